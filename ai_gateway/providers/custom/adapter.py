import time
from typing import Any, AsyncIterator, Dict, List, Sequence

from ...models.conversation_types import Message
from ...models.generation import (
    Choice,
    CompletionOptions,
    CompletionResponse,
    StreamChoice,
    StreamChunk,
    StreamDelta,
    Usage,
)
from ...streaming.decoders import iter_ndjson, iter_sse_data, safe_json_loads
from ..base import OptionsInput, ProviderAdapter
from ..errors import ProviderError, ValidationError
from ..openai.payloads import build_chat_payload
from .config import CustomProviderConfig

RESPONSE_TEXT_FIELDS = ("response", "text", "content", "output")
STREAM_TEXT_FIELDS = ("text", "content", "chunk")
# Prompt fields filled explicitly in the custom request format
CUSTOM_FORMAT_EXCLUDED = {"messages", "model", "temperature", "max_tokens"}


def normalize_finish_reason(reason: Any) -> str:
    """Best-effort mapping of arbitrary finish reason strings."""
    normalized = str(reason or "").lower()
    if "length" in normalized or "max" in normalized:
        return "length"
    if "function" in normalized:
        return "function_call"
    if "filter" in normalized or "safety" in normalized:
        return "content_filter"
    return "stop"


def messages_to_prompt(messages: Sequence[Message]) -> str:
    return "\n\n".join(f"{m.role[:1].upper()}{m.role[1:]}: {m.content}" for m in messages)


def _first_text(data: Dict[str, Any], fields: Sequence[str]) -> str:
    for field in fields:
        value = data.get(field)
        if value:
            return value if isinstance(value, str) else str(value)
    return ""


class CustomProvider(ProviderAdapter):
    """
    Provider for self-hosted or third-party endpoints.

    Paths, authentication and payload format come from
    ``CustomProviderConfig``. No context length check is applied and no cost
    is computed.
    """

    name = "custom"
    label = "Custom Provider"
    config_class = CustomProviderConfig
    config: CustomProviderConfig

    def auth_headers(self) -> Dict[str, str]:
        config = self.config
        if config.auth_type == "bearer":
            return {config.auth_header or "Authorization": f"Bearer {config.api_key}"}
        if config.auth_type == "apikey":
            return {config.auth_header or "X-API-Key": config.api_key}
        if config.auth_header:
            return {config.auth_header: config.api_key}
        return {}

    def url_for(self, path: str) -> str:
        if not self.config.base_url:
            raise ValidationError("Custom provider requires a base_url", provider=self.name)
        return f"{self.base_url}{path}"

    def _model(self, options: CompletionOptions) -> str:
        return options.model or self.config.default_model or "default"

    def build_request_body(self, options: CompletionOptions, stream: bool) -> Dict[str, Any]:
        if self.config.api_format == "openai":
            body = build_chat_payload(options, model=self._model(options), stream=stream)
        else:
            extras = options.model_dump(exclude=CUSTOM_FORMAT_EXCLUDED, exclude_none=True)
            body = {
                "prompt": messages_to_prompt(options.messages),
                "model": options.model or self.config.default_model,
                "temperature": options.temperature,
                "max_tokens": options.max_tokens,
                **extras,
            }
            if stream:
                body["stream"] = True
            body = {key: value for key, value in body.items() if value is not None}

        if self.config.request_transform is not None:
            body = self.config.request_transform.apply(body)
        return body

    def _transform_response(self, data: Any) -> Any:
        if self.config.response_transform is not None:
            return self.config.response_transform.apply(data)
        return data

    def parse_response(self, data: Dict[str, Any], options: CompletionOptions) -> CompletionResponse:
        prompt_estimate = self.estimate_tokens(" ".join(m.content for m in options.messages))

        if self.config.api_format == "openai":
            raw_choices = data.get("choices") or []
            choices = [
                Choice(
                    index=choice.get("index", position),
                    message=Message(
                        role=(choice.get("message") or {}).get("role") or "assistant",
                        content=(choice.get("message") or {}).get("content") or choice.get("text") or "",
                    ),
                    finish_reason=normalize_finish_reason(choice.get("finish_reason") or "stop"),
                )
                for position, choice in enumerate(raw_choices)
            ] or [
                Choice(index=0, message=Message(role="assistant", content=_first_text(data, ("text", "content"))))
            ]
            usage = data.get("usage") or {}
            prompt_tokens = usage.get("prompt_tokens") or prompt_estimate
            completion_tokens = usage.get("completion_tokens") or self.estimate_tokens(choices[0].message.content)
        else:
            content = _first_text(data, RESPONSE_TEXT_FIELDS)
            choices = [Choice(index=0, message=Message(role="assistant", content=content))]
            prompt_tokens = prompt_estimate
            completion_tokens = self.estimate_tokens(content)

        return CompletionResponse(
            id=data.get("id") or f"custom-{int(time.time() * 1000)}",
            choices=choices,
            usage=Usage(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
            model=data.get("model") or options.model or "custom",
            created=data.get("created") or int(time.time()),
        )

    def parse_stream_chunk(self, data: Dict[str, Any]) -> StreamChunk:
        if self.config.api_format == "openai":
            choices = []
            for choice in data.get("choices") or []:
                delta = choice.get("delta") or {}
                reason = choice.get("finish_reason")
                choices.append(
                    StreamChoice(
                        delta=StreamDelta(role=delta.get("role"), content=delta.get("content")),
                        index=choice.get("index") or 0,
                        finish_reason=normalize_finish_reason(reason) if reason else None,
                    )
                )
            return StreamChunk(choices=choices)
        return StreamChunk.text_chunk(_first_text(data, STREAM_TEXT_FIELDS))

    async def complete(self, options: OptionsInput) -> CompletionResponse:
        options = self.coerce_options(options)
        self.validate_messages(options.messages)
        body = self.build_request_body(options, stream=False)
        url = self.url_for(self.config.completion_path)
        headers = self.build_headers(self.auth_headers())
        model = self._model(options)

        with self.logger.track_request("complete", model) as request_info:
            data = await self.with_retry(lambda: self.request_json("POST", url, headers=headers, json=body))
            response = self.parse_response(self._transform_response(data), options)
            self.logger.log_usage(response.usage, model, request_info["request_id"])
            return response

    async def stream_complete(self, options: OptionsInput) -> AsyncIterator[StreamChunk]:
        options = self.coerce_options(options)
        self.validate_messages(options.messages)
        body = self.build_request_body(options, stream=True)
        url = self.url_for(self.config.stream_path)
        headers = self.build_headers(self.auth_headers())

        with self.logger.track_request("stream", self._model(options)):
            async with self.open_stream("POST", url, headers=headers, json=body) as lines:
                if self.config.api_format == "openai":
                    items = (safe_json_loads(payload) async for payload in iter_sse_data(lines))
                else:
                    items = iter_ndjson(lines)

                async for item in items:
                    if not item:
                        continue
                    data = self._transform_response(item)
                    if isinstance(data, dict):
                        yield self.parse_stream_chunk(data)

    async def validate_api_key(self) -> bool:
        """Custom endpoints are accepted unless they report no models at all."""
        if self.config.supported_models:
            return True
        models = await self.get_available_models()
        return len(models) > 0

    async def get_available_models(self) -> List[str]:
        if self.config.supported_models is not None:
            return list(self.config.supported_models)

        try:
            data = await self.request_json(
                "GET",
                self.url_for(self.config.models_path),
                headers=self.build_headers(self.auth_headers()),
            )
        except ProviderError as e:
            self.logger.debug("Model listing unavailable, using default model", error_msg=e.message)
            data = None

        if isinstance(data, dict) and isinstance(data.get("data"), list):
            return [
                item.get("id") or item.get("name")
                for item in data["data"]
                if isinstance(item, dict) and (item.get("id") or item.get("name"))
            ]
        return [self.config.default_model or "default"]

    def calculate_cost(self, usage: Usage, model: str) -> float:
        self.logger.debug("Cost calculation not available for custom providers", model=model)
        return 0.0
