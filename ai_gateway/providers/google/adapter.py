from typing import Any, AsyncIterator, Dict, List, Mapping, Sequence, Union

from ...config.constants import GOOGLE_CHARS_PER_TOKEN
from ...config.pricing import GOOGLE_PRICING, get_pricing
from ...models.conversation_types import VALID_ROLES, MultimodalMessage
from ...models.generation import CompletionOptions, CompletionResponse, StreamChunk, Usage
from ...streaming.decoders import iter_ndjson
from ..base import OptionsInput, ProviderAdapter
from ..errors import ProviderError, ValidationError
from .parsers import parse_generate_response, parse_stream_chunk
from .payloads import build_generate_payload


class GoogleProvider(ProviderAdapter):
    """Google Gemini provider using the generateContent REST API."""

    name = "google"
    label = "Google Gemini"
    default_base_url = "https://generativelanguage.googleapis.com"
    default_context_limit = 1048576
    model_aliases = {
        "gemini-flash": "gemini-1.5-flash",
        "gemini-pro": "gemini-1.5-pro",
        "gemini-2-flash": "gemini-2.0-flash",
        "gemini-2-pro": "gemini-2.0-pro",
        "flash": "gemini-1.5-flash",
        "pro": "gemini-1.5-pro",
    }

    @property
    def key_params(self) -> Dict[str, str]:
        return {"key": self.config.api_key}

    def model_url(self, model: str, method: str) -> str:
        return f"{self.base_url}/v1/models/{model}:{method}"

    def _prepare(self, options: OptionsInput):
        options = self.coerce_options(options)
        self.validate_messages(options.messages)
        model = self.normalize_model_name(options.model)
        self.check_context_length(options.messages, options.max_tokens or 0, self.context_limit_for(model))
        return options, model

    async def _generate(self, model: str, payload: Dict[str, Any]) -> CompletionResponse:
        headers = self.build_headers()
        url = self.model_url(model, "generateContent")

        with self.logger.track_request("complete", model) as request_info:
            data = await self.with_retry(
                lambda: self.request_json("POST", url, headers=headers, json=payload, params=self.key_params)
            )
            response = parse_generate_response(data, model)
            self.logger.log_usage(response.usage, model, request_info["request_id"])
            return response

    async def complete(self, options: OptionsInput) -> CompletionResponse:
        options, model = self._prepare(options)
        return await self._generate(model, build_generate_payload(options))

    async def stream_complete(self, options: OptionsInput) -> AsyncIterator[StreamChunk]:
        options, model = self._prepare(options)
        payload = build_generate_payload(options)
        url = self.model_url(model, "streamGenerateContent")

        with self.logger.track_request("stream", model):
            async with self.open_stream(
                "POST", url, headers=self.build_headers(), json=payload, params=self.key_params
            ) as lines:
                async for item in iter_ndjson(lines):
                    if not isinstance(item, dict):
                        continue
                    chunk = parse_stream_chunk(item, provider=self.name)
                    if chunk is not None:
                        yield chunk

    async def validate_api_key(self) -> bool:
        try:
            await self.request_json(
                "GET", f"{self.base_url}/v1/models", headers=self.build_headers(), params=self.key_params
            )
            return True
        except ProviderError as e:
            self.logger.debug("API key validation failed", status_code=e.status_code)
            return False

    async def get_available_models(self) -> List[str]:
        data = await self.with_retry(
            lambda: self.request_json(
                "GET", f"{self.base_url}/v1/models", headers=self.build_headers(), params=self.key_params
            )
        )
        models = []
        for item in data.get("models") or []:
            if "generateContent" in (item.get("supportedGenerationMethods") or []):
                name = item.get("name", "")
                models.append(name[len("models/"):] if name.startswith("models/") else name)
        return sorted(models)

    def calculate_cost(self, usage: Usage, model: str) -> float:
        """
        Cost in USD. Gemini bills per 1,000 characters, so token counts are
        converted at 4 characters per token before applying the rates. The
        result is an approximation and not directly comparable to token
        billed providers.
        """
        pricing = get_pricing(GOOGLE_PRICING, self.normalize_model_name(model))
        if pricing is None:
            self.logger.debug("No pricing for model, cost is 0", model=model)
            return 0.0
        prompt_chars = usage.prompt_tokens * GOOGLE_CHARS_PER_TOKEN
        completion_chars = usage.completion_tokens * GOOGLE_CHARS_PER_TOKEN
        return prompt_chars / 1000 * pricing["prompt"] + completion_chars / 1000 * pricing["completion"]

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    async def process_multimodal(
        self,
        messages: Sequence[Union[MultimodalMessage, Mapping[str, Any]]],
        model: str,
        **options: Any,
    ) -> CompletionResponse:
        """
        Complete a conversation whose messages may contain inline images.

        Args:
            messages: Messages with string content or a list of ``ContentPart``
            model: Gemini model id or alias
            **options: Extra completion options (temperature, max_tokens, ...)
        """
        parsed = [m if isinstance(m, MultimodalMessage) else MultimodalMessage.model_validate(m) for m in messages]
        if not parsed:
            raise ValidationError("Messages array cannot be empty", provider=self.name)
        for message in parsed:
            if message.role not in VALID_ROLES:
                raise ValidationError(f"Invalid message role: {message.role}", provider=self.name)

        model = self.normalize_model_name(model)
        completion_options = CompletionOptions(model=model, **options)
        payload = build_generate_payload(completion_options, messages=parsed)
        return await self._generate(model, payload)

    async def embed_text(self, text: str, model: str = "text-embedding-004") -> List[float]:
        payload = {"model": f"models/{model}", "content": {"parts": [{"text": text}]}}
        data = await self.with_retry(
            lambda: self.request_json(
                "POST",
                self.model_url(model, "embedContent"),
                headers=self.build_headers(),
                json=payload,
                params=self.key_params,
            )
        )
        return data["embedding"]["values"]
