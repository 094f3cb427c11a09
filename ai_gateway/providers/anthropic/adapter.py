from typing import AsyncIterator, Dict, List

from ...config.constants import ANTHROPIC_API_VERSION, ANTHROPIC_DEFAULT_MAX_TOKENS
from ...config.pricing import ANTHROPIC_PRICING, get_pricing
from ...models.conversation_types import Message
from ...models.generation import CompletionOptions, CompletionResponse, StreamChunk, Usage
from ...streaming.decoders import iter_sse_data
from ..base import OptionsInput, ProviderAdapter
from ..errors import ProviderError
from .parsers import parse_message_response
from .payloads import build_messages_payload
from .streaming import AnthropicStreamState, iter_message_events

ANTHROPIC_MODELS = [
    "claude-3-opus-20240229",
    "claude-3-5-sonnet-20241022",
    "claude-3-5-sonnet-20240620",
    "claude-3-sonnet-20240229",
    "claude-3-haiku-20240307",
]

VALIDATION_MODEL = "claude-3-haiku-20240307"


class AnthropicProvider(ProviderAdapter):
    """Anthropic Messages API provider."""

    name = "anthropic"
    label = "Anthropic"
    default_base_url = "https://api.anthropic.com"
    default_context_limit = 200000
    model_aliases = {
        "claude-3-opus": "claude-3-opus-20240229",
        "claude-3.5-sonnet": "claude-3-5-sonnet-20241022",
        "claude-3-sonnet": "claude-3-sonnet-20240229",
        "claude-3-haiku": "claude-3-haiku-20240307",
        "opus": "claude-3-opus-20240229",
        "sonnet": "claude-3-5-sonnet-20241022",
        "haiku": "claude-3-haiku-20240307",
    }

    def auth_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.config.api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/v1/messages"

    def _prepare(self, options: OptionsInput, stream: bool):
        options = self.coerce_options(options)
        self.validate_messages(options.messages)
        model = self.normalize_model_name(options.model)
        self.check_context_length(
            options.messages,
            options.max_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS,
            self.context_limit_for(model),
        )
        return options, model, build_messages_payload(options, model=model, stream=stream)

    async def complete(self, options: OptionsInput) -> CompletionResponse:
        options, model, payload = self._prepare(options, stream=False)
        headers = self.build_headers(self.auth_headers())

        with self.logger.track_request("complete", model) as request_info:
            data = await self.with_retry(
                lambda: self.request_json("POST", self.messages_url, headers=headers, json=payload)
            )
            response = parse_message_response(data, model, options.messages, self.estimate_tokens)
            self.logger.log_usage(response.usage, model, request_info["request_id"])
            return response

    async def stream_complete(self, options: OptionsInput) -> AsyncIterator[StreamChunk]:
        options, model, payload = self._prepare(options, stream=True)
        headers = self.build_headers(self.auth_headers())
        state = AnthropicStreamState()

        with self.logger.track_request("stream", model) as request_info:
            async with self.open_stream("POST", self.messages_url, headers=headers, json=payload) as lines:
                async for chunk in iter_message_events(iter_sse_data(lines), state, provider=self.name):
                    yield chunk
            self.logger.log_usage(state.usage, model, request_info["request_id"])

    async def validate_api_key(self) -> bool:
        """A one token completion; only a 401 marks the key invalid."""
        try:
            await self.complete(
                CompletionOptions(
                    model=VALIDATION_MODEL,
                    messages=[Message(role="user", content="Hi")],
                    max_tokens=1,
                )
            )
            return True
        except ProviderError as e:
            return e.status_code != 401

    async def get_available_models(self) -> List[str]:
        return list(ANTHROPIC_MODELS)

    def calculate_cost(self, usage: Usage, model: str) -> float:
        pricing = get_pricing(ANTHROPIC_PRICING, self.normalize_model_name(model))
        if pricing is None:
            self.logger.debug("No pricing for model, cost is 0", model=model)
            return 0.0
        return (
            usage.prompt_tokens / 1000 * pricing["prompt"]
            + usage.completion_tokens / 1000 * pricing["completion"]
        )

    async def generate_xml_response(
        self,
        prompt: str,
        xml_schema: str,
        model: str = "claude-3-5-sonnet-20241022",
    ) -> str:
        """Ask for an answer formatted as XML matching ``xml_schema``."""
        response = await self.complete(
            CompletionOptions(
                model=model,
                messages=[
                    Message(
                        role="system",
                        content=(
                            "You must respond with valid XML that conforms to the following schema:\n"
                            f"{xml_schema}\n\nRespond only with the XML, no additional text."
                        ),
                    ),
                    Message(role="user", content=prompt),
                ],
                temperature=0,
            )
        )
        return response.text
