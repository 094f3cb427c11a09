from typing import Any, AsyncIterator, Dict, List, Optional

from ...config.pricing import OPENAI_PRICING, get_pricing
from ...models.generation import CompletionResponse, StreamChunk, Usage
from ...streaming.decoders import iter_sse_data, safe_json_loads
from ..base import OptionsInput, ProviderAdapter
from ..errors import ProviderError
from .parsers import OPENAI_FINISH_REASONS, parse_completion, parse_stream_chunk
from .payloads import build_chat_payload

EXCLUDED_MODEL_MARKERS = ("instruct", "0125", "0314", "0613")


class OpenAIProvider(ProviderAdapter):
    """OpenAI chat completions over raw HTTP, plus embeddings, images and audio."""

    name = "openai"
    label = "OpenAI"
    default_base_url = "https://api.openai.com"
    default_context_limit = 4096
    model_aliases = {"gpt-3.5": "gpt-3.5-turbo"}
    finish_reasons = OPENAI_FINISH_REASONS
    pricing_table = OPENAI_PRICING

    def auth_headers(self) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        if self.config.organization:
            headers["OpenAI-Organization"] = self.config.organization
        return headers

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}/v1/chat/completions"

    def _prepare(self, options: OptionsInput, stream: bool):
        options = self.coerce_options(options)
        self.validate_messages(options.messages)
        model = self.normalize_model_name(options.model)
        self.check_context_length(options.messages, options.max_tokens or 0, self.context_limit_for(model))
        return model, build_chat_payload(options, model=model, stream=stream)

    async def complete(self, options: OptionsInput) -> CompletionResponse:
        model, payload = self._prepare(options, stream=False)
        headers = self.build_headers(self.auth_headers())

        with self.logger.track_request("complete", model) as request_info:
            data = await self.with_retry(
                lambda: self.request_json("POST", self.chat_url, headers=headers, json=payload)
            )
            response = parse_completion(data, model=model, finish_reasons=self.finish_reasons)
            self.logger.log_usage(response.usage, model, request_info["request_id"])
            return response

    async def stream_complete(self, options: OptionsInput) -> AsyncIterator[StreamChunk]:
        model, payload = self._prepare(options, stream=True)
        headers = self.build_headers(self.auth_headers())

        with self.logger.track_request("stream", model):
            async with self.open_stream("POST", self.chat_url, headers=headers, json=payload) as lines:
                async for item in iter_sse_data(lines):
                    data = safe_json_loads(item)
                    if isinstance(data, dict):
                        yield parse_stream_chunk(data, self.finish_reasons)

    async def validate_api_key(self) -> bool:
        try:
            await self.request_json(
                "GET", f"{self.base_url}/v1/models", headers=self.build_headers(self.auth_headers())
            )
            return True
        except ProviderError as e:
            self.logger.debug("API key validation failed", status_code=e.status_code)
            return False

    async def get_available_models(self) -> List[str]:
        data = await self.with_retry(
            lambda: self.request_json(
                "GET", f"{self.base_url}/v1/models", headers=self.build_headers(self.auth_headers())
            )
        )
        model_ids = [item.get("id", "") for item in data.get("data") or []]
        return sorted(
            model_id for model_id in model_ids
            if "gpt" in model_id and not any(marker in model_id for marker in EXCLUDED_MODEL_MARKERS)
        )

    def calculate_cost(self, usage: Usage, model: str) -> float:
        pricing = get_pricing(self.pricing_table, model)
        if pricing is None:
            self.logger.debug("No pricing for model, cost is 0", model=model)
            return 0.0
        return (
            usage.prompt_tokens / 1000 * pricing["prompt"]
            + usage.completion_tokens / 1000 * pricing["completion"]
        )

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    async def embed_text(self, text: str, model: str = "text-embedding-3-small") -> List[float]:
        """Embedding vector for ``text``."""
        data = await self.with_retry(
            lambda: self.request_json(
                "POST",
                f"{self.base_url}/v1/embeddings",
                headers=self.build_headers(self.auth_headers()),
                json={"input": text, "model": model},
            )
        )
        return data["data"][0]["embedding"]

    async def generate_image(
        self,
        prompt: str,
        model: str = "dall-e-3",
        n: int = 1,
        size: str = "1024x1024",
        quality: str = "standard",
        style: str = "vivid",
    ) -> str:
        """Generate an image and return the URL of the first result."""
        payload = {"model": model, "prompt": prompt, "n": n, "size": size, "quality": quality, "style": style}
        data = await self.with_retry(
            lambda: self.request_json(
                "POST",
                f"{self.base_url}/v1/images/generations",
                headers=self.build_headers(self.auth_headers()),
                json=payload,
            )
        )
        return data["data"][0]["url"]

    async def transcribe_audio(
        self,
        audio: bytes,
        filename: str = "audio.mp3",
        model: str = "whisper-1",
        language: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> str:
        """Transcribe an audio file with a multipart upload and return the text."""
        form: Dict[str, Any] = {"model": model}
        if language:
            form["language"] = language
        if prompt:
            form["prompt"] = prompt
        # httpx sets the multipart boundary; the JSON content type must not be sent
        headers = {**self.config.headers, **self.auth_headers()}

        data = await self.with_retry(
            lambda: self.request_json(
                "POST",
                f"{self.base_url}/v1/audio/transcriptions",
                headers=headers,
                data=form,
                files={"file": (filename, audio)},
            )
        )
        return data["text"]
