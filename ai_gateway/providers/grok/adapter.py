from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...config.pricing import GROK_PRICING
from ...models.conversation_types import Message
from ...models.generation import CompletionOptions, CompletionResponse
from ..base import OptionsInput
from ..errors import ProviderError
from ..openai.adapter import OpenAIProvider

GROK_MODELS = ["grok-1", "grok-2", "grok-2-advanced"]

GROK_FINISH_REASONS = {
    "stop": "stop",
    "length": "length",
    "max_tokens": "length",
    "content_filter": "content_filter",
}


class GrokProvider(OpenAIProvider):
    """
    X.AI Grok provider.

    The chat endpoint is OpenAI compatible, so request and response handling
    is inherited; Grok adds X platform search and trend endpoints.
    """

    name = "grok"
    label = "Grok"
    default_base_url = "https://api.x.ai"
    default_context_limit = 8192
    model_aliases = {
        "grok": "grok-1",
        "grok2": "grok-2",
        "grok-advanced": "grok-2-advanced",
    }
    finish_reasons = GROK_FINISH_REASONS
    pricing_table = GROK_PRICING

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def validate_api_key(self) -> bool:
        """A one token completion; only a 401 marks the key invalid."""
        try:
            await self.complete(
                CompletionOptions(
                    model="grok-1",
                    messages=[Message(role="user", content="Hi")],
                    max_tokens=1,
                )
            )
            return True
        except ProviderError as e:
            return e.status_code != 401

    async def get_available_models(self) -> List[str]:
        return list(GROK_MODELS)

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    async def search_posts(
        self,
        query: str,
        limit: int = 10,
        time_range: str = "recent",
        include_replies: bool = False,
    ) -> List[Dict[str, Any]]:
        """Search X posts."""
        params = {
            "q": query,
            "limit": limit,
            "time_range": time_range,
            "include_replies": str(include_replies).lower(),
        }
        data = await self.with_retry(
            lambda: self.request_json(
                "GET", f"{self.base_url}/v1/search/posts", headers=self.build_headers(self.auth_headers()), params=params
            )
        )
        return data.get("posts") or []

    async def analyze_trends(
        self,
        location: Optional[str] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Current X trends, optionally filtered by location and category."""
        params = {
            key: value
            for key, value in {"location": location, "category": category, "limit": limit}.items()
            if value is not None
        }
        data = await self.with_retry(
            lambda: self.request_json(
                "GET", f"{self.base_url}/v1/trends", headers=self.build_headers(self.auth_headers()), params=params
            )
        )
        return data.get("trends") or []

    async def generate_with_realtime_context(
        self,
        prompt: str,
        options: Optional[OptionsInput] = None,
    ) -> CompletionResponse:
        """Complete ``prompt`` with a system message carrying the current time."""
        base = self.coerce_options(options) if options is not None else CompletionOptions(model="grok-2")
        now = datetime.now(timezone.utc).isoformat()
        messages = [
            Message(
                role="system",
                content=(
                    f"You are Grok, an assistant with access to real-time information. "
                    f"The current time is {now}. Use up-to-date knowledge of current events when relevant."
                ),
            ),
            *base.messages,
            Message(role="user", content=prompt),
        ]
        return await self.complete(base.model_copy(update={"messages": messages}))
