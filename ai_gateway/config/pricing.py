"""
Static pricing tables and environment overrides.

OpenAI, Anthropic and Grok prices are USD per 1,000 tokens. Google prices are
USD per 1,000 characters.
"""

import json
import logging
import os
from functools import lru_cache
from typing import Dict, Optional

from .constants import PRICING_OVERRIDES_ENV_VAR

logger = logging.getLogger(__name__)

Pricing = Dict[str, float]

OPENAI_PRICING: Dict[str, Pricing] = {
    "gpt-4-turbo": {"prompt": 0.01, "completion": 0.03},
    "gpt-4-turbo-2024-04-09": {"prompt": 0.01, "completion": 0.03},
    "gpt-4-turbo-preview": {"prompt": 0.01, "completion": 0.03},
    "gpt-4": {"prompt": 0.03, "completion": 0.06},
    "gpt-4-32k": {"prompt": 0.06, "completion": 0.12},
    "gpt-3.5-turbo": {"prompt": 0.0005, "completion": 0.0015},
    "gpt-3.5-turbo-16k": {"prompt": 0.003, "completion": 0.004},
    "gpt-4o": {"prompt": 0.005, "completion": 0.015},
    "gpt-4o-mini": {"prompt": 0.00015, "completion": 0.0006},
}

ANTHROPIC_PRICING: Dict[str, Pricing] = {
    "claude-3-opus-20240229": {"prompt": 0.015, "completion": 0.075},
    "claude-3-5-sonnet-20241022": {"prompt": 0.003, "completion": 0.015},
    "claude-3-5-sonnet-20240620": {"prompt": 0.003, "completion": 0.015},
    "claude-3-sonnet-20240229": {"prompt": 0.003, "completion": 0.015},
    "claude-3-haiku-20240307": {"prompt": 0.00025, "completion": 0.00125},
}

GOOGLE_PRICING: Dict[str, Pricing] = {
    "gemini-1.5-flash": {"prompt": 0.000035, "completion": 0.00014},
    "gemini-1.5-pro": {"prompt": 0.00035, "completion": 0.0014},
    "gemini-2.0-flash": {"prompt": 0.000035, "completion": 0.00014},
    "gemini-2.0-pro": {"prompt": 0.00035, "completion": 0.0014},
}

GROK_PRICING: Dict[str, Pricing] = {
    "grok-1": {"prompt": 0.005, "completion": 0.015},
    "grok-2": {"prompt": 0.01, "completion": 0.03},
    "grok-2-advanced": {"prompt": 0.015, "completion": 0.045},
}


def load_pricing_overrides() -> Dict[str, Pricing]:
    """
    Load pricing overrides from the AI_GATEWAY_PRICING_OVERRIDES_JSON variable.

    The value is a JSON object mapping model ids to ``{"prompt", "completion"}``
    rates in the same unit as the provider's static table. Malformed values are
    logged and ignored.
    """
    json_str = os.getenv(PRICING_OVERRIDES_ENV_VAR)
    if not json_str:
        return {}

    try:
        overrides = json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {PRICING_OVERRIDES_ENV_VAR}: {e}")
        return {}

    if not isinstance(overrides, dict):
        logger.error(f"{PRICING_OVERRIDES_ENV_VAR} must be a JSON object")
        return {}

    valid = {}
    for model_id, pricing in overrides.items():
        if not isinstance(pricing, dict):
            logger.warning(f"Ignoring pricing override for {model_id}: expected an object")
            continue
        try:
            valid[model_id] = {
                "prompt": float(pricing["prompt"]),
                "completion": float(pricing["completion"]),
            }
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Ignoring pricing override for {model_id}: needs numeric prompt and completion")
    return valid


@lru_cache(maxsize=1)
def pricing_overrides() -> Dict[str, Pricing]:
    """Overrides loaded once per process. Call ``cache_clear()`` after changing the variable."""
    return load_pricing_overrides()


def get_pricing(table: Dict[str, Pricing], model: str) -> Optional[Pricing]:
    """Pricing for ``model``: environment override first, then the static table."""
    overrides = pricing_overrides()
    if model in overrides:
        return overrides[model]
    return table.get(model)
