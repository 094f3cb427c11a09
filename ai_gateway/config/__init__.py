from .models import (
    MODEL_ALIASES,
    MODEL_CONTEXT_LIMITS,
    PROVIDER_CAPABILITIES,
    PROVIDER_DEFAULTS,
    PROVIDER_INFO,
    get_context_limit,
    list_capabilities,
    resolve_model_alias,
    supports,
)
from .pricing import get_pricing, load_pricing_overrides, pricing_overrides
from .settings import GatewaySettings

__all__ = [
    "MODEL_ALIASES",
    "MODEL_CONTEXT_LIMITS",
    "PROVIDER_CAPABILITIES",
    "PROVIDER_DEFAULTS",
    "PROVIDER_INFO",
    "get_context_limit",
    "list_capabilities",
    "resolve_model_alias",
    "supports",
    "get_pricing",
    "load_pricing_overrides",
    "pricing_overrides",
    "GatewaySettings",
]
