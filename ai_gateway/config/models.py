"""
Static model metadata: context windows, tier aliases, provider capabilities
and the descriptive information exposed by the factory.
"""

from typing import Any, Dict, List, Optional, Union

from ..models.generation import ProviderType

# Context window sizes in tokens
MODEL_CONTEXT_LIMITS: Dict[str, int] = {
    # OpenAI
    "gpt-3.5-turbo": 16385,
    "gpt-4": 8192,
    "gpt-4-32k": 32768,
    "gpt-4-turbo": 128000,
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    # Anthropic
    "claude-3-opus-20240229": 200000,
    "claude-3-5-sonnet-20241022": 200000,
    "claude-3-5-sonnet-20240620": 200000,
    "claude-3-sonnet-20240229": 200000,
    "claude-3-haiku-20240307": 200000,
    # Google
    "gemini-1.5-flash": 1048576,
    "gemini-1.5-pro": 2097152,
    # Grok
    "grok-1": 8192,
    "grok-2": 32768,
}

# Tier aliases resolved per provider
MODEL_ALIASES: Dict[str, Dict[ProviderType, str]] = {
    "fast": {
        ProviderType.OPENAI: "gpt-3.5-turbo",
        ProviderType.ANTHROPIC: "claude-3-haiku-20240307",
        ProviderType.GOOGLE: "gemini-1.5-flash",
        ProviderType.GROK: "grok-1",
        ProviderType.CUSTOM: "default-fast",
    },
    "balanced": {
        ProviderType.OPENAI: "gpt-4",
        ProviderType.ANTHROPIC: "claude-3-5-sonnet-20241022",
        ProviderType.GOOGLE: "gemini-1.5-pro",
        ProviderType.GROK: "grok-2",
        ProviderType.CUSTOM: "default-balanced",
    },
    "powerful": {
        ProviderType.OPENAI: "gpt-4-turbo",
        ProviderType.ANTHROPIC: "claude-3-opus-20240229",
        ProviderType.GOOGLE: "gemini-2.0-pro",
        ProviderType.GROK: "grok-2-advanced",
        ProviderType.CUSTOM: "default-powerful",
    },
}

CAPABILITY_NAMES = ("streaming", "functions", "vision", "audio", "embeddings", "json_mode")


def _capabilities(*enabled: str) -> Dict[str, bool]:
    return {name: name in enabled for name in CAPABILITY_NAMES}


PROVIDER_CAPABILITIES: Dict[ProviderType, Dict[str, bool]] = {
    ProviderType.OPENAI: _capabilities(*CAPABILITY_NAMES),
    ProviderType.ANTHROPIC: _capabilities("streaming", "vision"),
    ProviderType.GOOGLE: _capabilities(*CAPABILITY_NAMES),
    ProviderType.GROK: _capabilities("streaming"),
    ProviderType.CUSTOM: _capabilities("streaming", "functions"),
}

# Endpoint and model defaults used by the factory; custom has none
PROVIDER_DEFAULTS: Dict[ProviderType, Dict[str, Any]] = {
    ProviderType.OPENAI: {"base_url": "https://api.openai.com", "default_model": "gpt-4o-mini"},
    ProviderType.ANTHROPIC: {"base_url": "https://api.anthropic.com", "default_model": "claude-3-haiku-20240307"},
    ProviderType.GOOGLE: {"base_url": "https://generativelanguage.googleapis.com", "default_model": "gemini-1.5-flash"},
    ProviderType.GROK: {"base_url": "https://api.x.ai", "default_model": "grok-1"},
    ProviderType.CUSTOM: {},
}

PROVIDER_INFO: Dict[ProviderType, Dict[str, Any]] = {
    ProviderType.OPENAI: {
        "name": "OpenAI",
        "description": "GPT-4, GPT-3.5 and other OpenAI models",
        "models": ["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"],
        "features": ["Function calling", "JSON mode", "Vision", "Audio transcription", "Embeddings"],
        "limitations": ["Rate limits vary by tier", "Context window varies by model"],
    },
    ProviderType.ANTHROPIC: {
        "name": "Anthropic",
        "description": "Claude 3 family of models",
        "models": [
            "claude-3-opus-20240229",
            "claude-3-5-sonnet-20241022",
            "claude-3-sonnet-20240229",
            "claude-3-haiku-20240307",
        ],
        "features": ["Large context window (200K)", "Vision", "XML output", "Constitutional AI"],
        "limitations": ["No function calling", "No embeddings"],
    },
    ProviderType.GOOGLE: {
        "name": "Google Gemini",
        "description": "Gemini Pro and Flash models",
        "models": ["gemini-1.5-flash", "gemini-1.5-pro", "gemini-2.0-flash", "gemini-2.0-pro"],
        "features": ["Very large context window", "Multimodal input", "Embeddings", "JSON mode"],
        "limitations": ["Character based pricing", "Regional availability"],
    },
    ProviderType.GROK: {
        "name": "Grok",
        "description": "X.AI Grok models with real-time information",
        "models": ["grok-1", "grok-2", "grok-2-advanced"],
        "features": ["Real-time information", "X platform search", "Trend analysis"],
        "limitations": ["Limited model selection", "No function calling"],
    },
    ProviderType.CUSTOM: {
        "name": "Custom Provider",
        "description": "Any OpenAI compatible or custom HTTP endpoint",
        "models": [],
        "features": ["Configurable endpoints", "Request and response transforms", "Custom authentication"],
        "limitations": ["Capabilities depend on the endpoint", "No cost tracking"],
    },
}


def resolve_model_alias(alias: str, provider: Union[ProviderType, str]) -> Optional[str]:
    """
    Resolve a tier alias (``fast``, ``balanced``, ``powerful``) for a provider.

    Returns None when the alias is unknown.
    """
    tier = MODEL_ALIASES.get(alias)
    if tier is None:
        return None
    return tier.get(ProviderType(provider))


def get_context_limit(model: str, default: int) -> int:
    return MODEL_CONTEXT_LIMITS.get(model, default)


def supports(provider: Union[ProviderType, str], capability: str) -> bool:
    """Whether ``provider`` advertises ``capability`` in the capability matrix."""
    return PROVIDER_CAPABILITIES[ProviderType(provider)].get(capability, False)


def list_capabilities(provider: Union[ProviderType, str]) -> List[str]:
    return [name for name, enabled in PROVIDER_CAPABILITIES[ProviderType(provider)].items() if enabled]
