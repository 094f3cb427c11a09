"""
Provider factory: builds, caches and validates provider adapters.

Adapters are cached per ``(provider_type, api_key)`` so that repeated calls
for the same credentials share one adapter instance.
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Type, Union

import httpx

from ..config.models import PROVIDER_DEFAULTS, PROVIDER_INFO
from ..config.settings import GatewaySettings
from ..models.generation import ProviderConfig, ProviderInfo, ProviderType
from ..providers.anthropic.adapter import AnthropicProvider
from ..providers.base import ProviderAdapter
from ..providers.custom.adapter import CustomProvider
from ..providers.errors import CredentialsNotFoundError, ProviderError
from ..providers.google.adapter import GoogleProvider
from ..providers.grok.adapter import GrokProvider
from ..providers.openai.adapter import OpenAIProvider
from .cache import ProviderCache
from .key_store import KeyStore

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: Dict[ProviderType, Type[ProviderAdapter]] = {
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.ANTHROPIC: AnthropicProvider,
    ProviderType.GOOGLE: GoogleProvider,
    ProviderType.GROK: GrokProvider,
    ProviderType.CUSTOM: CustomProvider,
}

ConfigInput = Union[ProviderConfig, Mapping[str, Any]]


def _provider_type(value: Union[ProviderType, str]) -> ProviderType:
    try:
        return ProviderType(value)
    except ValueError:
        raise ValueError(f"Unknown provider type: {value}") from None


class ProviderFactory:
    """Creates provider adapters and caches them by provider type and API key."""

    def __init__(
        self,
        cache: Optional[ProviderCache] = None,
        key_store: Optional[KeyStore] = None,
        settings: Optional[GatewaySettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            cache: Adapter cache; sized from ``settings`` when omitted
            key_store: Credential source for ``create_for_user``
            settings: Defaults for timeout and retries
            transport: httpx transport handed to every adapter built here
        """
        self.settings = settings or GatewaySettings()
        self.cache = cache or ProviderCache(
            max_size=self.settings.cache_max_size,
            max_age=self.settings.cache_max_age_seconds,
        )
        self.key_store = key_store
        self.transport = transport

    def create(self, provider_type: Union[ProviderType, str], config: ConfigInput) -> ProviderAdapter:
        """
        Return the cached adapter for ``(provider_type, api_key)`` or build one.

        Args:
            provider_type: One of the ``ProviderType`` values
            config: ProviderConfig, CustomProviderConfig or a dict of fields

        Raises:
            ValueError: Unknown provider type
        """
        provider_type = _provider_type(provider_type)
        adapter_class = PROVIDER_CLASSES[provider_type]
        api_key = config.api_key if isinstance(config, ProviderConfig) else _api_key_from_mapping(config)

        def build() -> ProviderAdapter:
            logger.debug(f"Creating {provider_type.value} provider adapter")
            return adapter_class(config, transport=self.transport)

        return self.cache.get_or_create((provider_type, api_key), build)

    async def create_for_user(self, user_id: str, provider_type: Union[ProviderType, str]) -> ProviderAdapter:
        """
        Build (or reuse) an adapter with the user's stored credentials.

        Raises:
            CredentialsNotFoundError: No key store, or no active key for the provider
        """
        provider_type = _provider_type(provider_type)
        if self.key_store is None:
            raise CredentialsNotFoundError("No key store configured", provider=provider_type.value)

        credentials = await self.key_store.get_credentials(user_id, provider_type)
        if credentials is None:
            raise CredentialsNotFoundError(
                f"No active API key found for provider: {provider_type.value}",
                provider=provider_type.value,
            )

        config = self.get_default_config(provider_type)
        config["api_key"] = credentials.api_key
        if credentials.base_url:
            config["base_url"] = credentials.base_url
        return self.create(provider_type, config)

    def get_default_config(self, provider_type: Union[ProviderType, str]) -> Dict[str, Any]:
        """Endpoint, default model, timeout and retries for a provider (no API key)."""
        provider_type = _provider_type(provider_type)
        config: Dict[str, Any] = dict(PROVIDER_DEFAULTS[provider_type])
        config["timeout"] = self.settings.timeout_ms
        config["max_retries"] = self.settings.max_retries
        return config

    def get_provider_info(self, provider_type: Union[ProviderType, str]) -> ProviderInfo:
        provider_type = _provider_type(provider_type)
        return ProviderInfo(type=provider_type, **PROVIDER_INFO[provider_type])

    def get_available_providers(self) -> List[ProviderType]:
        return list(PROVIDER_CLASSES)

    async def validate_provider_config(self, provider_type: Union[ProviderType, str], config: ConfigInput) -> bool:
        """Build an uncached adapter and check its key. Never raises for provider failures."""
        try:
            adapter_class = PROVIDER_CLASSES[_provider_type(provider_type)]
            adapter = adapter_class(config, transport=self.transport)
            return await adapter.validate_api_key()
        except (ProviderError, ValueError) as e:
            logger.warning(f"Provider validation failed for {provider_type}: {e}")
            return False

    def clear_cache(self) -> None:
        self.cache.clear()

    def remove_from_cache(self, provider_type: Union[ProviderType, str], api_key: str) -> bool:
        return self.cache.remove((_provider_type(provider_type), api_key))


def _api_key_from_mapping(config: Mapping[str, Any]) -> str:
    api_key = config.get("api_key", config.get("apiKey"))
    if not api_key:
        raise ValueError("Provider config requires an api_key")
    return api_key


_default_factory: Optional[ProviderFactory] = None
_default_factory_lock = threading.Lock()


def get_default_factory() -> ProviderFactory:
    """Process-wide factory configured from the environment."""
    global _default_factory
    with _default_factory_lock:
        if _default_factory is None:
            _default_factory = ProviderFactory(settings=GatewaySettings.from_env())
        return _default_factory


def set_default_factory(factory: Optional[ProviderFactory]) -> None:
    """Replace (or reset with None) the process-wide factory."""
    global _default_factory
    with _default_factory_lock:
        _default_factory = factory


def create_provider(provider_type: Union[ProviderType, str], api_key: str, **options: Any) -> ProviderAdapter:
    """Create a provider from its defaults plus ``options``, using the default factory."""
    factory = get_default_factory()
    config = {**factory.get_default_config(provider_type), **options, "api_key": api_key}
    return factory.create(provider_type, config)


async def create_user_provider(user_id: str, provider_type: Union[ProviderType, str]) -> ProviderAdapter:
    return await get_default_factory().create_for_user(user_id, provider_type)


async def validate_provider(
    provider_type: Union[ProviderType, str],
    api_key: str,
    base_url: Optional[str] = None,
) -> bool:
    factory = get_default_factory()
    config = {**factory.get_default_config(provider_type), "api_key": api_key}
    if base_url:
        config["base_url"] = base_url
    return await factory.validate_provider_config(provider_type, config)
