from .cache import CachedProviderEntry, ProviderCache
from .key_store import EnvKeyStore, KeyStore, ProviderCredentials, StaticKeyStore
from .provider_factory import (
    PROVIDER_CLASSES,
    ProviderFactory,
    create_provider,
    create_user_provider,
    get_default_factory,
    set_default_factory,
    validate_provider,
)

__all__ = [
    "CachedProviderEntry",
    "ProviderCache",
    "EnvKeyStore",
    "KeyStore",
    "ProviderCredentials",
    "StaticKeyStore",
    "PROVIDER_CLASSES",
    "ProviderFactory",
    "create_provider",
    "create_user_provider",
    "get_default_factory",
    "set_default_factory",
    "validate_provider",
]
