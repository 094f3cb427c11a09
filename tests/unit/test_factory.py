"""Unit tests for the provider factory, its cache and key stores."""

import asyncio

import pytest

from ai_gateway.config.settings import GatewaySettings
from ai_gateway.factory import (
    EnvKeyStore,
    ProviderCache,
    ProviderCredentials,
    ProviderFactory,
    StaticKeyStore,
    create_provider,
    get_default_factory,
    set_default_factory,
    validate_provider,
)
from ai_gateway.models.generation import ProviderConfig, ProviderType
from ai_gateway.providers import AnthropicProvider, CustomProvider, GoogleProvider, GrokProvider, OpenAIProvider
from ai_gateway.providers.custom import CustomProviderConfig
from ai_gateway.providers.errors import CredentialsNotFoundError
from tests.helpers.http_mocks import MockAPI, error_response, json_response

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestProviderCache:
    def test_get_or_create_builds_once(self):
        cache = ProviderCache()
        builds = []

        def build():
            builds.append(1)
            return OpenAIProvider({"api_key": "k"})

        first = cache.get_or_create("key", build)
        second = cache.get_or_create("key", build)

        assert first is second
        assert len(builds) == 1

    def test_idle_entries_expire(self):
        clock = FakeClock()
        cache = ProviderCache(max_age=60, clock=clock)
        adapter = OpenAIProvider({"api_key": "k"})
        cache.put("key", adapter)

        clock.advance(59)
        assert cache.get("key") is adapter
        clock.advance(59)
        assert cache.get("key") is adapter, "access refreshes the idle timer"
        clock.advance(60)
        assert cache.get("key") is None
        assert "key" not in cache

    def test_full_cache_evicts_least_recently_accessed(self):
        clock = FakeClock()
        cache = ProviderCache(max_size=3, clock=clock)
        for key in ("a", "b", "c"):
            cache.put(key, OpenAIProvider({"api_key": key}))
            clock.advance(1)

        cache.get("a")
        clock.advance(1)
        cache.put("d", OpenAIProvider({"api_key": "d"}))

        assert sorted(cache.keys()) == ["a", "c", "d"]
        assert len(cache) == 3

    def test_remove_and_clear(self):
        cache = ProviderCache()
        cache.put("a", OpenAIProvider({"api_key": "a"}))
        cache.put("b", OpenAIProvider({"api_key": "b"}))

        assert cache.remove("a") is True
        assert cache.remove("a") is False
        cache.clear()
        assert len(cache) == 0


class TestProviderFactory:
    @pytest.mark.parametrize("provider_type, adapter_class", [
        ("openai", OpenAIProvider),
        ("anthropic", AnthropicProvider),
        ("google", GoogleProvider),
        ("grok", GrokProvider),
        (ProviderType.CUSTOM, CustomProvider),
    ])
    def test_creates_each_provider(self, provider_type, adapter_class):
        adapter = ProviderFactory().create(provider_type, {"api_key": "k"})
        assert type(adapter) is adapter_class

    def test_same_credentials_share_adapter(self):
        factory = ProviderFactory()
        first = factory.create("openai", {"api_key": "k1"})
        second = factory.create("openai", ProviderConfig(api_key="k1", timeout=5))

        assert first is second
        assert factory.create("openai", {"api_key": "k2"}) is not first
        assert factory.create("grok", {"api_key": "k1"}) is not first

    def test_cache_bound_of_fifty(self):
        factory = ProviderFactory()
        first = factory.create("openai", {"api_key": "key-0"})
        for i in range(1, 51):
            factory.create("openai", {"api_key": f"key-{i}"})

        assert len(factory.cache) == 50
        assert (ProviderType.OPENAI, "key-0") not in factory.cache
        assert factory.create("openai", {"api_key": "key-0"}) is not first

    def test_cache_age_from_settings(self):
        clock = FakeClock()
        settings = GatewaySettings(cache_max_age_seconds=10)
        factory = ProviderFactory(cache=ProviderCache(max_age=settings.cache_max_age_seconds, clock=clock))
        first = factory.create("openai", {"api_key": "k"})

        clock.advance(10)

        assert factory.create("openai", {"api_key": "k"}) is not first

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider type: mistral"):
            ProviderFactory().create("mistral", {"api_key": "k"})

    def test_missing_api_key(self):
        with pytest.raises(ValueError, match="api_key"):
            ProviderFactory().create("openai", {})

    def test_custom_config_object(self):
        config = CustomProviderConfig(api_key="k", base_url="https://x.test", api_format="custom")
        adapter = ProviderFactory().create("custom", config)
        assert adapter.config.api_format == "custom"

    def test_remove_and_clear_cache(self):
        factory = ProviderFactory()
        factory.create("openai", {"api_key": "k"})
        factory.create("google", {"api_key": "k"})

        assert factory.remove_from_cache("openai", "k") is True
        assert factory.remove_from_cache("openai", "k") is False
        factory.clear_cache()
        assert len(factory.cache) == 0

    def test_default_config(self):
        factory = ProviderFactory(settings=GatewaySettings(timeout_ms=5000, max_retries=1))
        assert factory.get_default_config("anthropic") == {
            "base_url": "https://api.anthropic.com",
            "default_model": "claude-3-haiku-20240307",
            "timeout": 5000,
            "max_retries": 1,
        }
        assert "base_url" not in factory.get_default_config("custom")

    def test_provider_info(self):
        factory = ProviderFactory()
        info = factory.get_provider_info("google")
        assert info.type == ProviderType.GOOGLE
        assert info.name == "Google Gemini"
        assert "gemini-1.5-pro" in info.models
        assert factory.get_available_providers() == list(ProviderType)


class TestCreateForUser:
    @pytest.mark.asyncio
    async def test_uses_stored_credentials(self):
        key_store = StaticKeyStore({("user-1", "openai"): {"api_key": "sk-user", "base_url": "https://proxy.test"}})
        factory = ProviderFactory(key_store=key_store, settings=GatewaySettings(timeout_ms=7000))

        adapter = await factory.create_for_user("user-1", "openai")

        assert adapter.config.api_key == "sk-user"
        assert adapter.base_url == "https://proxy.test"
        assert adapter.config.timeout == 7000
        assert await factory.create_for_user("user-1", ProviderType.OPENAI) is adapter

    @pytest.mark.asyncio
    async def test_missing_key(self):
        factory = ProviderFactory(key_store=StaticKeyStore())
        with pytest.raises(CredentialsNotFoundError, match="No active API key found for provider: anthropic"):
            await factory.create_for_user("user-1", "anthropic")

    @pytest.mark.asyncio
    async def test_no_key_store(self):
        with pytest.raises(CredentialsNotFoundError):
            await ProviderFactory().create_for_user("user-1", "openai")

    @pytest.mark.asyncio
    async def test_removed_key(self):
        key_store = StaticKeyStore()
        key_store.set("u", "grok", ProviderCredentials(api_key="x"))
        key_store.remove("u", "grok")
        assert await key_store.get_credentials("u", ProviderType.GROK) is None

    @pytest.mark.asyncio
    async def test_env_key_store(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("GOOGLE_BASE_URL", "https://gemini-proxy.test")
        key_store = EnvKeyStore(dotenv=False)

        credentials = await key_store.get_credentials("anyone", ProviderType.GOOGLE)

        assert credentials == ProviderCredentials(api_key="test-google-key", base_url="https://gemini-proxy.test")

    @pytest.mark.asyncio
    async def test_env_key_store_missing(self, monkeypatch):
        monkeypatch.delenv("CUSTOM_API_KEY", raising=False)
        assert await EnvKeyStore(dotenv=False).get_credentials("u", ProviderType.CUSTOM) is None


class TestValidation:
    @pytest.mark.asyncio
    async def test_validate_provider_config(self):
        api = MockAPI(json_response({"data": []}))
        factory = ProviderFactory(transport=api.transport)

        assert await factory.validate_provider_config("openai", {"api_key": "k"}) is True
        assert len(factory.cache) == 0

    @pytest.mark.asyncio
    async def test_validate_provider_config_failures(self):
        factory = ProviderFactory(transport=MockAPI(error_response(401)).transport)

        assert await factory.validate_provider_config("openai", {"api_key": "bad"}) is False
        assert await factory.validate_provider_config("mistral", {"api_key": "k"}) is False

    @pytest.mark.asyncio
    async def test_validate_provider_helper(self):
        api = MockAPI(json_response({"models": []}))
        set_default_factory(ProviderFactory(transport=api.transport))

        assert await validate_provider("google", "g-key", base_url="https://gemini.test") is True
        assert api.last_request.url.host == "gemini.test"


class TestDefaultFactory:
    def test_default_factory_is_shared(self):
        assert get_default_factory() is get_default_factory()

    def test_default_factory_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AI_GATEWAY_TIMEOUT_MS", "1234")
        monkeypatch.setenv("AI_GATEWAY_CACHE_MAX_SIZE", "2")

        factory = get_default_factory()

        assert factory.settings.timeout_ms == 1234
        assert factory.cache.max_size == 2

    def test_create_provider(self):
        adapter = create_provider("anthropic", "sk-ant", max_retries=0)

        assert isinstance(adapter, AnthropicProvider)
        assert adapter.config.max_retries == 0
        assert create_provider("anthropic", "sk-ant") is adapter

    def test_concurrent_creation_builds_once(self):
        factory = ProviderFactory()

        async def create_many():
            async def create():
                return factory.create("openai", {"api_key": "shared"})

            return await asyncio.gather(*(create() for _ in range(10)))

        adapters = asyncio.run(create_many())
        assert all(adapter is adapters[0] for adapter in adapters)
