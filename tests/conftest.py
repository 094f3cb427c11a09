"""Shared pytest fixtures for AI Gateway tests."""

import pytest

from ai_gateway.config.pricing import pricing_overrides
from ai_gateway.factory.provider_factory import set_default_factory
from ai_gateway.models.conversation_types import Message
from ai_gateway.models.generation import CompletionOptions

GATEWAY_ENV_VARS = (
    "AI_GATEWAY_TIMEOUT_MS",
    "AI_GATEWAY_MAX_RETRIES",
    "AI_GATEWAY_CACHE_MAX_SIZE",
    "AI_GATEWAY_CACHE_MAX_AGE_SECONDS",
    "AI_GATEWAY_PRICING_OVERRIDES_JSON",
)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")
    config.addinivalue_line("markers", "integration: tests spanning factory, adapters and HTTP surface")


@pytest.fixture(autouse=True)
def clean_gateway_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in GATEWAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    pricing_overrides.cache_clear()
    yield
    pricing_overrides.cache_clear()
    set_default_factory(None)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Provider keys as read by EnvKeyStore."""
    env_vars = {
        "OPENAI_API_KEY": "test-openai-key",
        "ANTHROPIC_API_KEY": "test-anthropic-key",
        "GOOGLE_API_KEY": "test-google-key",
        "GROK_API_KEY": "test-grok-key",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def user_messages():
    return [Message(role="user", content="Hello")]


@pytest.fixture
def conversation_messages():
    """System prompt followed by alternating turns."""
    return [
        Message(role="system", content="You are helpful"),
        Message(role="user", content="Hello"),
        Message(role="assistant", content="Hi there"),
        Message(role="user", content="How are you?"),
    ]


@pytest.fixture
def simple_options(user_messages):
    return CompletionOptions(model="gpt-3.5-turbo", messages=user_messages)
