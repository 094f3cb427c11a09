"""
Gateway defaults and environment variable names.

Pricing tables live in ai_gateway/config/pricing.py and model metadata in
ai_gateway/config/models.py.
"""

# Request defaults
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0
RETRY_BACKOFF_FACTOR = 2.0
# Statuses that are worth another attempt after a backoff delay
RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})

# Provider cache
DEFAULT_CACHE_MAX_SIZE = 50
DEFAULT_CACHE_MAX_AGE_SECONDS = 3600.0

# Token estimation: characters per token for Hangul heavy text and everything else
HANGUL_CHARS_PER_TOKEN = 2.5
DEFAULT_CHARS_PER_TOKEN = 4
# Google bills per character; usage is reported in tokens
GOOGLE_CHARS_PER_TOKEN = 4

ANTHROPIC_API_VERSION = "2023-06-01"
ANTHROPIC_DEFAULT_MAX_TOKENS = 4096

# Environment variables
TIMEOUT_ENV_VAR = "AI_GATEWAY_TIMEOUT_MS"
MAX_RETRIES_ENV_VAR = "AI_GATEWAY_MAX_RETRIES"
CACHE_MAX_SIZE_ENV_VAR = "AI_GATEWAY_CACHE_MAX_SIZE"
CACHE_MAX_AGE_ENV_VAR = "AI_GATEWAY_CACHE_MAX_AGE_SECONDS"
PRICING_OVERRIDES_ENV_VAR = "AI_GATEWAY_PRICING_OVERRIDES_JSON"

