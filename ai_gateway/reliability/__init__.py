from .retry import BackoffState, RetryConfig, RetryManager

__all__ = ["BackoffState", "RetryConfig", "RetryManager"]
