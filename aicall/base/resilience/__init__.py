from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, call_with_retry, is_retryable

__all__ = ["DEFAULT_RETRY_CONFIG", "RetryConfig", "call_with_retry", "is_retryable"]
