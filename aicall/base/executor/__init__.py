"""Provider executor implementations."""

from .default_executor import DefaultProviderExecutor

__all__ = ["DefaultProviderExecutor"]
