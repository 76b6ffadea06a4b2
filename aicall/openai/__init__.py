"""OpenAI Chat Completions provider adapter."""

from .client import OpenAIProvider
from .stream_helpers import OpenAIStreamingAdapter, ThinkTagSplitter

__all__ = ["OpenAIProvider", "OpenAIStreamingAdapter", "ThinkTagSplitter"]
