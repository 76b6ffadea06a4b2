"""Mock provider package exposing deterministic fixtures for tests."""

from .client import MockProvider, MockStreamingAdapter, load_fixture_catalog

__all__ = ["MockProvider", "MockStreamingAdapter", "load_fixture_catalog"]
