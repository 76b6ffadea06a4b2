"""Provider factory.

Creates provider adapters by canonical id. Adapter modules are imported
lazily with ``importlib`` so the core never imports an SDK until a provider
is actually requested.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple, Type


class UnknownProviderError(Exception):
    """Raised when a provider cannot be resolved or initialized.

    Failure modes include:
    - The provider id is not registered in the factory mapping.
    - The adapter module cannot be imported or the adapter class is missing.
    - The adapter constructor raised.
    """


class ProviderFactory:
    """Create provider adapters from a canonical id (e.g. ``"openai"``)."""

    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "mock": {"module": "aicall.mock.client", "class": "MockProvider"},
        "openai": {"module": "aicall.openai.client", "class": "OpenAIProvider"},
    }

    @classmethod
    def create(cls, provider: str, **kwargs: Any) -> Any:
        """Instantiate the adapter for ``provider`` with ``kwargs``.

        Raises:
            UnknownProviderError: for an unknown id, an import failure, a
                missing adapter class or a failing constructor.
        """
        name = (provider or "").lower().strip()
        spec = cls._PROVIDERS.get(name)
        if not spec:
            raise UnknownProviderError(f"Unknown provider '{provider}'")

        module_path, class_name = spec["module"], spec["class"]
        try:
            mod = import_module(module_path)
        except Exception as exc:  # pragma: no cover - import failure path
            raise UnknownProviderError(
                f"Failed to import module '{module_path}' for provider '{provider}': {exc}"
            ) from exc
        try:
            klass: Type = getattr(mod, class_name)
        except AttributeError as exc:
            raise UnknownProviderError(
                f"Adapter class '{class_name}' not found in '{module_path}' for provider '{provider}'"
            ) from exc
        try:
            return klass(**kwargs)
        except TypeError as exc:
            raise UnknownProviderError(f"Invalid arguments for '{provider}' adapter constructor: {exc}") from exc

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        return tuple(cls._PROVIDERS)


def create_provider(provider: str, **kwargs: Any) -> Any:
    """Shortcut for :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(provider, **kwargs)


__all__ = ["ProviderFactory", "UnknownProviderError", "create_provider"]
