"""Model registry domain errors."""

from __future__ import annotations


class ModelRegistryError(ValueError):
    """Raised for invalid registrations (empty provider or model names)."""


__all__ = ["ModelRegistryError"]
