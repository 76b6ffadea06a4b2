"""Repositories backing provider and model selection."""

from .model_registry import ModelCapabilityRegistry, ModelEntry, ModelRegistryError

__all__ = ["ModelCapabilityRegistry", "ModelEntry", "ModelRegistryError"]
