"""One-class-per-file parts of the model registry."""

from .model_capability_registry import ModelCapabilityRegistry
from .model_entry import ModelEntry
from .model_registry_error import ModelRegistryError

__all__ = ["ModelCapabilityRegistry", "ModelEntry", "ModelRegistryError"]
