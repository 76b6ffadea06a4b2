"""
Model Registry package

Public API:
- ModelCapabilityRegistry
- ModelEntry
- ModelRegistryError
"""

from .repository_parts import ModelCapabilityRegistry, ModelEntry, ModelRegistryError

__all__ = ["ModelCapabilityRegistry", "ModelEntry", "ModelRegistryError"]
