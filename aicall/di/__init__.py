"""Composition root for the call pipeline."""
from __future__ import annotations

from .container import AICallContainer, build_container

__all__ = ["AICallContainer", "build_container"]
