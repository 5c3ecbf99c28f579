"""Boundary with the outside world: finding and importing plugin code."""

from __future__ import annotations

from ._loader import release_namespace
from .component_loader import ComponentLoader

__all__ = ["ComponentLoader", "release_namespace"]
