"""Loading source types from Go packages into a TypeRegistry."""

from __future__ import annotations

from .registry import TypeRegistry, load_targets

__all__ = ["TypeRegistry", "load_targets"]
