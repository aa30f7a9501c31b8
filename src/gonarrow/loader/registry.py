from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..descriptors import NamedType, decode_named_type
from ..errors import ResolutionError
from .scan import scan_types

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Resolved named types keyed by (package path, type name)."""

    def __init__(self, types: Mapping[tuple[str, str], NamedType] | None = None) -> None:
        self._types: dict[tuple[str, str], NamedType] = dict(types or {})

    def add(self, pkg: str, name: str, t: NamedType) -> None:
        self._types[(pkg, name)] = t

    def lookup(self, pkg: str, name: str) -> NamedType:
        t = self._types.get((pkg, name))
        if t is None:
            raise ResolutionError(f"type not found: {pkg}.{name}")
        return t

    def __contains__(self, key: object) -> bool:
        return key in self._types

    def __len__(self) -> int:
        return len(self._types)

    @classmethod
    def from_scan(cls, obj: Mapping[str, Any]) -> "TypeRegistry":
        """Build a registry from the scanner document, failing on the first unresolved entry."""
        items = obj.get("types")
        if not isinstance(items, list):
            raise ResolutionError("go type scan output has no 'types' list")
        reg = cls()
        for item in items:
            if not isinstance(item, dict):
                raise ResolutionError(f"malformed go type scan entry: {item!r}")
            pkg = item.get("pkg")
            name = item.get("name")
            if not isinstance(pkg, str) or not isinstance(name, str):
                raise ResolutionError(f"malformed go type scan entry: {item!r}")
            err = item.get("error")
            if err:
                raise ResolutionError(f"{pkg}.{name}: {err}")
            reg.add(pkg, name, decode_named_type(item.get("type")))
        return reg


def load_targets(
    *,
    dir: Path,
    specs: Mapping[str, Mapping[str, str]],
    go: str = "go",
    env: dict[str, str] | None = None,
) -> dict[str, dict[str, NamedType]]:
    """Resolve {pkg: {source name: target name}} into {pkg: {target name: type}}."""
    requests = {pkg: sorted(mappings) for pkg, mappings in specs.items()}
    registry = TypeRegistry.from_scan(scan_types(dir=dir, requests=requests, go=go, env=env))

    loaded: dict[str, dict[str, NamedType]] = {}
    for pkg, mappings in specs.items():
        mapped: dict[str, NamedType] = {}
        for source_name, target_name in mappings.items():
            t = registry.lookup(pkg, source_name)
            logger.debug("resolved %s.%s (%d methods) as %s", pkg, source_name, len(t.methods), target_name)
            mapped[target_name] = t
        loaded[pkg] = mapped
    return loaded
