"""Extract missing methods from `go build` error output.

The compiler reports a method call on an interface that lacks it as

    ./main.go:10:4: v.Foo undefined (type T has no field or method Foo)

Only that shape is recognized; every other line is ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_MISSING_METHOD_RE = re.compile(
    r"(?:\btype\s+)?\*?(?:\w+\.)*(?P<type>\w+) has no field or method (?P<method>\w+)\b"
)


def parse_line(line: str) -> tuple[str, str] | None:
    """Return (type name, method name) for a missing-method diagnostic."""
    m = _MISSING_METHOD_RE.search(line)
    if m is None:
        return None
    return m.group("type"), m.group("method")


def collect_missing_methods(lines: Iterable[str]) -> dict[str, list[str]]:
    """Group missing methods by type name, in first-occurrence order without repeats."""
    wants: dict[str, dict[str, None]] = {}
    for line in lines:
        rec = parse_line(line)
        if rec is None:
            continue
        type_name, method = rec
        wants.setdefault(type_name, {})[method] = None
    return {t: list(methods) for t, methods in wants.items()}
