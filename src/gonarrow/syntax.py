"""Go syntax nodes and their textual rendering.

The node set mirrors the subset of `go/ast` expression nodes an interface
declaration can contain. Rendering produces gofmt-compatible source for
single-line type expressions; interface declarations are laid out one
method per line with a tab indent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .errors import ConversionError


@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class SelectorExpr:
    x: str  # import alias, e.g. "x0"
    sel: str


@dataclass(frozen=True)
class ArrayType:
    elt: "Node"
    len: int | None = None  # None renders a slice


@dataclass(frozen=True)
class Ellipsis:
    elt: "Node"


@dataclass(frozen=True)
class MapType:
    key: "Node"
    value: "Node"


SEND = 1
RECV = 2


@dataclass(frozen=True)
class ChanType:
    dir: int  # SEND, RECV or SEND | RECV
    value: "Node"


@dataclass(frozen=True)
class Field:
    type: "Node"
    names: tuple[str, ...] = ()
    tag: str | None = None


@dataclass(frozen=True)
class FuncType:
    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()


@dataclass(frozen=True)
class InterfaceType:
    # Each method is a Field with one name and a FuncType.
    methods: tuple[Field, ...] = ()


@dataclass(frozen=True)
class StructType:
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class StarExpr:
    x: "Node"


Node = Union[
    Ident,
    SelectorExpr,
    ArrayType,
    Ellipsis,
    MapType,
    ChanType,
    FuncType,
    InterfaceType,
    StructType,
    StarExpr,
]


@dataclass
class TypeSpec:
    """A top-level `type <name> <type>` declaration."""

    name: str
    type: Node
    doc: list[str] = field(default_factory=list)


def render(node: Node) -> str:
    """Render a type expression as Go source."""
    if isinstance(node, Ident):
        return node.name
    if isinstance(node, SelectorExpr):
        return f"{node.x}.{node.sel}"
    if isinstance(node, ArrayType):
        if node.len is None:
            return "[]" + render(node.elt)
        return f"[{node.len}]" + render(node.elt)
    if isinstance(node, Ellipsis):
        return "..." + render(node.elt)
    if isinstance(node, MapType):
        return f"map[{render(node.key)}]{render(node.value)}"
    if isinstance(node, ChanType):
        return _render_chan(node)
    if isinstance(node, FuncType):
        return "func" + _render_signature(node)
    if isinstance(node, InterfaceType):
        if not node.methods:
            return "interface{}"
        return "interface{ " + "; ".join(_render_method(m) for m in node.methods) + " }"
    if isinstance(node, StructType):
        if not node.fields:
            return "struct{}"
        return "struct{ " + "; ".join(_render_struct_field(f) for f in node.fields) + " }"
    if isinstance(node, StarExpr):
        return "*" + render(node.x)
    raise ConversionError(f"cannot render syntax node {type(node).__name__}")


def render_type_spec(spec: TypeSpec) -> list[str]:
    """Render a declaration as source lines (no trailing newline)."""
    lines = [f"// {d}" if d else "//" for d in spec.doc]
    t = spec.type
    if isinstance(t, InterfaceType):
        if not t.methods:
            lines.append(f"type {spec.name} interface{{}}")
            return lines
        lines.append(f"type {spec.name} interface {{")
        for m in t.methods:
            lines.append("\t" + _render_method(m))
        lines.append("}")
        return lines
    lines.append(f"type {spec.name} {render(t)}")
    return lines


def _render_chan(node: ChanType) -> str:
    value = render(node.value)
    if node.dir == SEND:
        return "chan<- " + value
    if node.dir == RECV:
        return "<-chan " + value
    if node.dir == SEND | RECV:
        # `chan <-chan T` would parse as `chan<- chan T`.
        if isinstance(node.value, ChanType) and node.value.dir == RECV:
            return f"chan ({value})"
        return "chan " + value
    raise ConversionError(f"invalid channel direction {node.dir!r}")


def _render_fields(fields: tuple[Field, ...]) -> str:
    named = any(f.names for f in fields)
    parts: list[str] = []
    for f in fields:
        t = render(f.type)
        if named:
            # Go requires all or none of a parameter list to be named.
            names = ", ".join(f.names) if f.names else "_"
            parts.append(f"{names} {t}")
        else:
            parts.append(t)
    return ", ".join(parts)


def _render_signature(ft: FuncType) -> str:
    out = "(" + _render_fields(ft.params) + ")"
    if not ft.results:
        return out
    if len(ft.results) == 1 and not ft.results[0].names:
        return out + " " + render(ft.results[0].type)
    return out + " (" + _render_fields(ft.results) + ")"


def _render_method(m: Field) -> str:
    if len(m.names) != 1 or not isinstance(m.type, FuncType):
        raise ConversionError(f"malformed interface method {m!r}")
    return m.names[0] + _render_signature(m.type)


def _render_struct_field(f: Field) -> str:
    out = render(f.type)
    if f.names:
        out = ", ".join(f.names) + " " + out
    if f.tag:
        out += " " + quote_tag(f.tag)
    return out


def quote_tag(tag: str) -> str:
    """Quote raw struct tag text as a Go string literal."""
    if "`" not in tag and "\n" not in tag:
        return f"`{tag}`"
    escaped = tag.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'
