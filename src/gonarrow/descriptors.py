"""Type descriptors: the structural model of Go types consumed by the converter.

Descriptors are produced by the loader (see `gonarrow.loader.scan`) from
compiler export data and are never mutated afterwards. Named types are
referenced by identity (package path + name) and never inlined, so a
descriptor graph has no cycles.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union

from .errors import ResolutionError


def is_exported(name: str) -> bool:
    return name[:1].isupper()


class ChanDir(enum.Enum):
    SEND = "send"
    RECV = "recv"
    BOTH = "both"


class BasicKind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINTPTR = "uintptr"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"
    STRING = "string"
    UNSAFE_POINTER = "unsafe_pointer"
    UNTYPED_BOOL = "untyped_bool"
    UNTYPED_INT = "untyped_int"
    UNTYPED_RUNE = "untyped_rune"
    UNTYPED_FLOAT = "untyped_float"
    UNTYPED_COMPLEX = "untyped_complex"
    UNTYPED_STRING = "untyped_string"
    UNTYPED_NIL = "untyped_nil"
    INVALID = "invalid"


@dataclass(frozen=True)
class Named:
    name: str
    pkg: str | None = None  # None for predeclared types (error, comparable, any)
    type_args: tuple["TypeDescriptor", ...] = ()


@dataclass(frozen=True)
class Array:
    length: int
    elem: "TypeDescriptor"


@dataclass(frozen=True)
class Slice:
    elem: "TypeDescriptor"


@dataclass(frozen=True)
class Map:
    key: "TypeDescriptor"
    elem: "TypeDescriptor"


@dataclass(frozen=True)
class Chan:
    dir: ChanDir
    elem: "TypeDescriptor"


@dataclass(frozen=True)
class Basic:
    kind: BasicKind


@dataclass(frozen=True)
class Var:
    type: "TypeDescriptor"
    name: str = ""


@dataclass(frozen=True)
class Signature:
    params: tuple[Var, ...] = ()
    results: tuple[Var, ...] = ()
    variadic: bool = False


@dataclass(frozen=True)
class Method:
    name: str
    sig: Signature

    @property
    def exported(self) -> bool:
        return is_exported(self.name)


@dataclass(frozen=True)
class Interface:
    methods: tuple[Method, ...] = ()
    # False for constraint interfaces carrying a type set (e.g. `interface{ ~int }`).
    is_method_set: bool = True

    @property
    def empty(self) -> bool:
        return not self.methods and self.is_method_set


@dataclass(frozen=True)
class StructField:
    type: "TypeDescriptor"
    name: str = ""  # empty for embedded fields
    embedded: bool = False
    tag: str = ""


@dataclass(frozen=True)
class Struct:
    fields: tuple[StructField, ...] = ()


@dataclass(frozen=True)
class Pointer:
    elem: "TypeDescriptor"


@dataclass(frozen=True)
class TypeParam:
    name: str


@dataclass(frozen=True)
class Unsupported:
    what: str


TypeDescriptor = Union[
    Named,
    Array,
    Slice,
    Map,
    Chan,
    Basic,
    Interface,
    Signature,
    Struct,
    Pointer,
    TypeParam,
    Unsupported,
]


@dataclass(frozen=True)
class NamedType:
    """A defined type resolved from the registry, with its full method list."""

    name: str
    pkg: str
    methods: tuple[Method, ...] = ()
    type_params: tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.pkg}.{self.name}"


# --- JSON decoding (scanner output) ---


def _bad(what: str, obj: Any) -> ResolutionError:
    return ResolutionError(f"malformed type descriptor ({what}): {obj!r}")


def _obj(obj: Any, key: str) -> Any:
    v = obj.get(key)
    if v is None:
        raise _bad(f"missing {key!r}", obj)
    return v


def _decode_vars(items: Any) -> tuple[Var, ...]:
    if items is None:
        return ()
    if not isinstance(items, list):
        raise _bad("var list", items)
    out: list[Var] = []
    for item in items:
        if not isinstance(item, dict):
            raise _bad("var", item)
        name = item.get("name") or ""
        if not isinstance(name, str):
            raise _bad("var name", item)
        out.append(Var(type=decode_type(_obj(item, "type")), name=name))
    return tuple(out)


def decode_signature(obj: Any) -> Signature:
    if not isinstance(obj, dict):
        raise _bad("signature", obj)
    return Signature(
        params=_decode_vars(obj.get("params")),
        results=_decode_vars(obj.get("results")),
        variadic=bool(obj.get("variadic", False)),
    )


def decode_methods(items: Any) -> tuple[Method, ...]:
    if items is None:
        return ()
    if not isinstance(items, list):
        raise _bad("method list", items)
    out: list[Method] = []
    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise _bad("method", item)
        out.append(Method(name=item["name"], sig=decode_signature(_obj(item, "sig"))))
    return tuple(out)


def decode_type(obj: Any) -> TypeDescriptor:
    """Decode one JSON type node emitted by the Go scanner."""
    if not isinstance(obj, dict):
        raise _bad("type", obj)
    kind = obj.get("kind")

    if kind == "named":
        pkg = obj.get("pkg") or None
        args = obj.get("type_args") or []
        if not isinstance(args, list):
            raise _bad("type_args", obj)
        return Named(
            name=str(_obj(obj, "name")),
            pkg=pkg,
            type_args=tuple(decode_type(a) for a in args),
        )
    if kind == "array":
        length = _obj(obj, "len")
        if not isinstance(length, int):
            raise _bad("array length", obj)
        return Array(length=length, elem=decode_type(_obj(obj, "elem")))
    if kind == "slice":
        return Slice(elem=decode_type(_obj(obj, "elem")))
    if kind == "map":
        return Map(key=decode_type(_obj(obj, "key")), elem=decode_type(_obj(obj, "elem")))
    if kind == "chan":
        try:
            d = ChanDir(obj.get("dir"))
        except ValueError as e:
            raise _bad("channel direction", obj) from e
        return Chan(dir=d, elem=decode_type(_obj(obj, "elem")))
    if kind == "basic":
        try:
            return Basic(kind=BasicKind(obj.get("name")))
        except ValueError:
            return Unsupported(what=f"basic {obj.get('name')}")
    if kind == "interface":
        return Interface(
            methods=decode_methods(obj.get("methods")),
            is_method_set=bool(obj.get("method_set", True)),
        )
    if kind == "signature":
        return decode_signature(obj)
    if kind == "struct":
        fields = obj.get("fields") or []
        if not isinstance(fields, list):
            raise _bad("struct fields", obj)
        out: list[StructField] = []
        for f in fields:
            if not isinstance(f, dict):
                raise _bad("struct field", f)
            embedded = bool(f.get("embedded", False))
            out.append(
                StructField(
                    type=decode_type(_obj(f, "type")),
                    name="" if embedded else str(f.get("name") or ""),
                    embedded=embedded,
                    tag=str(f.get("tag") or ""),
                )
            )
        return Struct(fields=tuple(out))
    if kind == "pointer":
        return Pointer(elem=decode_type(_obj(obj, "elem")))
    if kind == "typeparam":
        return TypeParam(name=str(obj.get("name") or "?"))
    return Unsupported(what=str(obj.get("what") or kind))


def decode_named_type(obj: Any) -> NamedType:
    if not isinstance(obj, dict):
        raise _bad("named type", obj)
    name = obj.get("name")
    pkg = obj.get("pkg")
    if not isinstance(name, str) or not isinstance(pkg, str) or not name or not pkg:
        raise _bad("named type", obj)
    tparams = obj.get("type_params") or []
    if not isinstance(tparams, list) or not all(isinstance(x, str) for x in tparams):
        raise _bad("type_params", obj)
    return NamedType(
        name=name,
        pkg=pkg,
        methods=decode_methods(obj.get("methods")),
        type_params=tuple(tparams),
    )
