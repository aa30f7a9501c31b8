from __future__ import annotations

from . import syntax as ast
from .descriptors import (
    Array,
    Basic,
    BasicKind,
    Chan,
    ChanDir,
    Interface,
    Map,
    Method,
    Named,
    Pointer,
    Signature,
    Slice,
    Struct,
    TypeDescriptor,
    TypeParam,
    Unsupported,
    Var,
)
from .errors import ConversionError, UnsupportedTypeError
from .imports import ImportTable

# Predeclared names that must stay unqualified.
_UNIVERSE_NAMES = {"error", "comparable", "any"}

_BASIC_NAMES = {
    BasicKind.BOOL: "bool",
    BasicKind.INT: "int",
    BasicKind.INT8: "int8",
    BasicKind.INT16: "int16",
    BasicKind.INT32: "int32",
    BasicKind.INT64: "int64",
    BasicKind.UINT: "uint",
    BasicKind.UINT8: "uint8",
    BasicKind.UINT16: "uint16",
    BasicKind.UINT32: "uint32",
    BasicKind.UINT64: "uint64",
    BasicKind.UINTPTR: "uintptr",
    BasicKind.FLOAT32: "float32",
    BasicKind.FLOAT64: "float64",
    BasicKind.COMPLEX64: "complex64",
    BasicKind.COMPLEX128: "complex128",
    BasicKind.STRING: "string",
}

_CHAN_DIRS = {
    ChanDir.SEND: ast.SEND,
    ChanDir.RECV: ast.RECV,
    ChanDir.BOTH: ast.SEND | ast.RECV,
}


def convert(t: TypeDescriptor, default_import: str, imports: ImportTable) -> ast.Node:
    """Return the syntax node for a type, registering any packages it references.

    `default_import` qualifies named types that carry no package of their own.
    Traversal is left to right, outer to inner, so alias numbering is fixed by
    the shape of the type alone.
    """
    if isinstance(t, Named):
        if t.type_args:
            raise UnsupportedTypeError(f"instantiated generic type {t.name} is not supported")
        if t.pkg is None and t.name in _UNIVERSE_NAMES:
            return ast.Ident(t.name)
        pkg = t.pkg if t.pkg is not None else default_import
        return ast.SelectorExpr(x=imports.name_for(pkg), sel=t.name)
    if isinstance(t, Array):
        return ast.ArrayType(elt=convert(t.elem, default_import, imports), len=t.length)
    if isinstance(t, Slice):
        return ast.ArrayType(elt=convert(t.elem, default_import, imports))
    if isinstance(t, Map):
        return ast.MapType(
            key=convert(t.key, default_import, imports),
            value=convert(t.elem, default_import, imports),
        )
    if isinstance(t, Chan):
        d = _CHAN_DIRS.get(t.dir)
        if d is None:
            raise ConversionError(f"unknown channel direction {t.dir!r}")
        return ast.ChanType(dir=d, value=convert(t.elem, default_import, imports))
    if isinstance(t, Basic):
        name = _BASIC_NAMES.get(t.kind)
        if name is None:
            raise UnsupportedTypeError(f"unhandled basic kind {t.kind.value}")
        return ast.Ident(name)
    if isinstance(t, Interface):
        if not t.is_method_set:
            raise UnsupportedTypeError("constraint interfaces are not supported")
        if t.empty:
            return ast.Ident("any")
        # Unexported methods of an interface literal cannot be spelled outside its package.
        return ast.InterfaceType(
            methods=tuple(convert_method(m, default_import, imports) for m in t.methods if m.exported)
        )
    if isinstance(t, Signature):
        return convert_signature(t, default_import, imports)
    if isinstance(t, Struct):
        return ast.StructType(
            fields=tuple(
                ast.Field(
                    type=convert(f.type, default_import, imports),
                    names=(f.name,) if f.name and not f.embedded else (),
                    tag=f.tag or None,
                )
                for f in t.fields
            )
        )
    if isinstance(t, Pointer):
        return ast.StarExpr(x=convert(t.elem, default_import, imports))
    if isinstance(t, TypeParam):
        raise UnsupportedTypeError(f"type parameter {t.name} is not supported")
    if isinstance(t, Unsupported):
        raise UnsupportedTypeError(f"unhandled type {t.what}")
    raise UnsupportedTypeError(f"unhandled type {type(t).__name__}")


def convert_signature(sig: Signature, default_import: str, imports: ImportTable) -> ast.FuncType:
    params = [_field(v, default_import, imports) for v in sig.params]
    if sig.variadic:
        if not params:
            raise ConversionError("variadic signature without parameters")
        last = params[-1]
        if not isinstance(last.type, ast.ArrayType) or last.type.len is not None:
            raise ConversionError("variadic parameter is not a slice")
        params[-1] = ast.Field(type=ast.Ellipsis(elt=last.type.elt), names=last.names)
    results = [_field(v, default_import, imports) for v in sig.results]
    return ast.FuncType(params=tuple(params), results=tuple(results))


def convert_method(m: Method, default_import: str, imports: ImportTable) -> ast.Field:
    return ast.Field(type=convert_signature(m.sig, default_import, imports), names=(m.name,))


def _field(v: Var, default_import: str, imports: ImportTable) -> ast.Field:
    return ast.Field(
        type=convert(v.type, default_import, imports),
        names=(v.name,) if v.name else (),
    )
