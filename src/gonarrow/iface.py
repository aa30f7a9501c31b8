from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from . import syntax as ast
from .convert import convert_method
from .descriptors import Method, NamedType
from .errors import ConfigurationError
from .imports import ImportTable


@dataclass(frozen=True)
class InterfaceDescriptor:
    name: str
    source: NamedType
    methods: tuple[ast.Field, ...]

    @property
    def method_names(self) -> list[str]:
        return [m.names[0] for m in self.methods]

    def type_spec(self) -> ast.TypeSpec:
        return ast.TypeSpec(
            name=self.name,
            type=ast.InterfaceType(methods=self.methods),
            doc=[f"{self.name} is generated from {self.source.qualified_name}."],
        )


def select_methods(methods: Iterable[Method], method_filter: Iterable[str] | None) -> list[Method]:
    # None selects every exported method; a set selects exactly the named
    # methods whatever their export status.
    if method_filter is None:
        return [m for m in methods if m.exported]
    wanted = set(method_filter)
    return [m for m in methods if m.name in wanted]


def build_interface(
    named: NamedType,
    declared_name: str,
    origin_pkg: str,
    method_filter: Iterable[str] | None,
    imports: ImportTable,
) -> InterfaceDescriptor:
    """Build the interface `declared_name` from the methods of `named`.

    Each selected method's signature is converted with `origin_pkg` as the
    default import, registering referenced packages in `imports`.
    """
    if not isinstance(named, NamedType):
        raise ConfigurationError(f"{declared_name}: source is not a defined named type: {named!r}")
    methods = tuple(
        convert_method(m, origin_pkg, imports) for m in select_methods(named.methods, method_filter)
    )
    return InterfaceDescriptor(name=declared_name, source=named, methods=methods)
