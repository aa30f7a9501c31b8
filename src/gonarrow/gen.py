from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from . import syntax as ast
from .descriptors import NamedType
from .errors import ConfigurationError
from .iface import InterfaceDescriptor, build_interface
from .imports import ImportTable

logger = logging.getLogger(__name__)

GENERATED_HEADER = "// Code generated by gonarrow. DO NOT EDIT."


class Generator:
    """Accumulates interfaces for one output file and renders it.

    Each generator owns the import table of its file, so alias numbers are
    local to the file and follow the order interfaces are added.
    """

    def __init__(self, package_name: str, file_name: str, build_constraint: str) -> None:
        self.package_name = package_name
        self.file_name = file_name
        self.build_constraint = build_constraint
        self.imports = ImportTable()
        self.interfaces: list[InterfaceDescriptor] = []

    def add_interface(
        self,
        named: NamedType,
        target_name: str,
        pkg_path: str,
        method_filter: Iterable[str] | None,
    ) -> InterfaceDescriptor:
        if any(i.name == target_name for i in self.interfaces):
            raise ConfigurationError(f"duplicate target interface name: {target_name}")
        desc = build_interface(named, target_name, pkg_path, method_filter, self.imports)
        self.interfaces.append(desc)
        return desc

    def render(self) -> str:
        lines: list[str] = [
            GENERATED_HEADER,
            "",
            f"//go:build {self.build_constraint}",
            "",
            f"package {self.package_name}",
            "",
        ]
        imports = self.imports.render()
        if imports:
            lines.extend(imports)
            lines.append("")
        for desc in self.interfaces:
            lines.extend(ast.render_type_spec(desc.type_spec()))
            lines.append("")
        return "\n".join(lines)

    def write(self, dir: Path) -> Path:
        out_file = Path(dir) / self.file_name
        out_file.parent.mkdir(parents=True, exist_ok=True)
        out_file.write_text(self.render(), encoding="utf-8")
        logger.info("wrote %s (%d interfaces, %d imports)", out_file, len(self.interfaces), len(self.imports))
        return out_file
