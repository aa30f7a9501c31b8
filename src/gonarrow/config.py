from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigurationError

ENV_GO = "GONARROW_GO"

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def default_go_command() -> str:
    """Return the Go toolchain binary to invoke.

    Override with `GONARROW_GO`.
    """
    return os.environ.get(ENV_GO) or "go"


def parse_target_spec(arg: str) -> tuple[str, dict[str, str]]:
    """Parse `<pkgPath>:<Src1>=><Dst1>,<Src2>=><Dst2>` into (pkgPath, {src: dst})."""
    pkg_path, sep, mappings = arg.partition(":")
    pkg_path = pkg_path.strip()
    if not sep or not pkg_path or not mappings.strip():
        raise ConfigurationError(
            f"invalid target spec {arg!r}: expected <pkgPath>:<Source>=><Target>[,...]"
        )
    out: dict[str, str] = {}
    for mapping in mappings.split(","):
        src, arrow, dst = mapping.partition("=>")
        src, dst = src.strip(), dst.strip()
        if not arrow or not src or not dst:
            raise ConfigurationError(f"invalid mapping {mapping!r} in target spec {arg!r}")
        for name in (src, dst):
            if not _IDENT_RE.fullmatch(name):
                raise ConfigurationError(f"invalid Go identifier {name!r} in target spec {arg!r}")
        if src in out:
            raise ConfigurationError(f"duplicate source type {pkg_path}.{src}")
        out[src] = dst
    return pkg_path, out


def parse_target_specs(args: Iterable[str]) -> dict[str, dict[str, str]]:
    """Merge target specs by package path; target names must be unique across all of them."""
    pkgs: dict[str, dict[str, str]] = {}
    targets: set[str] = set()
    for arg in args:
        pkg_path, mappings = parse_target_spec(arg)
        pkg = pkgs.setdefault(pkg_path, {})
        for src, dst in mappings.items():
            if src in pkg:
                raise ConfigurationError(f"duplicate source type {pkg_path}.{src}")
            if dst in targets:
                raise ConfigurationError(f"duplicate target interface name {dst}")
            pkg[src] = dst
            targets.add(dst)
    if not pkgs:
        raise ConfigurationError("no target specs given")
    return pkgs


def find_module_root(start: Path) -> Path:
    p = Path(start).resolve()
    while True:
        if (p / "go.mod").exists():
            return p
        if p.parent == p:
            break
        p = p.parent
    raise ConfigurationError(f"go.mod not found in {start} or any parent directory")


@dataclass(frozen=True)
class GenerateConfig:
    package_name: str
    dir: Path = field(default_factory=Path.cwd)
    file_prefix: str = "interfaces"
    tag: str = "impure"
    verify: bool = False
    go: str = field(default_factory=default_go_command)

    @property
    def normal_file(self) -> str:
        return f"{self.file_prefix}.go"

    @property
    def impure_file(self) -> str:
        return f"{self.file_prefix}_impure.go"

    def validate(self) -> None:
        if not self.package_name:
            raise ConfigurationError("missing -pkg param")
        if not _IDENT_RE.fullmatch(self.package_name):
            raise ConfigurationError(f"invalid Go package name: {self.package_name!r}")
        if not _IDENT_RE.fullmatch(self.tag):
            raise ConfigurationError(f"invalid build tag: {self.tag!r}")
        if not self.file_prefix or "/" in self.file_prefix or "\\" in self.file_prefix:
            raise ConfigurationError(f"invalid file prefix: {self.file_prefix!r}")
        if not Path(self.dir).is_dir():
            raise ConfigurationError(f"directory not found: {self.dir}")
        find_module_root(Path(self.dir))
