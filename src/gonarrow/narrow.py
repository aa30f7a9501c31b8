"""The narrowing loop: derive minimal interfaces with the compiler as oracle.

States, in order::

    INIT -> COMPLETE_GENERATED -> COMPLETE_BUILT -> NARROW_GENERATED -> NARROW_BUILT
         -> DONE                                    (narrow build succeeded)
         -> DIAGNOSTICS_COLLECTED -> NARROW_REGENERATED -> FINAL_WRITTEN

The complete interfaces live in a file guarded by a build tag and must
build. The narrow interfaces start empty; the methods the dependent code
calls surface as "has no field or method" errors, and the narrow file is
regenerated once with exactly those methods. One corrective pass is
assumed to be enough; `verify` adds a single check build afterwards but
never a second correction.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .config import GenerateConfig
from .descriptors import NamedType
from .diagnostics import collect_missing_methods
from .errors import ConvergenceError, OracleInconsistencyError
from .gen import Generator
from .oracle import Oracle

logger = logging.getLogger(__name__)

_MAX_REPORTED_LINES = 20


class State(enum.Enum):
    INIT = "init"
    COMPLETE_GENERATED = "complete_generated"
    COMPLETE_BUILT = "complete_built"
    NARROW_GENERATED = "narrow_generated"
    NARROW_BUILT = "narrow_built"
    DONE = "done"
    DIAGNOSTICS_COLLECTED = "diagnostics_collected"
    NARROW_REGENERATED = "narrow_regenerated"
    FINAL_WRITTEN = "final_written"


@dataclass(frozen=True)
class Target:
    """A source type and the interface name it is exposed as."""

    pkg: str
    name: str
    type: NamedType


@dataclass
class NarrowResult:
    state: State
    missing: dict[str, list[str]] = field(default_factory=dict)
    # target interface name -> methods in the final narrow interface
    interfaces: dict[str, list[str]] = field(default_factory=dict)
    files: list[Path] = field(default_factory=list)


def targets_from_registry(
    loaded: Mapping[str, Mapping[str, NamedType]],
) -> list[Target]:
    """Flatten {pkg: {target name: type}} into targets sorted by target name."""
    out = [
        Target(pkg=pkg, name=target_name, type=t)
        for pkg, mapped in loaded.items()
        for target_name, t in mapped.items()
    ]
    return sorted(out, key=lambda t: t.name)


class Narrower:
    def __init__(self, *, cfg: GenerateConfig, targets: Iterable[Target], oracle: Oracle) -> None:
        self.cfg = cfg
        self.targets = sorted(targets, key=lambda t: t.name)
        self.oracle = oracle
        self.state = State.INIT

    def _enter(self, state: State) -> None:
        logger.debug("narrowing: %s -> %s", self.state.value, state.value)
        self.state = state

    def _generate(
        self,
        file_name: str,
        build_constraint: str,
        filters: Mapping[str, Iterable[str]] | None,
    ) -> Generator:
        g = Generator(self.cfg.package_name, file_name, build_constraint)
        for t in self.targets:
            method_filter = None if filters is None else filters.get(t.name, ())
            g.add_interface(t.type, t.name, t.pkg, method_filter)
        return g

    def _write_narrow(self, filters: Mapping[str, Iterable[str]]) -> tuple[Generator, Path]:
        g = self._generate(self.cfg.normal_file, f"!{self.cfg.tag}", filters)
        return g, g.write(self.cfg.dir)

    def run(self) -> NarrowResult:
        result = NarrowResult(state=self.state)

        complete = self._generate(self.cfg.impure_file, self.cfg.tag, None)
        result.files.append(complete.write(self.cfg.dir))
        self._enter(State.COMPLETE_GENERATED)

        built = self.oracle.run_build([self.cfg.tag])
        if not built.succeeded:
            raise OracleInconsistencyError(
                f"build with complete interfaces (-tags {self.cfg.tag}) failed; "
                "the generated interfaces do not compile:\n" + _excerpt(built.lines)
            )
        self._enter(State.COMPLETE_BUILT)

        narrow, path = self._write_narrow({})
        result.files.append(path)
        self._enter(State.NARROW_GENERATED)

        built = self.oracle.run_build()
        self._enter(State.NARROW_BUILT)
        if built.succeeded:
            logger.info("no methods of the source types are used; keeping empty interfaces")
            result.interfaces = {d.name: d.method_names for d in narrow.interfaces}
            self._enter(State.DONE)
            result.state = self.state
            return result

        missing = collect_missing_methods(built.lines)
        self._enter(State.DIAGNOSTICS_COLLECTED)
        result.missing = missing
        if not missing:
            logger.warning(
                "narrow build failed without missing-method diagnostics:\n%s", _excerpt(built.lines)
            )
        for type_name, methods in missing.items():
            logger.info("%s uses %s", type_name, ", ".join(methods))
        for t in self.targets:
            known = {m.name for m in t.type.methods}
            unknown = [m for m in missing.get(t.name, []) if m not in known]
            if unknown:
                logger.warning(
                    "%s: methods %s are not declared by %s; the narrowed interface will not include them",
                    t.name,
                    ", ".join(unknown),
                    t.type.qualified_name,
                )

        narrow, path = self._write_narrow(missing)
        self._enter(State.NARROW_REGENERATED)
        result.interfaces = {d.name: d.method_names for d in narrow.interfaces}
        self._enter(State.FINAL_WRITTEN)
        result.state = self.state

        if self.cfg.verify:
            built = self.oracle.run_build()
            if not built.succeeded:
                raise ConvergenceError(
                    "build with narrowed interfaces still fails after one corrective pass:\n"
                    + _excerpt(built.lines)
                )
        return result


def _excerpt(lines: list[str]) -> str:
    if len(lines) <= _MAX_REPORTED_LINES:
        return "\n".join(lines)
    rest = len(lines) - _MAX_REPORTED_LINES
    return "\n".join(lines[:_MAX_REPORTED_LINES] + [f"... ({rest} more lines)"])
