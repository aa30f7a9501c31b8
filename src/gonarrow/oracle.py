from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from .errors import ToolchainError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    succeeded: bool
    lines: list[str] = field(default_factory=list)


class Oracle(Protocol):
    def run_build(self, tags: Sequence[str] = ()) -> BuildResult: ...


class GoBuildOracle:
    """Runs `go build` in a package directory and reports its diagnostics.

    The build is blocking and has no timeout. A non-zero exit is a normal
    outcome reported through `BuildResult`; only failing to launch the Go
    toolchain raises.
    """

    def __init__(
        self,
        dir: Path,
        *,
        packages: Sequence[str] = (".",),
        go: str = "go",
        all_errors: bool = True,
        env: dict[str, str] | None = None,
    ) -> None:
        self.dir = Path(dir)
        self.packages = list(packages)
        self.go = go
        self.all_errors = all_errors
        self.env = env

    def command(self, tags: Sequence[str] = ()) -> list[str]:
        cmd = [self.go, "build"]
        if tags:
            cmd += ["-tags", ",".join(tags)]
        if self.all_errors:
            # Lift the compiler's 10-error limit so one build reports every missing method.
            cmd.append("-gcflags=-e")
        cmd += self.packages
        return cmd

    def run_build(self, tags: Sequence[str] = ()) -> BuildResult:
        cmd = self.command(tags)
        logger.info("running %s in %s", " ".join(cmd), self.dir)
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(self.dir),
                env=self.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=False,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolchainError(
                f"Go toolchain not found (`{self.go}` is missing from PATH). "
                "Install Go and ensure `go` is available on PATH, or set GONARROW_GO."
            ) from e
        except OSError as e:
            raise ToolchainError(f"failed to run {' '.join(cmd)}: {e}") from e

        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        lines = stderr.splitlines()
        ok = proc.returncode == 0
        logger.info("build %s (exit %d, %d diagnostic lines)", "succeeded" if ok else "failed", proc.returncode, len(lines))
        return BuildResult(succeeded=ok, lines=lines)
