from __future__ import annotations

import argparse
import importlib.metadata
import logging
import os
import sys
from pathlib import Path

from .config import GenerateConfig, default_go_command, parse_target_specs
from .errors import GoNarrowError


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gonarrow",
        description=(
            "Generate the smallest Go interfaces a package needs from a set of concrete types, "
            "using `go build` errors to discover which methods are called."
        ),
    )
    parser.add_argument(
        "-C",
        "--dir",
        default=os.getcwd(),
        help="Directory of the package to generate in (default: current directory).",
    )
    parser.add_argument(
        "-f",
        "--file-prefix",
        default="interfaces",
        help="File name prefix for the generated files (default: interfaces).",
    )
    parser.add_argument("-pkg", "--pkg", default="", help="Name of the output package (required).")
    parser.add_argument(
        "--tag",
        default="impure",
        help="Build tag selecting the complete interfaces (default: impure).",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Build once more after narrowing and fail if the narrowed interfaces do not compile.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every narrowing step.")
    parser.add_argument("--version", action="store_true", help="Print gonarrow version.")
    parser.add_argument(
        "specs",
        nargs="*",
        metavar="SPEC",
        help="<pkgPath>:<SourceType>=><TargetInterface>[,<SourceType>=><TargetInterface>...]",
    )
    return parser


def run(args: argparse.Namespace) -> None:
    from .loader import load_targets
    from .narrow import Narrower, targets_from_registry
    from .oracle import GoBuildOracle

    cfg = GenerateConfig(
        package_name=args.pkg,
        dir=Path(args.dir),
        file_prefix=args.file_prefix,
        tag=args.tag,
        verify=bool(args.verify),
        go=default_go_command(),
    )
    cfg.validate()
    specs = parse_target_specs(args.specs)

    loaded = load_targets(dir=cfg.dir, specs=specs, go=cfg.go)
    oracle = GoBuildOracle(cfg.dir, go=cfg.go)
    result = Narrower(cfg=cfg, targets=targets_from_registry(loaded), oracle=oracle).run()
    for name, methods in sorted(result.interfaces.items()):
        logging.getLogger("gonarrow").info("%s: %s", name, ", ".join(methods) or "(no methods)")


def main(argv: list[str] | None = None) -> None:
    parser = _parser()
    args = parser.parse_args(argv)
    if args.version:
        try:
            print(importlib.metadata.version("gonarrow"))
        except importlib.metadata.PackageNotFoundError:
            print("0.0.0")
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        run(args)
    except GoNarrowError as e:
        print(f"gonarrow: {e}", file=sys.stderr)
        raise SystemExit(1) from e
