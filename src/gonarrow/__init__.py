"""gonarrow: derive minimal Go interfaces from concrete types using `go build` as an oracle."""

from __future__ import annotations

from . import errors
from .convert import convert
from .gen import Generator
from .iface import build_interface
from .imports import ImportTable
from .narrow import Narrower, NarrowResult, State, Target

__all__ = [
    "Generator",
    "ImportTable",
    "NarrowResult",
    "Narrower",
    "State",
    "Target",
    "build_interface",
    "convert",
    "errors",
]
