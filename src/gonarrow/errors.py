"""Domain-specific errors for gonarrow."""

from __future__ import annotations


class GoNarrowError(Exception):
    """Base error for gonarrow."""

    kind = "internal"


class ConfigurationError(GoNarrowError):
    """Raised when flags or target specs are missing or malformed."""

    kind = "configuration"


class ResolutionError(GoNarrowError):
    """Raised when a source package or type name cannot be resolved to a defined type."""

    kind = "resolution"


class ConversionError(GoNarrowError):
    """Raised when a type descriptor violates an invariant the converter relies on."""

    kind = "conversion"


class UnsupportedTypeError(ConversionError):
    """Raised when a type kind has no interface syntax (type params, unsafe.Pointer, ...)."""


class OracleInconsistencyError(GoNarrowError):
    """Raised when the complete interfaces fail to build."""

    kind = "oracle"


class ConvergenceError(GoNarrowError):
    """Raised when the optional verification build of the narrowed interfaces fails."""

    kind = "convergence"


class ToolchainError(GoNarrowError):
    """Raised when the Go toolchain cannot be launched."""

    kind = "toolchain"
