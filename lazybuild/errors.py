"""
Standardized Error Handling for lazybuild

Every error aborts the whole build pass. Nothing is committed and nothing is
retried; retry policy belongs to the caller.

Each class also derives from the builtin that matches its kind, so callers can
catch ``TypeError``/``ValueError`` without importing this module.
"""

from typing import Any


class LazyBuildError(Exception):
    """Base exception for all lazybuild errors.

    Includes error code for programmatic handling and context for debugging.

    Example:
        raise OutputCollisionError(
            "output already claimed",
            build_path="b.js",
            output_path="bundle.js",
            other_build_path="a.js",
        )
    """

    code = "LAZYBUILD_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(f"[{self.code}] {message}")

    def __repr__(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r}, {ctx_str})"


# ==============================================================================
# Orchestration Errors
# ==============================================================================


class ConcurrentBuildError(LazyBuildError, RuntimeError):
    """build() was called while another pass is in flight."""

    code = "CONCURRENT_BUILD"


# ==============================================================================
# Validation Errors
# ==============================================================================


class InvalidInputError(LazyBuildError, TypeError):
    """Input is not a well-formed Snapshot."""

    code = "INVALID_INPUT"


class InvalidImportPathError(LazyBuildError, AssertionError):
    """A transform asked import_file() for a rooted path."""

    code = "INVALID_IMPORT_PATH"


# ==============================================================================
# Result Errors
# ==============================================================================


class InvalidResultTypeError(LazyBuildError, TypeError):
    """Transform returned something other than None, bytes, str or a dict."""

    code = "INVALID_RESULT_TYPE"


class InvalidOutputValueError(LazyBuildError, TypeError):
    """An output path was mapped to something other than bytes or str."""

    code = "INVALID_OUTPUT_VALUE"


class InvalidOutputPathError(LazyBuildError, ValueError):
    """An output path is rooted, escapes the output tree, or is not a str."""

    code = "INVALID_OUTPUT_PATH"


class OutputCollisionError(LazyBuildError, ValueError):
    """Two build paths claimed the same output path in one generation."""

    code = "OUTPUT_COLLISION"


# ==============================================================================
# Exports
# ==============================================================================

__all__ = [
    # Base
    "LazyBuildError",
    # Orchestration
    "ConcurrentBuildError",
    # Validation
    "InvalidInputError",
    "InvalidImportPathError",
    # Results
    "InvalidResultTypeError",
    "InvalidOutputValueError",
    "InvalidOutputPathError",
    "OutputCollisionError",
]
