"""Error types for resforge.

Every error carries a stable ``code`` for programmatic handling. All of
them are terminal to a build run: nothing is retried automatically.
"""

from __future__ import annotations

from collections.abc import Sequence

from resforge.types import FailurePhase

# Error code constants
DUPLICATE_TARGET = "duplicate_target"
UNKNOWN_TARGET = "unknown_target"
CYCLIC_DEPENDENCY = "cyclic_dependency"
BUILD_FAILED = "build_failed"
BUILD_TIMEOUT = "build_timeout"
LAUNCH_ERROR = "launch_error"
COPY_ERROR = "copy_error"
DECLARATION_ERROR = "declaration_error"


class ResforgeError(Exception):
    """Base class for resforge errors."""

    def __init__(self, message: str, code: str = "resforge_error") -> None:
        super().__init__(message)
        self.code = code


class DuplicateTargetError(ResforgeError):
    """Raised when a target name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate target: {name}", code=DUPLICATE_TARGET)
        self.name = name


class UnknownTargetError(ResforgeError):
    """Raised when a requested target or prerequisite is not registered."""

    def __init__(self, name: str, required_by: str | None = None) -> None:
        message = f"Unknown target: {name}"
        if required_by is not None:
            message += f" (required by {required_by})"
        super().__init__(message, code=UNKNOWN_TARGET)
        self.name = name
        self.required_by = required_by


class CyclicDependencyError(ResforgeError):
    """Raised when a dependency cycle is reachable from a requested target."""

    def __init__(self, cycle: Sequence[str]) -> None:
        super().__init__(
            f"Dependency cycle: {' -> '.join(cycle)}",
            code=CYCLIC_DEPENDENCY,
        )
        self.cycle = list(cycle)


class DeclarationError(ResforgeError):
    """Raised when a target declaration file cannot be loaded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=DECLARATION_ERROR)


class BuildFailure(ResforgeError):
    """Raised when a target's recipe fails or cannot be launched.

    Attributes:
        target: Name of the failing target.
        underlying_error: The process or filesystem error behind the failure.
        phase: Recipe phase that failed (command or copy).
        exit_code: Process exit code, if the process ran to completion.
    """

    def __init__(
        self,
        target: str,
        underlying_error: BaseException | str,
        phase: FailurePhase = FailurePhase.COMMAND,
        exit_code: int | None = None,
        code: str = BUILD_FAILED,
    ) -> None:
        super().__init__(
            f"Target '{target}' failed ({phase.value}): {underlying_error}",
            code=code,
        )
        self.target = target
        self.underlying_error = underlying_error
        self.phase = phase
        self.exit_code = exit_code


__all__ = [
    "BUILD_FAILED",
    "BUILD_TIMEOUT",
    "COPY_ERROR",
    "CYCLIC_DEPENDENCY",
    "DECLARATION_ERROR",
    "DUPLICATE_TARGET",
    "LAUNCH_ERROR",
    "UNKNOWN_TARGET",
    "BuildFailure",
    "CyclicDependencyError",
    "DeclarationError",
    "DuplicateTargetError",
    "ResforgeError",
    "UnknownTargetError",
]
