"""Shared type definitions for resforge.

This module contains enums shared across subpackages to
avoid circular imports.
"""

from enum import Enum


class TargetState(str, Enum):
    """State of a single target within a build run."""

    PENDING = "pending"
    SKIPPED = "skipped"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunStatus(str, Enum):
    """Overall status of a build run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


class FailurePhase(str, Enum):
    """Phase of a recipe in which a build failure occurred."""

    COMMAND = "command"
    COPY = "copy"


__all__ = [
    "FailurePhase",
    "RunStatus",
    "TargetState",
]
