"""External build invoker.

This module handles:
- Running a target's recipe command in its working directory
- Passing the child's output through live
- Enforcing the optional recipe timeout
- Copying produced files into place as a separate recipe phase

Failures of either phase are raised as BuildFailure; nothing is retried.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from resforge.builds.models import BuildTarget, CopyStep
from resforge.errors import (
    BUILD_FAILED,
    BUILD_TIMEOUT,
    COPY_ERROR,
    LAUNCH_ERROR,
    BuildFailure,
)
from resforge.types import FailurePhase

logger = logging.getLogger(__name__)


@dataclass
class InvocationResult:
    """Result of invoking a target's recipe.

    Attributes:
        target: Name of the invoked target.
        started_at: Invocation start time.
        finished_at: Invocation finish time.
        command: The command that was executed, if any.
        exit_code: Process exit code, None when there was no recipe.
        copied: Files copied by the copy phase.
    """

    target: str
    started_at: datetime
    finished_at: datetime
    command: str | None = None
    exit_code: int | None = None
    copied: list[Path] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Duration of the invocation in seconds."""
        return (self.finished_at - self.started_at).total_seconds()


def run_command(target: BuildTarget, timeout: int | None = None) -> int:
    """Run a target's recipe command and wait for it.

    Output is not captured; the child inherits stdout and stderr.

    Args:
        target: Target with a recipe.
        timeout: Timeout in seconds (None = no timeout).

    Returns:
        The process exit code (always zero).

    Raises:
        BuildFailure: If the command cannot be launched, times out, or
            exits with a nonzero status.
    """
    recipe = target.recipe
    if recipe is None:
        raise ValueError(f"Target '{target.name}' has no recipe")
    cmd_str = shlex.join(recipe.command)

    if not recipe.working_directory.is_dir():
        raise BuildFailure(
            target.name,
            FileNotFoundError(f"Working directory not found: {recipe.working_directory}"),
            code=LAUNCH_ERROR,
        )

    env: dict[str, str] | None = None
    if recipe.env:
        env = dict(os.environ)
        env.update(recipe.env)

    logger.info("[%s] Executing: %s", target.name, cmd_str)
    logger.debug("[%s] Working directory: %s", target.name, recipe.working_directory)

    try:
        result = subprocess.run(
            list(recipe.command),
            cwd=recipe.working_directory,
            env=env,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise BuildFailure(
            target.name,
            f"timed out after {timeout} seconds",
            code=BUILD_TIMEOUT,
        ) from e
    except OSError as e:
        raise BuildFailure(target.name, e, code=LAUNCH_ERROR) from e

    if result.returncode != 0:
        raise BuildFailure(
            target.name,
            f"'{cmd_str}' exited with status {result.returncode}",
            exit_code=result.returncode,
            code=BUILD_FAILED,
        )
    return result.returncode


def copy_outputs(target_name: str, step: CopyStep) -> list[Path]:
    """Copy produced files into the destination directory.

    Mirrors ``cp <source>/<pattern> <destination>``: a missing source
    directory or an empty match is a failure.

    Args:
        target_name: Name of the target, for error reporting.
        step: Copy phase description.

    Returns:
        Paths of the copied entries in the destination.

    Raises:
        BuildFailure: With phase "copy" if anything cannot be copied.
    """
    if not step.source_dir.is_dir():
        raise BuildFailure(
            target_name,
            FileNotFoundError(f"Distributable directory not found: {step.source_dir}"),
            phase=FailurePhase.COPY,
            code=COPY_ERROR,
        )

    sources = sorted(step.source_dir.glob(step.pattern))
    if not sources:
        raise BuildFailure(
            target_name,
            FileNotFoundError(f"No files match {step.source_dir / step.pattern}"),
            phase=FailurePhase.COPY,
            code=COPY_ERROR,
        )

    copied: list[Path] = []
    try:
        step.destination.mkdir(parents=True, exist_ok=True)
        for source in sources:
            dest = step.destination / source.name
            if source.is_dir():
                shutil.copytree(source, dest, dirs_exist_ok=True)
            else:
                shutil.copy2(source, dest)
            copied.append(dest)
    except OSError as e:
        raise BuildFailure(
            target_name, e, phase=FailurePhase.COPY, code=COPY_ERROR
        ) from e

    logger.info(
        "[%s] Copied %d file(s) from %s to %s",
        target_name,
        len(copied),
        step.source_dir,
        step.destination,
    )
    return copied


def invoke_target(target: BuildTarget, timeout: int | None = None) -> InvocationResult:
    """Invoke a target's recipe.

    Targets without a recipe succeed immediately without running anything.

    Args:
        target: Target to build.
        timeout: Timeout in seconds for the recipe command.

    Returns:
        InvocationResult with execution details.

    Raises:
        BuildFailure: If the command or the copy phase fails.
    """
    started_at = datetime.now(timezone.utc)
    recipe = target.recipe
    if recipe is None:
        return InvocationResult(
            target=target.name,
            started_at=started_at,
            finished_at=started_at,
        )

    exit_code = run_command(target, timeout=timeout)

    copied: list[Path] = []
    if recipe.copy_outputs is not None:
        copied = copy_outputs(target.name, recipe.copy_outputs)

    return InvocationResult(
        target=target.name,
        started_at=started_at,
        finished_at=datetime.now(timezone.utc),
        command=shlex.join(recipe.command),
        exit_code=exit_code,
        copied=copied,
    )


__all__ = [
    "InvocationResult",
    "copy_outputs",
    "invoke_target",
    "run_command",
]
