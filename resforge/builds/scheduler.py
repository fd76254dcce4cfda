"""Incremental build scheduler.

Walks the resolved order of a requested target strictly sequentially.
Each target moves through ``pending -> skipped | running -> succeeded |
failed``. A target whose artifact is present is skipped; everything else
is handed to the invoker. The first failure halts the run and later
targets stay pending.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from resforge.builds.graph import DependencyGraph
from resforge.builds.locator import is_satisfied
from resforge.builds.models import BuildTarget
from resforge.builds.runner import InvocationResult, invoke_target
from resforge.errors import BuildFailure
from resforge.types import RunStatus, TargetState

logger = logging.getLogger(__name__)

Invoker = Callable[[BuildTarget], InvocationResult]
Locator = Callable[[BuildTarget], bool]
StateCallback = Callable[[BuildTarget, TargetState], None]


@dataclass
class TargetOutcome:
    """Final state of one target in a run."""

    target: BuildTarget
    state: TargetState = TargetState.PENDING
    result: InvocationResult | None = None

    @property
    def name(self) -> str:
        return self.target.name


@dataclass
class RunResult:
    """Result of a build run.

    Attributes:
        target: The requested target.
        status: Overall run status.
        outcomes: Per-target outcomes in resolved order.
        failure: The first failure, if the run did not succeed.
    """

    target: str
    status: RunStatus
    outcomes: list[TargetOutcome] = field(default_factory=list)
    failure: BuildFailure | None = None

    @property
    def success(self) -> bool:
        return self.status == RunStatus.SUCCEEDED

    @property
    def failed_target(self) -> str | None:
        return self.failure.target if self.failure is not None else None

    @property
    def states(self) -> dict[str, TargetState]:
        return {o.name: o.state for o in self.outcomes}

    @property
    def invoked(self) -> list[str]:
        """Targets with a recipe that was actually run."""
        return [
            o.name
            for o in self.outcomes
            if o.target.recipe is not None
            and o.state in (TargetState.SUCCEEDED, TargetState.FAILED)
        ]


@dataclass
class PlannedTarget:
    """A target in a build plan along with whether it would run."""

    target: BuildTarget
    satisfied: bool

    @property
    def will_run(self) -> bool:
        return not self.satisfied


def plan_build(
    graph: DependencyGraph,
    name: str,
    locator: Locator = is_satisfied,
    force: bool = False,
) -> list[PlannedTarget]:
    """Resolve a target and report which targets a run would build.

    Nothing is invoked. Prerequisites are assumed to succeed.

    Raises:
        UnknownTargetError: If the target is not registered.
        CyclicDependencyError: If a cycle is reachable from it.
    """
    return [
        PlannedTarget(target=t, satisfied=(not force) and locator(t))
        for t in graph.resolve_order(name)
    ]


def run_build(
    graph: DependencyGraph,
    name: str,
    invoker: Invoker | None = None,
    locator: Locator = is_satisfied,
    force: bool = False,
    timeout: int | None = None,
    on_state_change: StateCallback | None = None,
) -> RunResult:
    """Build a target and everything it depends on.

    The order is resolved before anything runs, so configuration errors
    surface with no recipe invoked.

    Args:
        graph: Dependency graph holding the targets.
        name: Requested target.
        invoker: Callable running a target's recipe; defaults to
            invoke_target with the given timeout.
        locator: Callable reporting whether a target is satisfied.
        force: Ignore present artifacts and run every recipe.
        timeout: Recipe timeout in seconds for the default invoker.
        on_state_change: Called on every state transition.

    Returns:
        RunResult describing the run.

    Raises:
        UnknownTargetError: If the target or a prerequisite is not registered.
        CyclicDependencyError: If a cycle is reachable from the target.
    """
    if invoker is None:
        invoker = partial(invoke_target, timeout=timeout)

    order = graph.resolve_order(name)
    outcomes = [TargetOutcome(target=t) for t in order]
    logger.info("Build order for %s: %s", name, ", ".join(t.name for t in order))

    def transition(outcome: TargetOutcome, state: TargetState) -> None:
        outcome.state = state
        logger.debug("[%s] -> %s", outcome.name, state.value)
        if on_state_change is not None:
            on_state_change(outcome.target, state)

    for target, outcome in zip(order, outcomes):
        if not force and locator(target):
            logger.info("[%s] Up to date: %s", target.name, target.artifact_path)
            transition(outcome, TargetState.SKIPPED)
            continue

        transition(outcome, TargetState.RUNNING)
        try:
            outcome.result = invoker(target)
        except BuildFailure as e:
            logger.error("%s", e)
            transition(outcome, TargetState.FAILED)
            return RunResult(
                target=name, status=RunStatus.FAILED, outcomes=outcomes, failure=e
            )
        except KeyboardInterrupt:
            logger.warning("[%s] Interrupted", target.name)
            transition(outcome, TargetState.FAILED)
            return RunResult(
                target=name,
                status=RunStatus.ABORTED,
                outcomes=outcomes,
                failure=BuildFailure(target.name, "interrupted"),
            )
        transition(outcome, TargetState.SUCCEEDED)

    return RunResult(target=name, status=RunStatus.SUCCEEDED, outcomes=outcomes)


__all__ = [
    "Invoker",
    "Locator",
    "PlannedTarget",
    "RunResult",
    "TargetOutcome",
    "plan_build",
    "run_build",
]
