"""Dependency graph over build targets.

This module handles:
- Registering targets under unique names
- Synthesizing the aggregate target that depends on everything else
- Resolving a prerequisites-first order for a requested target
- Detecting unknown prerequisites and dependency cycles
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from resforge.builds.models import BuildTarget
from resforge.errors import (
    CyclicDependencyError,
    DuplicateTargetError,
    UnknownTargetError,
)

logger = logging.getLogger(__name__)


class DependencyGraph:
    """A set of named build targets and their prerequisite relation.

    Targets keep their registration order, which is also the prerequisite
    order of a synthesized aggregate target.
    """

    def __init__(self, targets: Iterable[BuildTarget] = ()) -> None:
        self._targets: dict[str, BuildTarget] = {}
        self.aggregate_name: str | None = None
        for target in targets:
            self.register(target)

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __iter__(self) -> Iterator[BuildTarget]:
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)

    @property
    def names(self) -> list[str]:
        """Registered target names in registration order."""
        return list(self._targets)

    def register(self, target: BuildTarget) -> None:
        """Add a target to the graph.

        Args:
            target: Target to add.

        Raises:
            DuplicateTargetError: If a target with the same name exists.
        """
        if target.name in self._targets:
            raise DuplicateTargetError(target.name)
        self._targets[target.name] = target
        logger.debug(
            "Registered target %s (prerequisites: %s)",
            target.name,
            ", ".join(target.prerequisites) or "none",
        )

    def get(self, name: str) -> BuildTarget:
        """Look up a target by name.

        Raises:
            UnknownTargetError: If no such target is registered.
        """
        try:
            return self._targets[name]
        except KeyError:
            raise UnknownTargetError(name) from None

    def add_aggregate(self, name: str) -> BuildTarget:
        """Synthesize an aggregate target over every non-aggregate target.

        Args:
            name: Name of the aggregate target (usually "all").

        Returns:
            The registered aggregate target.

        Raises:
            DuplicateTargetError: If the name is already registered.
        """
        prerequisites = tuple(t.name for t in self._targets.values() if not t.aggregate)
        aggregate = BuildTarget(name=name, prerequisites=prerequisites, aggregate=True)
        self.register(aggregate)
        self.aggregate_name = name
        return aggregate

    def resolve_order(self, name: str) -> list[BuildTarget]:
        """Resolve the targets needed to satisfy a target.

        The walk is depth-first in declared prerequisite order; each target
        appears once, after all of its prerequisites.

        Args:
            name: Requested target.

        Returns:
            Ordered targets, ending with the requested one.

        Raises:
            UnknownTargetError: If the target or a reachable prerequisite
                is not registered.
            CyclicDependencyError: If a cycle is reachable from the target.
        """
        order: list[BuildTarget] = []
        done: set[str] = set()
        path: list[str] = []

        def visit(current: str, required_by: str | None) -> None:
            if current in done:
                return
            if current in path:
                raise CyclicDependencyError([*path[path.index(current) :], current])
            target = self._targets.get(current)
            if target is None:
                raise UnknownTargetError(current, required_by=required_by)

            path.append(current)
            for prerequisite in target.prerequisites:
                visit(prerequisite, current)
            path.pop()

            done.add(current)
            order.append(target)

        visit(name, None)
        return order

    def validate(self) -> None:
        """Check every target for unknown prerequisites and cycles.

        Raises:
            UnknownTargetError: If any prerequisite is not registered.
            CyclicDependencyError: If the graph contains a cycle.
        """
        for name in self._targets:
            self.resolve_order(name)


__all__ = ["DependencyGraph"]
