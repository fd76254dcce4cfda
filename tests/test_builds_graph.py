"""Tests for builds/graph.py module.

Tests target registration, aggregate synthesis, order resolution
and cycle detection.
"""

import pytest

from resforge.builds.graph import DependencyGraph
from resforge.builds.models import BuildTarget
from resforge.errors import (
    CyclicDependencyError,
    DuplicateTargetError,
    UnknownTargetError,
)


def names(targets: list[BuildTarget]) -> list[str]:
    return [t.name for t in targets]


@pytest.fixture
def diamond() -> DependencyGraph:
    """Graph where top depends on left and right, both depending on base."""
    return DependencyGraph(
        [
            BuildTarget(name="base"),
            BuildTarget(name="left", prerequisites=("base",)),
            BuildTarget(name="right", prerequisites=("base",)),
            BuildTarget(name="top", prerequisites=("left", "right")),
        ]
    )


class TestRegister:
    """Tests for target registration."""

    def test_register_adds_target(self):
        """Should make the target retrievable by name."""
        graph = DependencyGraph()
        target = BuildTarget(name="drivers")
        graph.register(target)

        assert "drivers" in graph
        assert graph.get("drivers") is target
        assert len(graph) == 1

    def test_duplicate_name_rejected(self):
        """Should raise DuplicateTargetError on a repeated name."""
        graph = DependencyGraph([BuildTarget(name="drivers")])

        with pytest.raises(DuplicateTargetError) as exc_info:
            graph.register(BuildTarget(name="drivers"))

        assert exc_info.value.name == "drivers"
        assert exc_info.value.code == "duplicate_target"

    def test_registration_order_kept(self):
        """Should iterate targets in registration order."""
        graph = DependencyGraph(
            [BuildTarget(name="c"), BuildTarget(name="a"), BuildTarget(name="b")]
        )
        assert graph.names == ["c", "a", "b"]

    def test_get_unknown(self):
        """Should raise UnknownTargetError for unregistered names."""
        with pytest.raises(UnknownTargetError):
            DependencyGraph().get("missing")


class TestAddAggregate:
    """Tests for aggregate target synthesis."""

    def test_aggregate_name_recorded(self):
        """Should remember the aggregate name for default target selection."""
        graph = DependencyGraph([BuildTarget(name="drivers")])
        assert graph.aggregate_name is None

        graph.add_aggregate("everything")

        assert graph.aggregate_name == "everything"

    def test_aggregate_depends_on_everything(self):
        """Should depend on every registered target in registration order."""
        graph = DependencyGraph(
            [
                BuildTarget(name="drivers"),
                BuildTarget(name="check_system"),
                BuildTarget(name="indeterministic_functions"),
            ]
        )
        aggregate = graph.add_aggregate("all")

        assert aggregate.prerequisites == (
            "drivers",
            "check_system",
            "indeterministic_functions",
        )
        assert aggregate.aggregate is True
        assert aggregate.phony is True
        assert aggregate.recipe is None
        assert graph.get("all") is aggregate

    def test_aggregate_skips_other_aggregates(self):
        """Should not depend on previously synthesized aggregates."""
        graph = DependencyGraph([BuildTarget(name="a")])
        graph.add_aggregate("all")
        second = graph.add_aggregate("everything")
        assert second.prerequisites == ("a",)

    def test_aggregate_name_collision(self):
        """Should raise DuplicateTargetError if the name is taken."""
        graph = DependencyGraph([BuildTarget(name="all")])
        with pytest.raises(DuplicateTargetError):
            graph.add_aggregate("all")

    def test_empty_graph_aggregate(self):
        """Should produce an aggregate with no prerequisites."""
        graph = DependencyGraph()
        assert graph.add_aggregate("all").prerequisites == ()


class TestResolveOrder:
    """Tests for resolve_order."""

    def test_single_target(self):
        """Should return just the target when it has no prerequisites."""
        graph = DependencyGraph([BuildTarget(name="solo")])
        assert names(graph.resolve_order("solo")) == ["solo"]

    def test_prerequisites_first_in_declared_order(self):
        """Should place prerequisites before dependents, in declared order."""
        graph = DependencyGraph(
            [
                BuildTarget(name="D"),
                BuildTarget(name="C"),
            ]
        )
        graph.add_aggregate("all")
        assert names(graph.resolve_order("all")) == ["D", "C", "all"]

    def test_diamond_deduplicated(self, diamond):
        """Should list a target reachable by two paths exactly once."""
        order = names(diamond.resolve_order("top"))

        assert order == ["base", "left", "right", "top"]
        assert order.count("base") == 1

    def test_every_prerequisite_precedes_dependent(self, diamond):
        """Should satisfy the topological property for every edge."""
        order = diamond.resolve_order("top")
        position = {t.name: i for i, t in enumerate(order)}
        for target in order:
            for prerequisite in target.prerequisites:
                assert position[prerequisite] < position[target.name]

    def test_only_reachable_targets(self, diamond):
        """Should not include targets unreachable from the request."""
        assert names(diamond.resolve_order("left")) == ["base", "left"]

    def test_unknown_requested_target(self, diamond):
        """Should raise UnknownTargetError for an unregistered request."""
        with pytest.raises(UnknownTargetError) as exc_info:
            diamond.resolve_order("nope")
        assert exc_info.value.name == "nope"
        assert exc_info.value.required_by is None

    def test_unknown_prerequisite(self):
        """Should name the target that requires the missing prerequisite."""
        graph = DependencyGraph([BuildTarget(name="a", prerequisites=("ghost",))])

        with pytest.raises(UnknownTargetError) as exc_info:
            graph.resolve_order("a")

        assert exc_info.value.name == "ghost"
        assert exc_info.value.required_by == "a"
        assert "required by a" in str(exc_info.value)

    def test_cycle_detected(self):
        """Should raise CyclicDependencyError instead of looping."""
        graph = DependencyGraph(
            [
                BuildTarget(name="a", prerequisites=("b",)),
                BuildTarget(name="b", prerequisites=("c",)),
                BuildTarget(name="c", prerequisites=("a",)),
            ]
        )

        with pytest.raises(CyclicDependencyError) as exc_info:
            graph.resolve_order("a")

        assert exc_info.value.cycle == ["a", "b", "c", "a"]
        assert exc_info.value.code == "cyclic_dependency"

    def test_self_cycle(self):
        """Should detect a target depending on itself."""
        graph = DependencyGraph([BuildTarget(name="a", prerequisites=("a",))])
        with pytest.raises(CyclicDependencyError) as exc_info:
            graph.resolve_order("a")
        assert exc_info.value.cycle == ["a", "a"]

    def test_cycle_reported_from_entry_point(self):
        """Should report only the cycle, not the path leading into it."""
        graph = DependencyGraph(
            [
                BuildTarget(name="top", prerequisites=("x",)),
                BuildTarget(name="x", prerequisites=("y",)),
                BuildTarget(name="y", prerequisites=("x",)),
            ]
        )
        with pytest.raises(CyclicDependencyError) as exc_info:
            graph.resolve_order("top")
        assert exc_info.value.cycle == ["x", "y", "x"]

    def test_cycle_unreachable_does_not_fail(self):
        """Should resolve targets that cannot reach the cycle."""
        graph = DependencyGraph(
            [
                BuildTarget(name="ok"),
                BuildTarget(name="a", prerequisites=("b",)),
                BuildTarget(name="b", prerequisites=("a",)),
            ]
        )
        assert names(graph.resolve_order("ok")) == ["ok"]


class TestValidate:
    """Tests for whole-graph validation."""

    def test_valid_graph(self, diamond):
        """Should pass for an acyclic graph with known prerequisites."""
        diamond.validate()

    def test_cycle_anywhere(self):
        """Should find cycles not reachable from any particular target."""
        graph = DependencyGraph(
            [
                BuildTarget(name="ok"),
                BuildTarget(name="a", prerequisites=("b",)),
                BuildTarget(name="b", prerequisites=("a",)),
            ]
        )
        with pytest.raises(CyclicDependencyError):
            graph.validate()

    def test_unknown_prerequisite(self):
        """Should find prerequisites that are not registered."""
        graph = DependencyGraph([BuildTarget(name="a", prerequisites=("ghost",))])
        with pytest.raises(UnknownTargetError):
            graph.validate()
