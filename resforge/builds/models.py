"""In-memory build target models.

Targets are constructed once per run from a declaration and are not
mutated afterwards. Paths held here are already resolved against the
build root.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CopyStep:
    """Second recipe phase that copies produced files into place.

    Attributes:
        source_dir: Directory holding the produced files.
        destination: Directory the files are copied into.
        pattern: Glob selecting files inside source_dir.
    """

    source_dir: Path
    destination: Path
    pattern: str = "*"


@dataclass(frozen=True)
class Recipe:
    """External command used to build a target.

    Attributes:
        working_directory: Directory the command runs in.
        command: Executable invocation, argv style.
        env: Extra environment variables, as name and value pairs, merged
            over the parent environment.
        copy_outputs: Optional copy phase run after a successful command.
    """

    working_directory: Path
    command: tuple[str, ...]
    env: tuple[tuple[str, str], ...] = ()
    copy_outputs: CopyStep | None = None

    def __post_init__(self) -> None:
        if not self.command:
            raise ValueError("recipe command must not be empty")


@dataclass(frozen=True)
class BuildTarget:
    """A named unit of build work.

    Attributes:
        name: Unique identifier within a graph.
        artifact_path: Output whose presence marks the target as satisfied.
            Phony targets have none.
        prerequisites: Names of targets satisfied before this one, in order.
        recipe: External command; aggregates have none.
        always_rebuild: Never skip, even when the artifact exists.
        aggregate: Synthesized target depending on every other target.
    """

    name: str
    artifact_path: Path | None = None
    prerequisites: tuple[str, ...] = ()
    recipe: Recipe | None = None
    always_rebuild: bool = False
    aggregate: bool = False

    @property
    def phony(self) -> bool:
        """Whether the target has no artifact to check."""
        return self.artifact_path is None


__all__ = ["BuildTarget", "CopyStep", "Recipe"]
