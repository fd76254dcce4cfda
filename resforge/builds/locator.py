"""Artifact locator.

Resolves where each target's artifact lives and whether it is present.
Staleness is presence-only: no hashing, no timestamp comparison. An empty
or corrupt artifact counts as present.
"""

from __future__ import annotations

from pathlib import Path

from resforge.builds.models import BuildTarget

MANIFEST_FILENAME = "manifest.json"


def resolve_path(path: str | Path, build_root: Path) -> Path:
    """Resolve a declared path against the build root.

    Args:
        path: Declared path, absolute or relative to the build root.
        build_root: Root directory of the build.

    Returns:
        Absolute path.
    """
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = build_root / candidate
    return candidate


def contract_manifest_path(project_dir: str | Path, build_root: Path, toolchain: str) -> Path:
    """Return the manifest path produced by a contract build of a project.

    Args:
        project_dir: Contract project directory.
        build_root: Root directory of the build.
        toolchain: Toolchain name used in the output layout (e.g. "ink").

    Returns:
        Path to ``<project>/target/<toolchain>/manifest.json``.
    """
    return resolve_path(project_dir, build_root) / "target" / toolchain / MANIFEST_FILENAME


def is_satisfied(target: BuildTarget) -> bool:
    """Check whether a target's artifact is already present.

    Args:
        target: Target to check.

    Returns:
        True iff the target has an artifact path, is not marked
        always-rebuild, and a filesystem entry exists at that path.
    """
    if target.artifact_path is None or target.always_rebuild:
        return False
    return target.artifact_path.exists()


__all__ = [
    "MANIFEST_FILENAME",
    "contract_manifest_path",
    "is_satisfied",
    "resolve_path",
]
