"""Nightly release bundle assembly.

This module handles:
- Naming dated nightly tags
- Collecting upstream bundle files from the dist directory
- Adding the repository-resident contract artifacts
- Checking the flat file collection is complete and unambiguous
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)

# Upstream build jobs and the files each uploads, keyed by bundle name
DEFAULT_BUNDLES: dict[str, tuple[str, ...]] = {
    "pruntime-binaries": ("pruntime",),
    "core-blockchain-binaries": ("phala-node", "pherry"),
}

DEFAULT_CONTRACT_FILES: tuple[str, ...] = (
    "system.contract",
    "log_server.contract",
    "log_server.sidevm.wasm",
    "sidevm_deployer.contract",
    "tokenomic.contract",
)

DEFAULT_RELEASE_BODY = "Nightly build"


class ReleaseAssemblyError(Exception):
    """Raised when release files are missing or collide."""

    def __init__(
        self,
        message: str,
        missing: list[Path] | None = None,
        code: str = "release_assembly_error",
    ) -> None:
        super().__init__(message)
        self.missing = missing or []
        self.code = code


@dataclass
class ReleaseBundle:
    """A dated pre-release and the flat set of files it publishes.

    Attributes:
        tag: Release tag (e.g. nightly-2024-01-31).
        name: Release title.
        body: Release notes.
        prerelease: Whether to mark the release as a pre-release.
        files: Files to upload; their basenames become asset names.
    """

    tag: str
    name: str
    body: str = DEFAULT_RELEASE_BODY
    prerelease: bool = True
    files: list[Path] = field(default_factory=list)

    @property
    def asset_names(self) -> list[str]:
        return [f.name for f in self.files]


def nightly_tag(day: date, prefix: str = "nightly") -> str:
    """Return the tag of the nightly release for a day.

    Args:
        day: Release date.
        prefix: Tag prefix.

    Returns:
        Tag like ``nightly-2024-01-31``.
    """
    return f"{prefix}-{day.isoformat()}"


def collect_release_files(
    dist_dir: Path,
    contracts_dir: Path,
    bundles: dict[str, tuple[str, ...]] | None = None,
    contract_files: tuple[str, ...] | None = None,
) -> list[Path]:
    """Collect every file a nightly release publishes.

    Bundle files are looked up at ``<dist_dir>/<bundle>/<file>``, contract
    files at ``<contracts_dir>/<file>``.

    Args:
        dist_dir: Directory the upstream bundles were downloaded into.
        contracts_dir: Directory holding the contract artifacts.
        bundles: Bundle name to file names; defaults to DEFAULT_BUNDLES.
        contract_files: Contract file names; defaults to DEFAULT_CONTRACT_FILES.

    Returns:
        Paths in publication order (bundles first, then contracts).

    Raises:
        ReleaseAssemblyError: If any file is missing or two files share
            a basename.
    """
    if bundles is None:
        bundles = DEFAULT_BUNDLES
    if contract_files is None:
        contract_files = DEFAULT_CONTRACT_FILES

    files: list[Path] = []
    for bundle, names in bundles.items():
        files.extend(dist_dir / bundle / name for name in names)
    files.extend(contracts_dir / name for name in contract_files)

    missing = [f for f in files if not f.is_file()]
    if missing:
        raise ReleaseAssemblyError(
            "Missing release files: " + ", ".join(str(m) for m in missing),
            missing=missing,
            code="missing_files",
        )

    seen: dict[str, Path] = {}
    for f in files:
        if f.name in seen:
            raise ReleaseAssemblyError(
                f"Duplicate asset name {f.name}: {seen[f.name]} and {f}",
                code="duplicate_asset",
            )
        seen[f.name] = f

    logger.debug("Collected %d release file(s)", len(files))
    return files


def assemble_release(
    dist_dir: Path,
    contracts_dir: Path,
    day: date,
    tag_prefix: str = "nightly",
    bundles: dict[str, tuple[str, ...]] | None = None,
    contract_files: tuple[str, ...] | None = None,
) -> ReleaseBundle:
    """Assemble the nightly release bundle for a day.

    Raises:
        ReleaseAssemblyError: If release files are missing or collide.
    """
    tag = nightly_tag(day, prefix=tag_prefix)
    files = collect_release_files(
        dist_dir,
        contracts_dir,
        bundles=bundles,
        contract_files=contract_files,
    )
    logger.info("Assembled release %s with %d file(s)", tag, len(files))
    return ReleaseBundle(tag=tag, name=tag, files=files)


__all__ = [
    "DEFAULT_BUNDLES",
    "DEFAULT_CONTRACT_FILES",
    "DEFAULT_RELEASE_BODY",
    "ReleaseAssemblyError",
    "ReleaseBundle",
    "assemble_release",
    "collect_release_files",
    "nightly_tag",
]
