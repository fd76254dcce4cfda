"""Nightly release service.

This module provides the high-level release API:
- publish_release(): create (or reuse) the dated pre-release and upload its files
- prune_releases(): keep the most recent matching releases, delete the rest
"""

from __future__ import annotations

import logging
from typing import Any

from resforge.release.bundle import ReleaseBundle
from resforge.release.github import GitHubReleaseClient

logger = logging.getLogger(__name__)

DEFAULT_KEEP_LATEST = 30


def publish_release(client: GitHubReleaseClient, bundle: ReleaseBundle) -> dict[str, Any]:
    """Publish a release bundle.

    An existing release for the bundle tag is updated in place, and any
    asset with the same name as a bundle file is replaced, so publishing
    the same day twice completes a partial upload.

    Args:
        client: Release host client.
        bundle: Assembled bundle.

    Returns:
        The created or updated release as returned by the host.

    Raises:
        PublishError: If any release host request fails.
    """
    existing = client.get_release_by_tag(bundle.tag)
    if existing is None:
        release = client.create_release(
            tag=bundle.tag,
            name=bundle.name,
            body=bundle.body,
            prerelease=bundle.prerelease,
        )
    else:
        logger.info("Release %s already exists, updating it", bundle.tag)
        release = client.update_release(
            existing["id"],
            name=bundle.name,
            body=bundle.body,
            prerelease=bundle.prerelease,
        )

    assets = {a["name"]: a for a in (existing or {}).get("assets", [])}
    for path in bundle.files:
        stale = assets.get(path.name)
        if stale is not None:
            logger.info("Replacing asset %s", path.name)
            client.delete_asset(stale["id"])
        client.upload_asset(release, path)

    logger.info(
        "Published %s with %d asset(s): %s",
        bundle.tag,
        len(bundle.files),
        release.get("html_url", ""),
    )
    return release


def select_stale_releases(
    releases: list[dict[str, Any]],
    keep_latest: int = DEFAULT_KEEP_LATEST,
    tag_pattern: str = "nightly",
) -> list[dict[str, Any]]:
    """Select matching releases beyond the most recent ``keep_latest``.

    Drafts are never selected. Releases are ordered newest first by
    creation time.

    Args:
        releases: Releases as returned by the host.
        keep_latest: Number of matching releases to keep.
        tag_pattern: Substring a tag must contain to be considered.

    Returns:
        Releases to delete, newest first.
    """
    if keep_latest < 0:
        raise ValueError(f"keep_latest must be >= 0, got {keep_latest}")

    matching = [
        r
        for r in releases
        if not r.get("draft") and tag_pattern in (r.get("tag_name") or "")
    ]
    matching.sort(key=lambda r: r.get("created_at") or "", reverse=True)
    return matching[keep_latest:]


def prune_releases(
    client: GitHubReleaseClient,
    keep_latest: int = DEFAULT_KEEP_LATEST,
    tag_pattern: str = "nightly",
    delete_tags: bool = True,
    dry_run: bool = False,
) -> list[str]:
    """Delete matching releases older than the most recent ``keep_latest``.

    Args:
        client: Release host client.
        keep_latest: Number of matching releases to keep.
        tag_pattern: Substring a tag must contain to be pruned.
        delete_tags: Also delete the tag of each deleted release.
        dry_run: Report what would be deleted without deleting.

    Returns:
        Tags of the deleted (or, in dry-run mode, selected) releases.

    Raises:
        PublishError: If listing or deleting fails.
    """
    stale = select_stale_releases(
        client.list_releases(), keep_latest=keep_latest, tag_pattern=tag_pattern
    )

    pruned: list[str] = []
    for release in stale:
        tag = release["tag_name"]
        if dry_run:
            logger.info("Would delete release %s", tag)
        else:
            logger.info("Deleting release %s", tag)
            client.delete_release(release["id"])
            if delete_tags:
                client.delete_tag(tag)
        pruned.append(tag)
    return pruned


__all__ = [
    "DEFAULT_KEEP_LATEST",
    "prune_releases",
    "publish_release",
    "select_stale_releases",
]
