"""Tests for release/service.py module."""

from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from resforge.release.bundle import ReleaseBundle
from resforge.release.github import GitHubReleaseClient, PublishError
from resforge.release.service import (
    prune_releases,
    publish_release,
    select_stale_releases,
)


def make_release(day: int, tag_prefix: str = "nightly", draft: bool = False) -> dict:
    return {
        "id": day,
        "tag_name": f"{tag_prefix}-2024-01-{day:02d}",
        "created_at": f"2024-01-{day:02d}T00:10:00Z",
        "draft": draft,
    }


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=GitHubReleaseClient)


class TestPublishRelease:
    """Tests for publish_release function."""

    def test_creates_then_uploads(self, client):
        """Should create the pre-release and upload each file in order."""
        release = {"id": 1, "upload_url": "u", "html_url": "https://example/r"}
        client.get_release_by_tag.return_value = None
        client.create_release.return_value = release
        files = [Path("/dist/a"), Path("/dist/b")]
        bundle = ReleaseBundle(tag="nightly-2024-01-31", name="nightly-2024-01-31", files=files)

        result = publish_release(client, bundle)

        assert result is release
        client.create_release.assert_called_once_with(
            tag="nightly-2024-01-31",
            name="nightly-2024-01-31",
            body="Nightly build",
            prerelease=True,
        )
        assert client.upload_asset.call_args_list == [
            call(release, Path("/dist/a")),
            call(release, Path("/dist/b")),
        ]
        client.update_release.assert_not_called()
        client.delete_asset.assert_not_called()

    def test_upload_failure_propagates(self, client):
        """Should stop at the first failed upload."""
        client.get_release_by_tag.return_value = None
        client.create_release.return_value = {"id": 1}
        client.upload_asset.side_effect = PublishError("boom")
        bundle = ReleaseBundle(tag="t", name="t", files=[Path("/a"), Path("/b")])

        with pytest.raises(PublishError):
            publish_release(client, bundle)

        assert client.upload_asset.call_count == 1

    def test_existing_release_reused(self, client):
        """Should update the day's release and replace same-named assets."""
        existing = {
            "id": 9,
            "tag_name": "nightly-2024-01-31",
            "assets": [{"id": 41, "name": "a"}, {"id": 42, "name": "unrelated"}],
        }
        updated = {**existing, "upload_url": "u"}
        client.get_release_by_tag.return_value = existing
        client.update_release.return_value = updated
        bundle = ReleaseBundle(
            tag="nightly-2024-01-31",
            name="nightly-2024-01-31",
            files=[Path("/dist/a"), Path("/dist/b")],
        )

        result = publish_release(client, bundle)

        assert result is updated
        client.create_release.assert_not_called()
        client.update_release.assert_called_once_with(
            9, name="nightly-2024-01-31", body="Nightly build", prerelease=True
        )
        client.delete_asset.assert_called_once_with(41)
        assert client.upload_asset.call_args_list == [
            call(updated, Path("/dist/a")),
            call(updated, Path("/dist/b")),
        ]


class TestSelectStaleReleases:
    """Tests for select_stale_releases function."""

    def test_keeps_most_recent(self):
        """Should select everything beyond the newest N."""
        releases = [make_release(d) for d in (3, 1, 5, 2, 4)]

        stale = select_stale_releases(releases, keep_latest=2)

        assert [r["id"] for r in stale] == [3, 2, 1]

    def test_pattern_filter(self):
        """Should ignore releases whose tag does not match."""
        releases = [make_release(1), make_release(2, tag_prefix="v1.0")]

        stale = select_stale_releases(releases, keep_latest=0)

        assert [r["tag_name"] for r in stale] == ["nightly-2024-01-01"]

    def test_drafts_ignored(self):
        """Should never select drafts."""
        releases = [make_release(1, draft=True), make_release(2)]
        assert select_stale_releases(releases, keep_latest=0) == [releases[1]]

    def test_fewer_than_keep(self):
        """Should select nothing when under the limit."""
        releases = [make_release(d) for d in range(1, 6)]
        assert select_stale_releases(releases, keep_latest=30) == []

    def test_negative_keep(self):
        """Should reject a negative keep count."""
        with pytest.raises(ValueError):
            select_stale_releases([], keep_latest=-1)


class TestPruneReleases:
    """Tests for prune_releases function."""

    def test_deletes_releases_and_tags(self, client):
        """Should delete each stale release and its tag."""
        client.list_releases.return_value = [make_release(d) for d in range(1, 33)]

        pruned = prune_releases(client, keep_latest=30)

        assert pruned == ["nightly-2024-01-02", "nightly-2024-01-01"]
        assert client.delete_release.call_args_list == [call(2), call(1)]
        assert client.delete_tag.call_args_list == [
            call("nightly-2024-01-02"),
            call("nightly-2024-01-01"),
        ]

    def test_keep_tags(self, client):
        """Should leave tags in place when asked."""
        client.list_releases.return_value = [make_release(1), make_release(2)]

        prune_releases(client, keep_latest=1, delete_tags=False)

        client.delete_release.assert_called_once_with(1)
        client.delete_tag.assert_not_called()

    def test_dry_run(self, client):
        """Should report without deleting."""
        client.list_releases.return_value = [make_release(1), make_release(2)]

        pruned = prune_releases(client, keep_latest=1, dry_run=True)

        assert pruned == ["nightly-2024-01-01"]
        client.delete_release.assert_not_called()
        client.delete_tag.assert_not_called()
