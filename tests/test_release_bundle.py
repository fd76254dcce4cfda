"""Tests for release/bundle.py module."""

from datetime import date

import pytest

from resforge.release.bundle import (
    DEFAULT_BUNDLES,
    DEFAULT_CONTRACT_FILES,
    ReleaseAssemblyError,
    ReleaseBundle,
    assemble_release,
    collect_release_files,
    nightly_tag,
)


@pytest.fixture
def release_tree(tmp_path):
    """Create dist bundles and contract artifacts."""
    dist = tmp_path / "dist"
    contracts = tmp_path / "e2e" / "res"
    for bundle, names in DEFAULT_BUNDLES.items():
        (dist / bundle).mkdir(parents=True)
        for name in names:
            (dist / bundle / name).write_bytes(b"\x7fELF")
    contracts.mkdir(parents=True)
    for name in DEFAULT_CONTRACT_FILES:
        (contracts / name).write_text("{}")
    return dist, contracts


class TestNightlyTag:
    """Tests for nightly_tag function."""

    def test_format(self):
        """Should format as prefix-YYYY-MM-DD."""
        assert nightly_tag(date(2024, 3, 5)) == "nightly-2024-03-05"

    def test_custom_prefix(self):
        """Should use the given prefix."""
        assert nightly_tag(date(2024, 3, 5), prefix="edge") == "edge-2024-03-05"


class TestCollectReleaseFiles:
    """Tests for collect_release_files function."""

    def test_all_files(self, release_tree):
        """Should list bundle files then contract files."""
        dist, contracts = release_tree

        files = collect_release_files(dist, contracts)

        assert [f.name for f in files] == [
            "pruntime",
            "phala-node",
            "pherry",
            "system.contract",
            "log_server.contract",
            "log_server.sidevm.wasm",
            "sidevm_deployer.contract",
            "tokenomic.contract",
        ]
        assert files[0] == dist / "pruntime-binaries" / "pruntime"

    def test_missing_files_listed(self, release_tree):
        """Should report every missing file."""
        dist, contracts = release_tree
        (dist / "core-blockchain-binaries" / "pherry").unlink()
        (contracts / "tokenomic.contract").unlink()

        with pytest.raises(ReleaseAssemblyError) as exc_info:
            collect_release_files(dist, contracts)

        assert exc_info.value.code == "missing_files"
        assert {p.name for p in exc_info.value.missing} == {
            "pherry",
            "tokenomic.contract",
        }

    def test_duplicate_asset_names(self, tmp_path):
        """Should reject two files with the same basename."""
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "a" / "tool").touch()
        (tmp_path / "b" / "tool").touch()

        with pytest.raises(ReleaseAssemblyError) as exc_info:
            collect_release_files(
                tmp_path,
                tmp_path,
                bundles={"a": ("tool",), "b": ("tool",)},
                contract_files=(),
            )

        assert exc_info.value.code == "duplicate_asset"


class TestAssembleRelease:
    """Tests for assemble_release function."""

    def test_bundle(self, release_tree):
        """Should produce a dated pre-release with every file."""
        dist, contracts = release_tree

        bundle = assemble_release(dist, contracts, date(2024, 1, 31))

        assert isinstance(bundle, ReleaseBundle)
        assert bundle.tag == "nightly-2024-01-31"
        assert bundle.name == bundle.tag
        assert bundle.prerelease is True
        assert bundle.body == "Nightly build"
        assert len(bundle.files) == 8
        assert "phala-node" in bundle.asset_names
