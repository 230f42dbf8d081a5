"""
Tests for the storage module.

Tests file-tree persistence of snapshots.
"""

import json
import logging
import tempfile
from pathlib import Path

import pytest

from rowsnap.codec import dump_file
from rowsnap.errors import (
    InvalidNameError,
    MalformedSnapshotError,
    SnapshotExistsError,
    SnapshotNotFoundError,
)
from rowsnap.models import Snapshot
from rowsnap.storage import MANIFEST_NAME, SnapshotStore, load_snapshot, save_snapshot
from rowsnap.types import ScanType
from tests.fixtures import events_result, make_col, make_result, sample_snapshot, users_result


TEST_NAME = "tests/test_shop.py::test_checkout"


@pytest.fixture
def store():
    """Create a store under a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield SnapshotStore(Path(tmpdir) / "snapshots")


def three_results():
    """Results whose names do not sort in recording order."""
    return (
        make_result("zeta", [make_col("n", ScanType.INT64)], [(1,)]),
        make_result("alpha", [make_col("n", ScanType.INT64)], [(2,)]),
        make_result("mid", [make_col("n", ScanType.INT64)], [(3,)]),
    )


class TestSaveLoad:
    """Tests for saving and loading snapshots."""

    def test_layout(self, store):
        """Test the directory layout of a saved snapshot."""
        path = store.save(sample_snapshot())

        assert path == store.root / "tests_test_shop.py_test_checkout" / "initial"
        assert sorted(p.name for p in path.iterdir()) == [MANIFEST_NAME, "user_count", "users"]

    def test_round_trip(self, store):
        """Test that values and order survive a save and load."""
        snapshot = sample_snapshot()
        store.save(snapshot)

        loaded = store.load(TEST_NAME, "initial")
        assert loaded.name == "initial"
        assert loaded.test_name == TEST_NAME
        assert loaded.result_names == ["users", "user_count"]
        for before, after in zip(snapshot.results, loaded.results):
            assert after.result_type == before.result_type
            assert after.rows == before.rows
            assert after.query is None

    def test_load_order_follows_manifest(self, store):
        """Test that results load in recorded, not alphabetical, order."""
        store.save(Snapshot(name="s", test_name=TEST_NAME, results=three_results()))
        assert store.load(TEST_NAME, "s").result_names == ["zeta", "alpha", "mid"]

    def test_manifest_contents(self, store):
        """Test the manifest written next to the results."""
        path = store.save(Snapshot(name="S", test_name=TEST_NAME, results=three_results()))
        manifest = json.loads((path / MANIFEST_NAME).read_text())

        assert path.name == "s"
        assert manifest == {
            "version": 1,
            "test": TEST_NAME,
            "snapshot": "S",
            "results": ["zeta", "alpha", "mid"],
        }

    def test_timestamps_survive(self, store):
        """Test a result with a timestamp column."""
        store.save(Snapshot(name="s", test_name=TEST_NAME, results=(events_result(),)))
        assert store.load(TEST_NAME, "s").results[0].rows == events_result().rows

    def test_convenience_functions(self, tmp_path):
        """Test the module-level save and load helpers."""
        save_snapshot(sample_snapshot(), root=tmp_path)
        loaded = load_snapshot(TEST_NAME, "initial", root=tmp_path)
        assert len(loaded) == 2


class TestOverwrite:
    """Tests for saving over an existing snapshot."""

    def test_exists_error_leaves_files_untouched(self, store):
        """Test that a refused save modifies nothing."""
        path = store.save(sample_snapshot())
        before = {p.name: p.read_bytes() for p in path.iterdir()}

        changed = Snapshot(name="initial", test_name=TEST_NAME, results=(users_result([(9, "x")]),))
        with pytest.raises(SnapshotExistsError):
            store.save(changed)

        assert {p.name: p.read_bytes() for p in path.iterdir()} == before

    def test_overwrite_replaces(self, store):
        """Test that overwrite removes results no longer recorded."""
        store.save(sample_snapshot())
        store.save(
            Snapshot(name="initial", test_name=TEST_NAME, results=(users_result([(9, "x")]),)),
            overwrite=True,
        )

        loaded = store.load(TEST_NAME, "initial")
        assert loaded.result_names == ["users"]
        assert loaded.results[0].rows == [(9, "x")]

    def test_exists(self, store):
        """Test the exists check."""
        assert not store.exists(TEST_NAME, "initial")
        store.save(sample_snapshot())
        assert store.exists(TEST_NAME, "Initial")


class TestErrors:
    """Tests for storage failures."""

    def test_not_found(self, store):
        """Test loading a snapshot that was never saved."""
        with pytest.raises(SnapshotNotFoundError):
            store.load(TEST_NAME, "missing")

    def test_duplicate_result_names(self, store):
        """Test that two results with one name are refused."""
        snapshot = Snapshot(name="s", test_name=TEST_NAME, results=(users_result(), users_result()))
        with pytest.raises(InvalidNameError):
            store.save(snapshot)
        assert not store.exists(TEST_NAME, "s")

    def test_invalid_result_name(self, store):
        """Test that a result name with a path separator is refused."""
        bad = make_result("a/b", [make_col("n", ScanType.INT64)], [])
        with pytest.raises(InvalidNameError):
            store.save(Snapshot(name="s", test_name=TEST_NAME, results=(bad,)))

    def test_missing_listed_file(self, store):
        """Test that a manifest entry without its file is reported."""
        path = store.save(sample_snapshot())
        (path / "users").unlink()
        with pytest.raises(MalformedSnapshotError):
            store.load(TEST_NAME, "initial")

    def test_corrupt_manifest(self, store):
        """Test that an unreadable manifest is reported."""
        path = store.save(sample_snapshot())
        (path / MANIFEST_NAME).write_text("[")
        with pytest.raises(MalformedSnapshotError):
            store.load(TEST_NAME, "initial")


class TestLegacyLayout:
    """Tests for snapshot directories written without a manifest."""

    def test_loads_in_name_order(self, store, caplog):
        """Test that results load sorted by file name with a warning."""
        path = store.snapshot_path(TEST_NAME, "old")
        path.mkdir(parents=True)
        for result in three_results():
            dump_file(result, path / result.name)

        with caplog.at_level(logging.WARNING, logger="rowsnap.storage.store"):
            loaded = store.load(TEST_NAME, "old")

        assert loaded.result_names == ["alpha", "mid", "zeta"]
        assert "no manifest.json" in caplog.text

    def test_unlisted_file_ignored(self, store, caplog):
        """Test that stray files beside a manifest are skipped."""
        path = store.save(sample_snapshot())
        dump_file(users_result(), path / "stray")

        with caplog.at_level(logging.WARNING, logger="rowsnap.storage.store"):
            loaded = store.load(TEST_NAME, "initial")

        assert loaded.result_names == ["users", "user_count"]
        assert "stray" in caplog.text


class TestListing:
    """Tests for listing stored snapshots."""

    def test_list_empty(self, store):
        """Test listing before anything is saved."""
        assert store.list_tests() == []
        assert store.list_snapshots() == []

    def test_list_snapshots(self, store):
        """Test summaries of stored snapshots."""
        store.save(sample_snapshot())
        store.save(sample_snapshot(name="after"))

        infos = store.list_snapshots()
        assert [i.name for i in infos] == ["after", "initial"]
        assert infos[0].result_names == ["users", "user_count"]
        assert all(i.has_manifest for i in infos)
        assert store.list_tests() == ["tests_test_shop.py_test_checkout"]
