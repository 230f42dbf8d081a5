"""
Tests for the rowsnap command-line interface.
"""

from datetime import timedelta

import pytest
from typer.testing import CliRunner

from cli.main import app
from rowsnap.models import Snapshot
from rowsnap.storage import SnapshotStore
from tests.fixtures import events_result, users_result


runner = CliRunner()


@pytest.fixture
def root(tmp_path):
    """Storage root holding two snapshots of one test."""
    store = SnapshotStore(tmp_path)
    store.save(Snapshot(name="initial", test_name="test_a", results=(users_result(), events_result())))

    later = events_result([(1, events_result().rows[0][1] + timedelta(hours=1))])
    store.save(Snapshot(name="after", test_name="test_a", results=(users_result(), later)))
    return tmp_path


class TestList:
    """Tests for the list command."""

    def test_empty_root(self, tmp_path):
        """Test listing a root with nothing stored."""
        result = runner.invoke(app, ["list", "--root", str(tmp_path)])
        assert result.exit_code == 0
        assert "No snapshots found" in result.output

    def test_lists_snapshots(self, root):
        """Test that stored snapshots are listed."""
        result = runner.invoke(app, ["list", "--root", str(root)])
        assert result.exit_code == 0
        assert "initial" in result.output
        assert "after" in result.output


class TestShow:
    """Tests for the show command."""

    def test_show_rows(self, root):
        """Test that rows of a result are printed."""
        result = runner.invoke(app, ["show", "test_a", "initial", "--result", "users", "--root", str(root)])
        assert result.exit_code == 0
        assert "grace" in result.output
        assert "int32" in result.output

    def test_unknown_result(self, root):
        """Test asking for a result the snapshot does not hold."""
        result = runner.invoke(app, ["show", "test_a", "initial", "--result", "nope", "--root", str(root)])
        assert result.exit_code == 1

    def test_missing_snapshot(self, root):
        """Test showing a snapshot that was never recorded."""
        result = runner.invoke(app, ["show", "test_a", "missing", "--root", str(root)])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestDiff:
    """Tests for the diff command."""

    def test_same_snapshot(self, root):
        """Test that a snapshot matches itself."""
        result = runner.invoke(app, ["diff", "test_a", "initial", "test_a", "initial", "--root", str(root)])
        assert result.exit_code == 0
        assert "Snapshots match" in result.output

    def test_different_snapshots(self, root):
        """Test that a moved timestamp is reported."""
        result = runner.invoke(app, ["diff", "test_a", "initial", "test_a", "after", "--root", str(root)])
        assert result.exit_code == 1
        assert "Snapshots differ" in result.output


class TestVerify:
    """Tests for the verify command."""

    def test_round_trip(self, root):
        """Test that stored results survive a round-trip."""
        result = runner.invoke(app, ["verify", "test_a", "initial", "--root", str(root)])
        assert result.exit_code == 0
        assert "users" in result.output


def test_version():
    """Test the version flag."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
