"""
File-Tree Snapshot Store for rowsnap

This module persists Snapshots as a directory tree of JSON documents and
reads them back.

Layout:
    <root>/<test dir>/<snapshot name>/manifest.json
    <root>/<test dir>/<snapshot name>/<result name>      (one per Result)

Design Decisions:
    - Plain files, so recorded snapshots can be reviewed and committed
      alongside the tests that own them
    - manifest.json records result order at save time; directory listing
      order is never trusted for it
    - Snapshot directories written without a manifest (older layout) still
      load, in sorted file name order, with a warning
    - Save with overwrite removes the old directory first

Limitation:
    Overwriting is not atomic. A failure part-way through save can leave a
    partial or empty snapshot directory behind.
"""

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from rowsnap.codec.document import dump_file, load_file
from rowsnap.db.adapter import Database
from rowsnap.db.statements import StatementBuilder
from rowsnap.errors import (
    InvalidNameError,
    MalformedSnapshotError,
    SnapshotExistsError,
    SnapshotNotFoundError,
)
from rowsnap.models import Snapshot
from rowsnap.naming import clean_name, safe_test_dir, validate_name
from rowsnap.storage.replay import DEFAULT_BATCH_SIZE, apply_snapshot


# Default storage root, relative to the working directory
DEFAULT_SNAPSHOT_ROOT = "testdata/snapshot"

MANIFEST_NAME = "manifest.json"
MANIFEST_VERSION = 1

logger = logging.getLogger(__name__)


@dataclass
class SnapshotInfo:
    """
    Summary of a stored snapshot for listing.

    Attributes:
        test_dir: Directory name of the owning test
        name: Snapshot name
        path: Snapshot directory
        result_names: Result names in recorded order
        has_manifest: False for snapshots stored in the older layout
    """

    test_dir: str
    name: str
    path: Path
    result_names: list[str]
    has_manifest: bool


class SnapshotStore:
    """
    Directory-tree persistence for Snapshots.

    Handles:
    - Saving a Snapshot with or without overwrite
    - Loading a Snapshot with its results in recorded order
    - Listing stored tests and snapshots
    - Replaying a stored Snapshot into a database

    Usage:
        store = SnapshotStore("testdata/snapshot")
        store.save(snapshot)
        snapshot = store.load("test_orders", "after_checkout")
    """

    def __init__(self, root: str | Path = DEFAULT_SNAPSHOT_ROOT) -> None:
        """
        Initialize the store.

        Args:
            root: Directory holding one subdirectory per test.
                  It is created lazily on first save.
        """
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def snapshot_path(self, test_name: str, name: str) -> Path:
        """Directory a snapshot is stored in."""
        return self._root / safe_test_dir(test_name) / clean_name(name)

    def exists(self, test_name: str, name: str) -> bool:
        return self.snapshot_path(test_name, name).exists()

    def save(self, snapshot: Snapshot, overwrite: bool = False) -> Path:
        """
        Persist every Result of a Snapshot.

        Args:
            snapshot: The snapshot to write
            overwrite: Replace an existing snapshot of the same name

        Returns:
            The snapshot directory

        Raises:
            SnapshotExistsError: If the snapshot exists and overwrite is False;
                                 nothing is modified in that case
            InvalidNameError: If a result name is unusable or repeated
        """
        path = self.snapshot_path(snapshot.test_name, snapshot.name)

        names = [validate_name(r.name) for r in snapshot.results]
        if len(set(names)) != len(names):
            raise InvalidNameError(f"duplicate result names in snapshot {snapshot.name!r}")

        if path.exists():
            if not overwrite:
                raise SnapshotExistsError(path)
            logger.info("Overwriting snapshot %s", path)
            shutil.rmtree(path)

        path.mkdir(parents=True, exist_ok=True)

        for result in snapshot.results:
            dump_file(result, path / result.name)

        manifest = {
            "version": MANIFEST_VERSION,
            "test": snapshot.test_name,
            "snapshot": snapshot.name,
            "results": names,
        }
        (path / MANIFEST_NAME).write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")

        logger.info("Saved snapshot %s (%d results)", path, len(names))
        return path

    def load(self, test_name: str, name: str) -> Snapshot:
        """
        Load a stored Snapshot.

        Args:
            test_name: Identifier of the owning test
            name: Snapshot name

        Returns:
            Snapshot with results in recorded order (no queries bound)

        Raises:
            SnapshotNotFoundError: If no snapshot is stored there
            MalformedSnapshotError: If the manifest or a result file is unusable
        """
        path = self.snapshot_path(test_name, name)
        if not path.is_dir():
            raise SnapshotNotFoundError(path)

        results = tuple(load_file(p) for p in self._result_files(path))
        logger.info("Loaded snapshot %s (%d results)", path, len(results))
        return Snapshot(name=clean_name(name), test_name=test_name, results=results)

    def apply(
        self,
        snapshot: Snapshot,
        db: Database,
        builder: Optional[StatementBuilder] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> int:
        """Replay a Snapshot's tables into a database; see apply_snapshot."""
        return apply_snapshot(snapshot, db, builder=builder, batch_size=batch_size)

    def list_tests(self) -> list[str]:
        """Directory names of every test with stored snapshots."""
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if p.is_dir())

    def list_snapshots(self, test_dir: Optional[str] = None) -> list[SnapshotInfo]:
        """
        Summaries of stored snapshots.

        Args:
            test_dir: Restrict to one test directory; all tests if None
        """
        tests = [test_dir] if test_dir is not None else self.list_tests()
        infos = []
        for test in tests:
            test_path = self._root / test
            if not test_path.is_dir():
                continue
            for snap_path in sorted(p for p in test_path.iterdir() if p.is_dir()):
                infos.append(
                    SnapshotInfo(
                        test_dir=test,
                        name=snap_path.name,
                        path=snap_path,
                        result_names=[p.name for p in self._result_files(snap_path)],
                        has_manifest=(snap_path / MANIFEST_NAME).is_file(),
                    )
                )
        return infos

    def _result_files(self, path: Path) -> list[Path]:
        manifest_path = path / MANIFEST_NAME
        if not manifest_path.is_file():
            logger.warning(
                "Snapshot %s has no %s; loading results in file name order",
                path,
                MANIFEST_NAME,
            )
            return sorted(
                (p for p in path.iterdir() if p.is_file() and p.name != MANIFEST_NAME),
                key=lambda p: p.name,
            )

        names = self._read_manifest(manifest_path)
        files = []
        for name in names:
            file_path = path / name
            if not file_path.is_file():
                raise MalformedSnapshotError(
                    f"{manifest_path} lists result {name!r} but {file_path} is missing"
                )
            files.append(file_path)

        for extra in self._unlisted(path, names):
            logger.warning("Ignoring %s: not listed in %s", extra, MANIFEST_NAME)
        return files

    def _read_manifest(self, manifest_path: Path) -> list[str]:
        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise MalformedSnapshotError(f"invalid manifest {manifest_path}: {e}") from e

        if not isinstance(manifest, dict) or manifest.get("version") != MANIFEST_VERSION:
            raise MalformedSnapshotError(f"unsupported manifest {manifest_path}")

        names = manifest.get("results")
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise MalformedSnapshotError(f"manifest {manifest_path} has no result list")

        for name in names:
            try:
                validate_name(name)
            except InvalidNameError as e:
                raise MalformedSnapshotError(f"manifest {manifest_path}: {e}") from e
        return names

    def _unlisted(self, path: Path, names: list[str]) -> Iterator[Path]:
        listed = set(names) | {MANIFEST_NAME}
        for p in sorted(path.iterdir()):
            if p.is_file() and p.name not in listed:
                yield p


# Module-level convenience functions

def save_snapshot(
    snapshot: Snapshot,
    root: str | Path = DEFAULT_SNAPSHOT_ROOT,
    overwrite: bool = False,
) -> Path:
    """
    Save a snapshot under a storage root.

    Args:
        snapshot: Snapshot to persist
        root: Storage root directory
        overwrite: Replace an existing snapshot of the same name

    Returns:
        The snapshot directory
    """
    return SnapshotStore(root).save(snapshot, overwrite=overwrite)


def load_snapshot(
    test_name: str,
    name: str,
    root: str | Path = DEFAULT_SNAPSHOT_ROOT,
) -> Snapshot:
    """
    Load a snapshot from a storage root.

    Args:
        test_name: Identifier of the owning test
        name: Snapshot name
        root: Storage root directory

    Returns:
        The loaded Snapshot
    """
    return SnapshotStore(root).load(test_name, name)
