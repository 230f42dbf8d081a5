"""
Storage module for rowsnap.

This module provides file-tree persistence of Snapshots and their replay
into a live database.
"""

from rowsnap.storage.replay import DEFAULT_BATCH_SIZE, apply_result, apply_snapshot
from rowsnap.storage.store import (
    DEFAULT_SNAPSHOT_ROOT,
    MANIFEST_NAME,
    SnapshotInfo,
    SnapshotStore,
    load_snapshot,
    save_snapshot,
)

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_SNAPSHOT_ROOT",
    "MANIFEST_NAME",
    "SnapshotInfo",
    "SnapshotStore",
    "apply_result",
    "apply_snapshot",
    "load_snapshot",
    "save_snapshot",
]
