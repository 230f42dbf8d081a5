"""
Configuration for rowsnap tooling.

The engine itself takes every setting as an argument. Settings gathers the
defaults in one place for the command-line interface, with overrides from
the environment:

    ROWSNAP_SNAPSHOT_ROOT   storage root directory
    ROWSNAP_BATCH_SIZE      rows per INSERT when replaying
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from rowsnap.storage.replay import DEFAULT_BATCH_SIZE
from rowsnap.storage.store import DEFAULT_SNAPSHOT_ROOT


logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """
    Resolved tool settings.

    Attributes:
        snapshot_root: Directory holding one subdirectory per test
        batch_size: Rows per INSERT statement during replay
    """

    snapshot_root: Path = field(default_factory=lambda: Path(DEFAULT_SNAPSHOT_ROOT))
    batch_size: int = DEFAULT_BATCH_SIZE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from defaults plus environment overrides.

        Raises:
            ValueError: If ROWSNAP_BATCH_SIZE is not a positive integer
        """
        environ = os.environ if environ is None else environ
        settings = cls()

        root = environ.get("ROWSNAP_SNAPSHOT_ROOT")
        if root:
            settings.snapshot_root = Path(root)
            logger.debug("Snapshot root from environment: %s", root)

        batch = environ.get("ROWSNAP_BATCH_SIZE")
        if batch:
            size = int(batch)
            if size < 1:
                raise ValueError(f"ROWSNAP_BATCH_SIZE must be positive, got {batch}")
            settings.batch_size = size

        return settings
