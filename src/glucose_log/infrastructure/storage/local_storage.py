"""
File-backed key-value storage.

Each key is an independent slot holding a string, persisted as a file in
the data directory. Writes go to a temporary file first and are moved onto
the slot with os.replace.
"""

import logging
import os
import re
from pathlib import Path

from glucose_log.utils.exceptions import StorageError
from glucose_log.utils.parameters import StorageConfig

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalStorage:
    """
    Durable key-value store with string slots.

    Mirrors the get/set/remove contract of browser local storage.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize local storage.

        Args:
            config: Storage configuration.
        """
        self.config = config
        self.data_dir = Path(config.data_dir)

    def _slot_path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """
        Read a slot.

        Args:
            key: Slot name.

        Returns:
            Stored string, or None if the slot is empty.

        Raises:
            StorageError: If the slot exists but cannot be read.
        """
        path = self._slot_path(key)
        if not path.exists():
            logger.debug(f"Slot {key} is empty")
            return None

        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read slot {key} from {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        """
        Overwrite a slot.

        Args:
            key: Slot name.
            value: String to store.

        Raises:
            StorageError: If the slot cannot be written.
        """
        path = self._slot_path(key)
        tmp = path.with_name(path.name + ".tmp")

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"Failed to write slot {key} to {path}: {e}") from e

        logger.debug(f"Wrote {len(value)} characters to slot {key}")
