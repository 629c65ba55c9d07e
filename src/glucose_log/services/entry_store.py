"""
Entry store service.

Owns the in-memory collection of glucose entries and writes it through to
local storage on every mutation.
"""

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from glucose_log.domain.entry import GlucoseEntry
from glucose_log.infrastructure.parsers.json_parser import ImportParser, ImportResult
from glucose_log.infrastructure.storage.local_storage import LocalStorage
from glucose_log.utils.exceptions import StorageError
from glucose_log.utils.ids import generate_entry_id

logger = logging.getLogger(__name__)

_ENTRY_LIST = TypeAdapter(list[GlucoseEntry])


class SaveResult(BaseModel):
    """Outcome of persisting the collection."""

    ok: bool
    count: int = 0
    error: str | None = None


def parse_glucose_value(value: Any) -> float | None:
    """
    Convert user input to a positive glucose value.

    Accepts numbers and numeric strings; a comma is accepted as the decimal
    separator.

    Args:
        value: Candidate value.

    Returns:
        Float value, or None if the input is non-numeric, non-finite or not
        strictly positive.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number) or number <= 0:
        return None

    return number


class EntryStore:
    """
    Store for blood-glucose entries.

    All mutations go through this class and are persisted immediately as a
    full-collection overwrite.
    """

    def __init__(self, storage: LocalStorage, storage_key: str) -> None:
        """
        Initialize entry store.

        Args:
            storage: Local key-value storage.
            storage_key: Slot holding the serialized collection.
        """
        self.storage = storage
        self.storage_key = storage_key
        self._entries: list[GlucoseEntry] = []
        self.last_save: SaveResult | None = None
        self._parser = ImportParser()

    @property
    def entries(self) -> list[GlucoseEntry]:
        """Snapshot of the current collection."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> list[GlucoseEntry]:
        """
        Load the collection from storage.

        Missing data yields an empty collection. Unreadable or malformed data
        is logged and also yields an empty collection.

        Returns:
            Loaded entries.
        """
        try:
            raw = self.storage.get_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to load entries: {e}")
            self._entries = []
            return self.entries

        if raw is None or not raw.strip():
            self._entries = []
            return self.entries

        try:
            self._entries = _ENTRY_LIST.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Stored entries are malformed, starting empty: {e}")
            self._entries = []
            return self.entries

        logger.info(f"Loaded {len(self._entries)} entries")
        return self.entries

    def save(self) -> SaveResult:
        """
        Persist the full collection.

        Returns:
            Save result; storage failures are reported here, never raised.
        """
        payload = json.dumps([e.to_dict() for e in self._entries], ensure_ascii=False)

        try:
            self.storage.set_item(self.storage_key, payload)
        except StorageError as e:
            logger.error(f"Failed to save entries: {e}")
            self.last_save = SaveResult(ok=False, count=len(self._entries), error=str(e))
            return self.last_save

        self.last_save = SaveResult(ok=True, count=len(self._entries))
        return self.last_save

    def add(self, value: Any, timestamp: datetime, note: str | None = None) -> GlucoseEntry | None:
        """
        Add a new measurement at the front of the collection.

        Args:
            value: Glucose value in mmol/L (number or numeric string).
            timestamp: Timezone-aware measurement time.
            note: Optional annotation.

        Returns:
            The new entry, or None if the value was rejected.
        """
        number = parse_glucose_value(value)
        if number is None:
            logger.debug(f"Rejected glucose value {value!r}")
            return None

        entry = GlucoseEntry(
            id=generate_entry_id(),
            value=number,
            timestamp=timestamp,
            note=note or None,
        )
        self._entries.insert(0, entry)
        self.save()

        logger.info(f"Added entry {entry.id}: {entry.value} at {entry.timestamp.isoformat()}")
        return entry

    def delete(self, entry_id: str) -> bool:
        """
        Delete an entry by id. Unknown ids are a no-op.

        Args:
            entry_id: Entry identifier.

        Returns:
            True if an entry was removed.
        """
        remaining = [e for e in self._entries if e.id != entry_id]
        removed = len(remaining) != len(self._entries)

        self._entries = remaining
        self.save()

        if removed:
            logger.info(f"Deleted entry {entry_id}")
        else:
            logger.debug(f"No entry with id {entry_id}")
        return removed

    def replace_all(self, new_entries: list[Any]) -> ImportResult:
        """
        Replace the whole collection.

        The batch is validated first; on failure nothing changes.

        Args:
            new_entries: Entry-like objects (dicts or GlucoseEntry instances).

        Returns:
            Import result describing the outcome.
        """
        items = [e.to_dict() if isinstance(e, GlucoseEntry) else e for e in new_entries]
        result = self._parser.parse_document(items)
        if not result.ok:
            return result

        self._entries = list(result.entries)
        self.save()

        logger.info(f"Replaced collection with {len(self._entries)} entries")
        return result

    def import_text(self, text: str) -> ImportResult:
        """
        Replace the collection from an import document.

        Args:
            text: JSON import document.

        Returns:
            Import result; the store is untouched on failure.
        """
        result = self._parser.parse_text(text)
        if not result.ok:
            return result
        return self.replace_all(result.entries)

    def import_file(self, file_path: Path) -> ImportResult:
        """
        Replace the collection from an import file on disk.

        Args:
            file_path: Path to a JSON import document.

        Returns:
            Import result; the store is untouched on failure.
        """
        result = self._parser.parse_file(file_path)
        if not result.ok:
            return result
        return self.replace_all(result.entries)
