"""
JSON parser for entry import documents.

Accepts either a bare array of entry-like objects or an object carrying
that array under "sugarLogs". Every element is checked against a strict
schema; a single bad element rejects the whole document.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from glucose_log.domain.entry import GlucoseEntry
from glucose_log.utils.exceptions import ImportValidationError
from glucose_log.utils.ids import generate_entry_id
from glucose_log.utils.timezone_utils import parse_timestamp

logger = logging.getLogger(__name__)

LOG_COLLECTION_FIELD = "sugarLogs"


class ImportedEntry(BaseModel):
    """Schema for one element of an import document."""

    id: Any = None
    value: float = Field(strict=True, allow_inf_nan=False)
    timestamp: str = Field(strict=True)
    note: str | None = Field(None, strict=True)

    @field_validator("timestamp")
    @classmethod
    def _timestamp_is_instant(cls, value: str) -> str:
        try:
            parse_timestamp(value, "UTC", assume_local=False, iso_only=True)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid timestamp {value!r}") from e
        return value


class ImportResult(BaseModel):
    """Outcome of parsing an import document."""

    ok: bool
    entries: list[GlucoseEntry] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def success(cls, entries: list[GlucoseEntry]) -> "ImportResult":
        return cls(ok=True, entries=entries)

    @classmethod
    def failure(cls, error: str) -> "ImportResult":
        return cls(ok=False, error=error)


class ImportParser:
    """
    Parser for JSON import documents.

    Handles shape detection, per-element schema checking and id assignment.
    """

    def _extract_items(self, document: Any) -> list[Any]:
        """
        Locate the array of entry-like objects in a document.

        Args:
            document: Decoded JSON document.

        Returns:
            List of raw elements.

        Raises:
            ImportValidationError: If the document has an unsupported shape.
        """
        if isinstance(document, list):
            return document

        if isinstance(document, dict) and isinstance(document.get(LOG_COLLECTION_FIELD), list):
            return document[LOG_COLLECTION_FIELD]

        raise ImportValidationError(
            f"Expected an array or an object with a '{LOG_COLLECTION_FIELD}' array"
        )

    def validate(self, items: list[Any]) -> list[GlucoseEntry]:
        """
        Check every element and build entries.

        Missing ids, and ids repeated within the batch, are replaced with
        freshly generated ones.

        Args:
            items: Raw elements.

        Returns:
            Validated entries in input order.

        Raises:
            ImportValidationError: If any element fails the schema.
        """
        entries: list[GlucoseEntry] = []
        seen_ids: set[str] = set()

        for idx, item in enumerate(items):
            if not isinstance(item, dict):
                raise ImportValidationError(f"Element {idx} is not an object")

            try:
                imported = ImportedEntry.model_validate(item)
            except ValidationError as e:
                raise ImportValidationError(f"Element {idx} failed validation: {e}") from e

            entry_id = imported.id
            if not isinstance(entry_id, str) or not entry_id or entry_id in seen_ids:
                entry_id = generate_entry_id()
                logger.debug(f"Element {idx}: assigned new id {entry_id}")
            seen_ids.add(entry_id)

            entries.append(
                GlucoseEntry(
                    id=entry_id,
                    value=imported.value,
                    timestamp=imported.timestamp,
                    note=imported.note,
                )
            )

        return entries

    def parse_document(self, document: Any) -> ImportResult:
        """
        Parse an already decoded JSON document.

        Args:
            document: Decoded JSON value.

        Returns:
            Import result; never raises for invalid input.
        """
        try:
            entries = self.validate(self._extract_items(document))
        except ImportValidationError as e:
            logger.warning(f"Import rejected: {e}")
            return ImportResult.failure(str(e))

        logger.info(f"Parsed {len(entries)} entries from import document")
        return ImportResult.success(entries)

    def parse_text(self, text: str) -> ImportResult:
        """
        Parse JSON text.

        Args:
            text: Raw JSON text.

        Returns:
            Import result; never raises for invalid input.
        """
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Import rejected: invalid JSON: {e}")
            return ImportResult.failure(f"Invalid JSON: {e}")

        return self.parse_document(document)

    def parse_file(self, file_path: Path) -> ImportResult:
        """
        Parse a JSON import file.

        Args:
            file_path: Path to the import file.

        Returns:
            Import result; unreadable files produce a failure result.
        """
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read import file {file_path}: {e}")
            return ImportResult.failure(f"Failed to read {file_path}: {e}")

        return self.parse_text(text)
