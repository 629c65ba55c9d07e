"""
Export service for writing entry backups.

Writes the full collection as pretty-printed JSON (the import format) and,
optionally, as CSV.
"""

import json
import logging
from datetime import date
from pathlib import Path

import pandas as pd

from glucose_log.domain.entry import GlucoseEntry
from glucose_log.utils.parameters import ExportConfig

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "blood_sugar_backup"


def export_json(entries: list[GlucoseEntry]) -> str:
    """
    Serialize entries as a pretty-printed JSON array.

    Args:
        entries: Entries to export.

    Returns:
        JSON text using 2-space indentation.
    """
    return json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)


def backup_file_name(today: date, suffix: str = "json") -> str:
    """Backup file name for the given date."""
    return f"{BACKUP_PREFIX}_{today.isoformat()}.{suffix}"


class ExportService:
    """
    Service for writing entry backups to files.

    Handles multiple output formats.
    """

    def __init__(self, config: ExportConfig) -> None:
        """
        Initialize export service.

        Args:
            config: Export configuration.
        """
        self.config = config
        self.output_dir = Path(config.dir)

    def write_backup(self, entries: list[GlucoseEntry], today: date) -> list[Path]:
        """
        Write entries in every configured format.

        Args:
            entries: Entries to export.
            today: Date used in the file names.

        Returns:
            Paths of the written files.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []

        if "json" in self.config.formats:
            written.append(self._write_json(entries, today))

        if "csv" in self.config.formats:
            written.append(self._write_csv(entries, today))

        logger.info(f"Exported {len(entries)} entries to {len(written)} file(s)")
        return written

    def _write_json(self, entries: list[GlucoseEntry], today: date) -> Path:
        """
        Write entries to a JSON backup file.

        Args:
            entries: Entries to export.
            today: Date used in the file name.

        Returns:
            Path of the written file.
        """
        json_path = self.output_dir / backup_file_name(today, "json")

        with open(json_path, "w", encoding="utf-8") as f:
            f.write(export_json(entries) + "\n")

        logger.info(f"Wrote JSON backup to {json_path}")
        return json_path

    def _write_csv(self, entries: list[GlucoseEntry], today: date) -> Path:
        """
        Write entries to a CSV file.

        Args:
            entries: Entries to export.
            today: Date used in the file name.

        Returns:
            Path of the written file.
        """
        csv_path = self.output_dir / backup_file_name(today, "csv")

        df = pd.DataFrame(
            [e.to_dict() for e in entries], columns=["id", "value", "timestamp", "note"]
        )
        df.to_csv(csv_path, index=False, encoding="utf-8")

        logger.info(f"Wrote CSV to {csv_path}")
        return csv_path
