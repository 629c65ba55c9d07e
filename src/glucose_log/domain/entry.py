"""
Blood-glucose entry domain models.

This module defines the canonical schema for glucose measurements and the
closed value sets (language, range window, glucose level) used around them.
"""

from datetime import datetime
from enum import Enum
from typing import Any

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator

from glucose_log.utils.timezone_utils import format_timestamp, parse_timestamp

UNIT = "mmol/L"

# Classification thresholds in mmol/L
HIGH_THRESHOLD = 10.0
LOW_THRESHOLD = 4.0


class Language(str, Enum):
    """Supported display languages."""

    DANISH = "da"
    ENGLISH = "en"


class GlucoseLevel(str, Enum):
    """Classification of a single reading."""

    HIGH = "high"
    LOW = "low"
    NORMAL = "normal"


class RangeWindow(str, Enum):
    """Lookback windows offered for charting."""

    LAST_14_DAYS = "14d"
    LAST_MONTH = "1m"
    LAST_3_MONTHS = "3m"


def classify_value(value: float) -> GlucoseLevel:
    """
    Classify a glucose value against the fixed thresholds.

    Args:
        value: Glucose value in mmol/L.

    Returns:
        HIGH above 10, LOW below 4, NORMAL otherwise.
    """
    if value > HIGH_THRESHOLD:
        return GlucoseLevel.HIGH
    if value < LOW_THRESHOLD:
        return GlucoseLevel.LOW
    return GlucoseLevel.NORMAL


class GlucoseEntry(BaseModel):
    """
    A single blood-glucose measurement.

    Entries are immutable once created. Timestamps are timezone-aware;
    naive input is interpreted as UTC.
    """

    id: str = Field(min_length=1, description="Opaque unique identifier")
    value: float = Field(allow_inf_nan=False, description="Glucose value in mmol/L")
    timestamp: datetime = Field(description="Measurement instant (timezone-aware)")
    note: str | None = Field(None, description="Optional free-text annotation")

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return parse_timestamp(value, "UTC", assume_local=False, iso_only=True)
            except (ValueError, OverflowError) as e:
                raise ValueError(f"Invalid timestamp {value!r}: {e}") from e
        if isinstance(value, datetime) and value.tzinfo is None:
            return pytz.utc.localize(value)
        return value

    @property
    def level(self) -> GlucoseLevel:
        """Classification of this reading."""
        return classify_value(self.value)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert entry to its storage/export representation.

        Returns:
            Dictionary with id, value, ISO-8601 timestamp and note (if set).
        """
        data: dict[str, Any] = {
            "id": self.id,
            "value": self.value,
            "timestamp": format_timestamp(self.timestamp),
        }
        if self.note is not None:
            data["note"] = self.note
        return data
