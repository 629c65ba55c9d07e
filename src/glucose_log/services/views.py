"""
Derived views over the entry collection.

Pure functions: nothing here holds state, everything is recomputed from the
entries passed in.
"""

import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd
from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict

from glucose_log.domain.entry import GlucoseEntry, GlucoseLevel, RangeWindow

logger = logging.getLogger(__name__)

_WINDOWS: dict[RangeWindow, timedelta | relativedelta] = {
    RangeWindow.LAST_14_DAYS: timedelta(days=14),
    RangeWindow.LAST_MONTH: relativedelta(months=1),
    RangeWindow.LAST_3_MONTHS: relativedelta(months=3),
}


def round_half_up(value: float, places: str = "0.1") -> float:
    """Round a float with ties going away from zero, using its exact binary value."""
    return float(Decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP))


class SummaryStatistics(BaseModel):
    """Average, highest and lowest value, rounded to one decimal."""

    average: float
    highest: float
    lowest: float
    count: int


class ClassifiedEntry(BaseModel):
    """An entry paired with its glucose level."""

    entry: GlucoseEntry
    level: GlucoseLevel

    model_config = ConfigDict(frozen=True)


class DailyAverage(BaseModel):
    """Mean value and reading count for one local calendar day."""

    day: date
    average: float
    count: int


def summary_statistics(entries: list[GlucoseEntry]) -> SummaryStatistics | None:
    """
    Compute summary statistics.

    Args:
        entries: Entries to summarise.

    Returns:
        Statistics, or None for an empty collection.
    """
    if not entries:
        return None

    values = [e.value for e in entries]
    return SummaryStatistics(
        average=round_half_up(sum(values) / len(values)),
        highest=round_half_up(max(values)),
        lowest=round_half_up(min(values)),
        count=len(values),
    )


def range_start(window: RangeWindow, now: datetime) -> datetime:
    """
    Start of a lookback window ending at now.

    Args:
        window: Range selector.
        now: Current instant.

    Returns:
        Earliest instant included in the window.
    """
    return now - _WINDOWS[RangeWindow(window)]


def filter_by_range(
    entries: list[GlucoseEntry], window: RangeWindow, now: datetime
) -> list[GlucoseEntry]:
    """
    Keep entries inside [now - window, now], oldest first.

    Args:
        entries: Entries to filter.
        window: Range selector.
        now: Current instant (timezone-aware).

    Returns:
        Filtered entries sorted ascending by timestamp.
    """
    start = range_start(window, now)
    selected = [e for e in entries if start <= e.timestamp <= now]
    logger.debug(f"Range {RangeWindow(window).value}: {len(selected)} of {len(entries)} entries")
    return sorted(selected, key=lambda e: e.timestamp)


def list_entries(entries: list[GlucoseEntry]) -> list[ClassifiedEntry]:
    """
    Newest-first listing with per-entry classification.

    Args:
        entries: Entries to list.

    Returns:
        Classified entries sorted descending by timestamp.
    """
    ordered = sorted(entries, key=lambda e: e.timestamp, reverse=True)
    return [ClassifiedEntry(entry=e, level=e.level) for e in ordered]


def most_recent(entries: list[GlucoseEntry], limit: int) -> list[GlucoseEntry]:
    """Return at most limit entries, newest first."""
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)[:limit]


def daily_averages(entries: list[GlucoseEntry], timezone: str = "UTC") -> list[DailyAverage]:
    """
    Average readings per local calendar day.

    Args:
        entries: Entries to aggregate.
        timezone: Timezone defining day boundaries.

    Returns:
        One row per day with readings, oldest day first.
    """
    if not entries:
        return []

    df = pd.DataFrame(
        {
            "timestamp": [e.timestamp for e in entries],
            "value": [e.value for e in entries],
        }
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True).dt.tz_convert(timezone)
    df["day"] = df["timestamp"].dt.date

    daily = (
        df.groupby("day")["value"]
        .agg(average="mean", readings="count")
        .reset_index()
        .sort_values("day")
    )

    return [
        DailyAverage(day=row.day, average=round(float(row.average), 2), count=int(row.readings))
        for row in daily.itertuples(index=False)
    ]


def sparkline(values: list[float], vmin: float = 2.0, vmax: float = 15.0) -> str:
    """
    Render values as a block-character trend line.

    Args:
        values: Values in chronological order.
        vmin: Value mapped to the lowest block.
        vmax: Value mapped to the highest block.

    Returns:
        One character per value.
    """
    if not values:
        return ""
    blocks = "▁▂▃▄▅▆▇█"
    span = max(1e-9, vmax - vmin)
    out = []
    for v in values:
        x = (v - vmin) / span
        idx = int(round(x * (len(blocks) - 1)))
        idx = max(0, min(len(blocks) - 1, idx))
        out.append(blocks[idx])
    return "".join(out)
