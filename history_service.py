from __future__ import annotations

import copy
import datetime
import math
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import pandas as pd
from loguru import logger

from algorithms import MathTools

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
TREND_THRESHOLD = 0.1


class _NoData:
    """Falsy marker for "not enough history", distinct from a real zero."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_DATA"

    def __reduce__(self):
        return (_NoData, ())


NO_DATA = _NoData()


@dataclass(frozen=True)
class HistoryEntry:
    date: str
    record: Any

    def to_dict(self) -> dict:
        return {"date": self.date, "record": self.record}


class HistoryStore(Protocol):
    def read_history(
        self, range_days: int, end_date: datetime.date
    ) -> list[HistoryEntry]:
        ...

    def append_or_replace(self, date: str, record: Mapping) -> None:
        ...

    def delete(self, date: str) -> None:
        ...


def parse_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def window_start(range_days: int, end_date: datetime.date) -> datetime.date:
    return end_date - datetime.timedelta(days=max(range_days, 1) - 1)


def has_non_finite(value) -> bool:
    """True when ``value`` holds an infinite or NaN float at any depth."""
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, Mapping):
        return any(has_non_finite(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(has_non_finite(v) for v in value)
    return False


class InMemoryHistoryStore:
    """Date-keyed history kept in a dict; one record per date."""

    def __init__(self) -> None:
        self._records: dict[str, Any] = {}

    def append_or_replace(self, date: str, record: Mapping) -> None:
        self._records[str(date)] = copy.deepcopy(record)

    def delete(self, date: str) -> None:
        if str(date) not in self._records:
            raise ValueError("entry not found")
        del self._records[str(date)]

    def read_history(
        self, range_days: int, end_date: datetime.date
    ) -> list[HistoryEntry]:
        start = window_start(range_days, end_date).isoformat()
        end = end_date.isoformat()
        return [
            HistoryEntry(d, copy.deepcopy(self._records[d]))
            for d in sorted(self._records)
            if start <= d <= end
        ]

    def __len__(self) -> int:
        return len(self._records)


@dataclass(frozen=True)
class Trend:
    slope_per_day: float
    direction: str
    points: int
    first: float
    last: float

    def to_dict(self) -> dict:
        return {
            "slope_per_day": self.slope_per_day,
            "direction": self.direction,
            "points": self.points,
            "first": self.first,
            "last": self.last,
        }


class HistoryAggregator:
    """Reads and writes one kind of daily history through a store.

    Windows are calendar based: "last 7 days" means the 7 dates ending at
    ``end_date``, and a date without an entry is unknown, never zero.
    """

    def __init__(self, store: HistoryStore, default_days: int = 7) -> None:
        self.store = store
        self.default_days = default_days

    def save(self, date, record: Mapping) -> str:
        if not isinstance(record, Mapping):
            raise ValueError("history record must be a mapping")
        if has_non_finite(record):
            raise ValueError("history record values must be finite numbers")
        day = parse_date(date).isoformat()
        self.store.append_or_replace(day, dict(record))
        return day

    def delete(self, date) -> str:
        day = parse_date(date).isoformat()
        self.store.delete(day)
        return day

    def window(self, end_date, days: int | None = None) -> list[HistoryEntry]:
        """Return valid entries in the window, ascending by date."""
        end = parse_date(end_date)
        days = days or self.default_days
        start = window_start(days, end)
        entries: dict[datetime.date, HistoryEntry] = {}
        for entry in self.store.read_history(days, end):
            try:
                day = parse_date(entry.date)
            except (TypeError, ValueError):
                logger.warning("skipping history entry with bad date {!r}", entry.date)
                continue
            if not isinstance(entry.record, Mapping):
                logger.warning("skipping malformed history record for {}", entry.date)
                continue
            if not start <= day <= end:
                continue
            entries[day] = HistoryEntry(day.isoformat(), entry.record)
        return [entries[d] for d in sorted(entries)]

    def values(self, end_date, days: int | None = None, field: str = "score") -> pd.Series:
        points = {}
        for entry in self.window(end_date, days):
            raw = entry.record.get(field)
            if raw is None or isinstance(raw, bool):
                continue
            try:
                value = float(raw)
            except (TypeError, ValueError):
                value = None
            if value is None or not math.isfinite(value):
                logger.warning(
                    "skipping non-numeric {} on {}: {!r}", field, entry.date, raw
                )
                continue
            points[pd.Timestamp(entry.date)] = value
        return pd.Series(points, dtype=float)

    def average(self, end_date, days: int | None = None, field: str = "score"):
        series = self.values(end_date, days, field)
        if series.empty:
            return NO_DATA
        return round(float(series.mean()), 1)

    def trend(self, end_date, days: int | None = None, field: str = "score"):
        series = self.values(end_date, days, field)
        if len(series) < 2:
            return NO_DATA
        offsets = (series.index - series.index[0]).days
        slope = MathTools.slope(offsets, series.values)
        if slope > TREND_THRESHOLD:
            direction = "up"
        elif slope < -TREND_THRESHOLD:
            direction = "down"
        else:
            direction = "flat"
        return Trend(
            slope_per_day=round(slope, 3),
            direction=direction,
            points=len(series),
            first=float(series.iloc[0]),
            last=float(series.iloc[-1]),
        )

    def weekly_series(self, end_date, field: str = "score") -> list[dict]:
        """Seven calendar slots ending at ``end_date``; missing days are ``None``."""
        end = parse_date(end_date)
        calendar = pd.date_range(end=pd.Timestamp(end), periods=7, freq="D")
        series = self.values(end, 7, field).reindex(calendar)
        slots = []
        for stamp, value in series.items():
            missing = pd.isna(value)
            slots.append(
                {
                    "date": stamp.date().isoformat(),
                    "day": DAY_LABELS[stamp.weekday()],
                    "value": None if missing else float(value),
                    "has_data": not missing,
                }
            )
        return slots
