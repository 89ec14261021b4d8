"""Conversion of graph property values into index-safe JSON values."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Union


@dataclass(frozen=True)
class GeoPoint:
    """A spatial point (cartesian or WGS-84)."""

    x: float
    y: float
    z: float | None = None
    srid: int | None = None


@dataclass(frozen=True)
class Duration:
    """A graph duration: calendar months and days plus an exact seconds/nanos part."""

    months: int = 0
    days: int = 0
    seconds: int = 0
    nanoseconds: int = 0

    @classmethod
    def from_timedelta(cls, value: timedelta) -> "Duration":
        return cls(days=value.days, seconds=value.seconds, nanoseconds=value.microseconds * 1000)


ScalarValue = Union[str, int, float, bool, None]
PropertyValue = Union[ScalarValue, GeoPoint, date, datetime, time, Duration, timedelta, list, tuple]

JsonValue = Union[str, int, float, bool, None, list, dict]


def _format_offset(value: timedelta | None) -> str:
    # Java "Z" pattern letter: +HHMM
    total = int(value.total_seconds()) if value is not None else 0
    sign = "-" if total < 0 else "+"
    total = abs(total)
    return f"{sign}{total // 3600:02d}{(total % 3600) // 60:02d}"


def _format_datetime(value: datetime) -> str:
    head = f"{value.year:04d}-{value.month:02d}-{value.day:02d}T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    millis = value.microsecond // 1000
    if value.tzinfo is None or value.utcoffset() is None:
        return f"{head}.{millis:03d}Z"
    return f"{head}.{millis:03d}{_format_offset(value.utcoffset())}"


def _format_time(value: time) -> str:
    # The zone suffix is a literal "Z" for both local and offset times.
    return f"{value.hour:02d}{value.minute:02d}{value.second:02d}Z"


def _expand_duration(value: Duration) -> dict[str, int]:
    return {
        "months": value.months,
        "days": value.days,
        "seconds": value.seconds,
        "nanos": value.nanoseconds,
    }


def normalize_value(value: PropertyValue) -> JsonValue | Any:
    """Convert a property value to something the search engine can store.

    Total: values of unknown type are returned unchanged.
    """
    if isinstance(value, GeoPoint):
        # 2-D only; the index side has no 3-D geo support.
        return [value.x, value.y]
    # datetime is a date subclass, so it has to be checked first.
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, date):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    if isinstance(value, time):
        return _format_time(value)
    if isinstance(value, Duration):
        return _expand_duration(value)
    if isinstance(value, timedelta):
        return _expand_duration(Duration.from_timedelta(value))
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]
    return value
