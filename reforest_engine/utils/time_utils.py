"""
Time and date utilities for sensor reading histories.

Sensor readings arrive with timestamps in several shapes depending on the
ingestion path: ``datetime`` objects, ISO-8601 strings (``...Z`` or with an
offset), epoch numbers (seconds or milliseconds), or exported document
timestamps of the form ``{"seconds": ..., "nanoseconds": ...}``.
``parse_timestamp()`` normalises all of them to timezone-aware UTC.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any, Optional

# Epoch values above this are treated as milliseconds (year ~5138 in seconds).
_EPOCH_MS_THRESHOLD = 1e11


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def isoformat_z(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with a trailing ``Z``.

    Naive datetimes are assumed to already be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Normalise a reading timestamp to an aware UTC ``datetime``.

    Args:
        value: ``datetime``, ``date``, ISO-8601 string, epoch seconds or
            milliseconds, or a mapping with ``seconds``/``_seconds`` keys.

    Returns:
        Aware UTC datetime, or ``None`` if the value is missing or cannot be
        interpreted.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        return _from_epoch(float(value))

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
            return _from_epoch(float(seconds) + float(nanos) / 1e9)
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return _from_epoch(float(text))
        except ValueError:
            pass
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parse_timestamp(parsed)

    return None


def _from_epoch(seconds: float) -> Optional[datetime]:
    if not math.isfinite(seconds):
        return None
    if abs(seconds) > _EPOCH_MS_THRESHOLD:
        seconds = seconds / 1000.0
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
