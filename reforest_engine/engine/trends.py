"""
Soil trend analysis over a sensor's reading history.

Minimum data
------------
At least ``min_readings`` (default 7) readings are required.  With fewer, the
result is a valid low-confidence report (``message="insufficient_data"``,
``confidence=0``), not an error.

Per-attribute trend
-------------------
Readings are sorted oldest-first by timestamp (stable; readings with a
missing or unparsable timestamp are treated as oldest).  Each attribute's
numeric series is extracted independently, dropping entries whose value is
missing or not a number, so one malformed reading only affects the
attributes it is malformed for.

    slope      = (last - first) / len(series)
    direction  = rising   if slope >  0.5
                 falling  if slope < -0.5
                 stable   otherwise
    net_change = last - first

Series shorter than two points are reported as ``stable`` with zero slope.

Alerts (checked against the most recent reading only)
-----------------------------------------------------
    low_moisture_trend : moisture falling AND latest soilMoisture < 30
    high_ph_trend      : pH rising        AND latest pH > 8.0

Confidence is fixed at 0.8 once the minimum-data threshold is met; it is not
derived from data quality.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, Optional

from reforest_engine.config import TrendConfig
from reforest_engine.engine.validator import coerce_number
from reforest_engine.models.sensor import SensorReading
from reforest_engine.models.trend import AttributeTrend, TrendAlert, TrendReport
from reforest_engine.taxonomy.engine_taxonomy import (
    AlertSeverity,
    AlertType,
    TrendDirection,
    TrendMessage,
)
from reforest_engine.utils.time_utils import parse_timestamp

logger = logging.getLogger(__name__)

# Attribute name in the report -> accepted keys on a raw reading mapping
ATTRIBUTE_KEYS: dict[str, tuple[str, ...]] = {
    "moisture":    ("soilMoisture", "soil_moisture"),
    "ph":          ("pH", "ph"),
    "temperature": ("temperature",),
}

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

Reading = SensorReading | Mapping[str, Any]


def classify_direction(slope: float, threshold: float = 0.5) -> TrendDirection:
    """Map a slope to a direction; the threshold itself is ``stable``."""
    if slope > threshold:
        return TrendDirection.RISING
    if slope < -threshold:
        return TrendDirection.FALLING
    return TrendDirection.STABLE


def compute_trend(values: Sequence[float], threshold: float = 0.5) -> AttributeTrend:
    """First-to-last trend of an already time-ordered numeric series."""
    if len(values) < 2:
        return AttributeTrend(slope=0.0, direction=TrendDirection.STABLE, net_change=0.0)

    net_change = values[-1] - values[0]
    slope = net_change / len(values)
    return AttributeTrend(
        slope=slope,
        direction=classify_direction(slope, threshold),
        net_change=net_change,
    )


def sort_readings(readings: Sequence[Reading]) -> list[Reading]:
    """Return ``readings`` oldest-first (stable; untimed readings first)."""

    def _key(reading: Reading) -> tuple[bool, datetime]:
        ts = parse_timestamp(_raw_value(reading, ("timestamp",)))
        return (ts is not None, ts or _OLDEST)

    return sorted(readings, key=_key)


def extract_series(readings: Sequence[Reading], attribute: str) -> list[float]:
    """Numeric values of ``attribute`` in reading order, malformed entries dropped."""
    keys = ATTRIBUTE_KEYS[attribute]
    series: list[float] = []
    for index, reading in enumerate(readings):
        value = coerce_number(_raw_value(reading, keys))
        if value is None:
            logger.debug("Dropping malformed %s value at position %d", attribute, index)
            continue
        series.append(value)
    return series


def build_alerts(
    trends: Mapping[str, AttributeTrend],
    latest: Reading,
    config: TrendConfig | None = None,
) -> list[TrendAlert]:
    """Raise alerts for the most recent reading given the computed trends."""
    config = config or TrendConfig()
    alerts: list[TrendAlert] = []

    moisture = coerce_number(_raw_value(latest, ATTRIBUTE_KEYS["moisture"]))
    if (
        trends["moisture"].direction == TrendDirection.FALLING
        and moisture is not None
        and moisture < config.low_moisture_alert
    ):
        alerts.append(
            TrendAlert(
                alert_type=AlertType.LOW_MOISTURE_TREND,
                severity=AlertSeverity.WARNING,
                message="Soil moisture declining and below optimal range",
                current_value=moisture,
            )
        )

    ph = coerce_number(_raw_value(latest, ATTRIBUTE_KEYS["ph"]))
    if (
        trends["ph"].direction == TrendDirection.RISING
        and ph is not None
        and ph > config.high_ph_alert
    ):
        alerts.append(
            TrendAlert(
                alert_type=AlertType.HIGH_PH_TREND,
                severity=AlertSeverity.WARNING,
                message="pH trending upward and above optimal range",
                current_value=ph,
            )
        )

    return alerts


def analyze_trends(
    readings: Optional[Sequence[Reading]],
    config: TrendConfig | None = None,
) -> TrendReport:
    """Analyse a reading history for per-attribute trends and alerts.

    Args:
        readings: ``SensorReading`` objects or raw mappings, any order.
        config:   Thresholds; defaults to ``TrendConfig()``.

    Returns:
        TrendReport — ``insufficient_data`` below the minimum length,
        otherwise ``analysis_complete``.
    """
    config = config or TrendConfig()
    readings = list(readings or [])

    if len(readings) < config.min_readings:
        logger.info(
            "Trend analysis skipped: %d readings, %d required",
            len(readings), config.min_readings,
        )
        return TrendReport(
            trends=None,
            alerts=[],
            confidence=0.0,
            message=TrendMessage.INSUFFICIENT_DATA,
            readings_count=len(readings),
            required_readings=config.min_readings,
        )

    ordered = sort_readings(readings)
    trends = {
        attribute: compute_trend(extract_series(ordered, attribute), config.slope_threshold)
        for attribute in ATTRIBUTE_KEYS
    }
    alerts = build_alerts(trends, ordered[-1], config)

    logger.info(
        "Trend analysis complete: %d readings, %d alert(s)", len(readings), len(alerts)
    )
    return TrendReport(
        trends=trends,
        alerts=alerts,
        confidence=config.confidence,
        message=TrendMessage.ANALYSIS_COMPLETE,
        readings_count=len(readings),
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _raw_value(reading: Reading, keys: tuple[str, ...]) -> Any:
    if isinstance(reading, SensorReading):
        reading = {**reading.measurements(), "timestamp": reading.timestamp}
    if not isinstance(reading, Mapping):
        return None
    for key in keys:
        if key in reading:
            return reading[key]
    return None
