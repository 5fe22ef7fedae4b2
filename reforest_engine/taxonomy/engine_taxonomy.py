"""
Label taxonomy for the recommendation and trend engine.

  - ``Season``               — seasonal regime that selects the factor set.
  - ``TrendDirection``       — classified direction of an attribute's trend.
  - ``AlertType``            — kinds of trend alert raised on the latest reading.
  - ``AlertSeverity``        — how urgently an alert should be surfaced.
  - ``RecommendationStatus`` — review status derived from confidence.
  - ``TrendMessage``         — status message of a trend report.

This module has NO imports from any other ``reforest_engine`` package.
"""

from enum import StrEnum


class Season(StrEnum):
    """Seasonal regime used for compatibility tolerance adjustment."""

    DRY = "dry"
    """November through May."""

    WET = "wet"
    """June through October."""

    MODERATE = "moderate"
    """Neutral factor set; no calendar month currently maps here."""


class TrendDirection(StrEnum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class AlertType(StrEnum):
    LOW_MOISTURE_TREND = "low_moisture_trend"
    """Moisture falling and latest reading below the optimal band."""

    HIGH_PH_TREND = "high_ph_trend"
    """pH rising and latest reading above the optimal band."""


class AlertSeverity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class RecommendationStatus(StrEnum):
    """Review status shown alongside stored recommendations."""

    APPROVED = "Approved"
    PENDING = "Pending"
    UNDER_REVIEW = "Under Review"
    NEEDS_REVIEW = "Needs Review"


class TrendMessage(StrEnum):
    INSUFFICIENT_DATA = "insufficient_data"
    ANALYSIS_COMPLETE = "analysis_complete"
