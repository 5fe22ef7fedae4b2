"""
Trend analysis output models.

A ``TrendReport`` has two shapes depending on whether the reading history met
the minimum length:

    insufficient  -> {"trends": null, "alerts": [], "confidence": 0,
                      "message": "insufficient_data",
                      "readingsCount": 4, "requiredReadings": 7}

    complete      -> {"trends": {"moisture": {...}, "ph": {...},
                                 "temperature": {...}},
                      "alerts": [...], "confidence": 0.8,
                      "message": "analysis_complete", "readingsAnalyzed": 9}

``TrendReport.to_payload()`` emits exactly these shapes.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from reforest_engine.taxonomy.engine_taxonomy import (
    AlertSeverity,
    AlertType,
    TrendDirection,
    TrendMessage,
)


class AttributeTrend(BaseModel):
    """Trend of one attribute across a reading history.

    Attributes:
        slope:      (last − first) / series length.
        direction:  Classified direction of ``slope``.
        net_change: last − first.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    slope: float
    direction: TrendDirection
    net_change: float


class TrendAlert(BaseModel):
    """Alert raised against the most recent reading."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    alert_type: AlertType = Field(alias="type")
    severity: AlertSeverity
    message: str
    current_value: Optional[float] = None


class TrendReport(BaseModel):
    """Result of analysing one sensor's reading history."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    trends: Optional[dict[str, AttributeTrend]] = None
    alerts: list[TrendAlert] = []
    confidence: float
    message: TrendMessage
    readings_count: int
    required_readings: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.message == TrendMessage.ANALYSIS_COMPLETE

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the JSON-ready reporting shape."""
        payload: dict[str, Any] = {
            "trends": (
                {
                    name: trend.model_dump(by_alias=True, mode="json")
                    for name, trend in self.trends.items()
                }
                if self.trends is not None
                else None
            ),
            "alerts": [a.model_dump(by_alias=True, mode="json") for a in self.alerts],
            "confidence": self.confidence,
            "message": str(self.message),
        }
        if self.is_complete:
            payload["readingsAnalyzed"] = self.readings_count
        else:
            payload["readingsCount"] = self.readings_count
            payload["requiredReadings"] = self.required_readings
        return payload
