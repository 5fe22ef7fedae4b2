"""
Sensor reading and request models.

``SensorReading`` is a single soil measurement (pH, moisture, temperature)
produced by the ingestion layer.  Its measurement fields are optional at the
model level: a reading with a missing value is still representable so that
the validator, not the model, decides whether it is usable.

``RecommendationRequest`` is the caller-facing input envelope::

    {"sensorId": "SEN_01",
     "sensorData": {"ph": 6.5, "soilMoisture": 48, "temperature": 27},
     "location": "LOC_001",
     "coordinates": {"latitude": 14.59, "longitude": 120.98}}

Location and coordinates are opaque metadata; the engine never interprets
them geographically.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` if it is not one.

    Numeric strings are accepted; booleans are not.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class SensorReading(BaseModel):
    """One soil sensor measurement.

    Attributes:
        ph:            Soil pH (0–14).  Accepts ``ph`` or ``pH`` on input.
        soil_moisture: Volumetric soil moisture percentage (0–100).
        temperature:   Soil temperature in °C.
        timestamp:     When the measurement was taken, or ``None``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    ph: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("ph", "pH"),
        serialization_alias="ph",
    )
    soil_moisture: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("soilMoisture", "soil_moisture"),
        serialization_alias="soilMoisture",
    )
    temperature: Optional[float] = None
    timestamp: Optional[datetime] = None

    @field_validator("ph", "soil_moisture", "temperature", mode="before")
    @classmethod
    def lenient_measurement(cls, value: Any) -> Optional[float]:
        # Unusable values become None and are reported by the validator.
        return coerce_number(value)

    def measurements(self) -> dict[str, Optional[float]]:
        """Return the three measured values keyed by their wire names."""
        return {
            "ph": self.ph,
            "soilMoisture": self.soil_moisture,
            "temperature": self.temperature,
        }


class Coordinates(BaseModel):
    """Latitude/longitude pair carried through as metadata."""

    model_config = ConfigDict(frozen=True)

    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class RecommendationRequest(BaseModel):
    """Input envelope for one recommendation call."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    sensor_id: str
    sensor_data: SensorReading
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RecommendationRequest":
        """Build a request from a caller-facing JSON payload."""
        return cls.model_validate(payload)


class SensorStats(BaseModel):
    """Summary statistics over a sensor's stored reading history.

    Averages are ``None`` when the sensor has no readings for that attribute.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    sensor_id: str
    total_readings: int = 0
    latest_reading: Optional[SensorReading] = None
    oldest_reading: Optional[SensorReading] = None
    avg_ph: Optional[float] = Field(default=None, alias="avgPH")
    avg_moisture: Optional[float] = None
    avg_temperature: Optional[float] = None
