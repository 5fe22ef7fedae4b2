"""
Recommendation result and response models.

``RecommendationResult`` is what the engine produces for one request: the
top-K ranked species plus the season, generation time and aggregate
confidence.  It is the object handed to the persistence collaborator.

``RecommendationResponse`` is the caller-facing shape::

    {"recommendationId": "reco101", "recommendations": [...≤3],
     "sensorData": {...}, "season": "dry",
     "generatedAt": "2026-03-02T08:15:00.000Z", "confidence": 87.42}

``StoredRecommendation`` is a persisted recommendation read back from the
database, including its review status and soft-delete flag.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from reforest_engine.models.sensor import Coordinates, SensorReading
from reforest_engine.models.species import ScoredSpecies
from reforest_engine.taxonomy.engine_taxonomy import RecommendationStatus, Season
from reforest_engine.utils.time_utils import isoformat_z


class RecommendationResult(BaseModel):
    """Ranked top-K species for one sensor reading.

    Attributes:
        sensor_id:       Sensor that produced the reading.
        sensor_data:     The validated reading.
        location:        Opaque location label, if supplied.
        coordinates:     Opaque coordinates, if supplied.
        season:          Season used for the factor set.
        generated_at:    UTC time the result was produced.
        recommendations: Top-K ``ScoredSpecies`` in rank order.
        aggregate_confidence_pct: Mean confidence of the top-K × 100 (2 dp).
        warnings:        Validator warnings for the reading.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    sensor_id: str
    sensor_data: SensorReading
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    season: Season
    generated_at: datetime
    recommendations: list[ScoredSpecies]
    aggregate_confidence_pct: float
    warnings: list[str] = []

    @field_serializer("generated_at")
    def _serialize_generated_at(self, value: datetime) -> str:
        return isoformat_z(value)


class RecommendationResponse(BaseModel):
    """Caller-facing response for one recommendation call."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    recommendation_id: Optional[str] = None
    recommendations: list[ScoredSpecies]
    sensor_data: SensorReading
    season: Season
    generated_at: datetime
    confidence: float
    warnings: list[str] = []

    @field_serializer("generated_at")
    def _serialize_generated_at(self, value: datetime) -> str:
        return isoformat_z(value)

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the JSON-ready caller-facing dict."""
        return self.model_dump(by_alias=True, mode="json")


class SeedlingOption(BaseModel):
    """One recommended seedling as stored alongside a recommendation."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    seedling_id: str
    rank: int
    scientific_name: str
    common_name: str
    is_native: bool
    category: str
    success_rate: float
    adaptability_score: float
    confidence_pct: float
    overall_score: float


class StoredRecommendation(BaseModel):
    """A recommendation as persisted by the recommendation repository."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    recommendation_id: str
    sensor_id: str
    location_ref: str
    season: Season
    confidence_pct: float
    generated_at: datetime
    sensor_conditions: SensorReading
    coordinates: Optional[Coordinates] = None
    seedlings: list[SeedlingOption] = []
    status: RecommendationStatus
    deleted: bool = False
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
