"""
Repository for persisted recommendations and their seedling rows.

Identifiers are sequential: ``reco101``, ``reco102``, ... drawn from the
``id_counters`` table (the ``recommendation`` counter starts at 100).
Deletion is soft: the row is flagged and timestamped, never removed, and
``list_active()`` hides it.

Satisfies the ``RecommendationStore`` protocol used by
``RecommendationService``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from reforest_engine.db.repositories.base import BaseRepository
from reforest_engine.models.recommendation import (
    RecommendationResult,
    SeedlingOption,
    StoredRecommendation,
)
from reforest_engine.models.sensor import Coordinates, SensorReading
from reforest_engine.taxonomy.engine_taxonomy import RecommendationStatus
from reforest_engine.utils.time_utils import isoformat_z, parse_timestamp, utcnow

logger = logging.getLogger(__name__)

RECOMMENDATION_COUNTER = "recommendation"
RECOMMENDATION_COUNTER_START = 100
RECOMMENDATION_ID_PREFIX = "reco"


def recommendation_status(confidence_pct: float) -> RecommendationStatus:
    """Review status for an aggregate confidence.

    Values <= 1 are taken as a 0–1 fraction and scaled to a percentage.

        >= 85  Approved
        >= 70  Pending
        >= 50  Under Review
        else   Needs Review
    """
    pct = confidence_pct * 100.0 if confidence_pct <= 1.0 else confidence_pct
    if pct >= 85.0:
        return RecommendationStatus.APPROVED
    if pct >= 70.0:
        return RecommendationStatus.PENDING
    if pct >= 50.0:
        return RecommendationStatus.UNDER_REVIEW
    return RecommendationStatus.NEEDS_REVIEW


def location_ref(location: Optional[str], sensor_id: str) -> str:
    """Location document path for a recommendation."""
    if location and location.startswith("LOC_"):
        return f"/locations/{location}"
    return f"/locations/LOC_{sensor_id}"


class RecommendationRepository(BaseRepository):
    """Read/write access to ``recommendations`` and ``recommended_seedlings``."""

    def next_recommendation_id(self) -> str:
        """Advance the counter and return the new identifier."""
        self.execute(
            "INSERT OR IGNORE INTO id_counters (name, value) VALUES (?, ?);",
            (RECOMMENDATION_COUNTER, RECOMMENDATION_COUNTER_START),
        )
        self.execute(
            "UPDATE id_counters SET value = value + 1 WHERE name = ?;",
            (RECOMMENDATION_COUNTER,),
        )
        row = self.fetchone(
            "SELECT value FROM id_counters WHERE name = ?;", (RECOMMENDATION_COUNTER,)
        )
        assert row is not None
        return f"{RECOMMENDATION_ID_PREFIX}{row['value']}"

    def save(self, result: RecommendationResult) -> str:
        """Persist ``result`` and its top-K species; return the new id."""
        reco_id = self.next_recommendation_id()
        coords = result.coordinates if result.coordinates and result.coordinates.is_complete else None

        self.execute(
            """
            INSERT INTO recommendations (
                recommendation_id, sensor_id, location_ref, season,
                confidence_pct, status, sensor_ph, sensor_moisture,
                sensor_temperature, latitude, longitude, generated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                reco_id,
                result.sensor_id,
                location_ref(result.location, result.sensor_id),
                str(result.season),
                result.aggregate_confidence_pct,
                str(recommendation_status(result.aggregate_confidence_pct)),
                result.sensor_data.ph,
                result.sensor_data.soil_moisture,
                result.sensor_data.temperature,
                coords.latitude if coords else None,
                coords.longitude if coords else None,
                isoformat_z(result.generated_at),
            ),
        )

        self.executemany(
            """
            INSERT INTO recommended_seedlings (
                recommendation_id, rank, seedling_id, scientific_name,
                common_name, is_native, category, success_rate,
                adaptability_score, confidence_pct, overall_score
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            [
                (
                    reco_id,
                    rank,
                    sp.species_id or sp.scientific_name,
                    sp.scientific_name,
                    sp.common_name,
                    int(sp.is_native),
                    sp.category,
                    sp.success_rate,
                    sp.adaptability_score,
                    round(sp.confidence_score * 100.0, 2),
                    sp.overall_score,
                )
                for rank, sp in enumerate(result.recommendations, start=1)
            ],
        )

        logger.info(
            "Stored recommendation %s for sensor %s (%d seedlings)",
            reco_id, result.sensor_id, len(result.recommendations),
        )
        return reco_id

    def get(self, reco_id: str) -> Optional[StoredRecommendation]:
        """Fetch one recommendation (soft-deleted ones included)."""
        row = self.fetchone(
            "SELECT * FROM recommendations WHERE recommendation_id = ?;", (reco_id,)
        )
        return self._hydrate(row) if row else None

    def list_active(self, limit: int = 100) -> list[StoredRecommendation]:
        """Non-deleted recommendations, newest first."""
        rows = self.fetchall(
            """
            SELECT * FROM recommendations
            WHERE deleted = 0
            ORDER BY generated_at DESC, rowid DESC
            LIMIT ?;
            """,
            (limit,),
        )
        return [self._hydrate(r) for r in rows]

    def soft_delete(self, reco_id: str, deleted_by: str = "system") -> bool:
        """Flag a recommendation as deleted.

        Returns:
            ``True`` if an active recommendation was flagged, ``False`` if it
            does not exist or was already deleted.
        """
        cursor = self.execute(
            """
            UPDATE recommendations
            SET deleted = 1, deleted_at = ?, deleted_by = ?
            WHERE recommendation_id = ? AND deleted = 0;
            """,
            (isoformat_z(utcnow()), deleted_by, reco_id),
        )
        if cursor.rowcount:
            logger.info("Recommendation %s soft-deleted by %s", reco_id, deleted_by)
        return cursor.rowcount > 0

    def _seedlings_for(self, reco_id: str) -> list[SeedlingOption]:
        rows = self.fetchall(
            "SELECT * FROM recommended_seedlings WHERE recommendation_id = ? ORDER BY rank;",
            (reco_id,),
        )
        return [_row_to_seedling(r) for r in rows]

    def _hydrate(self, row: sqlite3.Row) -> StoredRecommendation:
        coordinates = None
        if row["latitude"] is not None and row["longitude"] is not None:
            coordinates = Coordinates(latitude=row["latitude"], longitude=row["longitude"])

        return StoredRecommendation(
            recommendation_id=row["recommendation_id"],
            sensor_id=row["sensor_id"],
            location_ref=row["location_ref"],
            season=row["season"],
            confidence_pct=row["confidence_pct"],
            generated_at=parse_timestamp(row["generated_at"]),
            sensor_conditions=SensorReading(
                ph=row["sensor_ph"],
                soil_moisture=row["sensor_moisture"],
                temperature=row["sensor_temperature"],
            ),
            coordinates=coordinates,
            seedlings=self._seedlings_for(row["recommendation_id"]),
            status=row["status"],
            deleted=bool(row["deleted"]),
            deleted_at=parse_timestamp(row["deleted_at"]),
            deleted_by=row["deleted_by"],
        )


# ── Row converters ─────────────────────────────────────────────────────────────

def _row_to_seedling(row: sqlite3.Row) -> SeedlingOption:
    return SeedlingOption(
        seedling_id=row["seedling_id"],
        rank=row["rank"],
        scientific_name=row["scientific_name"],
        common_name=row["common_name"],
        is_native=bool(row["is_native"]),
        category=row["category"],
        success_rate=row["success_rate"],
        adaptability_score=row["adaptability_score"],
        confidence_pct=row["confidence_pct"],
        overall_score=row["overall_score"],
    )
