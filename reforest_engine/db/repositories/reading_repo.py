"""
Repository for stored sensor readings (the history trend analysis runs on).
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from reforest_engine.db.repositories.base import BaseRepository
from reforest_engine.models.sensor import SensorReading, SensorStats
from reforest_engine.utils.time_utils import isoformat_z, parse_timestamp, utcnow

logger = logging.getLogger(__name__)


class SensorReadingRepository(BaseRepository):
    """Read/write access to ``sensor_readings``."""

    def insert(self, sensor_id: str, reading: SensorReading) -> int:
        """Store one reading; a reading without a timestamp is stamped now.

        Returns:
            The new ``reading_id``.
        """
        recorded_at = parse_timestamp(reading.timestamp) or utcnow()
        cursor = self.execute(
            """
            INSERT INTO sensor_readings (sensor_id, ph, soil_moisture, temperature, recorded_at)
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                sensor_id,
                reading.ph,
                reading.soil_moisture,
                reading.temperature,
                isoformat_z(recorded_at),
            ),
        )
        return int(cursor.lastrowid)

    def history(self, sensor_id: str, limit: int = 50) -> list[SensorReading]:
        """The ``limit`` most recent readings for a sensor, oldest first."""
        rows = self.fetchall(
            """
            SELECT * FROM sensor_readings
            WHERE sensor_id = ?
            ORDER BY recorded_at DESC, reading_id DESC
            LIMIT ?;
            """,
            (sensor_id, limit),
        )
        return [_row_to_reading(r) for r in reversed(rows)]

    def stats(self, sensor_id: str) -> SensorStats:
        """Count, averages and latest/oldest reading for a sensor."""
        agg = self.fetchone(
            """
            SELECT COUNT(*)           AS total,
                   AVG(ph)            AS avg_ph,
                   AVG(soil_moisture) AS avg_moisture,
                   AVG(temperature)   AS avg_temperature
            FROM sensor_readings
            WHERE sensor_id = ?;
            """,
            (sensor_id,),
        )
        assert agg is not None
        total = int(agg["total"])
        if total == 0:
            return SensorStats(sensor_id=sensor_id)

        return SensorStats(
            sensor_id=sensor_id,
            total_readings=total,
            latest_reading=self._edge_reading(sensor_id, newest=True),
            oldest_reading=self._edge_reading(sensor_id, newest=False),
            avg_ph=_round2(agg["avg_ph"]),
            avg_moisture=_round2(agg["avg_moisture"]),
            avg_temperature=_round2(agg["avg_temperature"]),
        )

    def _edge_reading(self, sensor_id: str, newest: bool) -> Optional[SensorReading]:
        order = "DESC" if newest else "ASC"
        row = self.fetchone(
            f"""
            SELECT * FROM sensor_readings
            WHERE sensor_id = ?
            ORDER BY recorded_at {order}, reading_id {order}
            LIMIT 1;
            """,
            (sensor_id,),
        )
        return _row_to_reading(row) if row else None


def _row_to_reading(row: sqlite3.Row) -> SensorReading:
    return SensorReading(
        ph=row["ph"],
        soil_moisture=row["soil_moisture"],
        temperature=row["temperature"],
        timestamp=parse_timestamp(row["recorded_at"]),
    )


def _round2(value: Optional[float]) -> Optional[float]:
    return round(value, 2) if value is not None else None
