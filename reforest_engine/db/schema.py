"""
SQLite schema DDL for recommendations and sensor reading history.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.

Table creation order respects foreign key dependencies:
  1. id_counters            (no FKs)
  2. recommendations        (no FKs)
  3. recommended_seedlings  (-> recommendations)
  4. sensor_readings        (no FKs)
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_ID_COUNTERS = """
CREATE TABLE IF NOT EXISTS id_counters (
    name        TEXT    PRIMARY KEY,
    value       INTEGER NOT NULL
);
"""

_DDL_RECOMMENDATIONS = """
CREATE TABLE IF NOT EXISTS recommendations (
    recommendation_id   TEXT    PRIMARY KEY,
    sensor_id           TEXT    NOT NULL,
    location_ref        TEXT    NOT NULL,
    season              TEXT    NOT NULL,
    confidence_pct      REAL    NOT NULL,
    status              TEXT    NOT NULL,
    sensor_ph           REAL,
    sensor_moisture     REAL,
    sensor_temperature  REAL,
    latitude            REAL,
    longitude           REAL,
    generated_at        TEXT    NOT NULL,
    deleted             INTEGER NOT NULL DEFAULT 0,
    deleted_at          TEXT,
    deleted_by          TEXT
);
CREATE INDEX IF NOT EXISTS idx_recommendations_sensor
    ON recommendations(sensor_id, generated_at);
"""

_DDL_RECOMMENDED_SEEDLINGS = """
CREATE TABLE IF NOT EXISTS recommended_seedlings (
    seedling_row_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    recommendation_id   TEXT    NOT NULL REFERENCES recommendations(recommendation_id),
    rank                INTEGER NOT NULL,
    seedling_id         TEXT    NOT NULL,
    scientific_name     TEXT    NOT NULL,
    common_name         TEXT    NOT NULL,
    is_native           INTEGER NOT NULL,
    category            TEXT    NOT NULL,
    success_rate        REAL    NOT NULL,
    adaptability_score  REAL    NOT NULL,
    confidence_pct      REAL    NOT NULL,
    overall_score       REAL    NOT NULL,
    UNIQUE (recommendation_id, rank)
);
"""

_DDL_SENSOR_READINGS = """
CREATE TABLE IF NOT EXISTS sensor_readings (
    reading_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    sensor_id       TEXT    NOT NULL,
    ph              REAL,
    soil_moisture   REAL,
    temperature     REAL,
    recorded_at     TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_sensor_readings_sensor_time
    ON sensor_readings(sensor_id, recorded_at);
"""

# ── Ordered list of all DDL to apply ──────────────────────────────────────────

_ALL_DDL: list[str] = [
    _DDL_ID_COUNTERS,
    _DDL_RECOMMENDATIONS,
    _DDL_RECOMMENDED_SEEDLINGS,
    _DDL_SENSOR_READINGS,
]

# Table names for introspection / tests
ALL_TABLE_NAMES = [
    "id_counters",
    "recommendations",
    "recommended_seedlings",
    "sensor_readings",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent; safe to call on an already-initialized database.
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
