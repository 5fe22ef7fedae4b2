"""
Shared pytest fixtures for the reforestation engine test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - Sample species, readings and a small species dataset for use in
    multiple test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Generator

import pytest

from reforest_engine.db.schema import apply_schema
from reforest_engine.models.sensor import SensorReading
from reforest_engine.models.species import SpeciesRecord


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Foreign key enforcement is ON. Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def optimal_reading() -> SensorReading:
    """A reading inside every optimal band."""
    return SensorReading(
        ph=6.5,
        soil_moisture=50.0,
        temperature=27.0,
        timestamp=datetime(2026, 3, 2, 8, 15, tzinfo=timezone.utc),
    )


@pytest.fixture
def narra() -> SpeciesRecord:
    """A native species whose ranges contain ``optimal_reading``."""
    return SpeciesRecord(
        species_id="seed_001",
        scientific_name="Pterocarpus indicus",
        common_name="Narra",
        ph_min=5.5,
        ph_max=7.5,
        moisture_min=40.0,
        moisture_max=70.0,
        temp_min=22.0,
        temp_max=32.0,
        success_rate=88.0,
        adaptability_score=90.0,
        is_native=True,
        category="native",
    )


@pytest.fixture
def species_dataset(narra: SpeciesRecord) -> list[SpeciesRecord]:
    """Four species with distinct fits for ``optimal_reading``."""
    return [
        narra,
        SpeciesRecord(
            species_id="seed_002",
            scientific_name="Swietenia macrophylla",
            common_name="Mahogany",
            ph_min=6.0,
            ph_max=7.5,
            moisture_min=45.0,
            moisture_max=75.0,
            temp_min=24.0,
            temp_max=34.0,
            success_rate=80.0,
            adaptability_score=78.0,
            is_native=False,
            category="non-native",
        ),
        SpeciesRecord(
            species_id="seed_003",
            scientific_name="Rhizophora mucronata",
            common_name="Bakauan",
            ph_min=7.5,
            ph_max=8.5,
            moisture_min=85.0,
            moisture_max=100.0,
            temp_min=25.0,
            temp_max=35.0,
            success_rate=70.0,
            adaptability_score=60.0,
            is_native=True,
            category="mangrove",
        ),
        SpeciesRecord(
            species_id="seed_004",
            scientific_name="Pinus kesiya",
            common_name="Benguet Pine",
            ph_min=4.5,
            ph_max=5.5,
            moisture_min=20.0,
            moisture_max=35.0,
            temp_min=12.0,
            temp_max=20.0,
            success_rate=75.0,
            adaptability_score=70.0,
            is_native=True,
            category="native",
        ),
    ]
