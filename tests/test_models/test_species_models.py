"""
Tests for species models: validation rules and caller-facing aliases.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from reforest_engine.models.species import ScoredSpecies, SpeciesRecord


def _kwargs(**overrides) -> dict:
    base = dict(
        scientific_name="Vitex parviflora",
        common_name="Molave",
        ph_min=6.0,
        ph_max=7.0,
        moisture_min=30.0,
        moisture_max=50.0,
        temp_min=24.0,
        temp_max=30.0,
        success_rate=80.0,
        adaptability_score=85.0,
        is_native=True,
        category="native",
    )
    base.update(overrides)
    return base


class TestSpeciesRecord:
    def test_valid(self):
        record = SpeciesRecord(**_kwargs())
        assert record.common_name == "Molave"

    def test_frozen(self):
        record = SpeciesRecord(**_kwargs())
        with pytest.raises(ValidationError):
            record.common_name = "Other"

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError, match="ph_min"):
            SpeciesRecord(**_kwargs(ph_min=8.0))

    def test_percentage_bounds(self):
        with pytest.raises(ValidationError):
            SpeciesRecord(**_kwargs(success_rate=101.0))

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            SpeciesRecord(**_kwargs(common_name="  "))

    def test_camel_case_input_and_output(self):
        payload = {
            "scientificName": "Vitex parviflora",
            "commonName": "Molave",
            "pHMin": 6.0,
            "pHMax": 7.0,
            "moistureMin": 30,
            "moistureMax": 50,
            "tempMin": 24,
            "tempMax": 30,
            "successRate": 80,
            "adaptabilityScore": 85,
            "isNative": True,
            "category": "native",
        }
        record = SpeciesRecord.model_validate(payload)
        dumped = record.model_dump(by_alias=True)
        assert dumped["pHMin"] == 6.0
        assert dumped["isNative"] is True

    def test_preferred_ph_wire_name(self):
        record = SpeciesRecord.model_validate({**_kwargs(), "prefpH": 6.5})
        assert record.pref_ph == 6.5
        dumped = record.model_dump(by_alias=True)
        assert dumped["prefpH"] == 6.5
        assert "prefPH" not in dumped


class TestScoredSpecies:
    def test_from_species_copies_fields(self):
        record = SpeciesRecord(**_kwargs())
        scored = ScoredSpecies.from_species(
            record,
            ph_compatibility=1.0,
            moisture_compatibility=0.5,
            temp_compatibility=1.0,
            confidence_score=0.8,
            overall_score=0.75,
        )
        assert scored.common_name == record.common_name
        assert scored.native_bonus == 0.0
        dumped = scored.model_dump(by_alias=True)
        assert dumped["pHCompatibility"] == 1.0
        assert dumped["moistureCompatibility"] == 0.5
