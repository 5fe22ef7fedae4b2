"""
Tests for reforest_engine/engine/scorer.py.

What we test
------------
range_compatibility():
  - Exactly 1.0 anywhere inside [min, max], for every positive factor.
  - Outside the band: exp(-distance / (factor * tolerance)) with
    tolerance = max(0.8 * width, 1.0).
  - Strictly increasing in factor and strictly decreasing in distance.
  - None / NaN -> 0.0; factor <= 0 raises ValueError.
  - Reversed bounds are normalised.

compute_confidence() / compute_overall():
  - Weighted sum plus native bonus, clamped to [0.05, 1.0].
  - Overall blends confidence with success rate and adaptability.

score_species():
  - One ScoredSpecies per dataset entry, in dataset order.
  - Confidence always within [0.05, 1.0], even for hopeless fits.
  - Seasonal factors change out-of-band scores only.
  - Empty / None dataset raises DatasetUnavailableError before the reading
    is inspected.
"""

from __future__ import annotations

import math

import pytest

from reforest_engine.config import ScoringWeights
from reforest_engine.engine.scorer import (
    DatasetUnavailableError,
    compute_confidence,
    compute_overall,
    range_compatibility,
    score_one,
    score_species,
)
from reforest_engine.models.season import SeasonalFactors
from reforest_engine.models.sensor import SensorReading
from reforest_engine.models.species import ScoredSpecies, SpeciesRecord

NEUTRAL = SeasonalFactors()


def _species(**overrides) -> SpeciesRecord:
    base = dict(
        scientific_name="Shorea contorta",
        common_name="White Lauan",
        ph_min=5.0,
        ph_max=6.5,
        moisture_min=50.0,
        moisture_max=80.0,
        temp_min=24.0,
        temp_max=32.0,
        success_rate=80.0,
        adaptability_score=70.0,
        is_native=False,
        category="non-native",
    )
    base.update(overrides)
    return SpeciesRecord(**base)


class TestRangeCompatibility:
    @pytest.mark.parametrize("value", [5.0, 6.0, 7.0])
    @pytest.mark.parametrize("factor", [0.1, 0.8, 1.0, 1.2, 10.0])
    def test_inside_band_is_one(self, value, factor):
        assert range_compatibility(value, 5.0, 7.0, factor) == 1.0

    def test_outside_band_formula(self):
        # width 2 -> tolerance 1.6; distance 3
        assert range_compatibility(10.0, 5.0, 7.0) == pytest.approx(math.exp(-3 / 1.6))

    def test_below_band_uses_distance_to_min(self):
        assert range_compatibility(4.0, 5.0, 7.0) == pytest.approx(math.exp(-1 / 1.6))

    def test_tolerance_floor_for_degenerate_range(self):
        assert range_compatibility(8.0, 6.0, 6.0) == pytest.approx(math.exp(-2.0))

    def test_strictly_increasing_in_factor(self):
        scores = [range_compatibility(40.0, 50.0, 80.0, f) for f in (0.5, 0.8, 1.0, 1.2, 2.0)]
        assert scores == sorted(scores)
        assert len(set(scores)) == len(scores)

    def test_strictly_decreasing_in_distance(self):
        scores = [range_compatibility(v, 50.0, 80.0) for v in (49.0, 40.0, 20.0, 0.0)]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_bounded_between_zero_and_one(self):
        assert 0.0 <= range_compatibility(1e6, 0.0, 1.0) <= 1.0

    def test_none_and_nan_score_zero(self):
        assert range_compatibility(None, 5.0, 7.0) == 0.0
        assert range_compatibility(math.nan, 5.0, 7.0) == 0.0

    @pytest.mark.parametrize("factor", [0.0, -1.0])
    def test_non_positive_factor_raises(self, factor):
        with pytest.raises(ValueError):
            range_compatibility(6.0, 5.0, 7.0, factor)

    def test_reversed_bounds(self):
        assert range_compatibility(6.0, 7.0, 5.0) == 1.0


class TestComputeConfidence:
    def test_perfect_native_is_clamped_to_one(self):
        confidence, bonus = compute_confidence(1.0, 1.0, 1.0, 88.0, 90.0, True)
        assert confidence == 1.0
        assert bonus == pytest.approx(0.10)

    def test_non_native_has_no_bonus(self):
        confidence, bonus = compute_confidence(1.0, 1.0, 1.0, 50.0, 50.0, False)
        assert bonus == 0.0
        assert confidence == pytest.approx(0.80 + 0.05 + 0.05)

    def test_floor(self):
        confidence, _ = compute_confidence(0.0, 0.0, 0.0, 0.0, 0.0, False)
        assert confidence == pytest.approx(0.05)

    def test_custom_weights(self):
        weights = ScoringWeights(ph=1.0, moisture=0.0, temperature=0.0,
                                 success_rate=0.0, adaptability=0.0, native_bonus=0.0)
        confidence, _ = compute_confidence(0.5, 1.0, 1.0, 100.0, 100.0, True, weights)
        assert confidence == pytest.approx(0.5)

    def test_overall_blend(self):
        assert compute_overall(1.0, 88.0, 90.0) == pytest.approx(0.6 + 0.176 + 0.18)


class TestScoreSpecies:
    def test_perfect_fit(self, optimal_reading, narra):
        scored = score_one(optimal_reading, narra, NEUTRAL)
        assert isinstance(scored, ScoredSpecies)
        assert scored.ph_compatibility == 1.0
        assert scored.moisture_compatibility == 1.0
        assert scored.temp_compatibility == 1.0
        assert scored.confidence_score == 1.0
        assert scored.overall_score == pytest.approx(0.956)
        assert scored.native_bonus == pytest.approx(0.10)
        assert scored.common_name == "Narra"

    def test_one_result_per_species_in_order(self, optimal_reading, species_dataset):
        scored = score_species(optimal_reading, species_dataset, NEUTRAL)
        assert [s.species_id for s in scored] == [s.species_id for s in species_dataset]

    def test_confidence_bounds(self, species_dataset):
        readings = [
            SensorReading(ph=0.0, soil_moisture=0.0, temperature=-10.0),
            SensorReading(ph=14.0, soil_moisture=100.0, temperature=60.0),
            SensorReading(ph=6.5, soil_moisture=50.0, temperature=27.0),
        ]
        hopeless = _species(success_rate=0.0, adaptability_score=0.0)
        for reading in readings:
            for s in score_species(reading, [*species_dataset, hopeless], NEUTRAL):
                assert 0.05 <= s.confidence_score <= 1.0

    def test_hopeless_fit_hits_floor(self):
        species = _species(success_rate=0.0, adaptability_score=0.0)
        reading = SensorReading(ph=14.0, soil_moisture=0.0, temperature=60.0)
        scored = score_one(reading, species, NEUTRAL)
        assert scored.confidence_score == pytest.approx(0.05)

    def test_wet_season_is_more_forgiving_of_dry_soil(self):
        species = _species()
        reading = SensorReading(ph=6.0, soil_moisture=35.0, temperature=28.0)
        dry = score_one(reading, species, SeasonalFactors(moisture=0.8, temperature=1.1))
        wet = score_one(reading, species, SeasonalFactors(moisture=1.2, temperature=0.9))
        assert wet.moisture_compatibility > dry.moisture_compatibility
        # temperature in band: factor has no effect
        assert wet.temp_compatibility == dry.temp_compatibility == 1.0

    def test_input_species_not_mutated(self, optimal_reading, species_dataset):
        before = [s.model_dump() for s in species_dataset]
        score_species(optimal_reading, species_dataset, NEUTRAL)
        assert [s.model_dump() for s in species_dataset] == before


class TestEmptyDataset:
    @pytest.mark.parametrize(
        "reading",
        [
            SensorReading(ph=6.5, soil_moisture=50.0, temperature=27.0),
            SensorReading(ph=20.0, soil_moisture=-5.0, temperature=99.0),
            SensorReading(),
        ],
    )
    def test_empty_dataset_raises_for_any_reading(self, reading):
        with pytest.raises(DatasetUnavailableError):
            score_species(reading, [], NEUTRAL)

    def test_none_dataset_raises(self, optimal_reading):
        with pytest.raises(DatasetUnavailableError):
            score_species(optimal_reading, None, NEUTRAL)

    def test_error_is_runtime_error(self):
        assert issubclass(DatasetUnavailableError, RuntimeError)
