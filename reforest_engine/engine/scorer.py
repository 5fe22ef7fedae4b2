"""
Species compatibility scoring: converts one sensor reading plus the species
dataset into a list of ``ScoredSpecies`` (unordered; ranking is the ranker's
job).

Per-attribute compatibility
---------------------------
    range_compatibility(value, min, max, factor)

    inside [min, max]  -> 1.0
    outside            -> exp(-distance / (factor * tolerance))
                          tolerance = max(0.8 * (max - min), 1.0)

The seasonal ``factor`` scales the tolerance band: factor > 1 widens it (the
same deviation scores higher), factor < 1 narrows it.  For any fixed
out-of-band distance the score is strictly increasing in ``factor`` and
strictly decreasing in distance; it never leaves [0, 1].  The 1.0 tolerance
floor keeps degenerate single-value ranges (min == max) from collapsing to a
step function.

Combined score (weights from ``ScoringWeights``)
------------------------------------------------
    base_confidence = 0.25 * ph_score
                    + 0.30 * moisture_score
                    + 0.25 * temp_score
                    + 0.10 * success_rate / 100
                    + 0.10 * adaptability_score / 100

    confidence = clamp(base_confidence + (0.10 if native else 0), 0.05, 1.0)

    overall    = 0.6 * confidence
               + 0.2 * success_rate / 100
               + 0.2 * adaptability_score / 100

The confidence floor of 0.05 means no species ever reports zero viability.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Optional

from reforest_engine.config import ScoringWeights
from reforest_engine.engine.validator import coerce_number
from reforest_engine.models.season import SeasonalFactors
from reforest_engine.models.sensor import SensorReading
from reforest_engine.models.species import ScoredSpecies, SpeciesRecord

logger = logging.getLogger(__name__)

# Tolerance band = max(width * _TOLERANCE_WIDTH_RATIO, _MIN_TOLERANCE)
_TOLERANCE_WIDTH_RATIO = 0.8
_MIN_TOLERANCE = 1.0

DEFAULT_WEIGHTS = ScoringWeights()


class DatasetUnavailableError(RuntimeError):
    """Raised when scoring is requested without a usable species dataset.

    Fatal for the current call only.  Restoring the dataset is the dataset
    provider's responsibility; the engine never retries.
    """

    def __init__(self, detail: str = "Species dataset is empty or not loaded.") -> None:
        super().__init__(detail)


def range_compatibility(
    value: Optional[float],
    minimum: float,
    maximum: float,
    factor: float = 1.0,
) -> float:
    """Score how well ``value`` fits ``[minimum, maximum]``.

    Args:
        value:   Measured value; ``None`` or non-finite scores 0.
        minimum: Lower bound of the preferred band.
        maximum: Upper bound of the preferred band.
        factor:  Seasonal tolerance multiplier (> 0).

    Returns:
        Compatibility in [0, 1]; exactly 1.0 inside the band.

    Raises:
        ValueError: If ``factor`` is not strictly positive.
    """
    if not factor > 0.0:
        raise ValueError(f"factor must be > 0, got {factor}.")
    if value is None or not all(math.isfinite(v) for v in (value, minimum, maximum)):
        return 0.0

    lo, hi = min(minimum, maximum), max(minimum, maximum)
    if lo <= value <= hi:
        return 1.0

    distance = lo - value if value < lo else value - hi
    tolerance = max((hi - lo) * _TOLERANCE_WIDTH_RATIO, _MIN_TOLERANCE)
    return _clamp(math.exp(-distance / (factor * tolerance)), 0.0, 1.0)


def compute_confidence(
    ph_score: float,
    moisture_score: float,
    temp_score: float,
    success_rate: float,
    adaptability_score: float,
    is_native: bool,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> tuple[float, float]:
    """Combine attribute scores and history into a confidence score.

    Returns:
        ``(confidence_score, native_bonus)``; confidence is clamped to
        ``[weights.confidence_floor, 1.0]``.
    """
    base = (
        weights.ph             * ph_score
        + weights.moisture     * moisture_score
        + weights.temperature  * temp_score
        + weights.success_rate * (success_rate / 100.0)
        + weights.adaptability * (adaptability_score / 100.0)
    )
    native_bonus = weights.native_bonus if is_native else 0.0
    confidence = _clamp(base + native_bonus, weights.confidence_floor, 1.0)
    return confidence, native_bonus


def compute_overall(
    confidence_score: float,
    success_rate: float,
    adaptability_score: float,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Blend confidence with raw historical performance for ranking."""
    return (
        weights.overall_confidence     * confidence_score
        + weights.overall_success_rate * (success_rate / 100.0)
        + weights.overall_adaptability * (adaptability_score / 100.0)
    )


def score_one(
    reading: SensorReading,
    species: SpeciesRecord,
    factors: SeasonalFactors,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoredSpecies:
    """Score a single species against one reading."""
    ph_score = range_compatibility(
        coerce_number(reading.ph), species.ph_min, species.ph_max, factors.ph
    )
    moisture_score = range_compatibility(
        coerce_number(reading.soil_moisture),
        species.moisture_min,
        species.moisture_max,
        factors.moisture,
    )
    temp_score = range_compatibility(
        coerce_number(reading.temperature),
        species.temp_min,
        species.temp_max,
        factors.temperature,
    )

    confidence, native_bonus = compute_confidence(
        ph_score=ph_score,
        moisture_score=moisture_score,
        temp_score=temp_score,
        success_rate=species.success_rate,
        adaptability_score=species.adaptability_score,
        is_native=species.is_native,
        weights=weights,
    )
    overall = compute_overall(
        confidence, species.success_rate, species.adaptability_score, weights
    )

    return ScoredSpecies.from_species(
        species,
        ph_compatibility=ph_score,
        moisture_compatibility=moisture_score,
        temp_compatibility=temp_score,
        confidence_score=confidence,
        overall_score=overall,
        native_bonus=native_bonus,
    )


def score_species(
    reading: SensorReading,
    dataset: Sequence[SpeciesRecord],
    seasonal_factors: SeasonalFactors,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[ScoredSpecies]:
    """Score every species in ``dataset`` against ``reading``.

    The dataset is checked before the reading is looked at, so an empty
    dataset fails the call for any reading, valid or not.

    Args:
        reading:          The sensor reading to score against.
        dataset:          Species snapshot; treated as read-only.
        seasonal_factors: Active season's tolerance multipliers.
        weights:          Score weights (process-wide constants).

    Returns:
        One ``ScoredSpecies`` per dataset entry, in dataset order.

    Raises:
        DatasetUnavailableError: If ``dataset`` is empty or ``None``.
    """
    if not dataset:
        raise DatasetUnavailableError()

    scored = [score_one(reading, sp, seasonal_factors, weights) for sp in dataset]
    logger.debug("Scored %d species", len(scored))
    return scored


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
