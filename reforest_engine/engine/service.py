"""
Recommendation service: wires validation, scoring, ranking and persistence
for one request.

Collaborators are injected:

    DatasetSource        -> ``get_dataset()`` returns the current species
                            snapshot or raises ``DatasetUnavailableError``.
    RecommendationStore  -> ``save(result)`` persists a result and returns its
                            identifier.  Optional; without a store the
                            response carries ``recommendationId = None``.
    clock                -> zero-argument callable returning the current UTC
                            time; drives season resolution and timestamps.

The service holds no mutable state between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any, Optional, Protocol

from reforest_engine.config import AppConfig
from reforest_engine.engine.ranker import rank_species, top_n
from reforest_engine.engine.scorer import score_species
from reforest_engine.engine.seasons import current_season, seasonal_factors
from reforest_engine.engine.trends import Reading, analyze_trends
from reforest_engine.engine.validator import SensorValidationError, validate_sensor_data
from reforest_engine.models.recommendation import (
    RecommendationResponse,
    RecommendationResult,
)
from reforest_engine.models.sensor import RecommendationRequest
from reforest_engine.models.species import ScoredSpecies, SpeciesRecord
from reforest_engine.models.trend import TrendReport
from reforest_engine.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class DatasetSource(Protocol):
    def get_dataset(self) -> Sequence[SpeciesRecord]:
        ...


class RecommendationStore(Protocol):
    def save(self, result: RecommendationResult) -> str:
        ...


Clock = Callable[[], datetime]


class RecommendationService:
    """Produces recommendations and trend reports from injected collaborators.

    Args:
        config:           Application config (weights, factors, thresholds).
        dataset_provider: Supplies the species snapshot per call.
        store:            Optional persistence collaborator.
        clock:            Current-time source; defaults to ``utcnow``.
    """

    def __init__(
        self,
        config: AppConfig,
        dataset_provider: DatasetSource,
        store: Optional[RecommendationStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config
        self.dataset_provider = dataset_provider
        self.store = store
        self.clock = clock or utcnow

    def generate(
        self, request: RecommendationRequest | Mapping[str, Any]
    ) -> RecommendationResponse:
        """Validate, score, rank and (optionally) persist one request.

        Raises:
            SensorValidationError:   The reading failed validation.
            DatasetUnavailableError: No species dataset is available.
        """
        if not isinstance(request, RecommendationRequest):
            request = RecommendationRequest.from_payload(dict(request))

        validation = validate_sensor_data(request.sensor_data)
        if not validation.is_valid:
            logger.warning(
                "Rejected reading from sensor %s: %s",
                request.sensor_id, "; ".join(validation.errors),
            )
            raise SensorValidationError(validation.errors)

        dataset = self.dataset_provider.get_dataset()

        now = self.clock()
        season = current_season(now)
        factors = seasonal_factors(season, self.config.seasons)

        scored = score_species(request.sensor_data, dataset, factors, self.config.scoring)
        ranked = rank_species(scored, self.config.ranking)
        top = top_n(ranked, self.config.recommendation.top_k)

        result = RecommendationResult(
            sensor_id=request.sensor_id,
            sensor_data=request.sensor_data,
            location=request.location,
            coordinates=request.coordinates,
            season=season,
            generated_at=now,
            recommendations=top,
            aggregate_confidence_pct=aggregate_confidence_pct(top),
            warnings=validation.warnings,
        )

        recommendation_id: Optional[str] = None
        if self.store is not None:
            recommendation_id = self.store.save(result)

        logger.info(
            "Recommendation for sensor %s: season=%s candidates=%d top=%s id=%s",
            request.sensor_id,
            season,
            len(dataset),
            [s.common_name for s in top],
            recommendation_id,
        )

        return RecommendationResponse(
            recommendation_id=recommendation_id,
            recommendations=top,
            sensor_data=request.sensor_data,
            season=season,
            generated_at=now,
            confidence=top_confidence_pct(top),
            warnings=validation.warnings,
        )

    def analyze(self, readings: Optional[Sequence[Reading]]) -> TrendReport:
        """Run trend analysis with the configured thresholds."""
        return analyze_trends(readings, self.config.trends)


def top_confidence_pct(ranked: Sequence[ScoredSpecies]) -> float:
    """Confidence of the best candidate as a percentage (2 dp); 0 if none."""
    if not ranked:
        return 0.0
    return round(ranked[0].confidence_score * 100.0, 2)


def aggregate_confidence_pct(ranked: Sequence[ScoredSpecies]) -> float:
    """Mean confidence of ``ranked`` as a percentage (2 dp); 0 if empty."""
    if not ranked:
        return 0.0
    mean = sum(s.confidence_score for s in ranked) / len(ranked)
    return round(mean * 100.0, 2)
