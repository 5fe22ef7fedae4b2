"""
Tests for reforest_engine/engine/reporter.py.

What we test
------------
write_recommendation_json():
  - Creates the output directory; filename uses the recommendation id.
  - Payload carries schemaVersion plus the caller-facing response fields.

write_recommendation_csv():
  - One row per ranked species with 1-based rank.
  - Unsaved responses are labelled by generation timestamp.

write_trend_report_json():
  - Writes the trend payload with sensorId and date-labelled filename.
"""

from __future__ import annotations

import csv
import json
from datetime import date, datetime, timezone

from reforest_engine.dataset.provider import DatasetProvider
from reforest_engine.config import AppConfig
from reforest_engine.engine.reporter import (
    write_recommendation_csv,
    write_recommendation_json,
    write_trend_report_json,
)
from reforest_engine.engine.service import RecommendationService
from reforest_engine.engine.trends import analyze_trends
from reforest_engine.models.sensor import RecommendationRequest

_CLOCK = datetime(2026, 3, 2, 8, 15, tzinfo=timezone.utc)


def _response(species_dataset, recommendation_id: str | None = "reco101"):
    class _Store:
        def save(self, result):
            return recommendation_id

    service = RecommendationService(
        AppConfig(),
        DatasetProvider(species_dataset),
        store=_Store() if recommendation_id else None,
        clock=lambda: _CLOCK,
    )
    request = RecommendationRequest.from_payload(
        {"sensorId": "SEN_01", "sensorData": {"ph": 6.5, "soilMoisture": 50, "temperature": 27}}
    )
    return service.generate(request)


class TestRecommendationJson:
    def test_written_with_id_label(self, tmp_path, species_dataset):
        out = tmp_path / "nested" / "recommendations"
        path = write_recommendation_json(_response(species_dataset), out)
        assert path == out / "recommendation_reco101.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["schemaVersion"] == "v1.0.0"
        assert payload["recommendationId"] == "reco101"
        assert payload["season"] == "dry"
        assert len(payload["recommendations"]) == 3


class TestRecommendationCsv:
    def test_one_row_per_rank(self, tmp_path, species_dataset):
        path = write_recommendation_csv(_response(species_dataset), tmp_path)
        with path.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert [r["rank"] for r in rows] == ["1", "2", "3"]
        assert rows[0]["common_name"] == "Narra"
        assert rows[0]["confidence_pct"] == "100.0"

    def test_unsaved_response_uses_timestamp(self, tmp_path, species_dataset):
        path = write_recommendation_csv(_response(species_dataset, None), tmp_path)
        assert path.name == "recommendation_20260302T081500.csv"


class TestTrendReportJson:
    def test_payload(self, tmp_path):
        report = analyze_trends([])
        path = write_trend_report_json(report, tmp_path, "SEN_01", run_date=date(2026, 3, 2))
        assert path.name == "trends_SEN_01_2026-03-02.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["sensorId"] == "SEN_01"
        assert payload["message"] == "insufficient_data"
        assert payload["requiredReadings"] == 7
