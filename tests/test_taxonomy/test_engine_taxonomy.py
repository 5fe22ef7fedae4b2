"""Tests for the engine label enums."""

from __future__ import annotations

from reforest_engine.taxonomy.engine_taxonomy import (
    AlertType,
    RecommendationStatus,
    Season,
    TrendDirection,
    TrendMessage,
)


class TestEngineTaxonomy:
    def test_season_values(self):
        assert {s.value for s in Season} == {"dry", "wet", "moderate"}

    def test_str_is_value(self):
        assert str(TrendDirection.FALLING) == "falling"
        assert f"{Season.DRY}" == "dry"

    def test_alert_types(self):
        assert {a.value for a in AlertType} == {"low_moisture_trend", "high_ph_trend"}

    def test_status_labels(self):
        assert [s.value for s in RecommendationStatus] == [
            "Approved", "Pending", "Under Review", "Needs Review",
        ]

    def test_trend_messages(self):
        assert TrendMessage("insufficient_data") is TrendMessage.INSUFFICIENT_DATA
