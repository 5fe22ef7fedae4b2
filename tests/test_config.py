"""
Tests for reforest_engine/config.py.

What we test
------------
  - The shipped default.toml loads and matches the model defaults.
  - local.toml next to the config file is deep-merged over it.
  - REFOREST_* environment variables override file values.
  - Missing config file -> FileNotFoundError.
  - Invalid values -> pydantic ValidationError.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from reforest_engine.config import (
    AppConfig,
    ScoringWeights,
    SeasonConfig,
    TrendConfig,
    load_config,
)

_DEFAULT_TOML = Path(__file__).parent.parent / "config" / "default.toml"


class TestLoadConfig:
    def test_default_toml_matches_model_defaults(self, monkeypatch):
        for var in ("REFOREST_DB_PATH", "REFOREST_DATASET_PATH", "REFOREST_LOG_LEVEL", "REFOREST_DEBUG"):
            monkeypatch.delenv(var, raising=False)
        config = load_config(_DEFAULT_TOML)
        defaults = AppConfig()
        assert config.scoring == defaults.scoring
        assert config.seasons == defaults.seasons
        assert config.trends == defaults.trends
        assert config.ranking == defaults.ranking
        assert config.recommendation.top_k == 3

    def test_local_override(self, tmp_path, monkeypatch):
        monkeypatch.delenv("REFOREST_DB_PATH", raising=False)
        (tmp_path / "default.toml").write_text(
            '[database]\ndb_path = "a.db"\n[trends]\nmin_readings = 7\n', encoding="utf-8"
        )
        (tmp_path / "local.toml").write_text("[trends]\nmin_readings = 10\n", encoding="utf-8")
        config = load_config(tmp_path / "default.toml")
        assert config.trends.min_readings == 10
        assert config.database.db_path == "a.db"

    def test_env_overrides(self, tmp_path, monkeypatch):
        (tmp_path / "default.toml").write_text('[database]\ndb_path = "a.db"\n', encoding="utf-8")
        monkeypatch.setenv("REFOREST_DB_PATH", "env.db")
        monkeypatch.setenv("REFOREST_LOG_LEVEL", "debug")
        monkeypatch.setenv("REFOREST_DEBUG", "true")
        config = load_config(tmp_path / "default.toml")
        assert config.database.db_path == "env.db"
        assert config.logging.level == "DEBUG"
        assert config.debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_invalid_value(self, tmp_path, monkeypatch):
        monkeypatch.delenv("REFOREST_LOG_LEVEL", raising=False)
        (tmp_path / "default.toml").write_text("[trends]\nmin_readings = 1\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(tmp_path / "default.toml")


class TestSections:
    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            ScoringWeights(ph=-0.1)

    def test_confidence_floor_bounds(self):
        with pytest.raises(ValidationError):
            ScoringWeights(confidence_floor=0.0)

    def test_seasonal_factor_must_be_positive(self):
        with pytest.raises(ValidationError):
            SeasonConfig(dry={"moisture": 0.0})

    def test_trend_minimum(self):
        with pytest.raises(ValidationError):
            TrendConfig(min_readings=1)
