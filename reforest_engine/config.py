"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``REFOREST_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Score weights, ranking tolerances, the seasonal-factor table and trend
thresholds are process-wide constants.  They are modelled as frozen
sub-configs and injected into the engine components, so a running process
never mutates them and no call can override them.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from reforest_engine.models.season import SeasonalFactors

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/reforest.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class DataConfig(BaseModel):
    """Filesystem paths for the species dataset and report output."""

    model_config = ConfigDict(frozen=True)

    dataset_path: str = "data/species/tree_species.csv"
    output_dir: str = "data/outputs"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/reforest.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class ScoringWeights(BaseModel):
    """Fixed weights of the species compatibility score.

    confidence = ph·pH + moisture·moist + temperature·temp
                 + success_rate·(successRate/100)
                 + adaptability·(adaptabilityScore/100)
                 (+ native_bonus if native), clamped to [confidence_floor, 1]

    overall    = overall_confidence·confidence
                 + overall_success_rate·(successRate/100)
                 + overall_adaptability·(adaptabilityScore/100)
    """

    model_config = ConfigDict(frozen=True)

    ph: float = 0.25
    moisture: float = 0.30
    temperature: float = 0.25
    success_rate: float = 0.10
    adaptability: float = 0.10
    native_bonus: float = 0.10
    confidence_floor: float = 0.05

    overall_confidence: float = 0.6
    overall_success_rate: float = 0.2
    overall_adaptability: float = 0.2

    @model_validator(mode="after")
    def validate_weights(self) -> "ScoringWeights":
        for name, value in self.model_dump().items():
            if value < 0.0:
                raise ValueError(f"Scoring weight '{name}' must be >= 0, got {value}.")
        if not 0.0 < self.confidence_floor < 1.0:
            raise ValueError(
                f"confidence_floor must be in (0.0, 1.0), got {self.confidence_floor}."
            )
        return self


class RankingConfig(BaseModel):
    """Tolerance bands used by the ranker's tie-break chain."""

    model_config = ConfigDict(frozen=True)

    overall_tolerance: float = 0.05
    confidence_tolerance: float = 0.03


class SeasonConfig(BaseModel):
    """Seasonal factor table, one ``SeasonalFactors`` per season label.

    ``moderate`` is defined but no calendar month currently resolves to it.
    """

    model_config = ConfigDict(frozen=True)

    dry: SeasonalFactors = SeasonalFactors(moisture=0.8, temperature=1.1, ph=1.0)
    wet: SeasonalFactors = SeasonalFactors(moisture=1.2, temperature=0.9, ph=1.0)
    moderate: SeasonalFactors = SeasonalFactors(moisture=1.0, temperature=1.0, ph=1.0)


class TrendConfig(BaseModel):
    """Trend analysis thresholds."""

    model_config = ConfigDict(frozen=True)

    min_readings: int = 7
    slope_threshold: float = 0.5
    low_moisture_alert: float = 30.0
    high_ph_alert: float = 8.0
    confidence: float = 0.8

    @field_validator("min_readings")
    @classmethod
    def validate_min_readings(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"min_readings must be >= 2, got {v}.")
        return v


class RecommendationConfig(BaseModel):
    """Recommendation output settings."""

    model_config = ConfigDict(frozen=True)

    top_k: int = 3

    @field_validator("top_k")
    @classmethod
    def validate_top_k(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"top_k must be >= 1, got {v}.")
        return v


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Engine components and CLI commands receive an ``AppConfig`` instance (or
    one of its sections).  It is constructed by ``load_config()`` which
    merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    data: DataConfig = DataConfig()
    logging: LoggingConfig = LoggingConfig()
    scoring: ScoringWeights = ScoringWeights()
    ranking: RankingConfig = RankingConfig()
    seasons: SeasonConfig = SeasonConfig()
    trends: TrendConfig = TrendConfig()
    recommendation: RecommendationConfig = RecommendationConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply REFOREST_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply REFOREST_* env vars to the raw config dict.

    Supported overrides:
      REFOREST_DB_PATH       → raw["database"]["db_path"]
      REFOREST_DATASET_PATH  → raw["data"]["dataset_path"]
      REFOREST_LOG_LEVEL     → raw["logging"]["level"]
      REFOREST_DEBUG         → raw["debug"]
    """
    if db_path := os.environ.get("REFOREST_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if dataset_path := os.environ.get("REFOREST_DATASET_PATH"):
        raw.setdefault("data", {})["dataset_path"] = dataset_path

    if log_level := os.environ.get("REFOREST_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("REFOREST_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        data=DataConfig(**raw.get("data", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        scoring=ScoringWeights(**raw.get("scoring", {})),
        ranking=RankingConfig(**raw.get("ranking", {})),
        seasons=SeasonConfig(**raw.get("seasons", {})),
        trends=TrendConfig(**raw.get("trends", {})),
        recommendation=RecommendationConfig(**raw.get("recommendation", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
