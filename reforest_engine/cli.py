"""
Reforestation recommendation engine — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (DB init, recommendation, trend analysis, etc.).
  5. Report result to stdout; errors go to stderr as ``[ERROR] ...`` with
     exit code 1.

Install and run::

    pip install -e .
    reforest-engine --help
    reforest-engine init-db
    reforest-engine dataset-info --dataset data/species/tree_species.xlsx
    reforest-engine recommend --sensor-id SEN_01 --ph 6.5 --moisture 48 --temperature 27
    reforest-engine record-reading --sensor-id SEN_01 --ph 6.4 --moisture 45 --temperature 26
    reforest-engine analyze-trends --sensor-id SEN_01
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="reforest-engine",
    help="Tree species recommendation and soil trend analysis CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from reforest_engine.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from reforest_engine.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_provider_or_exit(config, dataset_path: Optional[str]):
    """Load the species dataset into a provider, exiting on failure."""
    from reforest_engine.dataset.provider import DatasetProvider

    path = Path(dataset_path or config.data.dataset_path)
    provider = DatasetProvider()
    try:
        provider.load(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] Could not load species dataset: {exc}", err=True)
        raise typer.Exit(code=1)
    return provider


def _open_db(config, db_path: Optional[str]):
    """Open a configured connection to the database."""
    from reforest_engine.db.connection import get_connection

    return get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


def _build_reading(
    ph: Optional[float],
    moisture: Optional[float],
    temperature: Optional[float],
    timestamp: Optional[str] = None,
):
    from reforest_engine.models.sensor import SensorReading
    from reforest_engine.utils.time_utils import parse_timestamp

    ts = None
    if timestamp is not None:
        ts = parse_timestamp(timestamp)
        if ts is None:
            typer.echo(f"[ERROR] Invalid timestamp: {timestamp!r}", err=True)
            raise typer.Exit(code=1)
    return SensorReading(ph=ph, soil_moisture=moisture, temperature=temperature, timestamp=ts)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None, "--db-path", help="Override DB path from config (e.g. data/db/test.db)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Initialize the SQLite database and apply the full schema.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from reforest_engine.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with _open_db(config, target_path) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file (default: config/default.toml)."
    ),
    show_full: bool = typer.Option(False, "--full", help="Print full config including all fields."),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Species dataset:  {config.data.dataset_path}")
    typer.echo(f"  Top-K:            {config.recommendation.top_k}")
    typer.echo(f"  Trend minimum:    {config.trends.min_readings} readings")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("dataset-info")
def dataset_info(
    dataset_path: Optional[str] = typer.Option(
        None, "--dataset", help="Species dataset file (.csv, .json, .xlsx, .xls)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Load the species dataset and print a summary."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    provider = _load_provider_or_exit(config, dataset_path)
    info = provider.info()
    species = provider.get_dataset()
    native = sum(1 for s in species if s.is_native)

    typer.echo(f"Dataset: {info['source']}")
    typer.echo(f"  Species loaded: {info['size']} ({native} native)")
    typer.echo(f"  Last updated:   {info['lastUpdated']}")
    typer.echo("[OK] Dataset loaded.")


@app.command("recommend")
def recommend(
    sensor_id: str = typer.Option(..., "--sensor-id", help="Sensor identifier."),
    ph: Optional[float] = typer.Option(None, "--ph", help="Soil pH (0-14)."),
    moisture: Optional[float] = typer.Option(None, "--moisture", help="Soil moisture % (0-100)."),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="Soil temperature °C."),
    location: Optional[str] = typer.Option(None, "--location", help="Location label, e.g. LOC_001."),
    latitude: Optional[float] = typer.Option(None, "--lat", help="Latitude (metadata only)."),
    longitude: Optional[float] = typer.Option(None, "--lon", help="Longitude (metadata only)."),
    dataset_path: Optional[str] = typer.Option(None, "--dataset", help="Species dataset file."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    save: bool = typer.Option(True, "--save/--no-save", help="Persist the recommendation."),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", help="Also write JSON + CSV reports to this directory."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the response as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Recommend the top tree species for one sensor reading."""
    from reforest_engine.db.repositories.recommendation_repo import RecommendationRepository
    from reforest_engine.db.schema import apply_schema
    from reforest_engine.engine.reporter import (
        write_recommendation_csv,
        write_recommendation_json,
    )
    from reforest_engine.engine.scorer import DatasetUnavailableError
    from reforest_engine.engine.service import RecommendationService
    from reforest_engine.engine.validator import SensorValidationError
    from reforest_engine.models.sensor import Coordinates, RecommendationRequest

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    provider = _load_provider_or_exit(config, dataset_path)
    coordinates = None
    if latitude is not None or longitude is not None:
        coordinates = Coordinates(latitude=latitude, longitude=longitude)

    request = RecommendationRequest(
        sensor_id=sensor_id,
        sensor_data=_build_reading(ph, moisture, temperature),
        location=location,
        coordinates=coordinates,
    )

    try:
        if save:
            with _open_db(config, db_path) as conn:
                apply_schema(conn)
                service = RecommendationService(config, provider, RecommendationRepository(conn))
                response = service.generate(request)
        else:
            response = RecommendationService(config, provider).generate(request)
    except SensorValidationError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except DatasetUnavailableError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if output_dir:
        out = Path(output_dir)
        write_recommendation_json(response, out)
        write_recommendation_csv(response, out)

    if as_json:
        typer.echo(json.dumps(response.to_payload(), indent=2))
        return

    typer.echo(
        f"Recommendation {response.recommendation_id or '(not saved)'} | "
        f"season={response.season} | confidence={response.confidence:.2f}%"
    )
    for rank, sp in enumerate(response.recommendations, start=1):
        native = "native" if sp.is_native else "non-native"
        typer.echo(
            f"  {rank}. {sp.common_name} ({sp.scientific_name}) [{native}] "
            f"confidence={sp.confidence_score * 100:.1f}% overall={sp.overall_score:.3f}"
        )
    for warning in response.warnings:
        typer.echo(f"  [WARN] {warning}")
    typer.echo("[OK] Recommendation complete.")


@app.command("list-recommendations")
def list_recommendations(
    limit: int = typer.Option(20, "--limit", help="Maximum rows to show."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """List active (not deleted) recommendations, newest first."""
    from reforest_engine.db.repositories.recommendation_repo import RecommendationRepository
    from reforest_engine.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_db(config, db_path) as conn:
        apply_schema(conn)
        rows = RecommendationRepository(conn).list_active(limit=limit)

    if not rows:
        typer.echo("No recommendations stored.")
        return

    for reco in rows:
        names = ", ".join(s.common_name for s in reco.seedlings)
        typer.echo(
            f"{reco.recommendation_id}  {reco.sensor_id}  {reco.season}  "
            f"{reco.confidence_pct:.2f}%  {reco.status}  [{names}]"
        )


@app.command("show-recommendation")
def show_recommendation(
    reco_id: str = typer.Argument(..., help="Recommendation id, e.g. reco101."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print one stored recommendation as JSON."""
    from reforest_engine.db.repositories.recommendation_repo import RecommendationRepository
    from reforest_engine.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_db(config, db_path) as conn:
        apply_schema(conn)
        reco = RecommendationRepository(conn).get(reco_id)

    if reco is None:
        typer.echo(f"[ERROR] Recommendation not found: {reco_id}", err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(reco.model_dump(by_alias=True, mode="json"), indent=2))


@app.command("delete-recommendation")
def delete_recommendation(
    reco_id: str = typer.Argument(..., help="Recommendation id, e.g. reco101."),
    deleted_by: str = typer.Option("system", "--deleted-by", help="Who is deleting it."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Soft-delete a stored recommendation."""
    from reforest_engine.db.repositories.recommendation_repo import RecommendationRepository
    from reforest_engine.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_db(config, db_path) as conn:
        apply_schema(conn)
        deleted = RecommendationRepository(conn).soft_delete(reco_id, deleted_by=deleted_by)

    if not deleted:
        typer.echo(f"[ERROR] No active recommendation with id {reco_id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[OK] Recommendation {reco_id} deleted.")


@app.command("record-reading")
def record_reading(
    sensor_id: str = typer.Option(..., "--sensor-id", help="Sensor identifier."),
    ph: Optional[float] = typer.Option(None, "--ph", help="Soil pH (0-14)."),
    moisture: Optional[float] = typer.Option(None, "--moisture", help="Soil moisture % (0-100)."),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="Soil temperature °C."),
    timestamp: Optional[str] = typer.Option(
        None, "--timestamp", help="ISO-8601 time of the reading (default: now)."
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Validate and store one sensor reading in the history."""
    from reforest_engine.db.repositories.reading_repo import SensorReadingRepository
    from reforest_engine.db.schema import apply_schema
    from reforest_engine.engine.validator import validate_sensor_data

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    reading = _build_reading(ph, moisture, temperature, timestamp)
    validation = validate_sensor_data(reading)
    if not validation.is_valid:
        typer.echo(f"[ERROR] Invalid sensor data: {', '.join(validation.errors)}", err=True)
        raise typer.Exit(code=1)

    with _open_db(config, db_path) as conn:
        apply_schema(conn)
        reading_id = SensorReadingRepository(conn).insert(sensor_id, reading)

    for warning in validation.warnings:
        typer.echo(f"  [WARN] {warning}")
    typer.echo(f"[OK] Reading {reading_id} stored for sensor {sensor_id}.")


@app.command("analyze-trends")
def analyze_trends_cmd(
    sensor_id: str = typer.Option(..., "--sensor-id", help="Sensor identifier."),
    limit: int = typer.Option(50, "--limit", help="Most recent readings to analyse."),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", help="Also write the report as JSON to this directory."
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Analyse a sensor's stored history for soil trends and alerts."""
    from reforest_engine.db.repositories.reading_repo import SensorReadingRepository
    from reforest_engine.db.schema import apply_schema
    from reforest_engine.engine.reporter import write_trend_report_json
    from reforest_engine.engine.trends import analyze_trends

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_db(config, db_path) as conn:
        apply_schema(conn)
        history = SensorReadingRepository(conn).history(sensor_id, limit=limit)

    report = analyze_trends(history, config.trends)

    if output_dir:
        write_trend_report_json(report, Path(output_dir), sensor_id)

    typer.echo(json.dumps(report.to_payload(), indent=2))


@app.command("sensor-stats")
def sensor_stats(
    sensor_id: str = typer.Option(..., "--sensor-id", help="Sensor identifier."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print summary statistics for a sensor's stored readings."""
    from reforest_engine.db.repositories.reading_repo import SensorReadingRepository
    from reforest_engine.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_db(config, db_path) as conn:
        apply_schema(conn)
        stats = SensorReadingRepository(conn).stats(sensor_id)

    typer.echo(json.dumps(stats.model_dump(by_alias=True, mode="json"), indent=2))


if __name__ == "__main__":
    app()
