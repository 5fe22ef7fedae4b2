"""
Report writers: JSON and CSV output for recommendations and trend reports.

All functions are pure I/O, with no DB access.  They consume in-memory
response/report models and write human-readable + machine-readable files.

Output files
------------
  data/outputs/recommendations/
    recommendation_{id}.json   -- full caller-facing response
    recommendation_{id}.csv    -- one row per ranked species

  data/outputs/trends/
    trends_{sensor_id}_{date}.json

``{id}`` is the recommendation identifier when the response was persisted,
otherwise the generation timestamp (``YYYYMMDDTHHMMSS``).
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path

from reforest_engine.models.recommendation import RecommendationResponse
from reforest_engine.models.trend import TrendReport

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1.0.0"


def write_recommendation_json(response: RecommendationResponse, output_dir: Path) -> Path:
    """Write a recommendation response to a structured JSON file.

    Args:
        response:   Output of ``RecommendationService.generate()``.
        output_dir: Directory to write the file (created if missing).

    Returns:
        Path to the written JSON file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"recommendation_{_file_label(response)}.json"

    payload = {"schemaVersion": SCHEMA_VERSION, **response.to_payload()}
    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendation JSON written: %s", json_path)
    return json_path


def write_recommendation_csv(response: RecommendationResponse, output_dir: Path) -> Path:
    """Write the ranked species of a response to a CSV file.

    Columns: rank, scientific_name, common_name, category, is_native,
             ph_compatibility, moisture_compatibility, temp_compatibility,
             confidence_pct, overall_score, success_rate, adaptability_score,
             season.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / f"recommendation_{_file_label(response)}.csv"

    fieldnames = [
        "rank", "scientific_name", "common_name", "category", "is_native",
        "ph_compatibility", "moisture_compatibility", "temp_compatibility",
        "confidence_pct", "overall_score", "success_rate", "adaptability_score",
        "season",
    ]

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for rank, sp in enumerate(response.recommendations, start=1):
            writer.writerow(
                {
                    "rank":                   rank,
                    "scientific_name":        sp.scientific_name,
                    "common_name":            sp.common_name,
                    "category":               sp.category,
                    "is_native":              sp.is_native,
                    "ph_compatibility":       round(sp.ph_compatibility, 4),
                    "moisture_compatibility": round(sp.moisture_compatibility, 4),
                    "temp_compatibility":     round(sp.temp_compatibility, 4),
                    "confidence_pct":         round(sp.confidence_score * 100.0, 2),
                    "overall_score":          round(sp.overall_score, 4),
                    "success_rate":           sp.success_rate,
                    "adaptability_score":     sp.adaptability_score,
                    "season":                 str(response.season),
                }
            )

    logger.info(
        "Recommendation CSV written: %s (%d rows)", csv_path, len(response.recommendations)
    )
    return csv_path


def write_trend_report_json(
    report: TrendReport,
    output_dir: Path,
    sensor_id: str,
    run_date: date | None = None,
) -> Path:
    """Write a trend report to JSON.

    Args:
        report:     Output of ``analyze_trends()``.
        output_dir: Target directory.
        sensor_id:  Used in filename + metadata.
        run_date:   Date label. Defaults to today.

    Returns:
        Path to the written JSON file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"trends_{sensor_id}_{run_date}.json"

    payload = {
        "schemaVersion": SCHEMA_VERSION,
        "sensorId":      sensor_id,
        "generatedAt":   run_date.isoformat(),
        **report.to_payload(),
    }
    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Trend report JSON written: %s", json_path)
    return json_path


def _file_label(response: RecommendationResponse) -> str:
    if response.recommendation_id:
        return response.recommendation_id
    return response.generated_at.strftime("%Y%m%dT%H%M%S")
