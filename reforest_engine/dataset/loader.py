"""
Species dataset loader: spreadsheet / JSON files -> ``SpeciesRecord`` list.

Supported files
---------------
  .csv          comma-delimited with a header row
  .xlsx / .xls  first sheet, read with pandas (openpyxl engine for .xlsx)
  .json         list of objects (or ``{"species": [...]}``)

Spreadsheet columns (first matching header wins)
------------------------------------------------
  moisture     Soil Moisture | Moisture | Preferred Moisture    e.g. "40-60%"
  pH           pH Range | pH | Preferred pH                     e.g. "5.5–6.5"
  temperature  Temperature | Preferred Temperature | Temp       e.g. "22-32°C"
  names        Common Name | common_name, Scientific Name | scientific_name
  native       Native | Is Native       true/yes/y/1/native -> True
  history      Success Rate (%) | Success Rate | success_rate,
               Adaptability Score | adaptability_score
  descriptive  Category, Soil Type, Growth Rate, Uses, Climate Suitability

A range column gives a preferred value (its midpoint); the stored tolerance
band is that midpoint ± a per-attribute tolerance:

    moisture     max(5,   pref * 0.20)   clamped to [0, 100]
    temperature  max(2,   pref * 0.15)
    pH           max(0.5, pref * 0.10)   clamped to [0, 14]

Rows with a missing name or an unparsable range are skipped with a WARNING;
one bad row never fails the whole file.

JSON objects already in ``SpeciesRecord`` shape (``pHMin``, ``moistureMin``
...) are validated directly instead of going through the column mapping.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from pydantic import ValidationError

from reforest_engine.models.species import SpeciesRecord

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = frozenset({".csv", ".json", ".xlsx", ".xls"})

MOISTURE_COLUMNS = ("Soil Moisture", "Moisture", "Preferred Moisture")
PH_COLUMNS = ("pH Range", "pH", "Preferred pH")
TEMPERATURE_COLUMNS = ("Temperature", "Preferred Temperature", "Temp")

NATIVE_TOKENS = frozenset({"true", "yes", "y", "1", "native"})

# (native, non-native) defaults when the dataset has no history columns
DEFAULT_SUCCESS_RATE = (85.0, 75.0)
DEFAULT_ADAPTABILITY = (90.0, 80.0)

# Keys that mark a JSON object as already being in SpeciesRecord shape
_RECORD_SHAPE_KEYS = frozenset({"pHMin", "ph_min", "moistureMin", "moisture_min"})

_DASHES = str.maketrans({"–": "-", "—": "-", "−": "-"})


def parse_range(text: Any) -> Optional[tuple[float, float]]:
    """Parse a range cell such as ``"22–32°C"`` or ``"40-60%"``.

    Args:
        text: Cell value; non-strings are converted with ``str()``.

    Returns:
        ``(min, max)`` with ``min <= max``; a single number gives ``(v, v)``.
        ``None`` for empty, ``N/A`` or unparsable input.
    """
    if text is None or (isinstance(text, float) and math.isnan(text)):
        return None

    cleaned = str(text).strip()
    if not cleaned or cleaned.upper() == "N/A":
        return None

    cleaned = (
        cleaned.replace("°C", "").replace("°c", "").replace("%", "").translate(_DASHES)
    )
    cleaned = "".join(cleaned.split())

    if "-" not in cleaned:
        value = _to_float(cleaned)
        return None if value is None else (value, value)

    parts = [p for p in cleaned.split("-") if p]
    if len(parts) != 2:
        return None
    lo, hi = _to_float(parts[0]), _to_float(parts[1])
    if lo is None or hi is None:
        return None
    return min(lo, hi), max(lo, hi)


def row_to_species(row: Mapping[str, Any], index: int = 0) -> Optional[SpeciesRecord]:
    """Convert one spreadsheet row into a ``SpeciesRecord``.

    Args:
        row:   Column header -> cell value.
        index: 0-based data row index; used for the ``seed_NNN`` id and logs.

    Returns:
        The record, or ``None`` if the row was skipped.
    """
    line_no = index + 2  # 1-based, skip header row

    moisture = parse_range(_first(row, MOISTURE_COLUMNS))
    ph = parse_range(_first(row, PH_COLUMNS))
    temp = parse_range(_first(row, TEMPERATURE_COLUMNS))
    if moisture is None or ph is None or temp is None:
        logger.warning("Row %d: invalid range data, skipped", line_no)
        return None

    common_name = _first(row, ("Common Name", "common_name"))
    scientific_name = _first(row, ("Scientific Name", "scientific_name"))
    if not common_name or not scientific_name:
        logger.warning("Row %d: missing species name, skipped", line_no)
        return None

    pref_moisture = sum(moisture) / 2
    pref_temp = sum(temp) / 2
    pref_ph = sum(ph) / 2

    moisture_tol = max(5.0, pref_moisture * 0.2)
    temp_tol = max(2.0, pref_temp * 0.15)
    ph_tol = max(0.5, pref_ph * 0.1)

    native_cell = _first(row, ("Native", "Is Native")) or ""
    is_native = native_cell.lower() in NATIVE_TOKENS
    pick = 0 if is_native else 1

    success_rate = _to_float(_first(row, ("Success Rate (%)", "Success Rate", "success_rate")))
    adaptability = _to_float(_first(row, ("Adaptability Score", "adaptability_score")))

    try:
        return SpeciesRecord(
            species_id=f"seed_{index + 1:03d}",
            common_name=common_name,
            scientific_name=scientific_name,
            moisture_min=max(0.0, pref_moisture - moisture_tol),
            moisture_max=min(100.0, pref_moisture + moisture_tol),
            ph_min=max(0.0, pref_ph - ph_tol),
            ph_max=min(14.0, pref_ph + ph_tol),
            temp_min=pref_temp - temp_tol,
            temp_max=pref_temp + temp_tol,
            pref_moisture=round(pref_moisture, 1),
            pref_temp=round(pref_temp, 1),
            pref_ph=round(pref_ph, 1),
            success_rate=success_rate if success_rate else DEFAULT_SUCCESS_RATE[pick],
            adaptability_score=adaptability if adaptability else DEFAULT_ADAPTABILITY[pick],
            is_native=is_native,
            category=_first(row, ("Category", "category")) or ("native" if is_native else "non-native"),
            soil_type=_first(row, ("Soil Type", "soil_type")),
            growth_rate=_first(row, ("Growth Rate", "growth_rate")),
            uses=_first(row, ("Uses", "uses")),
            climate_suitability=_first(row, ("Climate Suitability", "climate_suitability")),
        )
    except ValidationError as exc:
        logger.warning("Row %d: %s, skipped", line_no, exc.errors()[0]["msg"])
        return None


def load_species_dataset(path: Path) -> list[SpeciesRecord]:
    """Load and parse a species dataset file.

    Args:
        path: ``.csv``, ``.json``, ``.xlsx`` or ``.xls`` file.

    Returns:
        Parsed records in file order (skipped rows omitted).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the suffix is unsupported or the file has no usable
            structure (e.g. a JSON document that is not a list).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Species dataset not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported dataset format '{suffix}'. "
            f"Expected one of: {sorted(SUPPORTED_SUFFIXES)}"
        )

    if suffix == ".csv":
        rows = _read_csv_rows(path)
    elif suffix == ".json":
        rows = _read_json_rows(path)
    else:
        rows = _read_excel_rows(path)

    records: list[SpeciesRecord] = []
    for index, row in enumerate(rows):
        record = _row_to_record(row, index)
        if record is not None:
            records.append(record)

    logger.info(
        "Parsed %d valid tree species from %d rows in %s", len(records), len(rows), path.name
    )
    return records


# ── Private helpers ────────────────────────────────────────────────────────────

def _read_csv_rows(path: Path) -> list[dict[str, str]]:
    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")
        return list(reader)


def _read_excel_rows(path: Path) -> list[dict[str, Any]]:
    frame = pd.read_excel(path, dtype=str, keep_default_na=False)
    return frame.to_dict(orient="records")


def _read_json_rows(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("species")
    if not isinstance(data, list):
        raise ValueError(
            f"JSON dataset must be a list of objects or {{'species': [...]}}: {path}"
        )
    return [row for row in data if isinstance(row, dict)]


def _row_to_record(row: Mapping[str, Any], index: int) -> Optional[SpeciesRecord]:
    if _RECORD_SHAPE_KEYS.intersection(row):
        try:
            record = SpeciesRecord.model_validate(row)
        except ValidationError as exc:
            logger.warning("Row %d: %s, skipped", index + 2, exc.errors()[0]["msg"])
            return None
        if record.species_id is None:
            record = record.model_copy(update={"species_id": f"seed_{index + 1:03d}"})
        return record
    return row_to_species(row, index)


def _first(row: Mapping[str, Any], keys: tuple[str, ...]) -> Optional[str]:
    """Return the first non-empty cell among ``keys`` as a stripped string."""
    for key in keys:
        value = row.get(key)
        if value is None or (isinstance(value, float) and math.isnan(value)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
