"""
Sensor reading validation.

Each of ``ph``, ``soilMoisture`` and ``temperature`` is checked in two tiers:

    hard domain range  -> error   (reading rejected)
        ph           0 – 14
        soilMoisture 0 – 100
        temperature  -10 – 60

    optimal band       -> warning (reading still usable)
        ph           6.0 – 8.0
        soilMoisture 30 – 70
        temperature  20 – 35

A missing or non-finite value is an error.  ``validate_sensor_data()`` is
pure and total: it returns a ``ValidationResult`` for any input, including
``None`` or an empty mapping, and never raises.  Rejecting a request is the
caller's decision (see ``SensorValidationError``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from reforest_engine.models.sensor import SensorReading, coerce_number


@dataclass(frozen=True)
class FieldRule:
    """Domain range and optimal band for one measured field."""

    name: str
    minimum: float
    maximum: float
    optimal_low: float
    optimal_high: float
    aliases: tuple[str, ...] = ()


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule("ph", 0.0, 14.0, 6.0, 8.0, aliases=("pH",)),
    FieldRule("soilMoisture", 0.0, 100.0, 30.0, 70.0, aliases=("soil_moisture",)),
    FieldRule("temperature", -10.0, 60.0, 20.0, 35.0),
)


class SensorValidationError(ValueError):
    """Raised when a request's sensor reading fails validation.

    Attributes:
        errors: The validator's error messages.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"Invalid sensor data: {', '.join(self.errors)}")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one reading.

    Attributes:
        errors:   Hard failures; any error makes the reading unusable.
        warnings: Soft findings (outside optimal band); never block processing.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "hasWarnings": self.has_warnings,
        }


def validate_sensor_data(
    reading: SensorReading | Mapping[str, Any] | None,
) -> ValidationResult:
    """Validate a reading against domain ranges and optimal bands.

    Args:
        reading: A ``SensorReading``, a raw mapping (``ph``/``pH``,
                 ``soilMoisture``/``soil_moisture``, ``temperature``), or
                 ``None``.

    Returns:
        ValidationResult with errors and warnings in field order.
    """
    values = _extract_values(reading)
    errors: list[str] = []
    warnings: list[str] = []

    for rule in FIELD_RULES:
        value = coerce_number(values.get(rule.name))

        if value is None:
            errors.append(f"{rule.name} is missing or invalid")
            continue

        if value < rule.minimum or value > rule.maximum:
            errors.append(
                f"{rule.name} ({_fmt(value)}) is outside valid range "
                f"({_fmt(rule.minimum)}-{_fmt(rule.maximum)})"
            )
        elif value < rule.optimal_low or value > rule.optimal_high:
            warnings.append(
                f"{rule.name} ({_fmt(value)}) is outside optimal range "
                f"({_fmt(rule.optimal_low)}-{_fmt(rule.optimal_high)})"
            )

    return ValidationResult(errors=errors, warnings=warnings)

# ── Helpers ───────────────────────────────────────────────────────────────────

def _extract_values(reading: SensorReading | Mapping[str, Any] | None) -> dict[str, Any]:
    if reading is None:
        return {}
    if isinstance(reading, SensorReading):
        return reading.measurements()
    if not isinstance(reading, Mapping):
        return {}

    values: dict[str, Any] = {}
    for rule in FIELD_RULES:
        for key in (rule.name, *rule.aliases):
            if key in reading:
                values[rule.name] = reading[key]
                break
    return values


def _fmt(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)
