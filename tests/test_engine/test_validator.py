"""
Tests for reforest_engine/engine/validator.py.

What we test
------------
validate_sensor_data():
  - A reading inside every optimal band -> valid, no warnings.
  - Missing / None / NaN / non-numeric values -> "<field> is missing or invalid".
  - Values outside the hard domain -> error with the valid range in the message.
  - Values inside the domain but outside the optimal band -> warning only.
  - Accepts SensorReading objects and raw mappings with ``pH`` / ``soil_moisture``.
  - None / empty mapping -> three errors, never raises.

coerce_number():
  - Numeric strings are accepted; booleans and non-finite values are not.

SensorValidationError:
  - Message joins errors with ", "; ``errors`` keeps the list.
"""

from __future__ import annotations

import math

import pytest

from reforest_engine.engine.validator import (
    SensorValidationError,
    coerce_number,
    validate_sensor_data,
)
from reforest_engine.models.sensor import SensorReading


def _reading(**overrides) -> dict:
    base = {"ph": 6.5, "soilMoisture": 50, "temperature": 27}
    base.update(overrides)
    return base


class TestOptimalReadings:
    def test_optimal_reading_is_valid_without_warnings(self):
        result = validate_sensor_data(_reading())
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []
        assert not result.has_warnings

    def test_band_edges_are_optimal(self):
        for reading in (
            _reading(ph=6.0, soilMoisture=30, temperature=20),
            _reading(ph=8.0, soilMoisture=70, temperature=35),
        ):
            result = validate_sensor_data(reading)
            assert result.is_valid
            assert result.warnings == []

    def test_accepts_sensor_reading_model(self, optimal_reading):
        result = validate_sensor_data(optimal_reading)
        assert result.is_valid
        assert not result.has_warnings


class TestMissingValues:
    @pytest.mark.parametrize("field", ["ph", "soilMoisture", "temperature"])
    def test_none_is_error(self, field):
        result = validate_sensor_data(_reading(**{field: None}))
        assert not result.is_valid
        assert f"{field} is missing or invalid" in result.errors

    @pytest.mark.parametrize("field", ["ph", "soilMoisture", "temperature"])
    def test_nan_is_error(self, field):
        result = validate_sensor_data(_reading(**{field: math.nan}))
        assert f"{field} is missing or invalid" in result.errors

    def test_absent_key_is_error(self):
        reading = _reading()
        del reading["temperature"]
        result = validate_sensor_data(reading)
        assert result.errors == ["temperature is missing or invalid"]

    def test_non_numeric_string_is_error(self):
        result = validate_sensor_data(_reading(ph="acidic"))
        assert result.errors == ["ph is missing or invalid"]

    def test_none_input_reports_every_field(self):
        result = validate_sensor_data(None)
        assert len(result.errors) == 3
        assert not result.is_valid

    def test_empty_mapping_reports_every_field(self):
        assert len(validate_sensor_data({}).errors) == 3

    def test_model_with_missing_value(self):
        result = validate_sensor_data(SensorReading(ph=6.5, soil_moisture=50))
        assert result.errors == ["temperature is missing or invalid"]


class TestDomainRanges:
    def test_ph_above_domain(self):
        result = validate_sensor_data(_reading(ph=15))
        assert result.errors == ["ph (15) is outside valid range (0-14)"]

    def test_moisture_below_domain(self):
        result = validate_sensor_data(_reading(soilMoisture=-1))
        assert result.errors == ["soilMoisture (-1) is outside valid range (0-100)"]

    def test_temperature_above_domain(self):
        result = validate_sensor_data(_reading(temperature=61.5))
        assert result.errors == ["temperature (61.5) is outside valid range (-10-60)"]

    def test_domain_error_produces_no_warning_for_same_field(self):
        result = validate_sensor_data(_reading(ph=15))
        assert result.warnings == []


class TestOptimalBandWarnings:
    def test_low_ph_warns(self):
        result = validate_sensor_data(_reading(ph=5.5))
        assert result.is_valid
        assert result.warnings == ["ph (5.5) is outside optimal range (6-8)"]

    def test_dry_soil_warns(self):
        result = validate_sensor_data(_reading(soilMoisture=20))
        assert result.warnings == ["soilMoisture (20) is outside optimal range (30-70)"]

    def test_hot_soil_warns(self):
        result = validate_sensor_data(_reading(temperature=40))
        assert result.warnings == ["temperature (40) is outside optimal range (20-35)"]

    def test_errors_and_warnings_in_field_order(self):
        result = validate_sensor_data({"ph": 5.0, "soilMoisture": 150, "temperature": 10})
        assert result.errors == ["soilMoisture (150) is outside valid range (0-100)"]
        assert [w.split(" ")[0] for w in result.warnings] == ["ph", "temperature"]


class TestAliases:
    def test_capitalised_ph_key(self):
        result = validate_sensor_data({"pH": 6.5, "soilMoisture": 50, "temperature": 27})
        assert result.is_valid

    def test_snake_case_moisture_key(self):
        result = validate_sensor_data({"ph": 6.5, "soil_moisture": 50, "temperature": 27})
        assert result.is_valid

    def test_numeric_strings_accepted(self):
        result = validate_sensor_data({"ph": "6.5", "soilMoisture": " 50 ", "temperature": "27"})
        assert result.is_valid


class TestCoerceNumber:
    def test_int_and_float(self):
        assert coerce_number(7) == 7.0
        assert coerce_number(6.5) == 6.5

    def test_bool_rejected(self):
        assert coerce_number(True) is None

    def test_infinity_rejected(self):
        assert coerce_number(math.inf) is None
        assert coerce_number("inf") is None

    def test_other_types_rejected(self):
        assert coerce_number([6.5]) is None


class TestResultAndError:
    def test_to_dict_shape(self):
        payload = validate_sensor_data(_reading(ph=5.5)).to_dict()
        assert payload == {
            "isValid": True,
            "errors": [],
            "warnings": ["ph (5.5) is outside optimal range (6-8)"],
            "hasWarnings": True,
        }

    def test_validation_error_message(self):
        exc = SensorValidationError(["ph is missing or invalid", "temperature is missing or invalid"])
        assert str(exc) == (
            "Invalid sensor data: ph is missing or invalid, temperature is missing or invalid"
        )
        assert exc.errors == ["ph is missing or invalid", "temperature is missing or invalid"]
        assert isinstance(exc, ValueError)
