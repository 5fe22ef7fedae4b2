"""
Seasonal adjustment factors.

A ``SeasonalFactors`` record holds one positive multiplier per sensor
attribute.  Values above 1.0 widen the compatibility tolerance for that
attribute (the scorer is more forgiving of out-of-range readings); values
below 1.0 narrow it.

Exactly one factor set is active per ``Season`` label.  The table itself
lives in ``SeasonConfig`` (see ``reforest_engine.config``) so it can be
injected into the scorer rather than read from a module global.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class SeasonalFactors(BaseModel):
    """Per-attribute tolerance multipliers for one season.

    Attributes:
        moisture:    Multiplier applied to the soil-moisture tolerance band.
        temperature: Multiplier applied to the temperature tolerance band.
        ph:          Multiplier applied to the pH tolerance band.
    """

    model_config = ConfigDict(frozen=True)

    moisture: float = 1.0
    temperature: float = 1.0
    ph: float = 1.0

    @field_validator("moisture", "temperature", "ph")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if not v > 0.0:
            raise ValueError(f"Seasonal multipliers must be > 0, got {v}.")
        return v
