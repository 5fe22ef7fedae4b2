"""
Species reference models.

``SpeciesRecord`` is one entry of the species reference dataset: the soil
conditions a tree species tolerates plus its historical planting performance.
Records are immutable and owned by the dataset provider; the engine only
reads them.

``ScoredSpecies`` is a ``SpeciesRecord`` extended with the per-attribute
compatibility scores and the combined confidence/overall scores computed for
one sensor reading.  A fresh set is created per scoring call.

Serialised (``by_alias=True``) field names follow the caller-facing shape,
e.g. ``scientificName``, ``pHMin``, ``moistureCompatibility``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_RANGE_PAIRS: tuple[tuple[str, str], ...] = (
    ("ph_min", "ph_max"),
    ("moisture_min", "moisture_max"),
    ("temp_min", "temp_max"),
)


class SpeciesRecord(BaseModel):
    """Tolerance ranges and performance history for one tree species.

    Attributes:
        species_id:          Dataset-assigned identifier, e.g. ``"seed_001"``.
        scientific_name:     Binomial name.
        common_name:         Local/common name.
        ph_min, ph_max:      Tolerated soil pH band.
        moisture_min, moisture_max: Tolerated soil moisture band (%).
        temp_min, temp_max:  Tolerated soil temperature band (°C).
        success_rate:        Historical planting success, 0–100.
        adaptability_score:  Adaptability rating, 0–100.
        is_native:           Whether the species is native to the region.
        category:            Free-form grouping label.
        pref_ph, pref_moisture, pref_temp: Preferred (midpoint) values when
            the dataset supplied them.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    species_id: Optional[str] = None
    scientific_name: str
    common_name: str

    ph_min: float = Field(alias="pHMin")
    ph_max: float = Field(alias="pHMax")
    moisture_min: float
    moisture_max: float
    temp_min: float
    temp_max: float

    success_rate: float
    adaptability_score: float
    is_native: bool = False
    category: str

    soil_type: Optional[str] = None
    growth_rate: Optional[str] = None
    uses: Optional[str] = None
    climate_suitability: Optional[str] = None
    pref_ph: Optional[float] = Field(default=None, alias="prefpH")
    pref_moisture: Optional[float] = None
    pref_temp: Optional[float] = None

    @field_validator("success_rate", "adaptability_score")
    @classmethod
    def validate_percentage(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"Percentage fields must be in [0, 100], got {v}.")
        return v

    @field_validator("scientific_name", "common_name")
    @classmethod
    def validate_name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Species names must not be empty.")
        return v.strip()

    @model_validator(mode="after")
    def validate_ranges(self) -> "SpeciesRecord":
        for lo_name, hi_name in _RANGE_PAIRS:
            lo, hi = getattr(self, lo_name), getattr(self, hi_name)
            if lo > hi:
                raise ValueError(f"{lo_name} ({lo}) must be <= {hi_name} ({hi}).")
        return self


class ScoredSpecies(SpeciesRecord):
    """A species with its compatibility scores for one sensor reading.

    Attributes:
        ph_compatibility:       pH fit, 0–1.
        moisture_compatibility: Moisture fit, 0–1.
        temp_compatibility:     Temperature fit, 0–1.
        confidence_score:       Weighted fit incl. native bonus, 0.05–1.
        overall_score:          Confidence blended with historical metrics, 0–1.
        native_bonus:           Bonus added to confidence (0 for non-native).
    """

    ph_compatibility: float = Field(alias="pHCompatibility")
    moisture_compatibility: float
    temp_compatibility: float
    confidence_score: float
    overall_score: float
    native_bonus: float = 0.0

    @classmethod
    def from_species(cls, species: SpeciesRecord, **scores: float) -> "ScoredSpecies":
        """Copy ``species`` and attach computed ``scores`` (field names)."""
        return cls(**species.model_dump(), **scores)
