"""
Season resolution.

Calendar months map to a season label:

    11, 12, 1, 2, 3, 4, 5  -> dry
    6, 7, 8, 9, 10         -> wet

The factor table also defines ``moderate`` (all ×1.0), but no month resolves
to it under the current rule.  It is kept so a future mapping can use it
without a config change.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from reforest_engine.config import SeasonConfig
from reforest_engine.models.season import SeasonalFactors
from reforest_engine.taxonomy.engine_taxonomy import Season
from reforest_engine.utils.time_utils import utcnow

_DRY_MONTHS = frozenset({11, 12, 1, 2, 3, 4, 5})


def season_for_month(month: int) -> Season:
    """Map a calendar month (1–12) to its season."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in [1, 12], got {month}.")
    return Season.DRY if month in _DRY_MONTHS else Season.WET


def current_season(on_date: Optional[date | datetime] = None) -> Season:
    """Return the season for ``on_date`` (defaults to today, UTC)."""
    if on_date is None:
        on_date = utcnow()
    return season_for_month(on_date.month)


def seasonal_factors(season: Season | str, table: SeasonConfig) -> SeasonalFactors:
    """Look up the factor set for ``season`` in ``table``.

    Raises:
        ValueError: If ``season`` is not a known season label.
    """
    label = Season(season)
    return getattr(table, label.value)
