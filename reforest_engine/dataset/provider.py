"""
In-process species dataset provider.

Holds the current species snapshot as an immutable tuple of frozen
``SpeciesRecord`` objects.  ``load()`` / ``replace()`` / ``clear()`` swap the
reference; a tuple already returned by ``get_dataset()`` is never mutated, so
a scoring call keeps a consistent view for its whole duration.

Satisfies the ``DatasetSource`` protocol expected by ``RecommendationService``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from reforest_engine.dataset.loader import load_species_dataset
from reforest_engine.engine.scorer import DatasetUnavailableError
from reforest_engine.models.species import SpeciesRecord
from reforest_engine.utils.time_utils import isoformat_z, utcnow

logger = logging.getLogger(__name__)


class DatasetProvider:
    """Owns the species reference dataset for the process."""

    def __init__(self, records: Optional[Iterable[SpeciesRecord]] = None) -> None:
        self._snapshot: tuple[SpeciesRecord, ...] = ()
        self._source: Optional[str] = None
        self._last_updated: Optional[datetime] = None
        if records is not None:
            self.replace(records)

    @property
    def is_loaded(self) -> bool:
        return bool(self._snapshot)

    def load(self, path: Path) -> int:
        """Load ``path`` and make it the current snapshot.

        Returns:
            Number of species loaded.

        Raises:
            FileNotFoundError / ValueError: From ``load_species_dataset()``.
                The previous snapshot is kept on failure.
        """
        records = load_species_dataset(Path(path))
        self.replace(records, source=str(path))
        return len(self._snapshot)

    def replace(self, records: Iterable[SpeciesRecord], source: str = "memory") -> None:
        """Swap in a new snapshot built from ``records``."""
        self._snapshot = tuple(records)
        self._source = source
        self._last_updated = utcnow()
        logger.info("Species dataset set: %d species from %s", len(self._snapshot), source)

    def clear(self) -> None:
        self._snapshot = ()
        self._source = None
        self._last_updated = utcnow()
        logger.info("Species dataset cleared")

    def get_dataset(self) -> tuple[SpeciesRecord, ...]:
        """Return the current snapshot.

        Raises:
            DatasetUnavailableError: If no species are loaded.
        """
        if not self._snapshot:
            raise DatasetUnavailableError(
                "No species dataset loaded. Load a dataset before requesting recommendations."
            )
        return self._snapshot

    def info(self) -> dict[str, Any]:
        """Summary of the current snapshot."""
        return {
            "loaded": self.is_loaded,
            "size": len(self._snapshot),
            "source": self._source,
            "lastUpdated": isoformat_z(self._last_updated) if self._last_updated else None,
        }
