"""
Species ranker: orders ``ScoredSpecies`` by a cascading tie-break policy and
selects the top-N.

Comparator chain (first step that decides wins)
-----------------------------------------------
    1. overall_score     descending, differences <= 0.05 are a tie
    2. is_native         native before non-native
    3. confidence_score  descending, differences <= 0.03 are a tie
    4. success_rate      descending

Each step is a small comparison object with a ``compare(a, b) -> int``
method, so every level of the policy can be tested on its own and the chain
reads top to bottom exactly as listed above.

Determinism
-----------
Tolerance bands make the comparator non-transitive (A ~ B and B ~ C does not
imply A ~ C), so the outcome of a comparison sort would otherwise depend on
input order.  ``rank_species()`` first puts the input into a canonical order
with a stable sort on the exact keys; species identical on all four keys keep
their original dataset order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Protocol

from reforest_engine.config import RankingConfig
from reforest_engine.models.species import ScoredSpecies

# Absorbs float noise at the tolerance boundary (0.75 - 0.70 > 0.05 in IEEE).
_EPSILON = 1e-9

ScoreKey = Callable[[ScoredSpecies], float]


class ComparisonStep(Protocol):
    name: str

    def compare(self, a: ScoredSpecies, b: ScoredSpecies) -> int:
        """Negative if ``a`` ranks first, positive if ``b`` does, 0 to defer."""
        ...


@dataclass(frozen=True)
class ToleranceDescending:
    """Higher value first, unless the values are within ``tolerance``."""

    name: str
    key: ScoreKey
    tolerance: float

    def compare(self, a: ScoredSpecies, b: ScoredSpecies) -> int:
        diff = self.key(b) - self.key(a)
        if abs(diff) <= self.tolerance + _EPSILON:
            return 0
        return 1 if diff > 0 else -1


@dataclass(frozen=True)
class PreferTrue:
    """Candidates whose flag is set rank first."""

    name: str
    key: Callable[[ScoredSpecies], bool]

    def compare(self, a: ScoredSpecies, b: ScoredSpecies) -> int:
        flag_a, flag_b = bool(self.key(a)), bool(self.key(b))
        if flag_a == flag_b:
            return 0
        return -1 if flag_a else 1


@dataclass(frozen=True)
class Descending:
    """Higher value first; exact comparison."""

    name: str
    key: ScoreKey

    def compare(self, a: ScoredSpecies, b: ScoredSpecies) -> int:
        va, vb = self.key(a), self.key(b)
        if va == vb:
            return 0
        return -1 if va > vb else 1


def build_comparator_chain(config: RankingConfig | None = None) -> tuple[ComparisonStep, ...]:
    """Return the ordered tie-break chain for ``config``'s tolerance bands."""
    config = config or RankingConfig()
    return (
        ToleranceDescending("overall_score", lambda s: s.overall_score, config.overall_tolerance),
        PreferTrue("is_native", lambda s: s.is_native),
        ToleranceDescending(
            "confidence_score", lambda s: s.confidence_score, config.confidence_tolerance
        ),
        Descending("success_rate", lambda s: s.success_rate),
    )


DEFAULT_CHAIN = build_comparator_chain()


def compare_scored(
    a: ScoredSpecies,
    b: ScoredSpecies,
    chain: Sequence[ComparisonStep] = DEFAULT_CHAIN,
) -> int:
    """Fold ``chain`` over ``(a, b)``; the first non-zero step decides."""
    for step in chain:
        result = step.compare(a, b)
        if result != 0:
            return result
    return 0


def rank_species(
    scored: Sequence[ScoredSpecies],
    config: RankingConfig | None = None,
) -> list[ScoredSpecies]:
    """Order scored species best-first.

    Args:
        scored: Output of ``score_species()`` (any order).
        config: Tolerance bands; defaults to ``RankingConfig()``.

    Returns:
        New list, best candidate first.  The input is not modified.
    """
    chain = build_comparator_chain(config)
    canonical = sorted(
        scored,
        key=lambda s: (-s.overall_score, not s.is_native, -s.confidence_score, -s.success_rate),
    )
    return sorted(canonical, key=cmp_to_key(lambda a, b: compare_scored(a, b, chain)))


def top_n(ranked: Sequence[ScoredSpecies], n: int = 3) -> list[ScoredSpecies]:
    """Return the first ``n`` ranked species (fewer if the list is shorter)."""
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}.")
    return list(ranked[:n])
