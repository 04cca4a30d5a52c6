from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Tier:
    """One band of a 0-100 score."""

    min_score: int
    key: str
    label: str
    color_token: str
    recommendation: str


class TierTable:
    """Ordered threshold table mapping a score to exactly one tier.

    Thresholds are checked in descending order; the lowest threshold must be
    0 so every score in ``[0, 100]`` is covered.
    """

    def __init__(self, tiers: Iterable[Tier]) -> None:
        ordered = sorted(tiers, key=lambda t: t.min_score, reverse=True)
        if not ordered:
            raise ValueError("tier table must not be empty")
        thresholds = [t.min_score for t in ordered]
        if len(set(thresholds)) != len(thresholds):
            raise ValueError("tier thresholds must be unique")
        if any(th < 0 or th > 100 for th in thresholds):
            raise ValueError("tier thresholds must lie within [0, 100]")
        if thresholds[-1] != 0:
            raise ValueError("lowest tier threshold must be 0")
        keys = [t.key for t in ordered]
        if len(set(keys)) != len(keys):
            raise ValueError("tier keys must be unique")
        self._tiers: tuple[Tier, ...] = tuple(ordered)

    @property
    def tiers(self) -> tuple[Tier, ...]:
        return self._tiers

    def lookup(self, score: float) -> Tier:
        """Return the tier whose band contains ``score``."""
        for tier in self._tiers:
            if score >= tier.min_score:
                return tier
        return self._tiers[-1]

    def get(self, key: str) -> Tier:
        for tier in self._tiers:
            if tier.key == key:
                return tier
        raise KeyError(key)

    def __iter__(self):
        return iter(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)
