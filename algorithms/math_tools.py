import math
from typing import Iterable, Sequence

import numpy as np


class MathTools:
    """Provides the numeric helpers shared by the scoring and plan services."""

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round ``value`` to the nearest integer, halves away from zero."""
        if value < 0:
            return -math.floor(-value + 0.5)
        return math.floor(value + 0.5)

    @staticmethod
    def normalize(
        value: float, low: float, high: float, invert: bool = False
    ) -> float:
        """Map ``value`` on the scale [low, high] to [0, 1]."""
        if high <= low:
            raise ValueError("high must exceed low")
        frac = (MathTools.clamp(value, low, high) - low) / (high - low)
        return 1.0 - frac if invert else frac

    @staticmethod
    def largest_remainder(quotas: Sequence[float], total: int) -> list[int]:
        """Round real ``quotas`` to integers summing exactly to ``total``.

        Every value is floored, then the units still missing go to the
        entries with the largest fractional parts (ties to the earlier
        entry). When the quotas are too far from ``total`` for that to
        work the quotas are rescaled first.
        """
        if not quotas:
            if total != 0:
                raise ValueError("cannot distribute a non-zero total over nothing")
            return []
        floors = [math.floor(q) for q in quotas]
        leftover = total - sum(floors)
        positive = [i for i, q in enumerate(quotas) if q - floors[i] > 0]
        if leftover < 0 or leftover > max(len(positive), 0):
            return MathTools.apportion(quotas, total)
        order = sorted(positive, key=lambda i: (-(quotas[i] - floors[i]), i))
        for i in order[:leftover]:
            floors[i] += 1
        return floors

    @staticmethod
    def apportion(
        weights: Sequence[float], total: int, minimum: int = 0
    ) -> list[int]:
        """Split ``total`` proportionally to ``weights``.

        Each slot receives at least ``minimum``; the rest is shared out by
        the largest-remainder method, so the result always sums to ``total``.
        """
        count = len(weights)
        if count == 0:
            if total != 0:
                raise ValueError("cannot distribute a non-zero total over nothing")
            return []
        if total < minimum * count:
            raise ValueError("total too small for the requested minimum")
        if any(w < 0 for w in weights):
            raise ValueError("weights must be non-negative")
        remaining = total - minimum * count
        weight_sum = float(sum(weights))
        if weight_sum <= 0:
            weights = [1.0] * count
            weight_sum = float(count)
        quotas = [w / weight_sum * remaining for w in weights]
        floors = [math.floor(q) for q in quotas]
        leftover = remaining - sum(floors)
        order = sorted(range(count), key=lambda i: (-(quotas[i] - floors[i]), i))
        for i in order[:leftover]:
            floors[i] += 1
        return [f + minimum for f in floors]

    @staticmethod
    def slope(xs: Iterable[float], ys: Iterable[float]) -> float:
        """Return the least-squares slope of ``ys`` against ``xs``."""
        x = np.asarray(list(xs), dtype=float)
        y = np.asarray(list(ys), dtype=float)
        if len(x) != len(y):
            raise ValueError("xs and ys must have the same length")
        if len(x) < 2:
            raise ValueError("at least two points required")
        if np.ptp(x) == 0:
            return 0.0
        m, _ = np.polyfit(x, y, 1)
        return float(m)
