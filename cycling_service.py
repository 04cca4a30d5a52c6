from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field
from typing import Mapping

from loguru import logger

from algorithms import MathTools, Tier, TierTable

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fat": 9}


class UnknownPatternError(KeyError):
    """Raised when a cycling pattern key is not in the catalog."""


@dataclass(frozen=True)
class MacroSplit:
    protein: int
    carbs: int
    fat: int

    def __post_init__(self) -> None:
        if self.protein + self.carbs + self.fat != 100:
            raise ValueError("macro split must sum to 100")

    def grams(self, calories: int) -> dict[str, int]:
        return {
            name: MathTools.round_half_up(calories * pct / 100 / KCAL_PER_GRAM[name])
            for name, pct in (
                ("protein", self.protein),
                ("carbs", self.carbs),
                ("fat", self.fat),
            )
        }

    def to_dict(self) -> dict:
        return {"protein": self.protein, "carbs": self.carbs, "fat": self.fat}


@dataclass(frozen=True)
class DayType:
    calorie_multiplier: float
    macro_split: MacroSplit


@dataclass(frozen=True)
class CyclingPattern:
    key: str
    label: str
    description: str
    default_week: tuple[str, ...]
    day_types: Mapping[str, DayType]
    deficit_oriented: bool = False

    def __post_init__(self) -> None:
        if len(self.default_week) != 7:
            raise ValueError("a cycling week has exactly 7 days")
        missing = set(self.default_week) - set(self.day_types)
        if missing:
            raise ValueError(f"undefined day types: {sorted(missing)}")

    def deficit_percent(self, week) -> float:
        """Deficit implied by the multipliers of a concrete 7-day week."""
        mean = sum(self.day_types[d].calorie_multiplier for d in week) / 7
        return round((1 - mean) * 100, 1)

    @property
    def nominal_deficit_percent(self) -> float:
        return self.deficit_percent(self.default_week)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "description": self.description,
            "default_week": list(self.default_week),
            "day_types": {
                name: {
                    "calorie_multiplier": dt.calorie_multiplier,
                    "macro_split": dt.macro_split.to_dict(),
                }
                for name, dt in self.day_types.items()
            },
            "deficit_oriented": self.deficit_oriented,
        }


CYCLING_PATTERNS: dict[str, CyclingPattern] = {
    "standard": CyclingPattern(
        key="standard",
        label="Standard Cycling",
        description="Eat more on training days and less on rest days.",
        default_week=(
            "training", "rest", "training", "rest", "training", "training", "rest",
        ),
        day_types={
            "training": DayType(1.10, MacroSplit(25, 50, 25)),
            "rest": DayType(0.90, MacroSplit(40, 25, 35)),
        },
    ),
    "carb_cycling": CyclingPattern(
        key="carb_cycling",
        label="Carb Cycling",
        description="High, medium and low carbohydrate days around your training load.",
        default_week=(
            "training", "medium", "training", "rest", "medium", "training", "rest",
        ),
        day_types={
            "training": DayType(1.20, MacroSplit(25, 50, 25)),
            "medium": DayType(1.00, MacroSplit(35, 35, 30)),
            "rest": DayType(0.80, MacroSplit(40, 25, 35)),
        },
    ),
    "aggressive_cut": CyclingPattern(
        key="aggressive_cut",
        label="Aggressive Cut",
        description="Low-calorie week with a weekly carbohydrate refeed.",
        default_week=("rest", "rest", "rest", "rest", "rest", "medium", "refeed"),
        day_types={
            "training": DayType(0.85, MacroSplit(35, 40, 25)),
            "medium": DayType(0.75, MacroSplit(40, 30, 30)),
            "rest": DayType(0.65, MacroSplit(45, 20, 35)),
            "refeed": DayType(1.25, MacroSplit(25, 60, 15)),
        },
        deficit_oriented=True,
    ),
}

PATTERN_ALIASES = {"carbCycling": "carb_cycling", "aggressiveCut": "aggressive_cut"}

REFEED_MULTIPLIER = 1.25
REFEED_MACROS = MacroSplit(25, 60, 15)
REFEED_CADENCE_CONSTANT = 175
MIN_REFEED_DAYS = 5
MAX_REFEED_DAYS = 14

REFEED_TIERS = TierTable(
    [
        Tier(
            25,
            "high",
            "High",
            "#FF5252",
            "Refeed every {n} days recommended at your estimated body fat level",
        ),
        Tier(
            15,
            "medium",
            "Medium",
            "#FFB300",
            "A refeed every {n} days will help maintain metabolic rate",
        ),
        Tier(
            0,
            "low",
            "Low",
            "#00E676",
            "Refeeds every {n} days are optional but can help with adherence",
        ),
    ]
)


def get_pattern(pattern_key: str) -> CyclingPattern:
    key = PATTERN_ALIASES.get(pattern_key, pattern_key)
    try:
        return CYCLING_PATTERNS[key]
    except KeyError:
        raise UnknownPatternError(f"unknown cycling pattern: {pattern_key}") from None


def list_patterns() -> list[dict]:
    return [p.to_dict() for p in CYCLING_PATTERNS.values()]


@dataclass(frozen=True)
class RefeedRecommendation:
    frequency_days: int | None
    urgency: str
    message: str
    deficit_percent: float
    refeed_calories: int | None = None
    refeed_macros: dict[str, int] | None = None

    def to_dict(self) -> dict:
        return {
            "frequency_days": self.frequency_days,
            "urgency": self.urgency,
            "message": self.message,
            "deficit_percent": self.deficit_percent,
            "refeed_calories": self.refeed_calories,
            "refeed_macros": self.refeed_macros,
        }


def refeed_recommendation(
    current_deficit_percent: float, maintenance_calories: int | None = None
) -> RefeedRecommendation:
    """Recommend a refeed cadence for the given calorie deficit.

    The cadence shrinks as the deficit grows (``175 / deficit`` days, kept
    within 5-14). A deficit of zero or less needs no refeed.
    """
    deficit = float(current_deficit_percent)
    if not math.isfinite(deficit):
        raise ValueError("deficit percent must be a finite number")
    deficit = round(deficit, 1)
    if deficit <= 0:
        return RefeedRecommendation(
            frequency_days=None,
            urgency="none",
            message="No refeed needed while eating at or above maintenance",
            deficit_percent=deficit,
        )
    frequency = int(
        MathTools.clamp(
            MathTools.round_half_up(REFEED_CADENCE_CONSTANT / deficit),
            MIN_REFEED_DAYS,
            MAX_REFEED_DAYS,
        )
    )
    tier = REFEED_TIERS.lookup(MathTools.clamp(deficit, 0, 100))
    calories = macros = None
    if maintenance_calories:
        if not math.isfinite(maintenance_calories) or maintenance_calories < 0:
            raise ValueError("maintenance calories must be a non-negative number")
        calories = MathTools.round_half_up(maintenance_calories * REFEED_MULTIPLIER)
        macros = REFEED_MACROS.grams(calories)
    return RefeedRecommendation(
        frequency_days=frequency,
        urgency=tier.key,
        message=tier.recommendation.format(n=frequency),
        deficit_percent=deficit,
        refeed_calories=calories,
        refeed_macros=macros,
    )


@dataclass(frozen=True)
class DaySchedule:
    index: int
    day: str
    day_type: str
    calories: int
    protein: int
    carbs: int
    fat: int
    overridden: bool = False
    date: str | None = None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "day": self.day,
            "date": self.date,
            "day_type": self.day_type,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "overridden": self.overridden,
        }


@dataclass(frozen=True)
class WeekSchedule:
    pattern: str
    baseline_goal: int
    days: tuple[DaySchedule, ...]
    refeed: RefeedRecommendation | None = None
    stats: dict = field(default_factory=dict)

    @property
    def total_calories(self) -> int:
        return sum(d.calories for d in self.days)

    @property
    def average_calories(self) -> float:
        return self.total_calories / len(self.days)

    def to_dict(self) -> dict:
        return {
            "pattern": self.pattern,
            "baseline_goal": self.baseline_goal,
            "days": [d.to_dict() for d in self.days],
            "total_calories": self.total_calories,
            "average_calories": round(self.average_calories, 1),
            "stats": dict(self.stats),
            "refeed": self.refeed.to_dict() if self.refeed else None,
        }


def _resolve_week(
    pattern: CyclingPattern, overrides: Mapping | None
) -> tuple[list[str], set[int]]:
    week = list(pattern.default_week)
    applied: set[int] = set()
    for raw_index, day_type in (overrides or {}).items():
        try:
            index = int(raw_index)
        except (TypeError, ValueError):
            logger.warning("ignoring override with invalid day index {!r}", raw_index)
            continue
        if not 0 <= index < 7:
            logger.warning("ignoring override for out-of-range day {}", index)
            continue
        if day_type not in pattern.day_types:
            logger.warning(
                "ignoring unknown day type {!r} for pattern {}", day_type, pattern.key
            )
            continue
        week[index] = day_type
        applied.add(index)
    return week, applied


def weekly_stats(days: tuple[DaySchedule, ...]) -> dict:
    calories = [d.calories for d in days]
    counts: dict[str, int] = {}
    for d in days:
        counts[d.day_type] = counts.get(d.day_type, 0) + 1
    return {
        "highest": max(calories),
        "lowest": min(calories),
        "range": max(calories) - min(calories),
        "day_type_counts": counts,
    }


def cycling_schedule(
    pattern_key: str,
    baseline_goal: int,
    overrides: Mapping | None = None,
    maintenance_calories: int | None = None,
    week_start: datetime.date | None = None,
) -> WeekSchedule:
    """Lay out a 7-day calorie and macro schedule for ``pattern_key``.

    Multipliers are balanced over the concrete week (overrides included) and
    the daily values are rounded by largest remainder, so the week always
    totals ``7 * baseline_goal``.
    """
    pattern = get_pattern(pattern_key)
    goal = float(baseline_goal)
    if not math.isfinite(goal) or goal <= 0:
        raise ValueError("baseline_goal must be a positive number")
    baseline = int(goal)
    if baseline <= 0:
        raise ValueError("baseline_goal must be positive")
    week, applied = _resolve_week(pattern, overrides)
    multipliers = [pattern.day_types[d].calorie_multiplier for d in week]
    weekly_budget = 7 * baseline
    quotas = [weekly_budget * m / sum(multipliers) for m in multipliers]
    calories = MathTools.largest_remainder(quotas, weekly_budget)

    offset = week_start.weekday() if week_start is not None else 0
    days = []
    for index, (day_type, kcal) in enumerate(zip(week, calories)):
        grams = pattern.day_types[day_type].macro_split.grams(kcal)
        date = None
        if week_start is not None:
            date = (week_start + datetime.timedelta(days=index)).isoformat()
        days.append(
            DaySchedule(
                index=index,
                day=DAY_LABELS[(offset + index) % 7],
                day_type=day_type,
                calories=kcal,
                overridden=index in applied,
                date=date,
                **grams,
            )
        )
    days = tuple(days)

    refeed = None
    if pattern.deficit_oriented:
        if maintenance_calories:
            deficit = (1 - baseline / maintenance_calories) * 100
        else:
            deficit = pattern.deficit_percent(week)
        refeed = refeed_recommendation(deficit, maintenance_calories)
    logger.debug(
        "cycling schedule {} baseline={} overrides={}", pattern.key, baseline, sorted(applied)
    )
    return WeekSchedule(
        pattern=pattern.key,
        baseline_goal=baseline,
        days=days,
        refeed=refeed,
        stats=weekly_stats(days),
    )
