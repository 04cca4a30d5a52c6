from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Sequence

from loguru import logger

from algorithms import MathTools, Tier, TierTable


@dataclass(frozen=True)
class SubFactor:
    """A weighted input of a composite score.

    ``neutral`` is expressed on the factor's own scale and stands in for a
    missing value; it defaults to the scale midpoint.
    """

    name: str
    low: float
    high: float
    weight: float
    neutral: float | None = None
    invert: bool = False

    @property
    def neutral_value(self) -> float:
        if self.neutral is None:
            return (self.low + self.high) / 2
        return self.neutral

    def normalized(self, value: float) -> float:
        return MathTools.normalize(value, self.low, self.high, self.invert)


class WeightTable:
    """Ordered collection of sub-factors."""

    def __init__(self, factors: Iterable[SubFactor]) -> None:
        self._factors = tuple(factors)
        names = [f.name for f in self._factors]
        if len(set(names)) != len(names):
            raise ValueError("sub-factor names must be unique")
        if any(f.weight < 0 for f in self._factors):
            raise ValueError("sub-factor weights must be non-negative")

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._factors]

    @property
    def total_weight(self) -> float:
        return sum(f.weight for f in self._factors)

    def __iter__(self):
        return iter(self._factors)

    def __getitem__(self, name: str) -> SubFactor:
        for f in self._factors:
            if f.name == name:
                return f
        raise KeyError(name)


@dataclass(frozen=True)
class ReasonRule:
    """A sentence that is surfaced when ``predicate`` holds for the raw inputs."""

    key: str
    priority: int
    predicate: Callable[[Mapping], bool]
    message: str


@dataclass(frozen=True)
class ScoreResult:
    score: int
    tier: str
    label: str
    color_token: str
    reasons: tuple[str, ...]
    recommendation: str
    contributions: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "tier": self.tier,
            "label": self.label,
            "color_token": self.color_token,
            "reasons": list(self.reasons),
            "recommendation": self.recommendation,
            "contributions": dict(self.contributions),
        }


def as_number(value) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("ignoring non-numeric score input {!r}", value)
        return None
    if math.isnan(number):
        return None
    return number


def evaluate_rules(
    rules: Sequence[ReasonRule], raw: Mapping, max_reasons: int = 3
) -> tuple[str, ...]:
    """Return the messages of the firing rules in priority order."""
    fired = []
    for rule in sorted(rules, key=lambda r: r.priority):
        if rule.predicate(raw):
            fired.append(rule.message)
    return tuple(fired[: max(0, max_reasons)])


def compute_score(
    inputs: Mapping,
    weight_table: WeightTable,
    tier_table: TierTable,
    rules: Sequence[ReasonRule] = (),
    raw: Mapping | None = None,
    max_reasons: int = 3,
) -> ScoreResult:
    """Combine weighted sub-factors into a bounded score and tier.

    Each value is clamped to its factor's scale and normalized to ``[0, 1]``;
    missing values use the factor's neutral value. Reasons are evaluated
    against ``raw`` (defaults to ``inputs``).
    """
    unknown = set(inputs) - set(weight_table.names)
    if unknown:
        logger.debug("ignoring unknown score inputs: {}", sorted(unknown))
    points: list[float] = []
    for factor in weight_table:
        value = as_number(inputs.get(factor.name))
        if value is None:
            value = factor.neutral_value
        elif value < factor.low or value > factor.high:
            logger.debug(
                "clamping {}={} to [{}, {}]", factor.name, value, factor.low, factor.high
            )
        points.append(factor.normalized(value) * factor.weight)
    score = int(MathTools.clamp(MathTools.round_half_up(sum(points)), 0, 100))
    earned = MathTools.largest_remainder(points, score)
    tier = tier_table.lookup(score)
    reasons = evaluate_rules(rules, inputs if raw is None else raw, max_reasons)
    return ScoreResult(
        score=score,
        tier=tier.key,
        label=tier.label,
        color_token=tier.color_token,
        reasons=reasons,
        recommendation=tier.recommendation,
        contributions=dict(zip(weight_table.names, earned)),
    )


# Daily fitness score

DEFAULT_GOALS = {
    "calories": 2000,
    "protein": 150,
    "water": 8,
    "exercise_minutes": 30,
}

FITNESS_WEIGHTS = WeightTable(
    [
        SubFactor("nutrition", 0, 1, 25),
        SubFactor("exercise", 0, 1, 20),
        SubFactor("protein", 0, 1, 15),
        SubFactor("hydration", 0, 1, 15),
        SubFactor("sleep", 0, 1, 15),
        SubFactor("consistency", 0, 1, 10),
    ]
)

FITNESS_TIERS = TierTable(
    [
        Tier(90, "elite", "Elite", "#FFD700", "Outstanding day. Keep this routine going."),
        Tier(
            75,
            "excellent",
            "Excellent",
            "#00E676",
            "Great balance across the board; fine-tune your weakest category.",
        ),
        Tier(60, "good", "Good", "#00D4FF", "Solid day. Pick one category to improve tomorrow."),
        Tier(40, "fair", "Fair", "#FFB300", "A few habits need attention. Start with the tips below."),
        Tier(
            0,
            "getting_started",
            "Getting Started",
            "#FF6B35",
            "Every log counts. Focus on one goal today to build momentum.",
        ),
    ]
)


def _below(key: str, threshold: float = 1.0) -> Callable[[Mapping], bool]:
    def check(raw: Mapping) -> bool:
        value = raw.get(key)
        return value is not None and value < threshold

    return check


def _off_calorie_goal(raw: Mapping) -> bool:
    ratio = raw.get("calorie_ratio")
    return ratio is not None and abs(ratio - 1) > 0.1


def _sleep_out_of_range(raw: Mapping) -> bool:
    hours = raw.get("sleep_hours")
    return hours is not None and not 7 <= hours <= 9


FITNESS_RULES = (
    ReasonRule(
        "nutrition", 1, _off_calorie_goal,
        "Try to eat closer to your calorie goal for a higher score.",
    ),
    ReasonRule(
        "protein", 2, _below("protein_ratio"),
        "Hit your protein target to support muscle recovery and growth.",
    ),
    ReasonRule(
        "hydration", 3, _below("water_ratio"),
        "Drink more water to boost your hydration score and overall health.",
    ),
    ReasonRule(
        "exercise", 4, _below("exercise_ratio"),
        "Log a workout or aim for 30 minutes of activity to fill your movement ring.",
    ),
    ReasonRule(
        "sleep", 5, _sleep_out_of_range,
        "Aim for 7-9 hours of sleep to maximize your recovery score.",
    ),
    ReasonRule(
        "consistency", 6, _below("consistency"),
        "Complete your daily habits and fasting goals to improve consistency.",
    ),
)


@dataclass(frozen=True)
class FitnessBreakdown:
    score: int
    categories: dict[str, dict[str, int]]
    result: ScoreResult

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "categories": {k: dict(v) for k, v in self.categories.items()},
            **{k: v for k, v in self.result.to_dict().items() if k != "score"},
        }


def _ratio(value, goal) -> float | None:
    value = as_number(value)
    goal = as_number(goal)
    if value is None or goal is None or goal <= 0:
        return None
    return max(value, 0.0) / goal


def _sleep_fraction(hours: float | None) -> float | None:
    if hours is None:
        return None
    if 7 <= hours <= 9:
        return 1.0
    if hours >= 6:
        return 0.7
    if hours >= 5:
        return 0.4
    return 0.2


def _consistency(daily_totals: Mapping) -> float | None:
    fasted = daily_totals.get("fasting_completed")
    done = as_number(daily_totals.get("habits_completed"))
    total = as_number(daily_totals.get("habits_total"))
    if fasted is None and (done is None or not total):
        return None
    fast_part = 0.25 if fasted is None else (0.5 if fasted else 0.0)
    if done is None or not total or total <= 0:
        habit_part = 0.25
    else:
        habit_part = 0.5 * MathTools.clamp(done / total, 0.0, 1.0)
    return fast_part + habit_part


def fitness_inputs(daily_totals: Mapping, goals: Mapping | None = None) -> tuple[dict, dict]:
    """Return ``(normalized, raw)`` inputs for the daily fitness score."""
    merged = dict(DEFAULT_GOALS)
    merged.update({k: v for k, v in (goals or {}).items() if v is not None})
    calorie_ratio = _ratio(daily_totals.get("calories"), merged["calories"])
    protein_ratio = _ratio(daily_totals.get("protein"), merged["protein"])
    water_ratio = _ratio(daily_totals.get("water"), merged["water"])
    exercise_ratio = _ratio(
        daily_totals.get("exercise_minutes"), merged["exercise_minutes"]
    )
    sleep_hours = as_number(daily_totals.get("sleep_hours"))
    consistency = _consistency(daily_totals)
    normalized = {
        "nutrition": None
        if calorie_ratio is None
        else max(0.0, 1 - abs(1 - calorie_ratio)),
        "exercise": None if exercise_ratio is None else min(exercise_ratio, 1.0),
        "protein": None if protein_ratio is None else min(protein_ratio, 1.0),
        "hydration": None if water_ratio is None else min(water_ratio, 1.0),
        "sleep": _sleep_fraction(sleep_hours),
        "consistency": consistency,
    }
    raw = {
        "calorie_ratio": calorie_ratio,
        "protein_ratio": protein_ratio,
        "water_ratio": water_ratio,
        "exercise_ratio": exercise_ratio,
        "sleep_hours": sleep_hours,
        "consistency": consistency,
    }
    return normalized, raw


def compute_fitness_breakdown(
    daily_totals: Mapping, goals: Mapping | None = None, max_reasons: int = 3
) -> FitnessBreakdown:
    normalized, raw = fitness_inputs(daily_totals, goals)
    result = compute_score(
        normalized, FITNESS_WEIGHTS, FITNESS_TIERS, FITNESS_RULES, raw, max_reasons
    )
    categories = {
        factor.name: {
            "earned": result.contributions[factor.name],
            "max": int(factor.weight),
        }
        for factor in FITNESS_WEIGHTS
    }
    return FitnessBreakdown(score=result.score, categories=categories, result=result)


# Recovery / readiness score

RECOVERY_WEIGHTS = WeightTable(
    [
        SubFactor("hrv", 0, 100, 40),
        SubFactor("resting_hr", 0, 100, 20),
        SubFactor("sleep", 0, 100, 20),
        SubFactor("soreness", 0, 100, 10),
        SubFactor("energy", 0, 100, 10),
    ]
)

RECOVERY_TIERS = TierTable(
    [
        Tier(80, "peak", "Peak", "#00E676", "Full send! You're ready for heavy training"),
        Tier(60, "good", "Good", "#FFB300", "Good to go for moderate intensity training"),
        Tier(40, "fair", "Fair", "#FF9800", "Light activity recommended"),
        Tier(0, "rest", "Rest", "#FF5252", "Rest day suggested"),
    ]
)

RECOVERY_RULES = (
    ReasonRule(
        "hrv", 1, _below("hrv", 50),
        "Your HRV is below your baseline, a sign of incomplete recovery.",
    ),
    ReasonRule(
        "resting_hr", 2, _below("resting_hr", 50),
        "Your resting heart rate is elevated above your baseline.",
    ),
    ReasonRule("sleep", 3, _below("sleep", 60), "Last night's sleep was short or poor quality."),
    ReasonRule(
        "soreness", 4,
        lambda raw: (raw.get("avg_soreness") or 0) > 1.5,
        "Muscle soreness is elevated.",
    ),
    ReasonRule("energy", 5, _below("energy", 50), "Your energy levels are low today."),
)

INTENSITY_MAP = {
    "strength": 7,
    "hiit": 9,
    "cardio": 6,
    "yoga": 3,
    "flexibility": 2,
    "endurance": 7,
    "hypertrophy": 6,
}
DEFAULT_INTENSITY = 5
MAX_STRAIN = 21.0


@dataclass(frozen=True)
class RecoveryInput:
    hrv: float | None = None
    hrv_baseline: float | None = None
    resting_hr: float | None = None
    resting_hr_baseline: float | None = None
    sleep_hours: float | None = None
    sleep_quality: float | None = None
    soreness: Mapping[str, float] | None = None
    energy: float | None = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "RecoveryInput":
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)


@dataclass(frozen=True)
class RecoveryResult:
    result: ScoreResult
    components: dict[str, float | None]
    data_source: str
    should_rest: bool

    def to_dict(self) -> dict:
        out = self.result.to_dict()
        out["components"] = dict(self.components)
        out["data_source"] = self.data_source
        out["should_rest"] = self.should_rest
        return out


def _deviation(value, baseline) -> float | None:
    value = as_number(value)
    baseline = as_number(baseline)
    if value is None or baseline is None or baseline <= 0:
        return None
    return (value - baseline) / baseline


def recovery_components(data: RecoveryInput) -> dict[str, float | None]:
    """Map raw recovery metrics onto 0-100 component scores."""
    components: dict[str, float | None] = {}
    hrv_dev = _deviation(data.hrv, data.hrv_baseline)
    components["hrv"] = (
        None if hrv_dev is None else MathTools.normalize(hrv_dev, -0.3, 0.2) * 100
    )
    rhr_dev = _deviation(data.resting_hr, data.resting_hr_baseline)
    components["resting_hr"] = (
        None
        if rhr_dev is None
        else MathTools.normalize(rhr_dev, -0.10, 0.15, invert=True) * 100
    )
    sleep_parts = []
    hours = as_number(data.sleep_hours)
    if hours is not None:
        sleep_parts.append(MathTools.normalize(hours, 4, 8) * 100)
    quality = as_number(data.sleep_quality)
    if quality is not None:
        sleep_parts.append(MathTools.normalize(quality, 1, 5) * 100)
    components["sleep"] = sum(sleep_parts) / len(sleep_parts) if sleep_parts else None
    avg_soreness = average_soreness(data.soreness)
    components["soreness"] = (
        None
        if avg_soreness is None
        else MathTools.normalize(avg_soreness, 0, 3, invert=True) * 100
    )
    energy = as_number(data.energy)
    components["energy"] = (
        None if energy is None else MathTools.normalize(energy, 1, 5) * 100
    )
    return components


def average_soreness(soreness: Mapping[str, float] | None) -> float | None:
    if not soreness:
        return None
    values = [as_number(v) for v in soreness.values()]
    values = [MathTools.clamp(v, 0, 3) for v in values if v is not None]
    if not values:
        return None
    return sum(values) / len(values)


def compute_recovery_score(data: RecoveryInput, max_reasons: int = 3) -> RecoveryResult:
    components = recovery_components(data)
    avg_soreness = average_soreness(data.soreness)
    raw = dict(components)
    raw["avg_soreness"] = avg_soreness
    result = compute_score(
        components, RECOVERY_WEIGHTS, RECOVERY_TIERS, RECOVERY_RULES, raw, max_reasons
    )
    biometric = components["hrv"] is not None or components["resting_hr"] is not None
    should_rest = result.score < 40 or (avg_soreness is not None and avg_soreness > 2)
    return RecoveryResult(
        result=result,
        components={
            k: None if v is None else round(v, 1) for k, v in components.items()
        },
        data_source="biometric-enhanced" if biometric else "self-reported",
        should_rest=should_rest,
    )


def daily_strain(workouts: Iterable[Mapping]) -> float:
    """Return the accumulated training strain of a day on a 0-21 scale."""
    strain = 0.0
    for workout in workouts:
        kind = str(workout.get("type") or "").lower()
        minutes = as_number(workout.get("duration_minutes")) or 0.0
        intensity = INTENSITY_MAP.get(kind, DEFAULT_INTENSITY)
        strain += intensity * MathTools.clamp(minutes / 60, 0.0, 2.0)
    return round(min(strain, MAX_STRAIN), 1)
