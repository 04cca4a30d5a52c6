from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from loguru import logger

from algorithms import MathTools, Tier, TierTable
from scoring_service import ReasonRule, ScoreResult, as_number

TREND_PENALTY = {"improving": -10, "stable": 0, "declining": 10}
TREND_ALIASES = {"stagnant": "stable", "plateau": "stable"}

NEUTRAL_WEEKS = 4
NEUTRAL_RATING = 5.5
MAX_COUNTED_WEEKS = 8
MAX_WEEKS = 52
DELOAD_THRESHOLD = 50
DELOAD_INTERVAL_WEEKS = 6

DELOAD_TIERS = TierTable(
    [
        Tier(
            70,
            "high",
            "Deload Recommended",
            "#FF5252",
            "Take a deload week: reduce volume 40-50%, keep intensity moderate, "
            "prioritize sleep and nutrition.",
        ),
        Tier(
            50,
            "moderate",
            "Consider a Deload",
            "#FFB300",
            "Consider a Deload in the coming week: trim volume by about a third "
            "and watch how you recover.",
        ),
        Tier(
            25,
            "low",
            "Monitor Fatigue",
            "#00D4FF",
            "Fatigue is building. Keep training, but watch your sleep and soreness closely.",
        ),
        Tier(0, "none", "Keep Training", "#00E676", "Recovery is on track. Keep training as planned."),
    ]
)


@dataclass(frozen=True)
class DeloadInput:
    """Training-fatigue self report. ``None`` fields fall back to neutral values."""

    weeks_since_deload: int | None = None
    sleep_quality: float | None = None
    performance_trend: str | None = None
    mood: float | None = None
    soreness: float | None = None
    motivation: float | None = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "DeloadInput":
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)


def normalize_trend(trend: str | None) -> tuple[str, bool]:
    """Return ``(trend, stagnant)`` with aliases folded into the three trends."""
    if trend is None:
        return "stable", False
    key = str(trend).strip().lower()
    if key in TREND_ALIASES:
        return TREND_ALIASES[key], True
    if key not in TREND_PENALTY:
        logger.warning("unknown performance trend {!r}, treating as stable", trend)
        return "stable", False
    return key, False


def _rating(value, name: str) -> float:
    number = as_number(value)
    if number is None:
        return NEUTRAL_RATING
    if not 1 <= number <= 10:
        logger.debug("clamping {}={} to [1, 10]", name, number)
    return MathTools.clamp(number, 1, 10)


@dataclass(frozen=True)
class DeloadResult:
    result: ScoreResult
    terms: dict[str, float] = field(default_factory=dict)
    should_deload: bool = False
    next_deload_in_weeks: int = 1

    @property
    def fatigue(self) -> int:
        return self.result.score

    @property
    def urgency(self) -> str:
        return self.result.tier

    @property
    def reasons(self) -> tuple[str, ...]:
        return self.result.reasons

    @property
    def recommendation(self) -> str:
        return self.result.recommendation

    def to_dict(self) -> dict:
        out = self.result.to_dict()
        out.pop("contributions", None)
        out["fatigue"] = self.fatigue
        out["urgency"] = self.urgency
        out["terms"] = dict(self.terms)
        out["should_deload"] = self.should_deload
        out["next_deload_in_weeks"] = self.next_deload_in_weeks
        return out


DELOAD_RULES = (
    ReasonRule("weeks", 1, lambda r: r["weeks"] >= 6, "6+ weeks without a deload"),
    ReasonRule(
        "weeks", 2, lambda r: 4 <= r["weeks"] < 6, "4+ weeks of continuous training"
    ),
    ReasonRule("trend", 3, lambda r: r["trend"] == "declining", "Performance is declining"),
    ReasonRule("trend", 4, lambda r: r["stagnant"], "Performance has stagnated"),
    ReasonRule("sleep_quality", 5, lambda r: r["sleep_quality"] < 5, "Poor sleep quality"),
    ReasonRule("soreness", 6, lambda r: r["soreness"] > 7, "High muscle soreness"),
    ReasonRule("mood", 7, lambda r: r["mood"] < 5, "Low mood/energy"),
    ReasonRule("motivation", 8, lambda r: r["motivation"] < 4, "Low training motivation"),
)


def fatigue_terms(data: DeloadInput) -> tuple[dict[str, float], dict]:
    """Return the per-input fatigue terms and the cleaned raw inputs."""
    weeks_value = as_number(data.weeks_since_deload)
    if weeks_value is None:
        weeks = NEUTRAL_WEEKS
    else:
        weeks = int(MathTools.clamp(weeks_value, 0, MAX_WEEKS))
    sleep = _rating(data.sleep_quality, "sleep_quality")
    mood = _rating(data.mood, "mood")
    soreness = _rating(data.soreness, "soreness")
    motivation = _rating(data.motivation, "motivation")
    trend, stagnant = normalize_trend(data.performance_trend)
    terms = {
        "weeks": min(weeks, MAX_COUNTED_WEEKS) * 5,
        "sleep_quality": (10 - sleep) * 3,
        "mood": (10 - mood) * 2,
        "soreness": soreness * 3,
        "motivation": (10 - motivation) * 2,
        "trend": TREND_PENALTY[trend],
    }
    raw = {
        "weeks": weeks,
        "sleep_quality": sleep,
        "mood": mood,
        "soreness": soreness,
        "motivation": motivation,
        "trend": trend,
        "stagnant": stagnant,
    }
    return terms, raw


def evaluate_deload(data: DeloadInput, max_reasons: int | None = None) -> DeloadResult:
    """Score accumulated training fatigue and classify deload urgency.

    Reasons are ordered by the size of the fatigue term behind them, largest
    first; equal terms keep the rule order.
    """
    terms, raw = fatigue_terms(data)
    fatigue = int(MathTools.clamp(MathTools.round_half_up(sum(terms.values())), 0, 100))
    tier = DELOAD_TIERS.lookup(fatigue)
    fired = [rule for rule in DELOAD_RULES if rule.predicate(raw)]
    fired.sort(key=lambda rule: (-terms[rule.key], rule.priority))
    reasons = tuple(rule.message for rule in fired)
    if max_reasons is not None:
        reasons = reasons[: max(0, max_reasons)]
    result = ScoreResult(
        score=fatigue,
        tier=tier.key,
        label=tier.label,
        color_token=tier.color_token,
        reasons=reasons,
        recommendation=tier.recommendation,
    )
    logger.debug("deload fatigue={} urgency={}", fatigue, tier.key)
    return DeloadResult(
        result=result,
        terms={k: round(float(v), 2) for k, v in terms.items()},
        should_deload=fatigue >= DELOAD_THRESHOLD,
        next_deload_in_weeks=max(1, DELOAD_INTERVAL_WEEKS - raw["weeks"]),
    )
