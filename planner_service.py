from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from loguru import logger

from algorithms import MathTools
from exercise_library import (
    COMMON_INJURY_AREAS,
    ExerciseChoice,
    choose_exercise,
    normalize_equipment,
    parse_injuries,
)
from scoring_service import as_number


class PlanValidationError(ValueError):
    """Raised when a training plan request cannot be synthesized."""


GOALS = ("hypertrophy", "strength", "endurance", "weight_loss", "general")
GOAL_ALIASES = {
    "muscle": "hypertrophy",
    "muscle_gain": "hypertrophy",
    "bodybuilding": "hypertrophy",
    "power": "strength",
    "powerlifting": "strength",
    "cardio": "endurance",
    "fat_loss": "weight_loss",
    "cut": "weight_loss",
    "hiit": "weight_loss",
    "fitness": "general",
}
MIN_DAYS, MAX_DAYS = 3, 6
MIN_LEVEL, MAX_LEVEL = 1, 5
DEFAULT_DAYS = 4
DEFAULT_LEVEL = 3
MIN_WEEKS_FOR_DELOAD = 4

SESSION_MINUTES = {1: 45, 2: 50, 3: 60, 4: 70, 5: 75}
# kcal per minute of training for each intensity band
ENERGY_COEFFICIENTS = {
    "low": 4.0,
    "moderate": 5.5,
    "moderate_high": 6.5,
    "high": 7.5,
    "very_high": 8.5,
}
MUSCLE_ORDER = (
    "quadriceps",
    "chest",
    "back",
    "hamstrings",
    "shoulders",
    "glutes",
    "triceps",
    "biceps",
    "rear delts",
    "calves",
    "core",
    "conditioning",
    "mobility",
)


@dataclass(frozen=True)
class SplitDay:
    day: str
    focus: str
    muscles: frozenset[str]


@dataclass(frozen=True)
class PhaseArchetype:
    name: str
    focus: str
    intensity: str
    volume: str
    rest_periods: str
    rpe: str
    tips: tuple[str, ...]
    intensity_band: str
    weight: float = 1.0
    fixed_weeks: int | None = None

    @property
    def is_deload(self) -> bool:
        return self.name == "Deload"

    def weighted(self, weight: float) -> "PhaseArchetype":
        return PhaseArchetype(
            self.name,
            self.focus,
            self.intensity,
            self.volume,
            self.rest_periods,
            self.rpe,
            self.tips,
            self.intensity_band,
            weight,
            self.fixed_weeks,
        )


ANATOMICAL_ADAPTATION = PhaseArchetype(
    "Anatomical Adaptation",
    "Build movement quality, connective tissue strength, and work capacity",
    "55-65% 1RM",
    "Moderate (3 sets x 12-15 reps)",
    "60-90 seconds",
    "5-6",
    (
        "Focus on perfect form over weight",
        "Build mind-muscle connection",
        "Gradually increase training volume",
    ),
    "moderate",
)
HYPERTROPHY = PhaseArchetype(
    "Hypertrophy",
    "Maximize muscle growth through progressive overload and metabolic stress",
    "65-75% 1RM",
    "High (4 sets x 8-12 reps)",
    "60-120 seconds",
    "7-8",
    (
        "Aim to add weight or reps each session",
        "Use controlled eccentrics (3-4 seconds)",
        "Include both compound and isolation work",
    ),
    "moderate_high",
)
STRENGTH = PhaseArchetype(
    "Strength",
    "Build maximal strength through heavy compound movements",
    "80-90% 1RM",
    "Moderate (4-5 sets x 3-6 reps)",
    "2-4 minutes",
    "8-9",
    (
        "Prioritize big compound lifts (squat, bench, deadlift, OHP)",
        "Full recovery between sets is critical",
        "Reduce isolation work to preserve recovery capacity",
    ),
    "high",
)
PEAK = PhaseArchetype(
    "Peak",
    "Express maximal strength with minimal fatigue",
    "90-97% 1RM",
    "Low (3-5 sets x 1-3 reps)",
    "3-5 minutes",
    "9-10",
    ("Practice competition-style singles", "Cut accessory volume in half"),
    "very_high",
)
FOUNDATION = PhaseArchetype(
    "Foundation",
    "Build base fitness and movement quality",
    "60-75% 1RM",
    "Moderate-High",
    "60-120 seconds",
    "6-7",
    ("Focus on consistency", "Progressive overload weekly"),
    "moderate",
)
INTENSIFICATION = PhaseArchetype(
    "Intensification",
    "Increase intensity and push performance",
    "75-85% 1RM",
    "Moderate",
    "90-180 seconds",
    "7-9",
    ("Push harder on main lifts", "Maintain form under fatigue"),
    "high",
)
AEROBIC_BASE = PhaseArchetype(
    "Aerobic Base",
    "Build aerobic capacity with steady, conversational-pace volume",
    "60-70% max HR",
    "High (long steady sessions)",
    "Continuous",
    "4-6",
    ("Keep most sessions easy", "Add no more than 10% duration per week"),
    "moderate",
)
THRESHOLD = PhaseArchetype(
    "Threshold",
    "Raise lactate threshold with tempo and cruise intervals",
    "80-88% max HR",
    "Moderate (2-4 x 8-12 min intervals)",
    "2-3 minutes between intervals",
    "7-8",
    ("Hold an even pace across intervals", "Keep one easy day between hard sessions"),
    "high",
)
VO2_MAX = PhaseArchetype(
    "VO2 Max",
    "Sharpen top-end aerobic power with short hard intervals",
    "90-95% max HR",
    "Low-Moderate (5-6 x 3 min intervals)",
    "Equal work-to-rest",
    "8-9",
    ("Warm up for at least 15 minutes", "Stop the session if pace drops sharply"),
    "very_high",
)
METABOLIC = PhaseArchetype(
    "Metabolic Conditioning",
    "Maximize energy expenditure with circuits while preserving muscle",
    "60-70% 1RM",
    "High (circuits of 3-4 rounds x 10-15 reps)",
    "30-60 seconds",
    "7-8",
    ("Move briskly between stations", "Keep protein intake high to protect muscle"),
    "moderate_high",
)
DELOAD = PhaseArchetype(
    "Deload",
    "Active recovery to allow supercompensation",
    "50-60% 1RM",
    "Low (2 sets x 10 reps)",
    "As needed",
    "4-5",
    (
        "Reduce volume by 40-50%",
        "Maintain movement patterns but reduce load",
        "Focus on mobility and flexibility",
        "Prioritize sleep and nutrition",
    ),
    "low",
    fixed_weeks=1,
)


def _template(*pairs: tuple[PhaseArchetype, float]) -> tuple[PhaseArchetype, ...]:
    return tuple(a.weighted(w) for a, w in pairs)


# Every template ends with a Deload.
_BAND_TEMPLATES: dict[tuple[str, str], tuple[PhaseArchetype, ...]] = {
    ("hypertrophy", "novice"): _template(
        (ANATOMICAL_ADAPTATION, 4), (HYPERTROPHY, 5), (DELOAD, 1)
    ),
    ("hypertrophy", "intermediate"): _template(
        (ANATOMICAL_ADAPTATION, 3),
        (HYPERTROPHY, 4),
        (DELOAD, 1),
        (STRENGTH, 3),
        (DELOAD, 1),
    ),
    ("hypertrophy", "advanced"): _template(
        (HYPERTROPHY, 4), (DELOAD, 1), (STRENGTH, 3), (HYPERTROPHY, 3), (DELOAD, 1)
    ),
    ("strength", "novice"): _template(
        (ANATOMICAL_ADAPTATION, 3), (STRENGTH, 4), (DELOAD, 1)
    ),
    ("strength", "intermediate"): _template(
        (ANATOMICAL_ADAPTATION, 2), (HYPERTROPHY, 3), (STRENGTH, 4), (DELOAD, 1)
    ),
    ("strength", "advanced"): _template(
        (HYPERTROPHY, 3), (STRENGTH, 4), (DELOAD, 1), (PEAK, 2), (DELOAD, 1)
    ),
    ("endurance", "novice"): _template((AEROBIC_BASE, 5), (DELOAD, 1)),
    ("endurance", "intermediate"): _template(
        (AEROBIC_BASE, 4), (THRESHOLD, 4), (DELOAD, 1)
    ),
    ("endurance", "advanced"): _template(
        (AEROBIC_BASE, 3), (THRESHOLD, 3), (DELOAD, 1), (VO2_MAX, 2), (DELOAD, 1)
    ),
    ("weight_loss", "novice"): _template((FOUNDATION, 4), (METABOLIC, 4), (DELOAD, 1)),
    ("weight_loss", "intermediate"): _template(
        (FOUNDATION, 3), (METABOLIC, 4), (HYPERTROPHY, 3), (DELOAD, 1)
    ),
    ("weight_loss", "advanced"): _template(
        (METABOLIC, 4), (STRENGTH, 3), (DELOAD, 1), (METABOLIC, 3), (DELOAD, 1)
    ),
    ("general", "novice"): _template((FOUNDATION, 4), (INTENSIFICATION, 3), (DELOAD, 1)),
    ("general", "intermediate"): _template(
        (FOUNDATION, 3), (INTENSIFICATION, 4), (DELOAD, 1)
    ),
    ("general", "advanced"): _template(
        (FOUNDATION, 2), (HYPERTROPHY, 3), (INTENSIFICATION, 3), (DELOAD, 1)
    ),
}

LEVEL_BANDS = {1: "novice", 2: "novice", 3: "intermediate", 4: "advanced", 5: "advanced"}

PERIODIZATION_TEMPLATES: dict[tuple[str, int], tuple[PhaseArchetype, ...]] = {
    (goal, level): _BAND_TEMPLATES[(goal, band)]
    for goal in GOALS
    for level, band in LEVEL_BANDS.items()
}


def _split(*days: tuple[str, Iterable[str]]) -> tuple[SplitDay, ...]:
    return tuple(
        SplitDay(f"Day {i}", focus, frozenset(muscles))
        for i, (focus, muscles) in enumerate(days, start=1)
    )


PUSH = ("chest", "shoulders", "triceps")
PULL = ("back", "biceps", "rear delts")
LEGS = ("quadriceps", "hamstrings", "glutes", "calves")
UPPER = ("chest", "back", "shoulders", "biceps", "triceps")
LOWER = ("quadriceps", "hamstrings", "glutes", "calves")
FULL_BODY = ("quadriceps", "chest", "back", "hamstrings", "shoulders", "core")

SPLIT_TEMPLATES: dict[tuple[str, int], tuple[SplitDay, ...]] = {
    ("hypertrophy", 3): _split(("Push", PUSH), ("Pull", PULL), ("Legs", LEGS)),
    ("hypertrophy", 4): _split(
        ("Upper Push", PUSH),
        ("Lower Strength", ("quadriceps", "hamstrings", "glutes")),
        ("Upper Pull", PULL),
        ("Lower Hypertrophy", LEGS),
    ),
    ("hypertrophy", 5): _split(
        ("Chest & Triceps", ("chest", "triceps")),
        ("Back & Biceps", ("back", "biceps")),
        ("Legs", ("quadriceps", "hamstrings", "glutes")),
        ("Shoulders & Arms", ("shoulders", "biceps", "triceps")),
        ("Full Body / Weak Points", FULL_BODY),
    ),
    ("hypertrophy", 6): _split(
        ("Push (Heavy)", PUSH),
        ("Pull (Heavy)", ("back", "biceps")),
        ("Legs (Heavy)", ("quadriceps", "hamstrings", "glutes")),
        ("Push (Volume)", PUSH),
        ("Pull (Volume)", ("back", "biceps")),
        ("Legs (Volume)", LEGS),
    ),
    ("strength", 3): _split(
        ("Squat Focus", ("quadriceps", "glutes", "back", "core")),
        ("Bench Focus", ("chest", "triceps", "shoulders")),
        ("Deadlift Focus", ("back", "hamstrings", "glutes")),
    ),
    ("strength", 4): _split(
        ("Upper Heavy", ("chest", "back", "shoulders")),
        ("Lower Heavy", ("quadriceps", "hamstrings", "glutes")),
        ("Upper Volume", UPPER),
        ("Lower Volume", LOWER),
    ),
    ("strength", 5): _split(
        ("Squat", ("quadriceps", "glutes", "core")),
        ("Bench", ("chest", "triceps")),
        ("Deadlift", ("back", "hamstrings")),
        ("Overhead Press", ("shoulders", "triceps", "rear delts")),
        ("Accessories", ("back", "biceps", "calves", "core")),
    ),
    ("strength", 6): _split(
        ("Squat Heavy", ("quadriceps", "glutes")),
        ("Bench Heavy", ("chest", "triceps")),
        ("Deadlift Heavy", ("back", "hamstrings")),
        ("Squat Volume", ("quadriceps", "glutes", "calves")),
        ("Press Volume", ("chest", "shoulders", "triceps")),
        ("Pull Volume", PULL),
    ),
    ("endurance", 3): _split(
        ("Full Body Strength", FULL_BODY),
        ("Intervals", ("conditioning", "core")),
        ("Long Session", ("conditioning", "mobility")),
    ),
    ("endurance", 4): _split(
        ("Intervals", ("conditioning", "core")),
        ("Lower Body Strength", LOWER),
        ("Tempo", ("conditioning",)),
        ("Long Session", ("conditioning", "mobility")),
    ),
    ("endurance", 5): _split(
        ("Intervals", ("conditioning",)),
        ("Full Body Strength", FULL_BODY),
        ("Easy Aerobic", ("conditioning", "mobility")),
        ("Tempo", ("conditioning", "core")),
        ("Long Session", ("conditioning",)),
    ),
    ("endurance", 6): _split(
        ("Intervals", ("conditioning",)),
        ("Lower Body Strength", LOWER),
        ("Easy Aerobic", ("conditioning", "mobility")),
        ("Tempo", ("conditioning", "core")),
        ("Upper Body Strength", UPPER),
        ("Long Session", ("conditioning",)),
    ),
    ("weight_loss", 3): _split(
        ("Full Body A", FULL_BODY),
        ("Metabolic Circuit", ("conditioning", "core")),
        ("Full Body B", ("glutes", "chest", "back", "shoulders", "core")),
    ),
    ("weight_loss", 4): _split(
        ("Upper Body", UPPER),
        ("Lower Body", LOWER),
        ("Metabolic Circuit", ("conditioning", "core")),
        ("Full Body", FULL_BODY),
    ),
    ("weight_loss", 5): _split(
        ("Upper Body", UPPER),
        ("Lower Body", LOWER),
        ("Metabolic Circuit", ("conditioning", "core")),
        ("Full Body", FULL_BODY),
        ("Active Recovery", ("conditioning", "mobility")),
    ),
    ("weight_loss", 6): _split(
        ("Push", PUSH),
        ("Pull", PULL),
        ("Legs", LEGS),
        ("Metabolic Circuit", ("conditioning", "core")),
        ("Full Body", FULL_BODY),
        ("Active Recovery", ("conditioning", "mobility")),
    ),
    ("general", 3): _split(
        ("Full Body A", FULL_BODY),
        ("Full Body B", ("glutes", "chest", "back", "shoulders", "core")),
        ("Full Body C", ("quadriceps", "hamstrings", "back", "chest", "conditioning")),
    ),
    ("general", 4): _split(
        ("Upper", UPPER),
        ("Lower", LOWER),
        ("Upper", UPPER),
        ("Lower", LOWER),
    ),
    ("general", 5): _split(
        ("Upper", UPPER),
        ("Lower", LOWER),
        ("Push", PUSH),
        ("Pull", PULL),
        ("Legs", LEGS),
    ),
    ("general", 6): _split(
        ("Push", PUSH),
        ("Pull", PULL),
        ("Legs", LEGS),
        ("Push", PUSH),
        ("Pull", PULL),
        ("Legs", LEGS),
    ),
}


@dataclass(frozen=True)
class TrainingPlanRequest:
    goal: str = "general"
    experience_level: int = DEFAULT_LEVEL
    days_per_week: int = DEFAULT_DAYS
    weeks_duration: int = 12
    equipment: frozenset[str] = frozenset()
    injuries: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> "TrainingPlanRequest":
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        if "equipment" in known:
            known["equipment"] = frozenset(known["equipment"] or ())
        if known.get("injuries") is None:
            known.pop("injuries", None)
        return cls(**known)


@dataclass(frozen=True)
class Phase:
    name: str
    start_week: int
    end_week: int
    focus: str
    intensity: str
    volume: str
    rest_periods: str
    rpe: str
    tips: tuple[str, ...]
    intensity_band: str

    @property
    def weeks(self) -> tuple[int, int]:
        return (self.start_week, self.end_week)

    @property
    def duration(self) -> int:
        return self.end_week - self.start_week + 1

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "weeks": [self.start_week, self.end_week],
            "duration": self.duration,
            "focus": self.focus,
            "intensity": self.intensity,
            "volume": self.volume,
            "rest_periods": self.rest_periods,
            "rpe": self.rpe,
            "tips": list(self.tips),
        }


@dataclass(frozen=True)
class PlannedDay:
    day: str
    focus: str
    muscles: frozenset[str]
    exercises: tuple[ExerciseChoice, ...] = ()

    @property
    def flagged(self) -> bool:
        return any(e.flagged for e in self.exercises)

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "focus": self.focus,
            "muscles": sorted(self.muscles),
            "exercises": [e.to_dict() for e in self.exercises],
            "flagged": self.flagged,
        }


@dataclass(frozen=True)
class TrainingPlan:
    goal: str
    experience_level: int
    days_per_week: int
    weeks_duration: int
    weekly_split: tuple[PlannedDay, ...]
    phases: tuple[Phase, ...]
    estimated_calories_burned_per_week: int
    injury_areas: tuple[str, ...] = ()
    injury_notes: tuple[str, ...] = ()
    adjustments: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "goal": self.goal,
            "experience_level": self.experience_level,
            "days_per_week": self.days_per_week,
            "weeks_duration": self.weeks_duration,
            "weekly_split": [d.to_dict() for d in self.weekly_split],
            "phases": [p.to_dict() for p in self.phases],
            "estimated_calories_burned_per_week": self.estimated_calories_burned_per_week,
            "injury_areas": list(self.injury_areas),
            "injury_notes": list(self.injury_notes),
            "adjustments": list(self.adjustments),
        }


def validate_weeks(weeks_duration) -> int:
    if isinstance(weeks_duration, bool) or not isinstance(
        weeks_duration, numbers.Integral
    ):
        raise PlanValidationError(
            f"weeks_duration must be a whole number of weeks, got {weeks_duration!r}"
        )
    if weeks_duration <= 0:
        raise PlanValidationError(
            f"weeks_duration must be at least 1, got {weeks_duration}"
        )
    return int(weeks_duration)


class PlannerService:
    """Synthesizes periodized training plans from lookup tables."""

    def __init__(
        self,
        split_templates: Mapping[tuple[str, int], tuple[SplitDay, ...]] | None = None,
        periodization_templates: Mapping[tuple[str, int], tuple[PhaseArchetype, ...]]
        | None = None,
    ) -> None:
        self.split_templates = split_templates or SPLIT_TEMPLATES
        self.periodization_templates = periodization_templates or PERIODIZATION_TEMPLATES

    @staticmethod
    def resolve_goal(goal: str | None) -> tuple[str, str | None]:
        key = str(goal or "").strip().lower().replace(" ", "_").replace("-", "_")
        key = GOAL_ALIASES.get(key, key)
        if key in GOALS:
            return key, None
        logger.warning("unknown training goal {!r}, using general", goal)
        return "general", f"Unknown goal {goal!r}; using a general plan"

    @staticmethod
    def _clamped(value, default: int, low: int, high: int, name: str) -> tuple[int, str | None]:
        number = as_number(value)
        if number is None:
            return default, None
        clamped = int(MathTools.round_half_up(MathTools.clamp(number, low, high)))
        if clamped != number:
            logger.debug("clamping {}={} to {}", name, value, clamped)
            return clamped, f"{name} adjusted from {value} to {clamped}"
        return clamped, None

    def weekly_split(self, goal: str, days_per_week: int) -> tuple[SplitDay, ...]:
        return self.split_templates[(goal, days_per_week)]

    def partition_weeks(
        self, template: Iterable[PhaseArchetype], weeks_duration: int
    ) -> tuple[Phase, ...]:
        """Lay archetypes out over ``[1, weeks_duration]``.

        Later archetypes are dropped first when the plan is too short; plans
        of four or more weeks always close with a Deload, shorter plans have
        none.
        """
        archetypes = list(template)
        closing = None
        if archetypes and archetypes[-1].is_deload:
            closing = archetypes.pop()
        if weeks_duration >= MIN_WEEKS_FOR_DELOAD:
            available = weeks_duration - 1
            closing = closing or DELOAD
        else:
            available = weeks_duration
            closing = None
            archetypes = [a for a in archetypes if not a.is_deload]
        while len(archetypes) > available:
            archetypes.pop()
        while archetypes and archetypes[-1].is_deload:
            archetypes.pop()

        fixed = sum(a.fixed_weeks or 0 for a in archetypes)
        flexible = [a for a in archetypes if not a.fixed_weeks]
        shares = iter(
            MathTools.apportion([a.weight for a in flexible], available - fixed, minimum=1)
        )
        phases = []
        week = 1
        for archetype in archetypes:
            length = archetype.fixed_weeks or next(shares)
            phases.append(self._phase(archetype, week, week + length - 1))
            week += length
        if closing is not None:
            phases.append(self._phase(closing, week, week))
        return tuple(phases)

    @staticmethod
    def _phase(archetype: PhaseArchetype, start: int, end: int) -> Phase:
        return Phase(
            name=archetype.name,
            start_week=start,
            end_week=end,
            focus=archetype.focus,
            intensity=archetype.intensity,
            volume=archetype.volume,
            rest_periods=archetype.rest_periods,
            rpe=archetype.rpe,
            tips=archetype.tips,
            intensity_band=archetype.intensity_band,
        )

    @staticmethod
    def select_exercises(
        split: Iterable[SplitDay],
        equipment: frozenset[str],
        injuries: frozenset[str],
    ) -> tuple[PlannedDay, ...]:
        days = []
        for split_day in split:
            ordered = sorted(
                split_day.muscles,
                key=lambda m: MUSCLE_ORDER.index(m) if m in MUSCLE_ORDER else len(MUSCLE_ORDER),
            )
            choices = []
            for muscle in ordered:
                choice = choose_exercise(muscle, equipment, injuries)
                if choice is None:
                    logger.debug("no {} exercise fits equipment {}", muscle, sorted(equipment))
                    continue
                choices.append(choice)
            days.append(
                PlannedDay(split_day.day, split_day.focus, split_day.muscles, tuple(choices))
            )
        return tuple(days)

    @staticmethod
    def estimate_weekly_calories(
        days_per_week: int, experience_level: int, intensity_band: str
    ) -> int:
        minutes = SESSION_MINUTES[experience_level]
        return MathTools.round_half_up(
            days_per_week * minutes * ENERGY_COEFFICIENTS[intensity_band]
        )

    @staticmethod
    def injury_notes(areas: frozenset[str]) -> tuple[str, ...]:
        notes = []
        for area in sorted(areas):
            info = COMMON_INJURY_AREAS[area]
            notes.append(
                f"{area.replace('_', ' ').title()}: warm up with {info['warm_up_focus'].lower()}; "
                f"modify {', '.join(info['exercises_to_modify']).lower()}"
            )
        return tuple(notes)

    def generate(self, request: TrainingPlanRequest) -> TrainingPlan:
        weeks = validate_weeks(request.weeks_duration)
        adjustments = []
        goal, note = self.resolve_goal(request.goal)
        if note:
            adjustments.append(note)
        level, note = self._clamped(
            request.experience_level, DEFAULT_LEVEL, MIN_LEVEL, MAX_LEVEL, "experience_level"
        )
        if note:
            adjustments.append(note)
        days, note = self._clamped(
            request.days_per_week, DEFAULT_DAYS, MIN_DAYS, MAX_DAYS, "days_per_week"
        )
        if note:
            adjustments.append(note)

        equipment = normalize_equipment(request.equipment)
        injuries = parse_injuries(request.injuries)
        split = self.select_exercises(self.weekly_split(goal, days), equipment, injuries)
        phases = self.partition_weeks(self.periodization_templates[(goal, level)], weeks)
        calories = self.estimate_weekly_calories(days, level, phases[0].intensity_band)
        logger.debug(
            "generated {}-week {} plan: {} phases, {} days/week",
            weeks,
            goal,
            len(phases),
            days,
        )
        return TrainingPlan(
            goal=goal,
            experience_level=level,
            days_per_week=days,
            weeks_duration=weeks,
            weekly_split=split,
            phases=phases,
            estimated_calories_burned_per_week=calories,
            injury_areas=tuple(sorted(injuries)),
            injury_notes=self.injury_notes(injuries),
            adjustments=tuple(adjustments),
        )


def generate_training_plan(request: TrainingPlanRequest) -> TrainingPlan:
    return PlannerService().generate(request)
