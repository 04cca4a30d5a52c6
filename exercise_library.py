from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from loguru import logger


@dataclass(frozen=True)
class Exercise:
    name: str
    muscle: str
    equipment: frozenset[str] = frozenset()
    stresses: frozenset[str] = frozenset()


def _ex(name: str, muscle: str, equipment: Iterable[str] = (), stresses: Iterable[str] = ()) -> Exercise:
    return Exercise(name, muscle, frozenset(equipment), frozenset(stresses))


# Ordered by preference within each muscle group; bodyweight options last.
EXERCISE_LIBRARY: tuple[Exercise, ...] = (
    _ex("Barbell Bench Press", "chest", {"barbell", "bench"}, {"shoulders", "wrists"}),
    _ex("Dumbbell Bench Press", "chest", {"dumbbells", "bench"}, {"shoulders"}),
    _ex("Machine Chest Press", "chest", {"machine"}),
    _ex("Cable Fly", "chest", {"cable"}, {"shoulders"}),
    _ex("Dumbbell Floor Press", "chest", {"dumbbells"}),
    _ex("Push-Up", "chest", (), {"wrists", "shoulders"}),
    _ex("Overhead Press", "shoulders", {"barbell"}, {"shoulders", "lower_back"}),
    _ex("Dumbbell Shoulder Press", "shoulders", {"dumbbells"}, {"shoulders"}),
    _ex("Lateral Raise", "shoulders", {"dumbbells"}),
    _ex("Band Lateral Raise", "shoulders", {"resistance bands"}),
    _ex("Pike Push-Up", "shoulders", (), {"shoulders", "wrists"}),
    _ex("Close-Grip Bench Press", "triceps", {"barbell", "bench"}, {"wrists", "shoulders"}),
    _ex("Cable Triceps Pushdown", "triceps", {"cable"}),
    _ex("Overhead Dumbbell Extension", "triceps", {"dumbbells"}, {"shoulders"}),
    _ex("Bench Dip", "triceps", {"bench"}, {"shoulders", "wrists"}),
    _ex("Diamond Push-Up", "triceps", (), {"wrists"}),
    _ex("Deadlift", "back", {"barbell"}, {"lower_back", "hips"}),
    _ex("Barbell Row", "back", {"barbell"}, {"lower_back"}),
    _ex("Pull-Up", "back", {"pull-up bar"}, {"shoulders"}),
    _ex("Lat Pulldown", "back", {"cable"}),
    _ex("One-Arm Dumbbell Row", "back", {"dumbbells", "bench"}),
    _ex("Inverted Row", "back"),
    _ex("Barbell Curl", "biceps", {"barbell"}, {"wrists"}),
    _ex("Chin-Up", "biceps", {"pull-up bar"}, {"shoulders"}),
    _ex("Dumbbell Curl", "biceps", {"dumbbells"}),
    _ex("Cable Curl", "biceps", {"cable"}),
    _ex("Band Curl", "biceps", {"resistance bands"}),
    _ex("Doorway Curl", "biceps"),
    _ex("Face Pull", "rear delts", {"cable"}),
    _ex("Reverse Dumbbell Fly", "rear delts", {"dumbbells"}),
    _ex("Band Pull-Apart", "rear delts", {"resistance bands"}),
    _ex("Prone Y-T-W Raise", "rear delts"),
    _ex("Back Squat", "quadriceps", {"barbell"}, {"knees", "lower_back", "hips"}),
    _ex("Leg Press", "quadriceps", {"machine"}, {"knees"}),
    _ex("Goblet Squat", "quadriceps", {"dumbbells"}, {"knees"}),
    _ex("Walking Lunge", "quadriceps", (), {"knees", "hips"}),
    _ex("Bodyweight Squat", "quadriceps", (), {"knees"}),
    _ex("Romanian Deadlift", "hamstrings", {"barbell"}, {"lower_back", "hips"}),
    _ex("Lying Leg Curl", "hamstrings", {"machine"}),
    _ex("Dumbbell Romanian Deadlift", "hamstrings", {"dumbbells"}, {"lower_back"}),
    _ex("Nordic Curl", "hamstrings", (), {"knees"}),
    _ex("Sliding Leg Curl", "hamstrings"),
    _ex("Hip Thrust", "glutes", {"barbell", "bench"}, {"hips"}),
    _ex("Bulgarian Split Squat", "glutes", {"dumbbells", "bench"}, {"knees", "hips"}),
    _ex("Cable Kickback", "glutes", {"cable"}),
    _ex("Glute Bridge", "glutes"),
    _ex("Seated Calf Raise", "calves", {"machine"}),
    _ex("Dumbbell Calf Raise", "calves", {"dumbbells"}),
    _ex("Standing Calf Raise", "calves"),
    _ex("Hanging Leg Raise", "core", {"pull-up bar"}, {"shoulders", "lower_back"}),
    _ex("Cable Crunch", "core", {"cable"}),
    _ex("Plank", "core"),
    _ex("Dead Bug", "core"),
    _ex("Kettlebell Swing", "conditioning", {"kettlebell"}, {"lower_back", "hips"}),
    _ex("Rowing Machine Intervals", "conditioning", {"machine"}, {"lower_back"}),
    _ex("Bike Intervals", "conditioning", {"machine"}),
    _ex("Burpee", "conditioning", (), {"wrists", "knees", "shoulders"}),
    _ex("Jumping Jacks", "conditioning", (), {"knees"}),
    _ex("Shadow Boxing", "conditioning"),
    _ex("Yoga Flow", "mobility", (), {"wrists"}),
    _ex("Hip 90/90 Stretch", "mobility"),
    _ex("Thoracic Rotation", "mobility"),
)

KNOWN_EQUIPMENT = frozenset(
    item for ex in EXERCISE_LIBRARY for item in ex.equipment
)

EQUIPMENT_ALIASES = {
    "dumbbell": "dumbbells",
    "db": "dumbbells",
    "bands": "resistance bands",
    "band": "resistance bands",
    "resistance band": "resistance bands",
    "pullup bar": "pull-up bar",
    "pull up bar": "pull-up bar",
    "cables": "cable",
    "machines": "machine",
    "kettlebells": "kettlebell",
    "barbells": "barbell",
}
BODYWEIGHT_TOKENS = {"bodyweight", "none", "no equipment"}
FULL_GYM_TOKENS = {"full gym", "gym", "all"}

COMMON_INJURY_AREAS: dict[str, dict] = {
    "lower_back": {
        "risk_factors": ["Poor hip mobility", "Weak core", "Excessive spinal flexion under load"],
        "preventive_exercises": ["Bird dogs", "Dead bugs", "Pallof press", "Hip hinges", "McGill big 3"],
        "warm_up_focus": "Hip mobility and core activation",
        "exercises_to_modify": ["Deadlifts", "Squats", "Bent-over rows"],
    },
    "knees": {
        "risk_factors": ["Weak VMO", "Tight IT band", "Poor ankle mobility", "Valgus collapse"],
        "preventive_exercises": [
            "Terminal knee extensions",
            "Wall sits",
            "Ankle mobility drills",
            "Single-leg balance",
        ],
        "warm_up_focus": "Quad activation and ankle mobility",
        "exercises_to_modify": ["Deep squats", "Lunges", "Jump training"],
    },
    "shoulders": {
        "risk_factors": ["Poor scapular stability", "Tight chest/lats", "Excessive overhead pressing"],
        "preventive_exercises": [
            "Band pull-aparts",
            "Face pulls",
            "External rotations",
            "Scapular push-ups",
        ],
        "warm_up_focus": "Rotator cuff activation and scapular mobility",
        "exercises_to_modify": ["Overhead press", "Bench press", "Upright rows"],
    },
    "wrists": {
        "risk_factors": ["Poor wrist mobility", "Excessive gripping", "Improper front rack position"],
        "preventive_exercises": ["Wrist circles", "Prayer stretches", "Wrist curls", "Finger extensions"],
        "warm_up_focus": "Wrist mobilization",
        "exercises_to_modify": ["Front squats", "Clean & press", "Push-ups"],
    },
    "hips": {
        "risk_factors": ["Prolonged sitting", "Weak glutes", "Tight hip flexors"],
        "preventive_exercises": ["Hip 90/90 stretches", "Clamshells", "Glute bridges", "Pigeon pose"],
        "warm_up_focus": "Hip opening and glute activation",
        "exercises_to_modify": ["Squats", "Deadlifts", "Lunges"],
    },
}

INJURY_SYNONYMS = {
    "lower_back": ("lower back", "lower_back", "low back", "lumbar", "back", "spine", "disc"),
    "knees": ("knee", "knees", "acl", "mcl", "meniscus", "patella"),
    "shoulders": ("shoulder", "shoulders", "rotator cuff", "labrum"),
    "wrists": ("wrist", "wrists", "carpal"),
    "hips": ("hip", "hips", "hip flexor", "groin"),
}

GENERAL_INJURY_TIPS = (
    "Always warm up for 5-10 minutes before training",
    "Progress weight by no more than 5-10% per week",
    "Include mobility work 3-4 times per week",
    "Prioritize sleep (7-9 hours) for tissue recovery",
    "Stay hydrated - dehydrated tissues are more injury-prone",
    "Listen to sharp pain - stop the exercise immediately",
    "Ensure 48-72 hours rest between training the same muscle group",
    "Use proper breathing technique (exhale on exertion)",
)

PLATEAU_STRATEGIES: dict[str, tuple[dict, ...]] = {
    "strength": (
        {
            "name": "Pause Reps",
            "description": "Add 2-3 second pause at the bottom of each rep to eliminate momentum and build starting strength",
            "implementation": "Use 80-85% of normal working weight with 2-3 second pause at sticking point",
        },
        {
            "name": "Cluster Sets",
            "description": "Break a heavy set into mini-sets with 15-20 second rests between",
            "implementation": "5 x 1 with 15-20 seconds rest = 1 cluster set. Do 3-4 cluster sets.",
        },
        {
            "name": "Accommodating Resistance",
            "description": "Add bands or chains to change the strength curve",
            "implementation": "Add light bands to compound lifts for 2-3 weeks",
        },
        {
            "name": "Eccentric Overload",
            "description": "Use heavier than normal weight for the lowering phase",
            "implementation": "Use 110-120% 1RM for 3-5 second eccentrics with spotter",
        },
    ),
    "hypertrophy": (
        {
            "name": "Drop Sets",
            "description": "Immediately reduce weight and continue for more reps",
            "implementation": "After final working set, drop weight 20-30% and go to failure. Repeat 2-3 times.",
        },
        {
            "name": "Mechanical Drop Sets",
            "description": "Switch to an easier variation instead of reducing weight",
            "implementation": "Incline press -> Flat press -> Decline press, same weight",
        },
        {
            "name": "Time Under Tension",
            "description": "Slow down the eccentric and pause at peak contraction",
            "implementation": "4-0-2-1 tempo (4s down, 0 pause, 2s up, 1s squeeze)",
        },
        {
            "name": "Antagonist Supersets",
            "description": "Pair opposing muscle groups for greater neural drive",
            "implementation": "Bench press + Rows, Curls + Pushdowns",
        },
    ),
    "weight_loss": (
        {
            "name": "Refeed Day",
            "description": "Increase carbs to maintenance for 1-2 days to reset leptin",
            "implementation": "Eat at maintenance calories with 60% carbs for 1 day per week",
        },
        {
            "name": "Reverse Diet",
            "description": "Gradually increase calories by 100/week to raise metabolic rate",
            "implementation": "Add 100 calories per week for 4-6 weeks, then resume deficit",
        },
        {
            "name": "NEAT Increase",
            "description": "Boost Non-Exercise Activity Thermogenesis",
            "implementation": "Add 2,000 daily steps, take stairs, stand more, fidget more",
        },
        {
            "name": "Diet Break",
            "description": "Eat at maintenance for 1-2 weeks to prevent metabolic adaptation",
            "implementation": "Full 2 weeks at calculated TDEE, then resume deficit",
        },
    ),
}


def normalize_equipment(equipment: Iterable[str] | None) -> frozenset[str]:
    """Map user equipment names onto the library vocabulary.

    An empty collection means bodyweight only.
    """
    result: set[str] = set()
    for item in equipment or ():
        key = str(item).strip().lower()
        if not key or key in BODYWEIGHT_TOKENS:
            continue
        if key in FULL_GYM_TOKENS:
            result.update(KNOWN_EQUIPMENT)
            continue
        key = EQUIPMENT_ALIASES.get(key, key)
        if key not in KNOWN_EQUIPMENT:
            logger.debug("equipment {!r} is not used by any library exercise", item)
        result.add(key)
    return frozenset(result)


def parse_injuries(text: str | Iterable[str] | None) -> frozenset[str]:
    """Return the injury-area keys mentioned in free text."""
    if not text:
        return frozenset()
    if not isinstance(text, str):
        text = " ".join(str(t) for t in text)
    lowered = text.lower().replace("_", " ")
    found = set()
    for area, words in INJURY_SYNONYMS.items():
        for word in words:
            if re.search(r"\b" + re.escape(word.replace("_", " ")) + r"\b", lowered):
                found.add(area)
                break
    return frozenset(found)


@dataclass(frozen=True)
class ExerciseChoice:
    name: str
    muscle: str
    equipment: tuple[str, ...]
    flagged: bool = False
    note: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "muscle": self.muscle,
            "equipment": list(self.equipment),
            "flagged": self.flagged,
            "note": self.note,
        }


def available_exercises(muscle: str, equipment: frozenset[str]) -> list[Exercise]:
    return [
        ex for ex in EXERCISE_LIBRARY
        if ex.muscle == muscle and ex.equipment <= equipment
    ]


def choose_exercise(
    muscle: str, equipment: frozenset[str], injuries: frozenset[str]
) -> ExerciseChoice | None:
    """Pick the preferred exercise for ``muscle`` that the equipment allows.

    When the preferred exercise loads an injured area it is replaced by the
    first safe alternative, or kept and flagged when there is none. Returns
    ``None`` when no exercise for the muscle fits the equipment.
    """
    candidates = available_exercises(muscle, equipment)
    if not candidates:
        return None
    preferred = candidates[0]
    conflict = preferred.stresses & injuries
    if not conflict:
        return ExerciseChoice(preferred.name, muscle, tuple(sorted(preferred.equipment)))
    areas = ", ".join(sorted(a.replace("_", " ") for a in conflict))
    for alt in candidates[1:]:
        if not alt.stresses & injuries:
            return ExerciseChoice(
                alt.name,
                muscle,
                tuple(sorted(alt.equipment)),
                note=f"Replaces {preferred.name} to protect {areas}",
            )
    return ExerciseChoice(
        preferred.name,
        muscle,
        tuple(sorted(preferred.equipment)),
        flagged=True,
        note=f"Loads injured area ({areas}); use pain-free range or skip",
    )


def injury_prevention_plan(areas: Iterable[str] | str | None = None) -> dict:
    """Return prevention guidance for the given areas, or for all areas."""
    if isinstance(areas, str):
        found = parse_injuries(areas)
        keys = [k for k in COMMON_INJURY_AREAS if k in found]
    else:
        requested = [re.sub(r"\s+", "_", str(a).strip().lower()) for a in areas or ()]
        if requested:
            keys = [k for k in requested if k in COMMON_INJURY_AREAS]
        else:
            keys = list(COMMON_INJURY_AREAS)
    return {
        "areas": keys,
        "plans": {k: dict(COMMON_INJURY_AREAS[k]) for k in keys},
        "general_tips": list(GENERAL_INJURY_TIPS),
    }


def plateau_strategies(plateau_type: str | None) -> list[dict]:
    """Return plateau-breaking strategies, defaulting to hypertrophy."""
    key = (plateau_type or "").strip().lower().replace(" ", "_")
    return [dict(s) for s in PLATEAU_STRATEGIES.get(key, PLATEAU_STRATEGIES["hypertrophy"])]
