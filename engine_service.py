from __future__ import annotations

import copy
import datetime
import json
from typing import Callable, Iterable, Mapping

from loguru import logger

from cycling_service import (
    RefeedRecommendation,
    WeekSchedule,
    cycling_schedule,
    refeed_recommendation,
)
from deload_service import DeloadInput, DeloadResult, evaluate_deload
from history_service import HistoryAggregator, HistoryStore, InMemoryHistoryStore
from planner_service import PlannerService, TrainingPlan, TrainingPlanRequest
from scoring_service import (
    FitnessBreakdown,
    RecoveryInput,
    RecoveryResult,
    compute_fitness_breakdown,
    compute_recovery_score,
    daily_strain,
)
from settings_schema import EngineSettings


def _canonical(value):
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(v) for v in value), key=str)
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


class WellnessEngine:
    """Entry point tying the scoring, planning and history services together.

    Pure results are memoized per operation and input; every call gets its
    own copy of the result. History reads are never cached.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        store_factory: Callable[[str], HistoryStore] | None = None,
        planner: PlannerService | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self._store_factory = store_factory or (lambda kind: InMemoryHistoryStore())
        self.planner = planner or PlannerService()
        self._aggregators: dict[str, HistoryAggregator] = {}
        self._cache: dict[tuple[str, str], object] = {}

    def clear_cache(self) -> None:
        """Clear any memoized results."""
        self._cache.clear()

    def update_settings(self, settings: EngineSettings) -> None:
        """Swap in new settings; memoized results and history windows are reset."""
        self.settings = settings
        self._aggregators.clear()
        self.clear_cache()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _cached(self, op: str, payload, compute: Callable[[], object]):
        if not self.settings.cache_enabled:
            return compute()
        key = (op, json.dumps(_canonical(payload), sort_keys=True, default=str))
        if key in self._cache:
            logger.trace("cache hit for {}", op)
            return copy.deepcopy(self._cache[key])
        result = compute()
        self._cache[key] = result
        return copy.deepcopy(result)

    def fitness_score(
        self, daily_totals: Mapping, goals: Mapping | None = None
    ) -> FitnessBreakdown:
        merged = self.settings.goals()
        merged.update({k: v for k, v in (goals or {}).items() if v is not None})
        return self._cached(
            "fitness",
            {"totals": daily_totals, "goals": merged},
            lambda: compute_fitness_breakdown(
                daily_totals, merged, self.settings.max_reasons
            ),
        )

    def recovery_score(self, data: Mapping) -> RecoveryResult:
        return self._cached(
            "recovery",
            data,
            lambda: compute_recovery_score(
                RecoveryInput.from_dict(data), self.settings.max_reasons
            ),
        )

    def deload(self, data: Mapping) -> DeloadResult:
        return self._cached(
            "deload",
            data,
            lambda: evaluate_deload(
                DeloadInput.from_dict(data), self.settings.max_reasons
            ),
        )

    def training_plan(self, data: Mapping) -> TrainingPlan:
        return self._cached(
            "plan",
            data,
            lambda: self.planner.generate(TrainingPlanRequest.from_dict(data)),
        )

    def cycling_schedule(
        self,
        pattern_key: str,
        baseline_goal: int,
        overrides: Mapping | None = None,
        maintenance_calories: int | None = None,
        week_start: datetime.date | None = None,
    ) -> WeekSchedule:
        payload = {
            "pattern": pattern_key,
            "baseline": baseline_goal,
            "overrides": overrides or {},
            "maintenance": maintenance_calories,
            "week_start": week_start,
        }
        return self._cached(
            "cycling",
            payload,
            lambda: cycling_schedule(
                pattern_key, baseline_goal, overrides, maintenance_calories, week_start
            ),
        )

    def refeed(
        self, deficit_percent: float, maintenance_calories: int | None = None
    ) -> RefeedRecommendation:
        return self._cached(
            "refeed",
            {"deficit": deficit_percent, "maintenance": maintenance_calories},
            lambda: refeed_recommendation(deficit_percent, maintenance_calories),
        )

    def daily_strain(self, workouts: Iterable[Mapping]) -> float:
        return daily_strain(workouts)

    def history(self, kind: str) -> HistoryAggregator:
        if kind not in self._aggregators:
            self._aggregators[kind] = HistoryAggregator(
                self._store_factory(kind), self.settings.history_window_days
            )
        return self._aggregators[kind]

    def record_fitness(
        self, date, daily_totals: Mapping, goals: Mapping | None = None
    ) -> FitnessBreakdown:
        """Score a day and store it in the ``fitness`` history."""
        breakdown = self.fitness_score(daily_totals, goals)
        self.history("fitness").save(
            date,
            {
                "score": breakdown.score,
                "tier": breakdown.result.tier,
                "categories": copy.deepcopy(breakdown.categories),
            },
        )
        return breakdown
