import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from engine_service import WellnessEngine
from history_service import NO_DATA, InMemoryHistoryStore
from settings_schema import EngineSettings

PERFECT_DAY = {
    "calories": 2000,
    "protein": 150,
    "water": 8,
    "exercise_minutes": 30,
    "sleep_hours": 8,
    "fasting_completed": True,
    "habits_completed": 2,
    "habits_total": 2,
}


class WellnessEngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = WellnessEngine()

    def test_results_are_memoized(self) -> None:
        first = self.engine.fitness_score(PERFECT_DAY)
        second = self.engine.fitness_score(dict(PERFECT_DAY))
        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertEqual(first.score, 100)
        self.assertEqual(self.engine.cache_size, 1)
        self.engine.fitness_score({"calories": 1500})
        self.assertEqual(self.engine.cache_size, 2)

    def test_clear_cache(self) -> None:
        first = self.engine.deload({"weeks_since_deload": 5})
        self.engine.clear_cache()
        self.assertEqual(self.engine.cache_size, 0)
        second = self.engine.deload({"weeks_since_deload": 5})
        self.assertIsNot(first, second)
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_cached_results_are_independent_copies(self) -> None:
        first = self.engine.fitness_score({"calories": 2000})
        first.categories["nutrition"]["earned"] = 99
        first.result.contributions.clear()
        second = self.engine.fitness_score({"calories": 2000})
        self.assertEqual(second.categories["nutrition"], {"earned": 25, "max": 25})
        self.assertTrue(second.result.contributions)
        self.assertEqual(self.engine.cache_size, 1)

    def test_update_settings_resets_cache_and_history(self) -> None:
        self.engine.deload({"weeks_since_deload": 5})
        history = self.engine.history("sleep")
        self.engine.update_settings(EngineSettings(max_reasons=1, history_window_days=14))
        self.assertEqual(self.engine.cache_size, 0)
        self.assertIsNot(self.engine.history("sleep"), history)
        self.assertEqual(self.engine.history("sleep").default_days, 14)

    def test_cache_can_be_disabled(self) -> None:
        engine = WellnessEngine(EngineSettings(cache_enabled=False))
        first = engine.recovery_score({"energy": 4})
        second = engine.recovery_score({"energy": 4})
        self.assertIsNot(first, second)
        self.assertEqual(engine.cache_size, 0)

    def test_operations_do_not_share_keys(self) -> None:
        self.engine.deload({})
        self.engine.recovery_score({})
        self.assertEqual(self.engine.cache_size, 2)

    def test_set_and_list_inputs_share_a_key(self) -> None:
        first = self.engine.training_plan({"goal": "strength", "equipment": {"bench", "barbell"}})
        second = self.engine.training_plan({"goal": "strength", "equipment": ["barbell", "bench"]})
        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertEqual(self.engine.cache_size, 1)

    def test_cycling_and_refeed(self) -> None:
        monday = datetime.date(2026, 10, 19)
        schedule = self.engine.cycling_schedule("standard", 2000, week_start=monday)
        again = self.engine.cycling_schedule("standard", 2000, {}, None, monday)
        self.assertEqual(schedule.to_dict(), again.to_dict())
        self.assertEqual(self.engine.cache_size, 1)
        self.assertEqual(schedule.total_calories, 14000)
        self.assertEqual(self.engine.refeed(20).frequency_days, 9)

    def test_settings_goals_and_reason_limit(self) -> None:
        engine = WellnessEngine(EngineSettings(calorie_goal=2500, max_reasons=1))
        breakdown = engine.fitness_score({"calories": 2500, "protein": 0})
        self.assertEqual(breakdown.categories["nutrition"]["earned"], 25)
        self.assertEqual(len(breakdown.result.reasons), 1)
        overridden = engine.fitness_score({"calories": 2500}, {"calories": 2000, "water": None})
        self.assertLess(overridden.categories["nutrition"]["earned"], 25)

    def test_deload_reasons_follow_reason_limit(self) -> None:
        overreached = {
            "weeks_since_deload": 8,
            "sleep_quality": 3,
            "performance_trend": "declining",
            "mood": 4,
            "soreness": 8,
            "motivation": 3,
        }
        self.assertEqual(len(self.engine.deload(overreached).reasons), 3)
        engine = WellnessEngine(EngineSettings(max_reasons=1))
        self.assertEqual(
            engine.deload(overreached).reasons, ("6+ weeks without a deload",)
        )

    def test_daily_strain(self) -> None:
        self.assertEqual(self.engine.daily_strain([{"type": "hiit", "duration_minutes": 60}]), 9.0)

    def test_record_fitness_feeds_history(self) -> None:
        sunday = datetime.date(2026, 10, 18)
        self.engine.record_fitness("2026-10-17", {})
        self.engine.record_fitness(sunday, PERFECT_DAY)
        history = self.engine.history("fitness")
        self.assertEqual(history.average(sunday), 75.0)
        self.assertEqual(history.window(sunday)[-1].record["tier"], "elite")
        self.assertEqual(history.trend(sunday).direction, "up")
        self.assertIs(self.engine.history("recovery").average(sunday), NO_DATA)

    def test_recorded_history_is_detached_from_result(self) -> None:
        sunday = datetime.date(2026, 10, 18)
        breakdown = self.engine.record_fitness(sunday, PERFECT_DAY)
        breakdown.categories["sleep"]["earned"] = 0
        stored = self.engine.history("fitness").window(sunday)[-1].record
        self.assertEqual(stored["categories"]["sleep"], {"earned": 15, "max": 15})
        stored["score"] = 0
        self.assertEqual(self.engine.history("fitness").average(sunday), 100.0)

    def test_history_uses_store_factory_per_kind(self) -> None:
        stores = {}

        def factory(kind):
            stores[kind] = InMemoryHistoryStore()
            return stores[kind]

        engine = WellnessEngine(store_factory=factory)
        self.assertIs(engine.history("sleep"), engine.history("sleep"))
        engine.history("sleep").save("2026-10-18", {"hours": 7})
        engine.history("weight")
        self.assertEqual(sorted(stores), ["sleep", "weight"])
        self.assertEqual(len(stores["sleep"]), 1)
        self.assertEqual(len(stores["weight"]), 0)


if __name__ == "__main__":
    unittest.main()
