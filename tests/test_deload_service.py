import os
import sys
import unittest
from dataclasses import replace

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from deload_service import DELOAD_TIERS, DeloadInput, evaluate_deload

BASE = DeloadInput(
    weeks_since_deload=5,
    sleep_quality=6,
    performance_trend="stable",
    mood=6,
    soreness=4,
    motivation=6,
)


class DeloadAssessorTestCase(unittest.TestCase):
    def test_worked_example(self) -> None:
        result = evaluate_deload(BASE)
        self.assertEqual(result.fatigue, 65)
        self.assertEqual(result.urgency, "moderate")
        self.assertEqual(result.result.label, "Consider a Deload")
        self.assertTrue(result.recommendation.startswith("Consider a Deload"))
        self.assertTrue(result.should_deload)
        self.assertEqual(result.next_deload_in_weeks, 1)

    def test_fresh_athlete(self) -> None:
        data = DeloadInput(0, 10, "improving", 10, 1, 10)
        result = evaluate_deload(data)
        self.assertEqual(result.fatigue, 0)
        self.assertEqual(result.urgency, "none")
        self.assertEqual(result.result.label, "Keep Training")
        self.assertEqual(result.reasons, ())
        self.assertFalse(result.should_deload)
        self.assertEqual(result.next_deload_in_weeks, 6)

    def test_overreached_athlete_and_reason_order(self) -> None:
        data = DeloadInput(8, 3, "declining", 4, 8, 3)
        result = evaluate_deload(data)
        self.assertEqual(result.fatigue, 100)
        self.assertEqual(result.urgency, "high")
        self.assertEqual(
            result.reasons,
            (
                "6+ weeks without a deload",
                "High muscle soreness",
                "Poor sleep quality",
                "Low training motivation",
                "Low mood/energy",
                "Performance is declining",
            ),
        )
        limited = evaluate_deload(data, max_reasons=2)
        self.assertEqual(len(limited.reasons), 2)

    def test_unbounded_weeks_are_clamped(self) -> None:
        capped = evaluate_deload(replace(BASE, weeks_since_deload=52))
        for weeks in (float("inf"), 1e300):
            result = evaluate_deload(replace(BASE, weeks_since_deload=weeks))
            self.assertEqual(result.to_dict(), capped.to_dict())
        self.assertEqual(capped.fatigue, evaluate_deload(replace(BASE, weeks_since_deload=8)).fatigue)
        self.assertEqual(capped.next_deload_in_weeks, 1)
        floor = evaluate_deload(replace(BASE, weeks_since_deload=float("-inf")))
        self.assertEqual(floor.terms["weeks"], 0)

    def test_tier_boundaries(self) -> None:
        self.assertEqual(DELOAD_TIERS.lookup(70).key, "high")
        self.assertEqual(DELOAD_TIERS.lookup(69).key, "moderate")
        self.assertEqual(DELOAD_TIERS.lookup(50).key, "moderate")
        self.assertEqual(DELOAD_TIERS.lookup(49).key, "low")
        self.assertEqual(DELOAD_TIERS.lookup(25).key, "low")
        self.assertEqual(DELOAD_TIERS.lookup(24).key, "none")

    def test_neutral_defaults(self) -> None:
        result = evaluate_deload(DeloadInput())
        self.assertEqual(result.fatigue, 68)
        self.assertEqual(result.reasons, ("4+ weeks of continuous training",))

    def test_out_of_range_inputs_are_clamped(self) -> None:
        clamped = evaluate_deload(replace(BASE, sleep_quality=15, soreness=-2))
        explicit = evaluate_deload(replace(BASE, sleep_quality=10, soreness=1))
        self.assertEqual(clamped.fatigue, explicit.fatigue)
        negative_weeks = evaluate_deload(replace(BASE, weeks_since_deload=-3))
        zero_weeks = evaluate_deload(replace(BASE, weeks_since_deload=0))
        self.assertEqual(negative_weeks.fatigue, zero_weeks.fatigue)

    def test_trend_aliases(self) -> None:
        unknown = evaluate_deload(replace(BASE, performance_trend="sideways"))
        self.assertEqual(unknown.fatigue, 65)
        stagnant = evaluate_deload(replace(BASE, performance_trend="Stagnant"))
        self.assertEqual(stagnant.fatigue, 65)
        self.assertIn("Performance has stagnated", stagnant.reasons)

    def test_monotonic_in_load_factors(self) -> None:
        previous = -1
        for weeks in range(0, 14):
            fatigue = evaluate_deload(replace(BASE, weeks_since_deload=weeks)).fatigue
            self.assertGreaterEqual(fatigue, previous)
            previous = fatigue
        previous = -1
        for soreness in range(1, 11):
            fatigue = evaluate_deload(replace(BASE, soreness=soreness)).fatigue
            self.assertGreaterEqual(fatigue, previous)
            previous = fatigue
        previous = -1
        for trend in ("improving", "stable", "declining"):
            fatigue = evaluate_deload(replace(BASE, performance_trend=trend)).fatigue
            self.assertGreaterEqual(fatigue, previous)
            previous = fatigue

    def test_monotonic_in_recovery_factors(self) -> None:
        for field in ("sleep_quality", "mood", "motivation"):
            previous = 101
            for rating in range(1, 11):
                fatigue = evaluate_deload(replace(BASE, **{field: rating})).fatigue
                self.assertLessEqual(fatigue, previous)
                previous = fatigue

    def test_deterministic(self) -> None:
        self.assertEqual(evaluate_deload(BASE).to_dict(), evaluate_deload(BASE).to_dict())

    def test_from_dict(self) -> None:
        data = DeloadInput.from_dict({"weeks_since_deload": 2, "unknown": 1})
        self.assertEqual(data.weeks_since_deload, 2)
        self.assertIsNone(data.mood)


if __name__ == "__main__":
    unittest.main()
