import copy
import datetime
import os
import sys
import tempfile
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import HistoryRepository
from history_service import (
    NO_DATA,
    HistoryAggregator,
    HistoryEntry,
    InMemoryHistoryStore,
    Trend,
)

SUNDAY = datetime.date(2026, 10, 18)


class StubStore:
    def __init__(self, entries):
        self.entries = entries

    def read_history(self, range_days, end_date):
        return list(self.entries)

    def append_or_replace(self, date, record):
        raise AssertionError("read only")

    def delete(self, date):
        raise AssertionError("read only")


class NoDataTestCase(unittest.TestCase):
    def test_marker(self) -> None:
        self.assertFalse(NO_DATA)
        self.assertIsNot(NO_DATA, None)
        self.assertNotEqual(NO_DATA, 0)
        self.assertEqual(repr(NO_DATA), "NO_DATA")
        self.assertIs(copy.deepcopy(NO_DATA), NO_DATA)
        self.assertIs(type(NO_DATA)(), NO_DATA)


class HistoryAggregatorTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.history = HistoryAggregator(InMemoryHistoryStore())

    def test_save_replaces_same_date(self) -> None:
        self.history.save("2026-10-18", {"score": 40})
        self.history.save(SUNDAY, {"score": 80})
        entries = self.history.window(SUNDAY)
        self.assertEqual(entries, [HistoryEntry("2026-10-18", {"score": 80})])

    def test_save_rejects_non_mapping(self) -> None:
        with self.assertRaises(ValueError):
            self.history.save(SUNDAY, [1, 2])
        with self.assertRaises(ValueError):
            self.history.save("not a date", {"score": 1})

    def test_save_rejects_non_finite_values(self) -> None:
        for bad in (float("inf"), float("-inf"), float("nan")):
            with self.assertRaises(ValueError):
                self.history.save(SUNDAY, {"score": bad})
        with self.assertRaises(ValueError):
            self.history.save(SUNDAY, {"breakdown": {"sleep": [1.0, float("inf")]}})
        self.assertIs(self.history.average(SUNDAY), NO_DATA)

    def test_delete(self) -> None:
        self.history.save("2026-10-17", {"score": 40})
        self.history.save(SUNDAY, {"score": 80})
        self.assertEqual(self.history.delete(datetime.date(2026, 10, 17)), "2026-10-17")
        self.assertEqual(self.history.average(SUNDAY), 80.0)
        with self.assertRaises(ValueError):
            self.history.delete("2026-10-17")

    def test_stored_records_are_copies(self) -> None:
        record = {"score": 50, "categories": {"sleep": {"earned": 15}}}
        self.history.save(SUNDAY, record)
        record["categories"]["sleep"]["earned"] = 0
        read = self.history.window(SUNDAY)[0].record
        self.assertEqual(read["categories"]["sleep"]["earned"], 15)
        read["score"] = 0
        self.assertEqual(self.history.average(SUNDAY), 50.0)

    def test_average_over_present_days_only(self) -> None:
        self.history.save("2026-10-12", {"score": 60})
        self.history.save("2026-10-18", {"score": 80})
        self.assertEqual(self.history.average(SUNDAY), 70.0)
        self.assertEqual(self.history.average(SUNDAY, days=1), 80.0)

    def test_window_excludes_older_and_future_dates(self) -> None:
        self.history.save("2026-10-11", {"score": 10})
        self.history.save("2026-10-19", {"score": 10})
        self.history.save("2026-10-15", {"score": 90})
        self.assertEqual([e.date for e in self.history.window(SUNDAY)], ["2026-10-15"])
        self.assertEqual(self.history.average(SUNDAY), 90.0)

    def test_empty_history(self) -> None:
        self.assertIs(self.history.average(SUNDAY), NO_DATA)
        self.assertIs(self.history.trend(SUNDAY), NO_DATA)
        self.assertEqual(self.history.window(SUNDAY), [])

    def test_single_point_has_average_but_no_trend(self) -> None:
        self.history.save(SUNDAY, {"score": 0})
        self.assertEqual(self.history.average(SUNDAY), 0.0)
        self.assertIsNot(self.history.average(SUNDAY), NO_DATA)
        self.assertIs(self.history.trend(SUNDAY), NO_DATA)

    def test_trend_up(self) -> None:
        for day, score in (("2026-10-16", 50), ("2026-10-17", 60), ("2026-10-18", 70)):
            self.history.save(day, {"score": score})
        trend = self.history.trend(SUNDAY)
        self.assertIsInstance(trend, Trend)
        self.assertEqual(trend.direction, "up")
        self.assertAlmostEqual(trend.slope_per_day, 10.0)
        self.assertEqual(trend.points, 3)
        self.assertEqual((trend.first, trend.last), (50.0, 70.0))

    def test_trend_uses_calendar_offsets(self) -> None:
        self.history.save("2026-10-12", {"score": 80})
        self.history.save("2026-10-14", {"score": 60})
        self.history.save("2026-10-18", {"score": 20})
        trend = self.history.trend(SUNDAY)
        self.assertEqual(trend.direction, "down")
        self.assertAlmostEqual(trend.slope_per_day, -10.0)

    def test_flat_trend(self) -> None:
        self.history.save("2026-10-17", {"score": 55})
        self.history.save("2026-10-18", {"score": 55})
        self.assertEqual(self.history.trend(SUNDAY).direction, "flat")

    def test_other_fields(self) -> None:
        self.history.save("2026-10-17", {"weight": 80.5, "score": 1})
        self.history.save("2026-10-18", {"weight": 80.1})
        self.assertEqual(self.history.average(SUNDAY, field="weight"), 80.3)
        self.assertEqual(self.history.average(SUNDAY, field="score"), 1.0)
        self.assertIs(self.history.average(SUNDAY, field="steps"), NO_DATA)

    def test_weekly_series(self) -> None:
        self.history.save("2026-10-13", {"score": 64})
        self.history.save("2026-10-18", {"score": 71})
        slots = self.history.weekly_series(SUNDAY)
        self.assertEqual(len(slots), 7)
        self.assertEqual(
            [s["day"] for s in slots], ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        )
        self.assertEqual(slots[0]["date"], "2026-10-12")
        self.assertEqual(slots[-1]["date"], "2026-10-18")
        self.assertEqual(slots[1], {"date": "2026-10-13", "day": "Tue", "value": 64.0, "has_data": True})
        self.assertIsNone(slots[0]["value"])
        self.assertFalse(slots[0]["has_data"])
        self.assertEqual(sum(s["has_data"] for s in slots), 2)

    def test_weekly_series_without_data(self) -> None:
        slots = self.history.weekly_series("2026-10-21")
        self.assertEqual(slots[0]["day"], "Thu")
        self.assertTrue(all(s["value"] is None for s in slots))


class MalformedHistoryTestCase(unittest.TestCase):
    def test_bad_entries_are_skipped(self) -> None:
        store = StubStore(
            [
                HistoryEntry("2026-10-15", {"score": 60}),
                HistoryEntry("yesterday", {"score": 0}),
                HistoryEntry("2026-10-16", None),
                HistoryEntry("2026-10-17", {"score": "high"}),
                HistoryEntry("2026-10-18", {"score": 80}),
                HistoryEntry("2026-09-01", {"score": 0}),
            ]
        )
        history = HistoryAggregator(store)
        self.assertEqual(
            [e.date for e in history.window(SUNDAY)],
            ["2026-10-15", "2026-10-17", "2026-10-18"],
        )
        self.assertEqual(history.average(SUNDAY), 70.0)

    def test_duplicate_dates_keep_last(self) -> None:
        store = StubStore(
            [HistoryEntry("2026-10-18", {"score": 10}), HistoryEntry("2026-10-18", {"score": 30})]
        )
        self.assertEqual(HistoryAggregator(store).average(SUNDAY), 30.0)

    def test_non_finite_values_are_skipped(self) -> None:
        store = StubStore(
            [
                HistoryEntry("2026-10-15", {"score": 40}),
                HistoryEntry("2026-10-16", {"score": float("inf")}),
                HistoryEntry("2026-10-17", {"score": float("nan")}),
                HistoryEntry("2026-10-18", {"score": 60}),
            ]
        )
        history = HistoryAggregator(store)
        self.assertEqual(history.average(SUNDAY), 50.0)
        self.assertEqual(history.trend(SUNDAY).points, 2)
        slots = history.weekly_series(SUNDAY)
        self.assertEqual([s["value"] for s in slots[3:]], [40.0, None, None, 60.0])


class HistoryRepositoryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        handle, self.db_path = tempfile.mkstemp(suffix=".db")
        os.close(handle)
        os.remove(self.db_path)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_round_trip_and_replace(self) -> None:
        repo = HistoryRepository(self.db_path, kind="fitness")
        history = HistoryAggregator(repo)
        history.save("2026-10-17", {"score": 40})
        history.save("2026-10-17", {"score": 50})
        history.save("2026-10-18", {"score": 70, "tier": "good"})
        self.assertEqual(
            [e.date for e in repo.read_history(7, SUNDAY)], ["2026-10-17", "2026-10-18"]
        )
        self.assertEqual(history.average(SUNDAY), 60.0)
        self.assertEqual(history.window(SUNDAY)[-1].record, {"score": 70, "tier": "good"})

    def test_kinds_are_isolated(self) -> None:
        HistoryAggregator(HistoryRepository(self.db_path, "fitness")).save(SUNDAY, {"score": 90})
        recovery = HistoryAggregator(HistoryRepository(self.db_path, "recovery"))
        self.assertIs(recovery.average(SUNDAY), NO_DATA)

    def test_corrupt_record_is_skipped(self) -> None:
        repo = HistoryRepository(self.db_path)
        repo.append_or_replace("2026-10-17", {"score": 30})
        repo.execute(
            "INSERT INTO history_entries (kind, date, record) VALUES (?, ?, ?);",
            ("fitness", "2026-10-18", "{not json"),
        )
        history = HistoryAggregator(repo)
        self.assertEqual([e.date for e in history.window(SUNDAY)], ["2026-10-17"])
        self.assertEqual(history.average(SUNDAY), 30.0)

    def test_delete(self) -> None:
        repo = HistoryRepository(self.db_path)
        repo.append_or_replace("2026-10-18", {"score": 1})
        repo.delete("2026-10-18")
        self.assertEqual(repo.read_history(7, SUNDAY), [])
        with self.assertRaises(ValueError):
            repo.delete("2026-10-18")

    def test_existing_schema_is_reused(self) -> None:
        HistoryRepository(self.db_path).append_or_replace("2026-10-18", {"score": 5})
        entries = HistoryRepository(self.db_path).read_history(1, SUNDAY)
        self.assertEqual([e.date for e in entries], ["2026-10-18"])


if __name__ == "__main__":
    unittest.main()
