import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import Tier, TierTable


def _table() -> TierTable:
    return TierTable(
        [
            Tier(0, "low", "Low", "#f00", "rest"),
            Tier(75, "high", "High", "#0f0", "go"),
            Tier(40, "mid", "Mid", "#ff0", "easy"),
        ]
    )


class TierTableTestCase(unittest.TestCase):
    def test_descending_order(self) -> None:
        table = _table()
        self.assertEqual([t.key for t in table], ["high", "mid", "low"])
        self.assertEqual(len(table), 3)

    def test_lookup_boundaries(self) -> None:
        table = _table()
        self.assertEqual(table.lookup(100).key, "high")
        self.assertEqual(table.lookup(75).key, "high")
        self.assertEqual(table.lookup(74).key, "mid")
        self.assertEqual(table.lookup(40).key, "mid")
        self.assertEqual(table.lookup(39.9).key, "low")
        self.assertEqual(table.lookup(0).key, "low")

    def test_every_score_has_one_tier(self) -> None:
        table = _table()
        thresholds = sorted(t.min_score for t in table)
        for score in range(0, 101):
            tier = table.lookup(score)
            higher = [th for th in thresholds if th > tier.min_score]
            self.assertLessEqual(tier.min_score, score)
            if higher:
                self.assertLess(score, higher[0])

    def test_get(self) -> None:
        table = _table()
        self.assertEqual(table.get("mid").label, "Mid")
        with self.assertRaises(KeyError):
            table.get("missing")

    def test_invalid_tables(self) -> None:
        with self.assertRaises(ValueError):
            TierTable([])
        with self.assertRaises(ValueError):
            TierTable([Tier(10, "a", "A", "", ""), Tier(50, "b", "B", "", "")])
        with self.assertRaises(ValueError):
            TierTable([Tier(0, "a", "A", "", ""), Tier(0, "b", "B", "", "")])
        with self.assertRaises(ValueError):
            TierTable([Tier(0, "a", "A", "", ""), Tier(120, "b", "B", "", "")])
        with self.assertRaises(ValueError):
            TierTable([Tier(0, "a", "A", "", ""), Tier(50, "a", "B", "", "")])


if __name__ == "__main__":
    unittest.main()
