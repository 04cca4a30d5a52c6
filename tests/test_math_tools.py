import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import MathTools


class MathToolsTestCase(unittest.TestCase):
    def test_clamp(self) -> None:
        self.assertEqual(MathTools.clamp(5, 0, 10), 5)
        self.assertEqual(MathTools.clamp(-1, 0, 10), 0)
        self.assertEqual(MathTools.clamp(11, 0, 10), 10)
        with self.assertRaises(ValueError):
            MathTools.clamp(1, 2, 1)

    def test_round_half_up(self) -> None:
        self.assertEqual(MathTools.round_half_up(2.5), 3)
        self.assertEqual(MathTools.round_half_up(64.5), 65)
        self.assertEqual(MathTools.round_half_up(64.49), 64)
        self.assertEqual(MathTools.round_half_up(-2.5), -3)
        self.assertEqual(MathTools.round_half_up(0), 0)

    def test_normalize(self) -> None:
        self.assertAlmostEqual(MathTools.normalize(5, 0, 10), 0.5)
        self.assertAlmostEqual(MathTools.normalize(15, 0, 10), 1.0)
        self.assertAlmostEqual(MathTools.normalize(-3, 0, 10), 0.0)
        self.assertAlmostEqual(MathTools.normalize(2, 1, 5, invert=True), 0.75)
        with self.assertRaises(ValueError):
            MathTools.normalize(1, 5, 5)

    def test_apportion(self) -> None:
        self.assertEqual(MathTools.apportion([3, 4, 3], 10, minimum=1), [3, 4, 3])
        self.assertEqual(MathTools.apportion([1, 1, 1], 10), [4, 3, 3])
        self.assertEqual(MathTools.apportion([0, 0], 4), [2, 2])
        self.assertEqual(MathTools.apportion([], 0), [])
        for total in range(3, 30):
            parts = MathTools.apportion([5, 1, 2], total, minimum=1)
            self.assertEqual(sum(parts), total)
            self.assertTrue(all(p >= 1 for p in parts))

    def test_apportion_errors(self) -> None:
        with self.assertRaises(ValueError):
            MathTools.apportion([1, 1, 1], 2, minimum=1)
        with self.assertRaises(ValueError):
            MathTools.apportion([1, -1], 4)
        with self.assertRaises(ValueError):
            MathTools.apportion([], 3)

    def test_largest_remainder(self) -> None:
        self.assertEqual(MathTools.largest_remainder([2.5, 2.5], 5), [3, 2])
        self.assertEqual(MathTools.largest_remainder([1.2, 2.3, 3.5], 7), [1, 2, 4])
        self.assertEqual(MathTools.largest_remainder([12.5, 10, 7.5], 30), [13, 10, 7])
        self.assertEqual(sum(MathTools.largest_remainder([0.4, 0.4, 0.4], 1)), 1)

    def test_slope(self) -> None:
        self.assertAlmostEqual(MathTools.slope([0, 1, 2], [1, 3, 5]), 2.0)
        self.assertAlmostEqual(MathTools.slope([0, 2], [50, 70]), 10.0)
        self.assertEqual(MathTools.slope([1, 1], [3, 4]), 0.0)
        with self.assertRaises(ValueError):
            MathTools.slope([1], [2])
        with self.assertRaises(ValueError):
            MathTools.slope([1, 2], [2])


if __name__ == "__main__":
    unittest.main()
