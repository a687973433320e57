# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from babykicks.kicks.debounce import EPISODE_WINDOW_MS, KickDebouncer


class TestKickDebouncer(unittest.TestCase):
    def test_first_tap_opens_episode(self) -> None:
        d = KickDebouncer()
        self.assertTrue(d.record_tap(1_000))
        self.assertEqual((d.count, d.raw_count), (1, 1))

    def test_taps_inside_window_are_raw_only(self) -> None:
        d = KickDebouncer()
        d.record_tap(0)
        self.assertFalse(d.record_tap(10_000))
        self.assertFalse(d.record_tap(120_000))
        self.assertEqual((d.count, d.raw_count), (1, 3))

    def test_window_boundary_is_exclusive(self) -> None:
        d = KickDebouncer()
        d.record_tap(0)
        self.assertFalse(d.record_tap(EPISODE_WINDOW_MS))
        self.assertTrue(d.record_tap(EPISODE_WINDOW_MS + 1))
        self.assertEqual((d.count, d.raw_count), (2, 3))

    def test_window_anchored_at_episode_start(self) -> None:
        # Taps every 100s never extend the window past the first tap's anchor.
        d = KickDebouncer()
        for ts in (0, 100_000, 200_000, 300_000, 400_000):
            d.record_tap(ts)
        self.assertEqual(d.count, 2)
        self.assertEqual(d.raw_count, 5)
        self.assertEqual(d.last_episode_start, 400_000)

    def test_reset(self) -> None:
        d = KickDebouncer()
        d.record_tap(0)
        d.record_tap(1)
        d.reset()
        self.assertEqual((d.count, d.raw_count, d.last_episode_start), (0, 0, None))
        self.assertTrue(d.record_tap(2))


if __name__ == "__main__":
    unittest.main()
