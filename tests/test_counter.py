# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import unittest

from babykicks.kicks.counter import KickCounter
from babykicks.kicks.models import AnomalyAnalysis, AnomalySeverity, CounterStatus, CountMethod
from tests._support import FakeClock


class TestKickCounter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.finished = []
        self.counter = KickCounter(clock=self.clock, on_finish=self.finished.append, tick_sec=0)

    def test_wrong_state_calls_are_rejected(self) -> None:
        self.assertFalse(self.counter.tap())
        self.assertIsNone(self.counter.finish())
        self.assertIsNone(self.counter.save())
        self.assertFalse(self.counter.discard())
        self.assertIsNone(self.counter.tick())

        self.assertTrue(self.counter.start(CountMethod.STANDARD_HOUR))
        self.assertFalse(self.counter.start(CountMethod.EXTENDED_TWO_HOUR))
        self.assertEqual(self.counter.method, CountMethod.STANDARD_HOUR)
        self.assertIsNone(self.counter.save())
        self.assertFalse(self.counter.discard())

    def test_taps_are_debounced(self) -> None:
        self.counter.start(CountMethod.STANDARD_HOUR)
        self.assertTrue(self.counter.tap())
        self.clock.advance(60_000)
        self.counter.tap()
        self.clock.advance(300_000)
        self.counter.tap()
        snap = self.counter.snapshot()
        self.assertEqual(snap.status, CounterStatus.ACTIVE)
        self.assertEqual((snap.count, snap.raw_count), (2, 3))

    def test_auto_finish_at_ceiling(self) -> None:
        self.counter.start(CountMethod.STANDARD_HOUR, week_of_pregnancy=30)
        start = self.counter.start_time
        for _ in range(3599):
            self.assertIsNone(self.counter.tick())
        self.assertEqual(self.counter.status, CounterStatus.ACTIVE)
        self.assertEqual(self.counter.snapshot().remaining_seconds, 1)

        session = self.counter.tick()
        self.assertIsNotNone(session)
        assert session is not None
        self.assertEqual(self.counter.status, CounterStatus.SUMMARY)
        self.assertEqual(session.duration_seconds, 3600)
        self.assertEqual(session.end_time, start + 3_600_000)
        self.assertEqual(session.week_of_pregnancy, 30)
        self.assertEqual(self.finished, [session])

        # Further ticks do nothing once finished.
        self.assertIsNone(self.counter.tick())
        self.assertEqual(self.counter.elapsed_seconds, 3600)
        self.assertEqual(len(self.finished), 1)

    def test_two_hour_ceiling(self) -> None:
        self.counter.start(CountMethod.EXTENDED_TWO_HOUR)
        for _ in range(3600):
            self.counter.tick()
        self.assertEqual(self.counter.status, CounterStatus.ACTIVE)
        for _ in range(3600):
            self.counter.tick()
        self.assertEqual(self.counter.status, CounterStatus.SUMMARY)
        self.assertEqual(self.counter.summary.duration_seconds, 7200)

    def test_duration_rounds_half_up(self) -> None:
        self.counter.start(CountMethod.STANDARD_HOUR)
        self.clock.advance(1_500)
        self.assertEqual(self.counter.finish().duration_seconds, 2)
        self.counter.discard()

        self.counter.start(CountMethod.STANDARD_HOUR)
        self.clock.advance(1_499)
        self.assertEqual(self.counter.finish().duration_seconds, 1)

    def test_early_finish_snapshot(self) -> None:
        self.counter.start(CountMethod.STANDARD_HOUR)
        self.counter.tap()
        self.clock.advance(600_000)
        session = self.counter.finish()
        assert session is not None
        self.assertEqual(session.count, 1)
        self.assertEqual(session.raw_count, 1)
        self.assertEqual(session.duration_seconds, 600)
        self.assertIsNone(session.anomaly_reason)
        self.assertEqual(self.counter.snapshot().summary, session)

    def test_save_hands_over_session_and_resets(self) -> None:
        self.counter.start(CountMethod.STANDARD_HOUR)
        self.counter.tap()
        session = self.counter.finish()
        saved = self.counter.save()
        self.assertEqual(saved, session)
        self.assertEqual(self.counter.status, CounterStatus.IDLE)
        self.assertIsNone(self.counter.summary)
        self.assertEqual(self.counter.snapshot().raw_count, 0)
        self.assertIsNone(self.counter.save())

    def test_discard_resets(self) -> None:
        self.counter.start(CountMethod.STANDARD_HOUR)
        self.counter.finish()
        self.assertTrue(self.counter.discard())
        self.assertEqual(self.counter.status, CounterStatus.IDLE)
        self.assertIsNone(self.counter.summary)
        self.assertTrue(self.counter.start(CountMethod.STANDARD_HOUR))

    def test_analysis_applies_once_and_by_id(self) -> None:
        self.counter.start(CountMethod.STANDARD_HOUR)
        session = self.counter.finish()
        assert session is not None
        first = AnomalyAnalysis(is_anomaly=True, severity=AnomalySeverity.high, message="low")
        second = AnomalyAnalysis(severity=AnomalySeverity.none, message="fine")

        self.assertFalse(self.counter.apply_analysis("other", first))
        self.assertTrue(self.counter.apply_analysis(session.id, first))
        self.assertFalse(self.counter.apply_analysis(session.id, second))
        self.assertEqual(self.counter.summary.anomaly_status, AnomalySeverity.high)
        self.assertEqual(self.counter.summary.anomaly_reason, "low")

    def test_failing_finish_callback_does_not_break_finish(self) -> None:
        def boom(_session):
            raise RuntimeError("dispatch failed")

        counter = KickCounter(clock=self.clock, on_finish=boom, tick_sec=0)
        counter.start(CountMethod.STANDARD_HOUR)
        with self.assertLogs("babykicks.kicks.counter", level="WARNING"):
            session = counter.finish()
        self.assertIsNotNone(session)
        self.assertEqual(counter.status, CounterStatus.SUMMARY)


class TestKickCounterTicker(unittest.IsolatedAsyncioTestCase):
    async def test_ticker_advances_and_stops_on_finish(self) -> None:
        clock = FakeClock()
        counter = KickCounter(clock=clock, tick_sec=0.01)
        counter.start(CountMethod.STANDARD_HOUR)
        ticker = counter._ticker
        self.assertIsNotNone(ticker)

        await asyncio.sleep(0.1)
        self.assertGreater(counter.elapsed_seconds, 0)

        counter.finish()
        self.assertIsNone(counter._ticker)
        await asyncio.sleep(0.02)
        self.assertTrue(ticker.done())
        elapsed = counter.elapsed_seconds
        await asyncio.sleep(0.05)
        self.assertEqual(counter.elapsed_seconds, elapsed)

    async def test_ticker_cancelled_on_close(self) -> None:
        counter = KickCounter(clock=FakeClock(), tick_sec=0.01)
        counter.start(CountMethod.STANDARD_HOUR)
        ticker = counter._ticker
        counter.close()
        await asyncio.sleep(0.02)
        self.assertTrue(ticker.done())


if __name__ == "__main__":
    unittest.main()
