# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import unittest
from datetime import date, timedelta

import httpx

from babykicks.app_db import MemoryKeyValueStore
from babykicks.context import AppContext
from babykicks.i18n import Language
from babykicks.kicks.anomaly import AnomalyEvaluator
from babykicks.kicks.models import AnomalyAnalysis, AnomalySeverity, CounterStatus, CountMethod
from babykicks.kicks.storage import GUEST_HISTORY_KEY, HistoryStore, storage_key
from babykicks.profile.auth import MockGoogleAuthProvider
from babykicks.profile.models import UserProfile
from babykicks.profile.storage import load_profile
from tests._support import FakeClock, GatedHandler, advisory_client, completion, make_session

ACCOUNT_ID = "google_1092837465"

HIGH_RESULT = {
    "isAnomaly": True,
    "severity": "high",
    "message": "Much lower than usual.",
    "medicalContext": "Contact your doctor.",
}


class TestAppContext(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.kv = MemoryKeyValueStore()
        self.clock = FakeClock()
        self.ctx = AppContext(
            store=self.kv,
            advisory=advisory_client(api_key=None),
            auth=MockGoogleAuthProvider(),
            clock=self.clock,
            tick_sec=0,
        )
        self.ctx.set_profile(
            UserProfile(
                name="Mia",
                due_date=date.today() + timedelta(days=100),
                language=Language.en,
                timezone="UTC",
            )
        )
        await self.ctx.start()

    async def asyncTearDown(self) -> None:
        await self.ctx.close()

    def _count_low_session(self):
        """Start, tap once and finish after 4000s: the guideline rule flags it."""
        self.assertTrue(self.ctx.start_counting(CountMethod.STANDARD_HOUR))
        self.ctx.counter.tap()
        self.clock.advance(4_000_000)
        session = self.ctx.counter.finish()
        self.assertIsNotNone(session)
        return session

    async def test_session_carries_current_week(self) -> None:
        session = self._count_low_session()
        self.assertIn(session.week_of_pregnancy, (25, 26))

    async def test_discard_before_analysis_keeps_history_empty(self) -> None:
        self._count_low_session()
        self.assertTrue(self.ctx.discard_session())
        await self.ctx.drain()

        self.assertEqual(self.ctx.history, [])
        self.assertIsNone(self.kv.get(GUEST_HISTORY_KEY))
        self.assertEqual(self.ctx.counter.status, CounterStatus.IDLE)

    async def test_save_before_analysis_patches_history_once(self) -> None:
        session = self._count_low_session()
        saved = self.ctx.save_session()
        self.assertEqual(saved.id, session.id)
        self.assertIsNone(self.ctx.history[0].anomaly_reason)

        await self.ctx.drain()
        self.assertEqual(len(self.ctx.history), 1)
        self.assertEqual(self.ctx.history[0].anomaly_status, AnomalySeverity.medium)
        stored = HistoryStore(self.kv).load(None)
        self.assertEqual(stored[0].anomaly_status, AnomalySeverity.medium)

        late = AnomalyAnalysis(severity=AnomalySeverity.high, message="late")
        self.assertFalse(self.ctx.apply_analysis(session.id, late))
        self.assertEqual(self.ctx.history[0].anomaly_status, AnomalySeverity.medium)

    async def test_analysis_before_save_lands_in_summary(self) -> None:
        session = self._count_low_session()
        await self.ctx.drain()
        self.assertEqual(self.ctx.counter.summary.anomaly_status, AnomalySeverity.medium)

        self.ctx.save_session()
        self.assertEqual(self.ctx.history[0].id, session.id)
        self.assertEqual(self.ctx.history[0].anomaly_status, AnomalySeverity.medium)

    async def test_login_merges_guest_history_into_account(self) -> None:
        remote = make_session("remote", self.clock.now - 86_400_000)
        HistoryStore(self.kv).save([remote], ACCOUNT_ID)

        local = self._count_low_session()
        self.ctx.save_session()
        await self.ctx.drain()

        account = await self.ctx.login()
        self.assertEqual(account.id, ACCOUNT_ID)
        self.assertEqual(self.ctx.account_id, ACCOUNT_ID)
        self.assertEqual([s.id for s in self.ctx.history], ["remote", local.id])
        self.assertEqual(len(HistoryStore(self.kv).load(ACCOUNT_ID)), 2)
        self.assertIsNotNone(self.kv.get(storage_key(ACCOUNT_ID)))
        self.assertTrue(load_profile(self.kv).is_authenticated)

        # Logging in again does not duplicate anything.
        await self.ctx.login()
        self.assertEqual(len(self.ctx.history), 2)

    async def test_sessions_after_login_go_to_account_storage(self) -> None:
        await self.ctx.login()
        session = self._count_low_session()
        self.ctx.save_session()
        await self.ctx.drain()

        self.assertEqual([s.id for s in HistoryStore(self.kv).load(ACCOUNT_ID)], [session.id])
        self.assertEqual(HistoryStore(self.kv).load(None), [])

    async def test_logout_switches_back_to_guest_history(self) -> None:
        guest_session = self._count_low_session()
        self.ctx.save_session()
        await self.ctx.login()
        self.clock.advance(10_000_000)
        self._count_low_session()
        self.ctx.save_session()
        await self.ctx.drain()
        self.assertEqual(len(self.ctx.history), 2)

        await self.ctx.logout()
        self.assertIsNone(self.ctx.account_id)
        self.assertEqual([s.id for s in self.ctx.history], [guest_session.id])
        self.assertFalse(load_profile(self.kv).is_authenticated)

    async def test_sorted_history_orders_by_start(self) -> None:
        store = HistoryStore(self.kv)
        later = make_session("later", self.clock.now)
        earlier = make_session("earlier", self.clock.now - 3_600_000)
        store.append(self.ctx.history, later)
        store.append(self.ctx.history, earlier)
        self.assertEqual([s.id for s in self.ctx.sorted_history()], ["earlier", "later"])

    def _hold_remote_analysis(self) -> asyncio.Event:
        """Route evaluation to a remote endpoint that answers only once the gate opens."""
        gate = asyncio.Event()
        handler = GatedHandler(gate, httpx.Response(200, json=completion(HIGH_RESULT)))
        self.ctx.evaluator = AnomalyEvaluator(advisory_client(handler))
        return gate

    async def test_analysis_after_logout_patches_account_copy(self) -> None:
        await self.ctx.login()
        gate = self._hold_remote_analysis()
        session = self._count_low_session()
        self.ctx.save_session()
        await self.ctx.logout()

        gate.set()
        await self.ctx.drain()

        stored = HistoryStore(self.kv).load(ACCOUNT_ID)
        self.assertEqual([s.id for s in stored], [session.id])
        self.assertEqual(stored[0].anomaly_status, AnomalySeverity.high)
        self.assertTrue(stored[0].anomaly_reason.startswith("Much lower than usual."))
        # The active guest history is untouched.
        self.assertEqual(self.ctx.history, [])
        self.assertEqual(HistoryStore(self.kv).load(None), [])

    async def test_analysis_after_login_patches_both_copies(self) -> None:
        gate = self._hold_remote_analysis()
        session = self._count_low_session()
        self.ctx.save_session()
        await self.ctx.login()

        gate.set()
        await self.ctx.drain()

        self.assertEqual(self.ctx.history[0].anomaly_status, AnomalySeverity.high)
        account_copy = HistoryStore(self.kv).load(ACCOUNT_ID)
        guest_copy = HistoryStore(self.kv).load(None)
        self.assertEqual([s.id for s in guest_copy], [session.id])
        self.assertEqual(account_copy[0].anomaly_status, AnomalySeverity.high)
        self.assertEqual(guest_copy[0].anomaly_status, AnomalySeverity.high)

    async def test_failing_evaluation_is_logged_not_raised(self) -> None:
        class BrokenEvaluator:
            async def evaluate(self, *args, **kwargs):
                raise RuntimeError("evaluator crashed")

        self.ctx.evaluator = BrokenEvaluator()
        with self.assertLogs("babykicks.context", level="WARNING"):
            self._count_low_session()
            self.ctx.save_session()
            await self.ctx.drain()

        self.assertIsNone(self.ctx.history[0].anomaly_reason)
        self.assertEqual(self.ctx.counter.status, CounterStatus.IDLE)


if __name__ == "__main__":
    unittest.main()
