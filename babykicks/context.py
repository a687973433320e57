# -*- coding: utf-8 -*-
"""Application session context.

Owns the user profile, the active account's history list and the kick counter.
Every mutation runs on the event loop. Anomaly results come back as
``(session_id, AnomalyAnalysis)`` messages on a queue and are reconciled by id:
they patch the pending summary, the saved history entry, or are dropped when
the session was discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Set, Tuple

from .advisory.client import AdvisoryClient, AdvisorySettings
from .app_db import KeyValueStore, SQLiteKeyValueStore
from .config import Settings
from .i18n import Language
from .insights.cache import InsightCache
from .kicks.anomaly import AnomalyEvaluator
from .kicks.counter import Clock, KickCounter
from .kicks.models import AnomalyAnalysis, CountMethod, KickSession
from .kicks.storage import GUEST_ACCOUNT_ID, HistoryStore, sort_by_start, storage_key
from .profile.auth import GUEST_ACCOUNT, AuthProvider, MockGoogleAuthProvider
from .profile.models import AccountInfo, PregnancyProgress, UserProfile
from .profile.progress import pregnancy_progress, today_in
from .profile.storage import load_profile, save_profile

logger = logging.getLogger(__name__)

AnalysisMessage = Tuple[str, AnomalyAnalysis]


class AppContext:
    def __init__(
        self,
        *,
        store: KeyValueStore,
        advisory: AdvisoryClient,
        auth: AuthProvider,
        clock: Optional[Clock] = None,
        tick_sec: float = 1.0,
        default_language: Language | str = Language.zh,
        default_timezone: str = "Asia/Shanghai",
    ) -> None:
        self.store = store
        self.history_store = HistoryStore(store)
        self.evaluator = AnomalyEvaluator(advisory)
        self.insights = InsightCache(store, advisory)
        self.auth = auth
        self.counter = KickCounter(clock=clock, on_finish=self._dispatch_analysis, tick_sec=tick_sec)
        self.default_language = Language(default_language)
        self.default_timezone = default_timezone

        self.profile: Optional[UserProfile] = load_profile(store)
        self.history: List[KickSession] = self.history_store.load(self.account_id)

        self._results: Optional[asyncio.Queue] = None
        self._consumer: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        # Saved, not yet analyzed session id -> account it was saved under.
        self._owners: Dict[str, Optional[str]] = {}

    @classmethod
    def from_settings(cls, cfg: Settings) -> "AppContext":
        return cls(
            store=SQLiteKeyValueStore(cfg.db_path),
            advisory=AdvisoryClient(AdvisorySettings.from_settings(cfg)),
            auth=MockGoogleAuthProvider(delay_sec=cfg.auth_delay_sec),
            tick_sec=cfg.tick_sec,
            default_language=cfg.default_language,
            default_timezone=cfg.default_timezone,
        )

    # ── derived state ───────────────────────────────────────
    @property
    def account_id(self) -> Optional[str]:
        return self.profile.account_id if self.profile else None

    @property
    def language(self) -> Language:
        return self.profile.language if self.profile else self.default_language

    @property
    def timezone(self) -> str:
        return self.profile.timezone if self.profile else self.default_timezone

    def progress(self) -> Optional[PregnancyProgress]:
        if self.profile is None:
            return None
        return pregnancy_progress(self.profile.due_date, today_in(self.profile.timezone))

    def current_week(self) -> int:
        progress = self.progress()
        return progress.weeks if progress else 0

    # ── lifecycle ───────────────────────────────────────────
    async def start(self) -> None:
        self._ensure_consumer()

    async def drain(self) -> None:
        """Wait until every dispatched analysis has been applied or dropped."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._results is not None:
            await self._results.join()

    async def close(self) -> None:
        self.counter.close()
        await self.drain()
        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            await asyncio.gather(consumer, return_exceptions=True)
        self._results = None

    # ── counter ─────────────────────────────────────────────
    def start_counting(self, method: CountMethod) -> bool:
        return self.counter.start(method, week_of_pregnancy=self.current_week())

    def save_session(self) -> Optional[KickSession]:
        session = self.counter.save()
        if session is None:
            return None
        self.history_store.append(self.history, session, self.account_id)
        if not session.is_analyzed:
            self._owners[session.id] = self.account_id
        logger.info("Session %s saved to %s", session.id, self.account_id or GUEST_ACCOUNT_ID)
        return session

    def discard_session(self) -> bool:
        return self.counter.discard()

    def sorted_history(self) -> List[KickSession]:
        return sort_by_start(self.history)

    # ── anomaly reconciliation ──────────────────────────────
    def _ensure_consumer(self) -> asyncio.Queue:
        if self._results is None:
            self._results = asyncio.Queue()
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.get_running_loop().create_task(self._consume_results())
        return self._results

    def _dispatch_analysis(self, session: KickSession) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No event loop; anomaly analysis skipped for %s", session.id)
            return
        task = loop.create_task(
            self._evaluate(session, list(self.history), self.language, self.timezone)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _evaluate(
        self,
        session: KickSession,
        history: List[KickSession],
        language: Language,
        tz_name: str,
    ) -> None:
        try:
            analysis = await self.evaluator.evaluate(session, history, language, tz_name)
        except Exception as exc:
            logger.warning("Anomaly evaluation for %s failed: %s", session.id, exc, exc_info=True)
            return
        await self._ensure_consumer().put((session.id, analysis))

    async def _consume_results(self) -> None:
        assert self._results is not None
        queue = self._results
        while True:
            session_id, analysis = await queue.get()
            try:
                self.apply_analysis(session_id, analysis)
            except Exception as exc:
                logger.warning("Applying analysis for %s failed: %s", session_id, exc, exc_info=True)
            finally:
                queue.task_done()

    def apply_analysis(self, session_id: str, analysis: AnomalyAnalysis) -> bool:
        in_summary = self.counter.apply_analysis(session_id, analysis)
        in_history = self.history_store.patch_anomaly(self.history, session_id, analysis, self.account_id)
        # The account may have changed since save; its stored copy still needs the result.
        in_owner = False
        if session_id in self._owners:
            owner = self._owners.pop(session_id)
            if storage_key(owner) != storage_key(self.account_id):
                in_owner = self.history_store.patch_stored(session_id, analysis, owner)
        applied = in_summary or in_history or in_owner
        if not applied:
            logger.info("Analysis for %s dropped (session discarded or already analyzed)", session_id)
        return applied

    # ── profile & account ───────────────────────────────────
    def set_profile(self, profile: UserProfile) -> UserProfile:
        previous_account = self.account_id
        self.profile = profile
        save_profile(self.store, profile)
        if profile.account_id != previous_account:
            self.history = self.history_store.load(profile.account_id)
        return profile

    async def login(self) -> Optional[AccountInfo]:
        """Authenticate; a guest's local history is merged into the account once."""
        if self.profile is None:
            return None
        account = await self.auth.login()
        if not self.profile.is_authenticated:
            self.history = self.history_store.merge(self.history, account.id)
        elif self.profile.account_id != account.id:
            self.history = self.history_store.load(account.id)
        self.profile = self.profile.model_copy(update={"account": account})
        save_profile(self.store, self.profile)
        logger.info("Logged in as %s (%s)", account.id, account.provider.value)
        return account

    async def logout(self) -> None:
        """Switch back to guest storage; nothing is merged in this direction."""
        if self.profile is None:
            return
        await self.auth.logout()
        self.profile = self.profile.model_copy(update={"account": GUEST_ACCOUNT})
        save_profile(self.store, self.profile)
        self.history = self.history_store.load(GUEST_ACCOUNT_ID)
        logger.info("Logged out; using guest history (%s sessions)", len(self.history))
