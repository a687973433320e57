# -*- coding: utf-8 -*-
"""
Kick counting session state machine.

IDLE --start--> ACTIVE --finish / ceiling reached--> SUMMARY --save | discard--> IDLE

The counter owns the finished session until ``save()`` hands it to the caller.
Anomaly analysis is dispatched through ``on_finish`` without being awaited;
results come back through ``apply_analysis`` keyed by session id.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional
from uuid import uuid4

from .debounce import KickDebouncer
from .models import (
    AnomalyAnalysis,
    CounterStateResponse,
    CounterStatus,
    CountMethod,
    KickSession,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
FinishCallback = Callable[[KickSession], None]


def now_ms() -> int:
    return int(time.time() * 1000)


class KickCounter:
    """Single counting session driven by taps and a one-second ticker."""

    def __init__(
        self,
        *,
        clock: Optional[Clock] = None,
        on_finish: Optional[FinishCallback] = None,
        tick_sec: float = 1.0,
    ) -> None:
        self.clock: Clock = clock or now_ms
        self.on_finish = on_finish
        self.tick_sec = tick_sec

        self.status = CounterStatus.IDLE
        self.method = CountMethod.STANDARD_HOUR
        self.start_time: Optional[int] = None
        self.elapsed_seconds = 0
        self.week_of_pregnancy = 0
        self.debouncer = KickDebouncer()
        self.summary: Optional[KickSession] = None

        self._ticker: Optional[asyncio.Task] = None

    @property
    def ceiling_seconds(self) -> int:
        return self.method.ceiling_seconds

    # ── transitions ─────────────────────────────────────────
    def start(self, method: CountMethod, week_of_pregnancy: int = 0) -> bool:
        if self.status is not CounterStatus.IDLE:
            return False
        self.method = CountMethod(method)
        self.week_of_pregnancy = max(0, int(week_of_pregnancy))
        self.start_time = self.clock()
        self.elapsed_seconds = 0
        self.debouncer.reset()
        self.summary = None
        self.status = CounterStatus.ACTIVE
        self._start_ticker()
        logger.info("Counting started: method=%s week=%s", self.method.value, self.week_of_pregnancy)
        return True

    def tap(self) -> bool:
        if self.status is not CounterStatus.ACTIVE:
            return False
        self.debouncer.record_tap(self.clock())
        return True

    def tick(self) -> Optional[KickSession]:
        """Advance elapsed time by one second; finishes the session at the ceiling."""
        if self.status is not CounterStatus.ACTIVE:
            return None
        self.elapsed_seconds += 1
        if self.elapsed_seconds >= self.ceiling_seconds:
            logger.info("Counting ceiling reached after %ss", self.elapsed_seconds)
            return self.finish()
        return None

    def finish(self) -> Optional[KickSession]:
        if self.status is not CounterStatus.ACTIVE or self.start_time is None:
            return None
        self._stop_ticker()

        start = self.start_time
        end = max(self.clock(), start + self.elapsed_seconds * 1000)
        session = KickSession(
            id=uuid4().hex,
            start_time=start,
            end_time=end,
            duration_seconds=(end - start + 500) // 1000,
            count=self.debouncer.count,
            raw_count=self.debouncer.raw_count,
            method=self.method,
            week_of_pregnancy=self.week_of_pregnancy,
        )
        self.summary = session
        self.status = CounterStatus.SUMMARY
        logger.info(
            "Counting finished: id=%s count=%s raw=%s duration=%ss",
            session.id,
            session.count,
            session.raw_count,
            session.duration_seconds,
        )

        if self.on_finish is not None:
            try:
                self.on_finish(session)
            except Exception as exc:
                logger.warning("Anomaly dispatch failed for %s: %s", session.id, exc, exc_info=True)
        return session

    def save(self) -> Optional[KickSession]:
        """Release the finished session to the caller and return to IDLE."""
        if self.status is not CounterStatus.SUMMARY:
            return None
        session = self.summary
        self._reset()
        return session

    def discard(self) -> bool:
        if self.status is not CounterStatus.SUMMARY:
            return False
        if self.summary is not None:
            logger.info("Counting discarded: id=%s", self.summary.id)
        self._reset()
        return True

    def apply_analysis(self, session_id: str, analysis: AnomalyAnalysis) -> bool:
        if self.summary is None or self.summary.id != session_id:
            return False
        patched = self.summary.with_analysis(analysis)
        if patched is None:
            return False
        self.summary = patched
        return True

    def snapshot(self) -> CounterStateResponse:
        return CounterStateResponse(
            status=self.status,
            method=self.method,
            elapsed_seconds=self.elapsed_seconds,
            remaining_seconds=max(0, self.ceiling_seconds - self.elapsed_seconds),
            count=self.debouncer.count,
            raw_count=self.debouncer.raw_count,
            start_time=self.start_time,
            summary=self.summary,
        )

    def close(self) -> None:
        self._stop_ticker()

    def _reset(self) -> None:
        self._stop_ticker()
        self.status = CounterStatus.IDLE
        self.summary = None
        self.start_time = None
        self.elapsed_seconds = 0
        self.debouncer.reset()

    # ── ticker ──────────────────────────────────────────────
    def _start_ticker(self) -> None:
        if self.tick_sec <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: ticks are driven by the caller.
            return
        self._ticker = loop.create_task(self._run_ticker(self.start_time))

    def _stop_ticker(self) -> None:
        task, self._ticker = self._ticker, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    async def _run_ticker(self, session_start: Optional[int]) -> None:
        try:
            while self.status is CounterStatus.ACTIVE and self.start_time == session_start:
                await asyncio.sleep(self.tick_sec)
                if self.start_time != session_start:
                    break
                self.tick()
        except asyncio.CancelledError:
            logger.debug("Ticker cancelled for session started at %s", session_start)
