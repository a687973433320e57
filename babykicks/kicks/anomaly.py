# -*- coding: utf-8 -*-
"""Anomaly scoring for finished kick sessions.

Two modes:
- degraded: no advisory credentials configured; a fixed guideline rule applies.
- remote: the advisory service judges the session against the guideline and the
  user's own history at a comparable time of day.

``evaluate`` never raises. Any remote failure becomes a "recorded, no anomaly" result.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from ..advisory.client import AdvisoryClient, AdvisoryError
from ..advisory.prompts import SYSTEM_PROMPT, build_anomaly_prompt
from ..i18n import Language, t
from .models import AnalysisContext, AnomalyAnalysis, AnomalySeverity, KickSession

logger = logging.getLogger(__name__)

COMPARABLE_HOUR_WINDOW = 3
COMPARABLE_SESSION_LIMIT = 10
LOW_COUNT_THRESHOLD = 3
LOW_DURATION_SECONDS = 3600


def _zone(tz_name: Optional[str]):
    if not tz_name:
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", tz_name)
        return timezone.utc


def hour_of_day(epoch_ms: int, tz_name: Optional[str] = None) -> int:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=_zone(tz_name)).hour


def personal_average(
    session: KickSession,
    history: Sequence[KickSession],
    tz_name: Optional[str] = None,
) -> float:
    """Mean valid count of the last sessions started within 3 hours of this one's hour.

    The hour distance is a plain absolute difference: 23:00 and 01:00 are not
    considered close.
    """
    hour = hour_of_day(session.start_time, tz_name)
    comparable = [
        h
        for h in history
        if h.id != session.id
        and abs(hour_of_day(h.start_time, tz_name) - hour) <= COMPARABLE_HOUR_WINDOW
    ][-COMPARABLE_SESSION_LIMIT:]
    if not comparable:
        return 0.0
    return sum(h.count for h in comparable) / len(comparable)


def fallback_analysis(session: KickSession, language: Language) -> AnomalyAnalysis:
    is_low = session.count < LOW_COUNT_THRESHOLD and session.duration_seconds > LOW_DURATION_SECONDS
    if is_low:
        message = t(language, "movement_low") + t(language, "ai_disclaimer_suffix")
    else:
        message = t(language, "movement_normal")
    return AnomalyAnalysis(
        is_anomaly=is_low,
        severity=AnomalySeverity.medium if is_low else AnomalySeverity.none,
        message=message,
        medical_context=t(language, "movement_guideline"),
    )


def recorded_analysis(language: Language) -> AnomalyAnalysis:
    return AnomalyAnalysis(
        is_anomaly=False,
        severity=AnomalySeverity.none,
        message=t(language, "session_recorded") + t(language, "ai_disclaimer_suffix"),
        medical_context="",
    )


class AnomalyEvaluator:
    def __init__(self, client: AdvisoryClient) -> None:
        self.client = client

    def build_context(
        self,
        session: KickSession,
        history: Sequence[KickSession],
        language: Language,
        tz_name: Optional[str] = None,
    ) -> AnalysisContext:
        return AnalysisContext(
            week=session.week_of_pregnancy,
            method=session.method,
            count=session.count,
            raw_count=session.raw_count,
            duration_seconds=session.duration_seconds,
            personal_average=personal_average(session, history, tz_name),
            hour_of_day=hour_of_day(session.start_time, tz_name),
            language=language,
        )

    async def evaluate(
        self,
        session: KickSession,
        history: Sequence[KickSession],
        language: Language | str,
        tz_name: Optional[str] = None,
    ) -> AnomalyAnalysis:
        lang = Language(language)
        if not self.client.is_available():
            logger.info("Advisory unavailable, using guideline rule for %s", session.id)
            return fallback_analysis(session, lang)

        ctx = self.build_context(session, history, lang, tz_name)
        prompt = build_anomaly_prompt(
            week=ctx.week,
            method=ctx.method.value,
            count=ctx.count,
            raw_count=ctx.raw_count,
            duration_seconds=ctx.duration_seconds,
            personal_average=ctx.personal_average,
            hour_of_day=ctx.hour_of_day,
            language=lang,
        )
        try:
            parsed = await self.client.complete_json(SYSTEM_PROMPT, prompt)
            result = AnomalyAnalysis.model_validate(parsed)
        except (AdvisoryError, ValidationError) as exc:
            logger.warning("Anomaly analysis failed for %s: %s", session.id, exc)
            return recorded_analysis(lang)
        except Exception as exc:
            logger.warning("Unexpected anomaly analysis error for %s: %s", session.id, exc, exc_info=True)
            return recorded_analysis(lang)

        result.message = result.message + t(lang, "ai_disclaimer_suffix")
        return result
