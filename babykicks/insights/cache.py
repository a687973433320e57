# -*- coding: utf-8 -*-
"""Weekly insight cache.

One remote fetch per (week, language, timezone) for the lifetime of local
storage. Successful results are stored and never invalidated; placeholders
returned on failure are not stored, so a later call can still fill the cache.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from pydantic import ValidationError

from ..advisory.client import AdvisoryClient
from ..advisory.prompts import SYSTEM_PROMPT, build_insight_prompt
from ..app_db import KeyValueStore
from ..i18n import Language, t
from .models import WeeklyInsight

logger = logging.getLogger(__name__)


def cache_key(week: int, language: Language | str, timezone: str) -> str:
    return f"babykicks_insight_week_{week}_{Language(language).value}_{timezone}"


def missing_key_insight(week: int, language: Language) -> WeeklyInsight:
    return WeeklyInsight(
        week=week,
        mom_symptoms=t(language, "insight_missing_key"),
        baby_development="N/A",
        medical_advice="N/A",
        nutrition="N/A",
        shopping="N/A",
    )


def failed_insight(week: int, language: Language) -> WeeklyInsight:
    return WeeklyInsight(
        week=week,
        mom_symptoms=t(language, "insight_failed_mom"),
        baby_development=t(language, "insight_failed_baby"),
        medical_advice=t(language, "insight_failed_medical"),
        nutrition=t(language, "insight_failed_nutrition"),
        shopping="",
    )


class InsightCache:
    def __init__(self, store: KeyValueStore, client: AdvisoryClient) -> None:
        self.store = store
        self.client = client
        self._inflight: Dict[str, asyncio.Task] = {}

    def get_cached(self, week: int, language: Language | str, timezone: str) -> WeeklyInsight | None:
        key = cache_key(week, language, timezone)
        try:
            raw = self.store.get(key)
        except Exception as exc:
            logger.warning("Insight cache read failed for %s: %s", key, exc, exc_info=True)
            return None
        if not raw:
            return None
        try:
            return WeeklyInsight.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Corrupt insight cache entry %s ignored: %s", key, exc)
            return None

    async def get_insight(self, week: int, language: Language | str, timezone: str) -> WeeklyInsight:
        lang = Language(language)
        cached = self.get_cached(week, lang, timezone)
        if cached is not None:
            logger.debug("Insight cache hit: week=%s lang=%s tz=%s", week, lang.value, timezone)
            return cached

        if not self.client.is_available():
            return missing_key_insight(week, lang)

        key = cache_key(week, lang, timezone)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, week, lang, timezone))
            self._inflight[key] = task
            task.add_done_callback(lambda _t: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    async def _fetch_and_store(self, key: str, week: int, language: Language, timezone: str) -> WeeklyInsight:
        logger.info("Fetching weekly insight: week=%s lang=%s tz=%s", week, language.value, timezone)
        try:
            parsed = await self.client.complete_json(
                SYSTEM_PROMPT,
                build_insight_prompt(week, language, timezone),
            )
            insight = WeeklyInsight.model_validate({**parsed, "week": week})
        except Exception as exc:
            logger.warning("Weekly insight fetch failed for %s: %s", key, exc, exc_info=True)
            return failed_insight(week, language)

        try:
            self.store.set(key, insight.model_dump_json())
        except Exception as exc:
            logger.warning("Insight cache write failed for %s: %s", key, exc, exc_info=True)
        return insight
