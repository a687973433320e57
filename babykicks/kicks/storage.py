# -*- coding: utf-8 -*-
"""Kicks: account-scoped history storage and guest→account merge."""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..app_db import KeyValueStore
from .models import AnomalyAnalysis, KickSession

logger = logging.getLogger(__name__)

GUEST_ACCOUNT_ID = "guest"
GUEST_HISTORY_KEY = "babykicks_history"

_history_adapter = TypeAdapter(List[KickSession])


def is_guest(account_id: Optional[str]) -> bool:
    return not account_id or account_id == GUEST_ACCOUNT_ID


def storage_key(account_id: Optional[str] = None) -> str:
    if is_guest(account_id):
        return GUEST_HISTORY_KEY
    return f"{GUEST_HISTORY_KEY}_{account_id}"


def sort_by_start(history: Sequence[KickSession]) -> List[KickSession]:
    return sorted(history, key=lambda s: s.start_time)


class HistoryStore:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self, account_id: Optional[str] = None) -> List[KickSession]:
        key = storage_key(account_id)
        try:
            raw = self.store.get(key)
        except Exception as exc:
            logger.warning("History read failed for %s: %s", key, exc, exc_info=True)
            return []
        if not raw:
            return []
        try:
            return _history_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Corrupt history blob under %s ignored: %s", key, exc)
            return []

    def save(self, history: Sequence[KickSession], account_id: Optional[str] = None) -> None:
        payload = json.dumps(
            [s.model_dump(mode="json") for s in history],
            ensure_ascii=False,
        )
        self.store.set(storage_key(account_id), payload)

    def merge(self, local_history: Sequence[KickSession], target_account_id: str) -> List[KickSession]:
        """Union of the target account's history and ``local_history`` by session id.

        Remote entries come first, then local entries the remote did not have.
        The result is not re-sorted.
        """
        merged = list(self.load(target_account_id))
        existing_ids = {s.id for s in merged}
        added = 0
        for session in local_history:
            if session.id in existing_ids:
                continue
            merged.append(session)
            existing_ids.add(session.id)
            added += 1
        self.save(merged, target_account_id)
        logger.info(
            "Merged history into %s: %s existing, %s added",
            storage_key(target_account_id),
            len(merged) - added,
            added,
        )
        return merged

    def append(self, history: List[KickSession], session: KickSession, account_id: Optional[str] = None) -> bool:
        """Append ``session`` to ``history`` unless its id is present, then persist."""
        if any(s.id == session.id for s in history):
            return False
        history.append(session)
        self.save(history, account_id)
        return True

    def patch_anomaly(
        self,
        history: List[KickSession],
        session_id: str,
        analysis: AnomalyAnalysis,
        account_id: Optional[str] = None,
    ) -> bool:
        """Apply an analysis to the matching entry once, then persist."""
        for idx, session in enumerate(history):
            if session.id != session_id:
                continue
            patched = session.with_analysis(analysis)
            if patched is None:
                return False
            history[idx] = patched
            self.save(history, account_id)
            return True
        return False

    def patch_stored(
        self,
        session_id: str,
        analysis: AnomalyAnalysis,
        account_id: Optional[str] = None,
    ) -> bool:
        """Like ``patch_anomaly`` but against the persisted list of an inactive account."""
        return self.patch_anomaly(self.load(account_id), session_id, analysis, account_id)
