# -*- coding: utf-8 -*-
"""Profile: key-value storage helpers."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from ..app_db import KeyValueStore
from .models import UserProfile

logger = logging.getLogger(__name__)

PROFILE_KEY = "babykicks_profile"


def load_profile(store: KeyValueStore) -> Optional[UserProfile]:
    try:
        raw = store.get(PROFILE_KEY)
    except Exception as exc:
        logger.warning("Profile read failed: %s", exc, exc_info=True)
        return None
    if not raw:
        return None
    try:
        return UserProfile.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Stored profile is unreadable, starting without one: %s", exc)
        return None


def save_profile(store: KeyValueStore, profile: UserProfile) -> None:
    store.set(PROFILE_KEY, profile.model_dump_json())
