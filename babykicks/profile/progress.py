# -*- coding: utf-8 -*-
"""Gestational age derived from the due date (40 weeks = 280 days)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .models import PregnancyProgress

FULL_TERM_DAYS = 280
MAX_WEEKS = 42


def today_in(tz_name: str) -> date:
    return datetime.now(ZoneInfo(tz_name)).date()


def pregnancy_progress(due_date: date, today: Optional[date] = None) -> PregnancyProgress:
    today = today or date.today()
    days_remaining = (due_date - today).days
    days_elapsed = FULL_TERM_DAYS - days_remaining
    weeks = days_elapsed // 7
    days = days_elapsed % 7
    return PregnancyProgress(
        due_date=due_date,
        today=today,
        days_remaining=days_remaining,
        weeks=weeks if 0 < weeks <= MAX_WEEKS else 0,
        days=days if days_elapsed >= 0 else 0,
    )
