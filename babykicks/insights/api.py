# -*- coding: utf-8 -*-
"""Insights: API endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..context import AppContext
from ..deps import get_context
from ..i18n import Language
from .models import WeeklyInsightResponse

router = APIRouter(prefix="/api/insights", tags=["Insights"])


@router.get("/weekly", response_model=WeeklyInsightResponse, summary="Advisory content for a pregnancy week")
async def weekly_insight(
    week: int = Query(..., ge=1, le=42),
    language: Optional[Language] = Query(default=None),
    timezone: Optional[str] = Query(default=None, description="IANA zone; defaults to profile"),
    ctx: AppContext = Depends(get_context),
):
    lang = language or ctx.language
    tz = timezone or ctx.timezone
    insight = await ctx.insights.get_insight(week, lang, tz)
    return WeeklyInsightResponse(week=week, language=lang, timezone=tz, insight=insight)


@router.get("/current", response_model=WeeklyInsightResponse, summary="Advisory content for the current week")
async def current_insight(ctx: AppContext = Depends(get_context)):
    week = ctx.current_week()
    if week <= 0:
        raise HTTPException(status_code=404, detail="Pregnancy week unknown")
    insight = await ctx.insights.get_insight(week, ctx.language, ctx.timezone)
    return WeeklyInsightResponse(week=week, language=ctx.language, timezone=ctx.timezone, insight=insight)
