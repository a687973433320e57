# -*- coding: utf-8 -*-
"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request

from .context import AppContext
from .profile.models import UserProfile


def get_context(request: Request) -> AppContext:
    ctx = getattr(request.app.state, "context", None)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Application context not ready")
    return ctx


def require_profile(ctx: AppContext) -> UserProfile:
    if ctx.profile is None:
        raise HTTPException(status_code=404, detail="Profile not set up")
    return ctx.profile
