# -*- coding: utf-8 -*-
"""Profile & auth: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..context import AppContext
from ..deps import get_context, require_profile
from .models import AuthStatusResponse, PregnancyProgress, ProfileUpdateRequest, UserProfile

router = APIRouter(prefix="/api/profile", tags=["Profile"])
auth_router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _auth_status(ctx: AppContext) -> AuthStatusResponse:
    profile = ctx.profile
    return AuthStatusResponse(
        authenticated=bool(profile and profile.is_authenticated),
        account=profile.account if profile else None,
        history_count=len(ctx.history),
    )


@router.get("", response_model=UserProfile, summary="Get profile")
async def get_profile(ctx: AppContext = Depends(get_context)):
    return require_profile(ctx)


@router.put("", response_model=UserProfile, summary="Create or update profile")
async def put_profile(request: ProfileUpdateRequest, ctx: AppContext = Depends(get_context)):
    updates = request.model_dump(exclude_none=True)
    if ctx.profile is None:
        missing = [k for k in ("name", "due_date", "timezone") if k not in updates]
        if missing:
            raise HTTPException(status_code=422, detail=f"Missing fields for new profile: {', '.join(missing)}")
        profile = UserProfile.model_validate(updates)
    else:
        profile = ctx.profile.model_copy(update=updates)
    return ctx.set_profile(profile)


@router.get("/progress", response_model=PregnancyProgress, summary="Gestational week/day")
async def get_progress(ctx: AppContext = Depends(get_context)):
    require_profile(ctx)
    return ctx.progress()


@auth_router.get("/status", response_model=AuthStatusResponse, summary="Current account")
async def auth_status(ctx: AppContext = Depends(get_context)):
    return _auth_status(ctx)


@auth_router.post("/login", response_model=AuthStatusResponse, summary="Login (merges guest history)")
async def login(ctx: AppContext = Depends(get_context)):
    require_profile(ctx)
    await ctx.login()
    return _auth_status(ctx)


@auth_router.post("/logout", response_model=AuthStatusResponse, summary="Logout (back to guest storage)")
async def logout(ctx: AppContext = Depends(get_context)):
    require_profile(ctx)
    await ctx.logout()
    return _auth_status(ctx)
