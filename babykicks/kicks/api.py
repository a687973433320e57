# -*- coding: utf-8 -*-
"""Kicks: API endpoints (counter + history)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..context import AppContext
from ..deps import get_context
from .storage import GUEST_ACCOUNT_ID
from .models import CounterStartRequest, CounterStateResponse, CounterStatus, HistoryResponse

router = APIRouter(prefix="/api/kicks", tags=["Kicks"])


def _conflict(ctx: AppContext, action: str) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"Cannot {action} while counter is {ctx.counter.status.value}",
    )


@router.get("/counter", response_model=CounterStateResponse, summary="Current counter state")
async def counter_state(ctx: AppContext = Depends(get_context)):
    return ctx.counter.snapshot()


@router.post("/counter/start", response_model=CounterStateResponse, summary="Start a counting session")
async def counter_start(request: CounterStartRequest, ctx: AppContext = Depends(get_context)):
    if not ctx.start_counting(request.method):
        raise _conflict(ctx, "start")
    return ctx.counter.snapshot()


@router.post("/counter/tap", response_model=CounterStateResponse, summary="Record one tap")
async def counter_tap(ctx: AppContext = Depends(get_context)):
    if not ctx.counter.tap():
        raise _conflict(ctx, "tap")
    return ctx.counter.snapshot()


@router.post("/counter/finish", response_model=CounterStateResponse, summary="Finish the session early")
async def counter_finish(ctx: AppContext = Depends(get_context)):
    if ctx.counter.finish() is None:
        raise _conflict(ctx, "finish")
    return ctx.counter.snapshot()


@router.post("/counter/save", response_model=CounterStateResponse, summary="Save the finished session")
async def counter_save(ctx: AppContext = Depends(get_context)):
    if ctx.counter.status is not CounterStatus.SUMMARY:
        raise _conflict(ctx, "save")
    ctx.save_session()
    return ctx.counter.snapshot()


@router.post("/counter/discard", response_model=CounterStateResponse, summary="Discard the finished session")
async def counter_discard(ctx: AppContext = Depends(get_context)):
    if not ctx.discard_session():
        raise _conflict(ctx, "discard")
    return ctx.counter.snapshot()


@router.get("/history", response_model=HistoryResponse, summary="Saved sessions of the active account")
async def history(ctx: AppContext = Depends(get_context)):
    items = ctx.sorted_history()
    return HistoryResponse(
        account_id=ctx.account_id or GUEST_ACCOUNT_ID,
        count=len(items),
        items=items,
    )
