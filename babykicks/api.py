# -*- coding: utf-8 -*-
"""
BabyKicks API

Fetal movement counting sessions, anomaly flags, weekly advisory content and
guest→account history sync.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .context import AppContext
from .insights.api import router as insights_router
from .kicks.api import router as kicks_router
from .profile.api import auth_router, router as profile_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    ctx = AppContext.from_settings(settings)
    await ctx.start()
    app.state.context = ctx
    try:
        yield
    finally:
        await ctx.close()
        app.state.context = None


app = FastAPI(
    title="BabyKicks",
    description="胎动计数、异常提示与孕周指南",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(kicks_router)
app.include_router(insights_router)
app.include_router(profile_router)
app.include_router(auth_router)


@app.get("/api/health")
async def health() -> dict:
    return {"ok": True}


if __name__ == "__main__":
    import os

    import uvicorn

    host = os.environ.get("BABYKICKS_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("BABYKICKS_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("babykicks.api:app", host=host, port=port, reload=False)
