# src/tourguide/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and mounts the routers. Business logic lives
in `tourguide.service` and below; routes only translate HTTP <-> service calls.

The lifespan starts the background tracker on the shared service and shuts the
service down (tracker + worker pools) when the app exits.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from tourguide.config.settings import get_settings
from tourguide.core.logging import configure_logging

from . import routes

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    service = routes._service()
    service.start_tracker(get_settings().tracker.interval_seconds)
    try:
        yield
    finally:
        service.shutdown()


app = FastAPI(title="TourGuide API", version="0.1.0", lifespan=lifespan)

# CORS (dev-friendly): allow local frontends to call this API.
# - TOURGUIDE_CORS_ORIGINS="http://localhost:3000,http://127.0.0.1:3000"
# - TOURGUIDE_CORS_ALLOW_LOCAL=0 to disable the default localhost allowance
cors_origins = [s.strip() for s in os.getenv("TOURGUIDE_CORS_ORIGINS", "").split(",") if s.strip()]
cors_allow_local = os.getenv("TOURGUIDE_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes", "y"}
cors_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if cors_allow_local and not cors_origins else ""
if cors_origins or cors_origin_regex:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=cors_origin_regex or None,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(routes.router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
