"""FastAPI application factory for the fee tracker query surface."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feetracker.api.routes import fees, health, insights


def create_app(
    lifespan: Any = None,
    allowed_origins: list[str] | None = None,
) -> FastAPI:
    """Create and configure the query surface application.

    Route handlers read ``app.state.store``, ``app.state.engine`` and
    ``app.state.poller``; the caller (main.py or a test) must set them.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to start the poller alongside the server.
        allowed_origins: CORS origins; ``["*"]`` when not given.

    Returns:
        Configured FastAPI application with CORS and all read-only routes.
    """
    app = FastAPI(
        title="Horizon Fee Tracker",
        description=(
            "Current Stellar network fees, recent history, and derived insights. "
            "Fee values are decimal strings in stroops."
        ),
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["content-type"],
        expose_headers=["retry-after"],
        max_age=3600,
    )

    app.include_router(health.router)
    app.include_router(fees.router, prefix="/fees")
    app.include_router(insights.router)

    return app
