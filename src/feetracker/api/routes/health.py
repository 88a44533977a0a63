"""Liveness and status endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def health() -> JSONResponse:
    """Liveness check. Independent of whether any fee data has been ingested."""
    return JSONResponse(content={"status": "ok"})


@router.get("/status")
async def status(request: Request) -> JSONResponse:
    """Poller state and counters plus history occupancy."""
    store = request.app.state.store
    poller = request.app.state.poller
    return JSONResponse(content={
        "poller": poller.get_status(),
        "history": {
            "size": await store.size(),
            "capacity": store.capacity,
        },
    })
