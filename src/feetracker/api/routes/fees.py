"""Fee snapshot endpoints: the latest reading and the retained history."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from feetracker.models import FeeSnapshot

log = structlog.get_logger(__name__)

router = APIRouter()


def snapshot_to_dict(snapshot: FeeSnapshot) -> dict[str, Any]:
    """Project a snapshot into the public response shape. Percentiles always included."""
    charged = snapshot.charged
    return {
        "base_fee": snapshot.base_fee,
        "min_fee": charged.min,
        "max_fee": charged.max,
        "avg_fee": charged.avg,
        "percentiles": charged.percentiles(),
        "captured_at": snapshot.captured_at.isoformat(),
    }


def _unavailable(detail: str, request: Request) -> JSONResponse:
    poller = getattr(request.app.state, "poller", None)
    headers = {}
    if poller is not None:
        headers["Retry-After"] = str(int(poller.interval))
    return JSONResponse(
        status_code=503,
        content={"available": False, "detail": detail},
        headers=headers,
    )


@router.get("/current")
async def current_fees(request: Request) -> JSONResponse:
    """Latest ingested fee snapshot, or 503 before the first successful poll."""
    store = request.app.state.store
    latest = await store.latest()
    if latest is None:
        log.debug("current_fees_unavailable")
        return _unavailable("no fee data has been ingested yet", request)
    return JSONResponse(content=snapshot_to_dict(latest))


@router.get("/history")
async def fee_history(
    request: Request,
    limit: int | None = Query(default=None, ge=1),
) -> JSONResponse:
    """Retained snapshots, oldest first. ``limit`` keeps only the newest N."""
    store = request.app.state.store
    snapshots = await store.snapshot()
    if limit is not None:
        snapshots = snapshots[-limit:]
    return JSONResponse(content={
        "capacity": store.capacity,
        "count": len(snapshots),
        "snapshots": [snapshot_to_dict(s) for s in snapshots],
    })
