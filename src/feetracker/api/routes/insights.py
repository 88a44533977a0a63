"""Derived fee insights endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from feetracker.insights.models import Insights, InsightsStatus

router = APIRouter()

RECOMMENDATION_NOTE = (
    "recommended_tier compares the latest median fee with the recent moving "
    "average. It is a heuristic, not a guarantee of inclusion or of future fees."
)


def _insights_to_dict(insights: Insights) -> dict[str, Any]:
    return {
        "moving_average": str(insights.moving_average),
        "trend": insights.trend.value,
        "volatile": insights.volatile,
        "spread_ratio": str(insights.spread_ratio),
        "recommended_tier": insights.recommended_tier.value,
        "latest_p50": str(insights.latest_p50),
        "sample_size": insights.sample_size,
        "window_size": insights.window_size,
        "as_of": insights.as_of.isoformat(),
    }


def status_to_dict(status: InsightsStatus) -> dict[str, Any]:
    """Project the engine status into the public response shape."""
    return {
        "available": status.available,
        "degraded": status.degraded,
        "last_error": status.last_error,
        "degraded_at": status.degraded_at.isoformat() if status.degraded_at else None,
        "insights": _insights_to_dict(status.insights) if status.insights else None,
        "recommendation_note": RECOMMENDATION_NOTE,
    }


@router.get("/insights")
async def get_insights(request: Request) -> JSONResponse:
    """Latest good insights.

    ``degraded`` is true when the most recent recompute failed and the values
    shown are the last known good ones. Returns 503 with ``available: false``
    until the first successful recompute.
    """
    engine = request.app.state.engine
    status = await engine.current()
    return JSONResponse(
        status_code=200 if status.available else 503,
        content=status_to_dict(status),
    )
