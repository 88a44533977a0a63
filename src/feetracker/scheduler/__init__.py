"""Ingestion scheduling -- the fixed-interval fee poller."""

from feetracker.scheduler.poller import FeePoller, PollerState

__all__ = ["FeePoller", "PollerState"]
