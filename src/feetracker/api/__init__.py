"""HTTP query surface -- read-only JSON routes over the store, engine, and poller."""

from feetracker.api.app import create_app

__all__ = ["create_app"]
