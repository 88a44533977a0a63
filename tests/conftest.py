"""Shared test fixtures for the fee tracker."""

import pytest

from feetracker.config import AppSettings, HorizonSettings, PollSettings, StoreSettings


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (local Horizon, fast polling)."""
    return AppSettings(
        log_level="DEBUG",
        horizon=HorizonSettings(url="http://horizon.test", timeout_seconds=1.0),
        poll=PollSettings(interval_seconds=1),
        store=StoreSettings(capacity=5),
    )
