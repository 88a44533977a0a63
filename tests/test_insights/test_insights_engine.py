"""Tests for FeeInsightsEngine: empty state, idempotence, fail-closed degradation."""

from decimal import Decimal

import pytest

from helpers import make_snapshot
from feetracker.insights.engine import FeeInsightsEngine
from feetracker.insights.models import InsightsConfig, TrendDirection


@pytest.fixture
def engine() -> FeeInsightsEngine:
    return FeeInsightsEngine(InsightsConfig(window_size=2))


class TestEmptyState:
    @pytest.mark.asyncio
    async def test_current_before_any_recompute(self, engine: FeeInsightsEngine) -> None:
        status = await engine.current()
        assert status.available is False
        assert status.insights is None
        assert status.degraded is False
        assert status.last_error is None

    @pytest.mark.asyncio
    async def test_recompute_with_empty_history_keeps_state(self, engine: FeeInsightsEngine) -> None:
        status = await engine.recompute(())
        assert status.available is False
        assert status.degraded is False

    def test_default_config(self) -> None:
        assert FeeInsightsEngine().config == InsightsConfig()


class TestRecompute:
    @pytest.mark.asyncio
    async def test_moving_average_scenario(self, engine: FeeInsightsEngine) -> None:
        history = []
        for i, avg in enumerate(["100", "200", "300"]):
            history.append(make_snapshot(i, avg=avg))
            await engine.recompute(tuple(history))

        status = await engine.current()
        assert status.available
        assert status.insights.moving_average == Decimal("250")

    @pytest.mark.asyncio
    async def test_recompute_is_idempotent(self, engine: FeeInsightsEngine) -> None:
        history = (make_snapshot(0, avg="100"), make_snapshot(1, avg="180"))

        first = await engine.recompute(history)
        second = await engine.recompute(history)

        assert first.insights == second.insights
        assert first == second

    @pytest.mark.asyncio
    async def test_returns_same_status_as_current(self, engine: FeeInsightsEngine) -> None:
        status = await engine.recompute((make_snapshot(0),))
        assert status == await engine.current()


class TestDegradedComputation:
    @pytest.mark.asyncio
    async def test_bad_value_retains_previous_insights(self, engine: FeeInsightsEngine) -> None:
        good = (make_snapshot(0, avg="100"), make_snapshot(1, avg="300"))
        before = await engine.recompute(good)

        bad = good + (make_snapshot(2, avg="not-a-number"),)
        after = await engine.recompute(bad)

        assert after.insights == before.insights
        assert after.degraded is True
        assert "avg" in after.last_error
        assert after.degraded_at is not None
        assert after.degraded_count == 1

    @pytest.mark.asyncio
    async def test_degraded_before_any_success_stays_unavailable(
        self, engine: FeeInsightsEngine
    ) -> None:
        status = await engine.recompute((make_snapshot(0, min="NaN"),))
        assert status.available is False
        assert status.degraded is True
        assert status.last_error is not None

    @pytest.mark.asyncio
    async def test_recovers_after_good_recompute(self, engine: FeeInsightsEngine) -> None:
        await engine.recompute((make_snapshot(0, avg=""),))
        status = await engine.recompute((make_snapshot(1, avg="100"), make_snapshot(2, avg="200")))

        assert status.available
        assert status.degraded is False
        assert status.last_error is None
        assert status.degraded_count == 1
        assert status.insights.trend == TrendDirection.RISING

    @pytest.mark.asyncio
    async def test_degradation_does_not_raise(self, engine: FeeInsightsEngine) -> None:
        for raw in ["", "abc", "Infinity"]:
            await engine.recompute((make_snapshot(0, p50=raw),))
        status = await engine.current()
        assert status.degraded_count == 3

    @pytest.mark.asyncio
    async def test_oversized_value_degrades_instead_of_raising(
        self, engine: FeeInsightsEngine
    ) -> None:
        good = (make_snapshot(0, avg="100"), make_snapshot(1, avg="300"))
        before = await engine.recompute(good)

        huge = "1" + "0" * 30
        after = await engine.recompute(good + (make_snapshot(2, avg=huge, max=huge),))

        assert after.insights == before.insights
        assert after.degraded is True
        assert "out of range" in after.last_error
        assert after.degraded_count == 1
