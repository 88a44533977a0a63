"""Fee insights engine -- caches analytics derived from the fee history.

The poller calls ``recompute`` with the full store contents after every
successful ingestion. Computation runs outside the lock; only the swap of
the cached status is done under the write lock, so readers never wait on
Decimal arithmetic and never see a half-built result.
"""

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone

from feetracker.exceptions import ComputationDegradedError
from feetracker.insights.calculations import compute_insights
from feetracker.insights.models import InsightsConfig, InsightsStatus
from feetracker.logging import get_logger
from feetracker.models import FeeSnapshot
from feetracker.store.rwlock import ReadWriteLock

logger = get_logger(__name__)


class FeeInsightsEngine:
    """Holds the last good Insights and the outcome of the latest recompute.

    Fails closed: when a recompute cannot interpret its inputs, the previous
    Insights stay in place and the status is marked degraded.
    """

    def __init__(self, config: InsightsConfig | None = None) -> None:
        self._config = config or InsightsConfig()
        self._status = InsightsStatus()
        self._lock = ReadWriteLock()

    @property
    def config(self) -> InsightsConfig:
        return self._config

    async def recompute(self, history: Sequence[FeeSnapshot]) -> InsightsStatus:
        """Recompute insights from ``history`` (oldest first) and return the new status.

        An empty history leaves the status untouched. A parse failure keeps the
        previous Insights and records the error instead of raising.
        """
        if not history:
            return await self.current()

        try:
            insights = compute_insights(history, self._config)
        except ComputationDegradedError as e:
            async with self._lock.write():
                self._status = replace(
                    self._status,
                    degraded=True,
                    last_error=str(e),
                    degraded_at=datetime.now(timezone.utc),
                    degraded_count=self._status.degraded_count + 1,
                )
                status = self._status
            logger.warning(
                "insights_computation_degraded",
                error=str(e),
                retained_previous=status.available,
                degraded_count=status.degraded_count,
            )
            return status

        async with self._lock.write():
            self._status = InsightsStatus(
                insights=insights,
                degraded_count=self._status.degraded_count,
            )
            status = self._status

        logger.debug(
            "insights_recomputed",
            moving_average=str(insights.moving_average),
            trend=insights.trend.value,
            volatile=insights.volatile,
            tier=insights.recommended_tier.value,
            sample_size=insights.sample_size,
        )
        return status

    async def current(self) -> InsightsStatus:
        """Return the current status; ``insights`` is None before the first success."""
        async with self._lock.read():
            return self._status
