"""Fee poller -- drives ingestion on a fixed interval until shutdown.

Each cycle goes idle -> polling -> updating -> idle. While idle the poller
waits on whichever comes first: the next tick or the shutdown event.

Shutdown is NON-PREEMPTIVE. A shutdown requested while a fetch or a
store/engine update is in flight is only observed once the cycle has
returned to idle, so a snapshot that was fetched is always both stored and
reflected in the insights. ``stop()`` therefore sets the event and waits for
the loop to exit on its own; it must never cancel the task, since cancelling
mid-update would leave the store ahead of the insights. Shutdown latency is
bounded by one fetch (the provider's request timeout) plus one update.

Failures never end the loop. A provider error is logged and the next tick
tries again at the same cadence; there is no backoff.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum

from feetracker.exceptions import ProviderError
from feetracker.insights.engine import FeeInsightsEngine
from feetracker.logging import get_logger
from feetracker.models import FeeSnapshot
from feetracker.provider.base import FeeDataProvider
from feetracker.store.history import FeeHistoryStore

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PollerState(str, Enum):
    """Lifecycle state of the fee poller."""

    IDLE = "idle"
    POLLING = "polling"
    UPDATING = "updating"
    STOPPED = "stopped"


class FeePoller:
    """Polls the fee provider and feeds the history store and insights engine.

    The poller is the only writer to the store and the engine, and the only
    place that orders "push snapshot" before "recompute insights".
    """

    def __init__(
        self,
        provider: FeeDataProvider,
        store: FeeHistoryStore,
        engine: FeeInsightsEngine,
        interval: float = 10.0,
        shutdown_event: asyncio.Event | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._provider = provider
        self._store = store
        self._engine = engine
        self._interval = interval
        self._shutdown = shutdown_event or asyncio.Event()
        self._clock = clock
        self._state = PollerState.IDLE
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]

        self._cycles = 0
        self._successes = 0
        self._failures = 0
        self._last_success_at: datetime | None = None
        self._last_error: dict | None = None

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def shutdown_event(self) -> asyncio.Event:
        return self._shutdown

    @property
    def interval(self) -> float:
        return self._interval

    async def start(self) -> None:
        """Run the polling loop as a background task."""
        if self._task is not None and not self._task.done():
            logger.warning("fee_poller_already_running")
            return
        self._task = asyncio.create_task(self.run())

    def request_shutdown(self) -> None:
        """Latch the shutdown signal. Honored the next time the loop is idle."""
        if not self._shutdown.is_set():
            logger.info("fee_poller_shutdown_requested", state=self._state.value)
        self._shutdown.set()

    async def stop(self) -> None:
        """Request shutdown and wait for the in-flight cycle, if any, to finish."""
        self.request_shutdown()
        await self.wait_stopped()

    async def wait_stopped(self) -> None:
        """Wait until the background loop started by ``start()`` has exited."""
        if self._task is not None:
            await self._task
            self._task = None

    async def run(self) -> None:
        """Main loop. Returns once shutdown is observed while idle."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()  # first tick fires immediately
        self._state = PollerState.IDLE
        logger.info("fee_poller_started", interval=self._interval)

        while True:
            if self._shutdown.is_set():
                break

            delay = max(0.0, next_tick - loop.time())
            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
            else:
                break

            await self.poll_once()

            # Fixed cadence; an overrunning cycle delays the next tick instead of bursting.
            next_tick = max(next_tick + self._interval, loop.time())

        self._state = PollerState.STOPPED
        logger.info(
            "fee_poller_stopped",
            cycles=self._cycles,
            successes=self._successes,
            failures=self._failures,
        )

    async def poll_once(self) -> bool:
        """Run one fetch/update cycle. Returns True if a snapshot was ingested.

        Never raises except on cancellation; store and engine are left
        untouched when the fetch fails.
        """
        self._cycles += 1
        self._state = PollerState.POLLING
        try:
            try:
                stats = await self._provider.fetch_fee_stats()
            except asyncio.CancelledError:
                raise
            except ProviderError as e:
                self._record_failure(e.kind, str(e))
                logger.warning("fee_poll_failed", kind=e.kind, error=str(e))
                return False
            except Exception as e:
                self._record_failure("unexpected", repr(e))
                logger.error("fee_poll_unexpected_error", error=repr(e), exc_info=True)
                return False

            self._state = PollerState.UPDATING
            snapshot = FeeSnapshot.from_stats(stats, captured_at=self._clock())
            await self._store.push(snapshot)
            try:
                status = await self._engine.recompute(await self._store.snapshot())
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # ComputationDegradedError never escapes recompute; anything here is unexpected.
                self._record_failure("update", repr(e))
                logger.error("insights_update_failed", error=repr(e), exc_info=True)
                return False

            self._successes += 1
            self._last_success_at = snapshot.captured_at
            logger.info(
                "fee_snapshot_ingested",
                base_fee=snapshot.base_fee,
                min=snapshot.charged.min,
                max=snapshot.charged.max,
                avg=snapshot.charged.avg,
                p50=snapshot.charged.p50,
                history_size=len(self._store),
                insights_degraded=status.degraded,
            )
            return True
        finally:
            self._state = PollerState.IDLE

    def _record_failure(self, kind: str, message: str) -> None:
        self._failures += 1
        self._last_error = {
            "kind": kind,
            "message": message,
            "at": self._clock().isoformat(),
        }

    def get_status(self) -> dict:
        """Return a JSON-friendly summary of the poller."""
        return {
            "state": self._state.value,
            "interval_seconds": self._interval,
            "shutdown_requested": self._shutdown.is_set(),
            "cycles": self._cycles,
            "successes": self._successes,
            "failures": self._failures,
            "last_success_at": (
                self._last_success_at.isoformat() if self._last_success_at else None
            ),
            "last_error": self._last_error,
        }
