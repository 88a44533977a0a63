"""Bounded in-memory fee history with FIFO eviction.

Snapshots live in a fixed array of ``capacity`` slots addressed through a
head index and a size counter. Once full, each push overwrites the oldest
slot and advances the head, so pushes are O(1) and nothing is ever shifted.

The poller is the only writer. Request handlers read concurrently through
the store's ReadWriteLock and always receive an immutable tuple, never the
slot array itself.
"""

from feetracker.logging import get_logger
from feetracker.models import FeeSnapshot
from feetracker.store.rwlock import ReadWriteLock

logger = get_logger(__name__)

#: Snapshots retained when no capacity is configured (~16 minutes at 10s polls).
DEFAULT_CAPACITY = 100


class FeeHistoryStore:
    """Fixed-capacity ring buffer of FeeSnapshots, oldest first."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._slots: list[FeeSnapshot | None] = [None] * capacity
        self._head = 0  # index of the oldest snapshot
        self._size = 0
        self._lock = ReadWriteLock()

    @property
    def capacity(self) -> int:
        """Maximum number of snapshots retained; fixed for the store's lifetime."""
        return self._capacity

    def __len__(self) -> int:
        return self._size

    async def push(self, snapshot: FeeSnapshot) -> None:
        """Append a snapshot, evicting the oldest one when the store is full."""
        async with self._lock.write():
            if self._size < self._capacity:
                self._slots[(self._head + self._size) % self._capacity] = snapshot
                self._size += 1
                evicted = False
            else:
                self._slots[self._head] = snapshot
                self._head = (self._head + 1) % self._capacity
                evicted = True
        logger.debug("fee_snapshot_stored", size=self._size, evicted=evicted)

    async def snapshot(self) -> tuple[FeeSnapshot, ...]:
        """Return the retained snapshots, oldest first. Empty tuple if none."""
        async with self._lock.read():
            return self._ordered()

    async def latest(self) -> FeeSnapshot | None:
        """Return the most recent snapshot, or None before the first push."""
        async with self._lock.read():
            if self._size == 0:
                return None
            return self._slots[(self._head + self._size - 1) % self._capacity]

    async def size(self) -> int:
        """Return the number of retained snapshots."""
        async with self._lock.read():
            return self._size

    def _ordered(self) -> tuple[FeeSnapshot, ...]:
        return tuple(
            self._slots[(self._head + i) % self._capacity]  # type: ignore[misc]
            for i in range(self._size)
        )
