"""Fee history storage -- bounded ring buffer and its reader-writer lock."""

from feetracker.store.history import DEFAULT_CAPACITY, FeeHistoryStore
from feetracker.store.rwlock import ReadWriteLock

__all__ = ["DEFAULT_CAPACITY", "FeeHistoryStore", "ReadWriteLock"]
