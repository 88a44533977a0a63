"""Async reader-writer lock for state shared between the poller and HTTP handlers.

asyncio only ships a mutual-exclusion Lock. The fee history and the insights
cache have one writer (the poller) and many readers (request handlers), so
readers share the lock and a writer excludes them only while it mutates.
Waiting writers block new readers, so a steady stream of requests cannot
starve ingestion.

Releasing updates the counters before any await, so a release cancelled
while the condition is contended still frees the lock; the wake-up of
waiters is shielded from that cancellation.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    async def acquire_read(self) -> None:
        async with self._cond:
            while self._writer or self._writers_waiting:
                await self._cond.wait()
            self._readers += 1

    async def release_read(self) -> None:
        self._readers -= 1
        if self._readers == 0:
            await asyncio.shield(self._notify_all())

    async def acquire_write(self) -> None:
        async with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    await self._cond.wait()
            except BaseException:
                # Readers queued behind this writer must re-check.
                self._writers_waiting -= 1
                self._cond.notify_all()
                raise
            self._writers_waiting -= 1
            self._writer = True

    async def release_write(self) -> None:
        self._writer = False
        await asyncio.shield(self._notify_all())

    async def _notify_all(self) -> None:
        async with self._cond:
            self._cond.notify_all()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        await self.acquire_read()
        try:
            yield
        finally:
            await self.release_read()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """Hold the lock exclusively for the duration of the block."""
        await self.acquire_write()
        try:
            yield
        finally:
            await self.release_write()

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer
