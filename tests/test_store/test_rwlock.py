"""Tests for the async ReadWriteLock."""

import asyncio

import pytest

from feetracker.store.rwlock import ReadWriteLock


class TestReadWriteLock:
    @pytest.mark.asyncio
    async def test_readers_share_the_lock(self) -> None:
        lock = ReadWriteLock()
        async with lock.read():
            async with lock.read():
                assert lock.readers == 2
        assert lock.readers == 0

    @pytest.mark.asyncio
    async def test_writer_waits_for_readers(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []

        await lock.acquire_read()
        writer = asyncio.create_task(self._write(lock, events))
        await asyncio.sleep(0.01)
        assert events == []  # blocked by the reader

        await lock.release_read()
        await asyncio.wait_for(writer, timeout=1.0)
        assert events == ["write"]

    @pytest.mark.asyncio
    async def test_readers_wait_for_writer(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []

        await lock.acquire_write()
        reader = asyncio.create_task(self._read(lock, events))
        await asyncio.sleep(0.01)
        assert events == []
        assert lock.writer_active

        await lock.release_write()
        await asyncio.wait_for(reader, timeout=1.0)
        assert events == ["read"]

    @pytest.mark.asyncio
    async def test_waiting_writer_blocks_new_readers(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []

        await lock.acquire_read()
        writer = asyncio.create_task(self._write(lock, events))
        await asyncio.sleep(0.01)
        late_reader = asyncio.create_task(self._read(lock, events))
        await asyncio.sleep(0.01)
        assert events == []

        await lock.release_read()
        await asyncio.wait_for(asyncio.gather(writer, late_reader), timeout=1.0)
        assert events == ["write", "read"]

    @pytest.mark.asyncio
    async def test_lock_released_on_exception(self) -> None:
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            async with lock.write():
                raise RuntimeError("boom")
        assert not lock.writer_active
        async with lock.read():
            assert lock.readers == 1

    @pytest.mark.asyncio
    async def test_cancelled_release_still_frees_reader_slot(self) -> None:
        lock = ReadWriteLock()
        await lock.acquire_read()

        # Contend the condition so the release has to wait for it.
        await lock._cond.acquire()
        releasing = asyncio.create_task(lock.release_read())
        await asyncio.sleep(0.01)
        releasing.cancel()
        with pytest.raises(asyncio.CancelledError):
            await releasing
        lock._cond.release()

        assert lock.readers == 0
        await asyncio.wait_for(lock.acquire_write(), timeout=1.0)
        assert lock.writer_active

    @pytest.mark.asyncio
    async def test_cancelled_release_still_frees_writer(self) -> None:
        lock = ReadWriteLock()
        await lock.acquire_write()

        await lock._cond.acquire()
        releasing = asyncio.create_task(lock.release_write())
        await asyncio.sleep(0.01)
        releasing.cancel()
        with pytest.raises(asyncio.CancelledError):
            await releasing
        lock._cond.release()

        assert not lock.writer_active
        await asyncio.wait_for(lock.acquire_read(), timeout=1.0)
        assert lock.readers == 1

    @pytest.mark.asyncio
    async def test_cancelled_waiting_writer_unblocks_queued_readers(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []

        await lock.acquire_read()
        writer = asyncio.create_task(self._write(lock, events))
        await asyncio.sleep(0.01)
        queued_reader = asyncio.create_task(self._read(lock, events))
        await asyncio.sleep(0.01)
        assert events == []  # held back by the waiting writer

        writer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await writer
        await asyncio.wait_for(queued_reader, timeout=1.0)
        assert events == ["read"]
        await lock.release_read()
        assert lock.readers == 0

    @staticmethod
    async def _write(lock: ReadWriteLock, events: list[str]) -> None:
        async with lock.write():
            events.append("write")

    @staticmethod
    async def _read(lock: ReadWriteLock, events: list[str]) -> None:
        async with lock.read():
            events.append("read")
