"""Unit tests for AccessKeyUsageRecorder."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from identity.application.usage import AccessKeyUsageRecorder


class TestSchedule:
    """Tests for fire-and-forget scheduling."""

    @pytest.mark.asyncio
    async def test_schedule_does_not_wait_for_writer(self):
        """schedule() returns before the write completes."""
        release = asyncio.Event()

        async def slow_writer(access_key_id, used_at):
            await release.wait()

        recorder = AccessKeyUsageRecorder(writer=slow_writer, probe=MagicMock())

        task = recorder.schedule(100)

        assert not task.done()
        assert recorder.pending == 1

        release.set()
        await recorder.drain()
        assert recorder.pending == 0

    @pytest.mark.asyncio
    async def test_writes_given_timestamp(self):
        """An explicit timestamp is passed through."""
        writer = AsyncMock()
        recorder = AccessKeyUsageRecorder(writer=writer, probe=MagicMock())
        used_at = datetime(2024, 5, 1, tzinfo=UTC)

        await recorder.schedule(100, used_at)

        writer.assert_awaited_once_with(100, used_at)

    @pytest.mark.asyncio
    async def test_defaults_to_now(self):
        """Without a timestamp the current UTC time is used."""
        writer = AsyncMock()
        recorder = AccessKeyUsageRecorder(writer=writer, probe=MagicMock())
        before = datetime.now(UTC)

        await recorder.schedule(100)

        used_at = writer.await_args.args[1]
        assert used_at >= before
        assert used_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_failures_are_logged_not_raised(self):
        """A failing write is reported to the probe and swallowed."""
        error = RuntimeError("deadlock detected")
        probe = MagicMock()
        recorder = AccessKeyUsageRecorder(
            writer=AsyncMock(side_effect=error), probe=probe
        )

        task = recorder.schedule(100)
        await task

        assert task.exception() is None
        probe.usage_recording_failed.assert_called_once_with(100, error)

    @pytest.mark.asyncio
    async def test_concurrent_touches_on_same_key(self):
        """Duplicate touches race freely; all of them run."""
        writer = AsyncMock()
        recorder = AccessKeyUsageRecorder(writer=writer, probe=MagicMock())

        for _ in range(5):
            recorder.schedule(100)
        await recorder.drain()

        assert writer.await_count == 5

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self):
        """Draining an idle recorder returns immediately."""
        recorder = AccessKeyUsageRecorder(writer=AsyncMock(), probe=MagicMock())
        await recorder.drain()
