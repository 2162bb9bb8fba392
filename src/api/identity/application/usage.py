"""Best-effort recording of access key usage.

Every successful access key authentication schedules a ``last_used_at``
touch. The touch runs as a detached task on its own session so that its
latency or failure never reaches the response path.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from identity.application.observability import (
    DefaultResolutionProbe,
    ResolutionProbe,
)

UsageWriter = Callable[[int, datetime], Awaitable[None]]


class AccessKeyUsageRecorder:
    """Schedules fire-and-forget ``last_used_at`` updates.

    Holds a reference to every in-flight task until it finishes; the event
    loop itself only keeps weak references to tasks.
    """

    def __init__(
        self,
        writer: UsageWriter,
        probe: ResolutionProbe | None = None,
    ) -> None:
        """Initialize the recorder.

        Args:
            writer: Coroutine function that persists (access_key_id, used_at)
            probe: Optional domain probe for observability
        """
        self._writer = writer
        self._probe = probe or DefaultResolutionProbe()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of touches still in flight."""
        return len(self._tasks)

    def schedule(
        self, access_key_id: int, used_at: datetime | None = None
    ) -> asyncio.Task[None]:
        """Schedule a touch without awaiting it.

        Must be called from inside a running event loop.
        """
        task = asyncio.get_running_loop().create_task(
            self._record(access_key_id, used_at or datetime.now(UTC))
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for all in-flight touches (used on shutdown)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _record(self, access_key_id: int, used_at: datetime) -> None:
        try:
            await self._writer(access_key_id, used_at)
        except Exception as e:
            self._probe.usage_recording_failed(access_key_id, e)
