"""
Request coalescing.

Overlapping requests for the same key share one in-flight task; every caller
gets the same result or the same exception.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable

logger = logging.getLogger(__name__)


class RequestCoalescer:
    """One in-flight task per key."""

    def __init__(self):
        self._inflight: Dict[Hashable, asyncio.Future] = {}

    def in_flight(self, key: Hashable) -> bool:
        return key in self._inflight

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        """
        Await ``factory()`` for ``key``, joining an identical request already running.

        Args:
            key: Deduplication key
            factory: Creates the awaitable when no request for key is running

        Returns:
            The shared result
        """
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._release(key, done))
        else:
            logger.debug(f"Joining in-flight request for {key!r}")
        return await task

    def _release(self, key: Hashable, task: asyncio.Future):
        if self._inflight.get(key) is task:
            del self._inflight[key]
