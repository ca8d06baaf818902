"""
Snapshot caching for Taby.

Keeps the last fetched snapshot in local storage together with the time it was
written. Entries older than the staleness window count as misses. The cache is
an optimization only: every failure degrades to a miss or a no-op.
"""
import json
import time
import logging
from typing import Callable, Optional

from taby.config import GistCredentials
from taby.models import SyncData
from taby.storage import CacheIOError, LocalStorage

logger = logging.getLogger(__name__)


class SnapshotCache:
    """
    Time-limited snapshot cache on top of LocalStorage.

    Entries are stored as ``{"data": <snapshot>, "timestamp": <epoch ms>}``
    under a key derived from the credentials.
    """

    def __init__(self, storage: LocalStorage, max_age: float,
                 clock: Callable[[], float] = time.time):
        """
        Initialize the cache.

        Args:
            storage: Backing local storage
            max_age: Staleness window in seconds
            clock: Returns the current time in seconds
        """
        self.storage = storage
        self.max_age_ms = max_age * 1000
        self.clock = clock
        # Keys invalidated since their last successful write
        self._invalidated = set()

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    async def read(self, credentials: GistCredentials) -> Optional[SyncData]:
        """
        Return the cached snapshot, or None when missing, corrupt or stale.
        """
        key = credentials.cache_key()
        if key in self._invalidated:
            return None
        try:
            cached = await self.storage.get_item(key)
        except (CacheIOError, OSError) as e:
            logger.error(f"Failed to read cache: {e}")
            return None

        if not cached:
            logger.debug(f"Cache miss for {credentials!r}")
            return None

        try:
            entry = json.loads(cached)
            timestamp = entry["timestamp"]
            data = SyncData.from_dict(entry["data"])
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable cache entry: {e}")
            return None

        if not isinstance(timestamp, (int, float)) or self._now_ms() - timestamp >= self.max_age_ms:
            logger.debug(f"Cache expired for {credentials!r}")
            return None

        logger.debug(f"Cache hit for {credentials!r}")
        return data

    async def write(self, credentials: GistCredentials, data: SyncData):
        """Persist a snapshot stamped with the current time."""
        entry = json.dumps({"data": data.to_dict(), "timestamp": self._now_ms()}, ensure_ascii=False)
        try:
            await self.storage.set_item(credentials.cache_key(), entry)
        except (CacheIOError, OSError) as e:
            logger.error(f"Failed to save cache: {e}")
            return
        self._invalidated.discard(credentials.cache_key())
        logger.info(f"Cached snapshot for {credentials!r}")

    async def invalidate(self, credentials: GistCredentials):
        """Drop the cached snapshot; the next read is a miss."""
        key = credentials.cache_key()
        self._invalidated.add(key)
        try:
            await self.storage.remove_item(key)
        except (CacheIOError, OSError) as e:
            logger.error(f"Failed to invalidate cache: {e}")
            return
        logger.info(f"Invalidated cache for {credentials!r}")
