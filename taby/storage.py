"""
Local key/value storage for Taby.

A single JSON file maps string keys to string values. All methods are
coroutines; the file work runs in a worker thread so the event loop is never
blocked.
"""
import os
import json
import asyncio
import logging
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from taby.constants import STORAGE_FILENAME

logger = logging.getLogger(__name__)


class CacheIOError(Exception):
    """Reading or writing the local storage file failed."""
    pass


class LocalStorage:
    """
    Persistent string storage backed by one JSON file.

    A corrupt or unreadable file behaves like an empty one on read; write
    failures raise CacheIOError.
    """

    def __init__(self, data_dir: str):
        """
        Initialize the storage.

        Args:
            data_dir: Directory holding the storage file (created on first write)
        """
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / STORAGE_FILENAME
        # Guards load-modify-save; calls run in worker threads
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                items = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load storage file {self.path}: {e}")
            return {}
        if not isinstance(items, dict):
            logger.error(f"Ignoring storage file {self.path}: not an object")
            return {}
        return items

    def _save(self, items: Dict[str, str]):
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".storage-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(items, f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise CacheIOError(f"Failed to write {self.path}: {e}") from e

    def _set(self, key: str, value: str):
        with self._lock:
            items = self._load()
            items[key] = value
            self._save(items)

    def _remove(self, key: str):
        with self._lock:
            items = self._load()
            if key in items:
                del items[key]
                self._save(items)

    def _clear(self):
        with self._lock:
            self._save({})

    async def get_item(self, key: str) -> Optional[str]:
        items = await asyncio.to_thread(self._load)
        return items.get(key)

    async def set_item(self, key: str, value: str):
        await asyncio.to_thread(self._set, key, value)

    async def remove_item(self, key: str):
        await asyncio.to_thread(self._remove, key)

    async def all_items(self) -> Dict[str, str]:
        return await asyncio.to_thread(self._load)

    async def clear(self):
        await asyncio.to_thread(self._clear)
