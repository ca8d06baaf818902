"""
The persisted "selected space" preference.
"""
import logging
from typing import Optional, Sequence

from taby.constants import SELECTED_SPACE_KEY
from taby.models import Space
from taby.storage import CacheIOError, LocalStorage

logger = logging.getLogger(__name__)


class SpaceSelection:
    """Remembers which space the user last looked at, as a string id."""

    def __init__(self, storage: LocalStorage, key: str = SELECTED_SPACE_KEY):
        self.storage = storage
        self.key = key

    async def get(self) -> Optional[str]:
        return await self.storage.get_item(self.key)

    async def set(self, space_id) -> str:
        value = str(space_id)
        try:
            await self.storage.set_item(self.key, value)
        except CacheIOError as e:
            logger.error(f"Failed to save selected space: {e}")
        return value

    async def resolve(self, spaces: Sequence[Space]) -> Optional[str]:
        """
        The selected space id, valid for ``spaces``.

        Falls back to (and stores) the first space when nothing is selected
        or the selected space no longer exists.
        """
        if not spaces:
            return None

        selected = await self.get()
        if selected is not None and any(str(space.id) == selected for space in spaces):
            return selected

        logger.debug(f"Selected space {selected!r} not available, using first space")
        return await self.set(spaces[0].id)
