"""
Browse session: the state behind the list view.

Ties the pieces together the way the UI uses them: load a snapshot (with
concurrent loads coalesced), build the tree once per snapshot, keep the
selected space valid, and answer queries with collection-grouped cards.
"""
import logging
from typing import List, Optional

from taby.coalesce import RequestCoalescer
from taby.config import GistCredentials
from taby.constants import DEFAULT_SEARCH_THRESHOLD
from taby.models import CollectionWithCards, SpaceWithCollections, SyncData
from taby.search import SearchIndex
from taby.selection import SpaceSelection
from taby.sync import SyncOrchestrator
from taby.transliterate import Transliterator
from taby.tree import build_tree

logger = logging.getLogger(__name__)


class BrowseSession:
    """
    One user's view of one gist.

    Example:
        >>> session = BrowseSession(orchestrator, selection, credentials)
        >>> await session.load()
        >>> for collection in session.search("python"):
        ...     print(collection.title, len(collection.cards))
    """

    def __init__(self, orchestrator: SyncOrchestrator, selection: SpaceSelection,
                 credentials: GistCredentials,
                 transliterator: Optional[Transliterator] = None,
                 threshold: float = DEFAULT_SEARCH_THRESHOLD,
                 coalescer: Optional[RequestCoalescer] = None):
        self.orchestrator = orchestrator
        self.selection = selection
        self.credentials = credentials
        self.transliterator = transliterator
        self.threshold = threshold
        self.coalescer = coalescer or RequestCoalescer()

        self.snapshot: Optional[SyncData] = None
        self.selected_space_id: Optional[str] = None
        self._tree: List[SpaceWithCollections] = []
        self._tree_source: Optional[SyncData] = None
        self._index: Optional[SearchIndex] = None
        self._index_space_id: Optional[str] = None

    async def load(self) -> SyncData:
        """Get the snapshot (cache first) and pick a valid selected space."""
        snapshot = await self.coalescer.run(
            self.credentials.dedup_key(),
            lambda: self.orchestrator.get_snapshot(self.credentials),
        )
        return await self._use(snapshot)

    async def refresh(self) -> SyncData:
        """Invalidate the cache and refetch."""
        snapshot = await self.coalescer.run(
            ("refresh",) + self.credentials.dedup_key(),
            lambda: self.orchestrator.refresh(self.credentials),
        )
        return await self._use(snapshot)

    async def _use(self, snapshot: SyncData) -> SyncData:
        self.snapshot = snapshot
        self.selected_space_id = await self.selection.resolve(self.spaces)
        return snapshot

    @property
    def spaces(self) -> List[SpaceWithCollections]:
        """The tree for the current snapshot, rebuilt only when the snapshot changes."""
        if self.snapshot is None:
            return []
        if self._tree_source is not self.snapshot:
            self._tree = build_tree(self.snapshot)
            self._tree_source = self.snapshot
            self._index = None
        return self._tree

    @property
    def selected_space(self) -> Optional[SpaceWithCollections]:
        for space in self.spaces:
            if str(space.id) == self.selected_space_id:
                return space
        return None

    async def select_space(self, space_id) -> Optional[SpaceWithCollections]:
        """
        Switch to another space.

        Raises:
            KeyError: if the space is not in the current snapshot
        """
        space_id = str(space_id)
        if not any(str(space.id) == space_id for space in self.spaces):
            raise KeyError(f"No space with id {space_id}")
        self.selected_space_id = await self.selection.set(space_id)
        return self.selected_space

    def _search_index(self) -> Optional[SearchIndex]:
        space = self.selected_space
        if space is None:
            return None
        if self._index is None or self._index_space_id != self.selected_space_id:
            self._index = SearchIndex(
                space.collections,
                transliterator=self.transliterator,
                threshold=self.threshold,
            )
            self._index_space_id = self.selected_space_id
        return self._index

    def search(self, query: str = "") -> List[CollectionWithCards]:
        """Collections of the selected space with the cards matching ``query``."""
        index = self._search_index()
        if index is None:
            return []
        return index.filter_collections(query)

    def collection_urls(self, collection_id: int) -> List[str]:
        """The http(s) URLs of a collection's cards, in display order."""
        space = self.selected_space
        if space is None:
            return []
        for collection in space.collections:
            if collection.id == collection_id:
                return [card.url for card in collection.cards if card.url and card.url.startswith("http")]
        return []
