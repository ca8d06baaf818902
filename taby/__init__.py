"""
Taby - saved browser tabs, synced from a gist

Reads the Spaces -> Collections -> Cards snapshot that the Taby browser
extension stores (LZ-String compressed) in a GitHub or Gitee gist, caches it
locally, and makes it searchable, pinyin included.

Example Usage:
    >>> from taby import get_config, build_tree, SearchIndex
    >>> from taby.cli import build_session
    >>> session = build_session(get_config())
    >>> await session.load()
    >>> session.search("python")
"""

__version__ = "0.1.0"
__author__ = "Taby Contributors"

# Configuration
from taby.config import GistCredentials, TabyConfig, get_config, init_config

# Models
from taby.models import (
    Card,
    Collection,
    CollectionWithCards,
    Favicon,
    Label,
    Space,
    SpaceWithCollections,
    SyncData,
)

# Snapshot pipeline
from taby.decompress import MalformedSnapshotError, parse_gist_files
from taby.favicons import enrich_cards_with_favicons, resolve_card_favicon
from taby.tree import build_tree
from taby.storage import CacheIOError, LocalStorage
from taby.cache import SnapshotCache
from taby.sync import SyncFetchError, SyncOrchestrator
from taby.coalesce import RequestCoalescer

# Search
from taby.search import SearchIndex
from taby.transliterate import NullTransliterator, PinyinTransliterator, Transliterator

# Session
from taby.selection import SpaceSelection
from taby.session import BrowseSession

__all__ = [
    # Config
    "GistCredentials",
    "TabyConfig",
    "get_config",
    "init_config",
    # Models
    "Card",
    "Collection",
    "CollectionWithCards",
    "Favicon",
    "Label",
    "Space",
    "SpaceWithCollections",
    "SyncData",
    # Pipeline
    "MalformedSnapshotError",
    "parse_gist_files",
    "enrich_cards_with_favicons",
    "resolve_card_favicon",
    "build_tree",
    "CacheIOError",
    "LocalStorage",
    "SnapshotCache",
    "SyncFetchError",
    "SyncOrchestrator",
    "RequestCoalescer",
    # Search
    "SearchIndex",
    "NullTransliterator",
    "PinyinTransliterator",
    "Transliterator",
    # Session
    "SpaceSelection",
    "BrowseSession",
]
