"""
Fuzzy search over the cards of one space.

Each card is indexed under five fields: title, description, url and the
phonetic projections of title and description. Scores follow the usual fuzzy
search convention: 0 is a perfect match, 1 no match at all, and a card matches
when its best field scores at or below the threshold.
"""
import logging
from dataclasses import dataclass, replace
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Sequence, Tuple

from fuzzywuzzy import fuzz

from taby.constants import DEFAULT_SEARCH_THRESHOLD, SEARCH_KEYS
from taby.models import Card, CollectionWithCards
from taby.transliterate import PinyinTransliterator, Transliterator
from taby.tree import group_cards_by_collection_id

logger = logging.getLogger(__name__)


@dataclass
class IndexedCard:
    """A card plus the derived text it is searched by."""
    card: Card
    position: int
    title: str
    description: str
    url: str
    title_phonetic: str
    description_phonetic: str

    def fields(self, keys: Sequence[str] = SEARCH_KEYS) -> List[str]:
        return [getattr(self, key) for key in keys]


def partial_similarity(query: str, value: str) -> int:
    """
    Best similarity (0-100) of ``query`` against any same-length window of ``value``.

    Same windowing as ``fuzz.partial_ratio``, but with difflib's autojunk
    heuristic off so fields of 200+ characters still align on common letters.
    """
    matcher = SequenceMatcher(None, query, value, autojunk=False)
    best = 0.0
    for a, b, _ in matcher.get_matching_blocks():
        start = max(b - a, 0)
        window = value[start:start + len(query)]
        ratio = SequenceMatcher(None, query, window, autojunk=False).ratio()
        if ratio > 0.995:
            return 100
        best = max(best, ratio)
    return int(round(best * 100))


def field_score(query: str, value: str) -> float:
    """
    Fuzzy distance between a normalized query and one field value.

    Substring matches (with small misspellings) and out-of-order words both
    count, whatever the field length; a query longer than the field is
    compared whole.
    """
    if not value:
        return 1.0
    value = value.lower()
    if query in value:
        return 0.0
    if len(query) <= len(value):
        similarity = partial_similarity(query, value)
    else:
        similarity = fuzz.ratio(query, value)
    similarity = max(similarity, fuzz.token_set_ratio(query, value, force_ascii=False))
    return 1.0 - similarity / 100.0


class SearchIndex:
    """
    Search index for the collections of one space.

    Built once per card set; switch spaces or refresh the snapshot by building
    a new index.
    """

    def __init__(self, collections: Sequence[CollectionWithCards],
                 transliterator: Optional[Transliterator] = None,
                 threshold: float = DEFAULT_SEARCH_THRESHOLD,
                 keys: Sequence[str] = SEARCH_KEYS):
        """
        Build the index.

        Args:
            collections: Collections in display order, cards already sorted
            transliterator: Phonetic engine (pinyin by default)
            threshold: Maximum score for a match, 0.0 (exact) to 1.0 (anything)
            keys: Indexed fields
        """
        self.collections = list(collections)
        self.transliterator = transliterator or PinyinTransliterator()
        self.threshold = threshold
        self.keys = tuple(keys)
        self.cards = [card for collection in self.collections for card in collection.cards]
        self.entries = [self._index_card(card, position) for position, card in enumerate(self.cards)]
        logger.debug(f"Indexed {len(self.entries)} cards from {len(self.collections)} collections")

    def _index_card(self, card: Card, position: int) -> IndexedCard:
        return IndexedCard(
            card=card,
            position=position,
            title=card.display_title,
            description=card.display_description,
            url=card.url,
            title_phonetic=self.transliterator.phonetic_field(card.display_title),
            description_phonetic=self.transliterator.phonetic_field(card.display_description),
        )

    def score(self, query: str, entry: IndexedCard) -> float:
        """Best (lowest) field score of an entry for a normalized query."""
        return min(field_score(query, value) for value in entry.fields(self.keys))

    def search(self, query: str) -> List[Card]:
        """
        Cards matching ``query``.

        A blank query returns every card in tree order; otherwise matches are
        ranked best first, ties keeping tree order.
        """
        query = (query or "").strip().lower()
        if not query:
            return list(self.cards)

        scored: List[Tuple[float, int, Card]] = []
        for entry in self.entries:
            score = self.score(query, entry)
            if score <= self.threshold:
                scored.append((score, entry.position, entry.card))
        scored.sort(key=lambda item: (item[0], item[1]))

        logger.debug(f"Query {query!r} matched {len(scored)} of {len(self.entries)} cards")
        return [card for _, _, card in scored]

    def filter_collections(self, query: str) -> List[CollectionWithCards]:
        """
        Collections holding the cards that match ``query``.

        Cards within a collection keep their ranking order; collections keep
        tree order, and those without matches are dropped.
        """
        if not (query or "").strip():
            return list(self.collections)

        cards_by_collection_id: Dict[int, List[Card]] = group_cards_by_collection_id(self.search(query))
        return [
            replace(collection, cards=cards_by_collection_id[collection.id])
            for collection in self.collections
            if cards_by_collection_id.get(collection.id)
        ]
