"""
Turn a flat snapshot into the Space -> Collection -> Card tree.

Children are attached through ordered multi-maps keyed by parent id. Records
whose parent is missing never appear, and the input snapshot is not modified.
"""
from collections import defaultdict
from typing import Dict, Iterable, List

from taby.models import (
    Card,
    Collection,
    CollectionWithCards,
    Label,
    SpaceWithCollections,
    SyncData,
)


def by_order(item) -> float:
    """Sort key: ``order``, with a missing order counting as 0."""
    return getattr(item, "order", None) or 0


def build_labels_map(labels: Iterable[Label]) -> Dict[int, Label]:
    # Duplicate ids: last one wins
    return {label.id: label for label in labels}


def group_collections_by_space_id(collections: Iterable[Collection]) -> Dict[int, List[Collection]]:
    groups = defaultdict(list)
    for collection in collections:
        groups[collection.space_id].append(collection)
    return groups


def group_cards_by_collection_id(cards: Iterable[Card]) -> Dict[int, List[Card]]:
    groups = defaultdict(list)
    for card in cards:
        groups[card.collection_id].append(card)
    return groups


def labels_for_collection(label_ids: Iterable[int], labels_map: Dict[int, Label]) -> List[Label]:
    return [labels_map[label_id] for label_id in label_ids if label_id in labels_map]


def build_tree(data: SyncData) -> List[SpaceWithCollections]:
    """
    Denormalize a snapshot into a display-ordered tree.

    Args:
        data: Flat snapshot

    Returns:
        Spaces sorted by order, each with its collections sorted by order,
        each with its cards sorted by order and its labels resolved.
    """
    labels_map = build_labels_map(data.labels)
    collections_by_space_id = group_collections_by_space_id(data.collections)
    cards_by_collection_id = group_cards_by_collection_id(data.cards)

    tree = []
    for space in sorted(data.spaces, key=by_order):
        collections = [
            CollectionWithCards(
                id=collection.id,
                title=collection.title,
                space_id=collection.space_id,
                order=collection.order,
                label_ids=list(collection.label_ids),
                created_at=collection.created_at,
                cards=sorted(cards_by_collection_id.get(collection.id, []), key=by_order),
                labels=labels_for_collection(collection.label_ids, labels_map),
            )
            for collection in sorted(collections_by_space_id.get(space.id, []), key=by_order)
        ]
        tree.append(SpaceWithCollections(
            id=space.id,
            title=space.title,
            order=space.order,
            icon=space.icon,
            created_at=space.created_at,
            collections=collections,
        ))

    return tree
