"""
Data models for Taby snapshots.

Records arrive from the gist as flat JSON arrays with camelCase keys. Each
record type converts to and from that wire shape with ``from_dict`` and
``to_dict``; unknown keys are ignored so newer snapshots still load.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _optional_int(value: Any) -> Optional[int]:
    """Keep integers (bools excluded), drop everything else."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _order(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return 0


@dataclass
class Space:
    """Top-level grouping, root of the tree."""
    id: int
    title: str = ""
    order: float = 0
    icon: Optional[str] = None
    created_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Space":
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            order=_order(data.get("order")),
            icon=data.get("icon"),
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {"id": self.id, "title": self.title, "order": self.order}
        if self.icon is not None:
            d["icon"] = self.icon
        if self.created_at is not None:
            d["createdAt"] = self.created_at
        return d


@dataclass
class Label:
    id: int
    title: str = ""
    color: str = ""
    created_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Label":
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            color=data.get("color") or "",
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {"id": self.id, "title": self.title, "color": self.color}
        if self.created_at is not None:
            d["createdAt"] = self.created_at
        return d


@dataclass
class Collection:
    """A group of cards inside a space, tagged with zero or more labels."""
    id: int
    title: str = ""
    space_id: Optional[int] = None
    order: float = 0
    label_ids: List[int] = field(default_factory=list)
    created_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Collection":
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            space_id=data.get("spaceId"),
            order=_order(data.get("order")),
            label_ids=list(data.get("labelIds") or []),
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "id": self.id,
            "title": self.title,
            "spaceId": self.space_id,
            "order": self.order,
            "labelIds": list(self.label_ids),
        }
        if self.created_at is not None:
            d["createdAt"] = self.created_at
        return d


@dataclass
class Card:
    """A saved tab."""
    id: int
    title: str = ""
    url: str = ""
    description: str = ""
    collection_id: Optional[int] = None
    order: float = 0
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None
    favicon_id: Optional[int] = None
    favicon: Optional[str] = None
    window_id: Optional[int] = None
    created_at: Optional[int] = None

    @property
    def display_title(self) -> str:
        return self.title or self.custom_title or ""

    @property
    def display_description(self) -> str:
        return self.description or self.custom_description or ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        favicon = data.get("favicon")
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            url=data.get("url") or "",
            description=data.get("description") or "",
            collection_id=data.get("collectionId"),
            order=_order(data.get("order")),
            custom_title=data.get("customTitle"),
            custom_description=data.get("customDescription"),
            favicon_id=_optional_int(data.get("faviconId")),
            favicon=favicon if isinstance(favicon, str) else None,
            window_id=data.get("windowId"),
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "collectionId": self.collection_id,
            "order": self.order,
        }
        optional = {
            "customTitle": self.custom_title,
            "customDescription": self.custom_description,
            "faviconId": self.favicon_id,
            "favicon": self.favicon,
            "windowId": self.window_id,
            "createdAt": self.created_at,
        }
        d.update({k: v for k, v in optional.items() if v is not None})
        return d


@dataclass
class Favicon:
    id: int
    url: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Favicon":
        return cls(id=data["id"], url=data.get("url") or "")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "url": self.url}


@dataclass
class SyncData:
    """
    One complete flat snapshot as stored in the gist.

    The five sequences are independent; parents are referenced by id only.
    """
    spaces: List[Space] = field(default_factory=list)
    collections: List[Collection] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)
    cards: List[Card] = field(default_factory=list)
    favicons: List[Favicon] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncData":
        return cls(
            spaces=[Space.from_dict(item) for item in data.get("spaces") or []],
            collections=[Collection.from_dict(item) for item in data.get("collections") or []],
            labels=[Label.from_dict(item) for item in data.get("labels") or []],
            cards=[Card.from_dict(item) for item in data.get("cards") or []],
            favicons=[Favicon.from_dict(item) for item in data.get("favicons") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spaces": [s.to_dict() for s in self.spaces],
            "collections": [c.to_dict() for c in self.collections],
            "labels": [l.to_dict() for l in self.labels],
            "cards": [c.to_dict() for c in self.cards],
            "favicons": [f.to_dict() for f in self.favicons],
        }


@dataclass
class CollectionWithCards(Collection):
    """A collection with its cards sorted and its labels resolved."""
    cards: List[Card] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)


@dataclass
class SpaceWithCollections(Space):
    collections: List[CollectionWithCards] = field(default_factory=list)
