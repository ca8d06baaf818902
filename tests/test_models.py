"""
Tests for taby/models.py record conversion.
"""
import pytest

from taby.models import Card, Collection, Favicon, Label, Space, SyncData


class TestCard:
    """Test Card conversion and display helpers."""

    def test_from_dict_maps_camel_case(self):
        card = Card.from_dict({
            "id": 1,
            "title": "T",
            "url": "https://example.com",
            "description": "D",
            "collectionId": 7,
            "order": 3,
            "customTitle": "CT",
            "customDescription": "CD",
            "faviconId": 9,
            "windowId": 4,
            "createdAt": 1690000000000,
        })
        assert card.collection_id == 7
        assert card.custom_title == "CT"
        assert card.custom_description == "CD"
        assert card.favicon_id == 9
        assert card.window_id == 4
        assert card.created_at == 1690000000000

    def test_missing_order_defaults_to_zero(self):
        card = Card.from_dict({"id": 1, "collectionId": 1})
        assert card.order == 0

    def test_non_numeric_favicon_id_is_ignored(self):
        card = Card.from_dict({"id": 1, "faviconId": "5"})
        assert card.favicon_id is None

    def test_unknown_keys_are_ignored(self):
        card = Card.from_dict({"id": 1, "somethingNew": True})
        assert card.id == 1

    def test_display_title_falls_back_to_custom_title(self):
        assert Card(id=1, title="", custom_title="Custom").display_title == "Custom"
        assert Card(id=1, title="Real", custom_title="Custom").display_title == "Real"
        assert Card(id=1).display_title == ""

    def test_display_description_falls_back_to_custom_description(self):
        assert Card(id=1, custom_description="Note").display_description == "Note"
        assert Card(id=1, description="Desc", custom_description="Note").display_description == "Desc"

    def test_to_dict_omits_unset_optionals(self):
        d = Card(id=1, title="T", url="u", collection_id=2).to_dict()
        assert "favicon" not in d
        assert "faviconId" not in d
        assert d["collectionId"] == 2

    def test_dict_round_trip(self):
        card = Card(id=1, title="T", url="u", collection_id=2, order=5, favicon="data:x", favicon_id=3)
        assert Card.from_dict(card.to_dict()) == card


class TestCollection:

    def test_missing_label_ids_defaults_to_empty(self):
        collection = Collection.from_dict({"id": 1, "spaceId": 2})
        assert collection.label_ids == []
        assert collection.order == 0

    def test_to_dict_uses_wire_names(self):
        d = Collection(id=1, title="C", space_id=2, order=1, label_ids=[3]).to_dict()
        assert d == {"id": 1, "title": "C", "spaceId": 2, "order": 1, "labelIds": [3]}


class TestSyncData:
    """Test whole-snapshot conversion."""

    def test_from_dict_builds_typed_records(self, sample_records):
        data = SyncData.from_dict(sample_records)
        assert all(isinstance(s, Space) for s in data.spaces)
        assert all(isinstance(l, Label) for l in data.labels)
        assert all(isinstance(f, Favicon) for f in data.favicons)
        assert len(data.cards) == 4

    def test_missing_sections_are_empty(self):
        data = SyncData.from_dict({"spaces": [{"id": 1}]})
        assert data.collections == []
        assert data.cards == []

    def test_round_trip_preserves_snapshot(self, sample_snapshot):
        assert SyncData.from_dict(sample_snapshot.to_dict()) == sample_snapshot

    def test_missing_id_raises(self):
        with pytest.raises(KeyError):
            SyncData.from_dict({"spaces": [{"title": "no id"}]})
