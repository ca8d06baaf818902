"""
Tests for the fuzzy search index.
"""
import pytest

from taby.models import Card, CollectionWithCards
from taby.search import IndexedCard, SearchIndex, field_score
from taby.transliterate import NullTransliterator


@pytest.fixture
def collections():
    """Two collections in display order."""
    return [
        CollectionWithCards(id=1, title="Search", space_id=1, order=0, cards=[
            Card(id=10, title="百度", url="https://www.baidu.com", collection_id=1),
            Card(id=11, title="GitHub", url="https://github.com",
                 description="Code hosting platform", collection_id=1, order=1),
        ]),
        CollectionWithCards(id=2, title="Docs", space_id=1, order=1, cards=[
            Card(id=20, title="Learn Pyton", url="https://learn.example.org", collection_id=2),
            Card(id=21, title="Python Documentation", url="https://docs.python.org",
                 description="Official Python documentation", collection_id=2, order=1),
        ]),
    ]


@pytest.fixture
def index(collections):
    return SearchIndex(collections)


class TestFieldScore:

    def test_exact_substring_is_perfect(self):
        assert field_score("python", "Python Documentation") == 0.0

    def test_empty_field_never_matches(self):
        assert field_score("python", "") == 1.0

    def test_unrelated_text_scores_high(self):
        assert field_score("zzzz", "python documentation") > 0.3

    def test_query_longer_than_field_is_compared_whole(self):
        assert field_score("python documentation tutorial", "py") > 0.3


class TestIndexing:

    def test_phonetic_fields_are_derived(self, index):
        entry = index.entries[0]
        assert isinstance(entry, IndexedCard)
        assert entry.title_phonetic == "baidu bd"
        assert entry.description_phonetic == ""

    def test_custom_title_is_transliterated_when_title_empty(self):
        card = Card(id=1, title="", custom_title="中国", url="https://x.cn", collection_id=1)
        index = SearchIndex([CollectionWithCards(id=1, cards=[card])])
        assert index.entries[0].title_phonetic == "zhongguo zg"


class TestSearch:
    """Test query resolution."""

    def test_blank_query_returns_all_cards_in_tree_order(self, index):
        assert [c.id for c in index.search("")] == [10, 11, 20, 21]
        assert [c.id for c in index.search("   ")] == [10, 11, 20, 21]

    def test_initials_match_chinese_title(self, index):
        assert [c.id for c in index.search("bd")] == [10]

    def test_full_pinyin_matches_chinese_title(self, index):
        assert [c.id for c in index.search("baidu")] == [10]

    def test_chinese_query_matches_directly(self, index):
        assert [c.id for c in index.search("百度")] == [10]

    def test_ranking_puts_best_match_first(self, index):
        assert [c.id for c in index.search("python")] == [21, 20]

    def test_tolerates_misspelling(self, index):
        assert 21 in [c.id for c in index.search("pyhton")]

    def test_out_of_order_words(self, index):
        assert [c.id for c in index.search("documentation python")][0] == 21

    def test_matches_description(self, index):
        assert [c.id for c in index.search("hosting")] == [11]

    def test_matches_url(self, index):
        assert [c.id for c in index.search("learn.example")] == [20]

    def test_case_insensitive(self, index):
        assert [c.id for c in index.search("GITHUB")] == [11]

    def test_no_match(self, index):
        assert index.search("zzzzqqq") == []

    def test_results_are_plain_cards(self, index):
        results = index.search("bd")
        assert all(type(card) is Card for card in results)
        assert not hasattr(results[0], "title_phonetic")

    def test_null_transliterator_disables_phonetic_match(self, collections):
        index = SearchIndex(collections, transliterator=NullTransliterator())
        assert index.search("bd") == []

    def test_threshold_zero_requires_exact_substring(self, collections):
        index = SearchIndex(collections, threshold=0.0)
        assert [c.id for c in index.search("pyhton")] == []
        assert [c.id for c in index.search("github")] == [11]


class TestFilterCollections:
    """Test regrouping results by collection."""

    def test_blank_query_returns_collections_unchanged(self, index, collections):
        assert index.filter_collections("") == collections

    def test_collections_without_matches_are_omitted(self, index):
        result = index.filter_collections("bd")
        assert [c.id for c in result] == [1]
        assert [card.id for card in result[0].cards] == [10]

    def test_collection_order_is_preserved(self, index):
        result = index.filter_collections("o")
        ids = [c.id for c in result]
        assert ids == sorted(ids, key=[1, 2].index)

    def test_cards_keep_ranking_order(self, index):
        result = index.filter_collections("python")
        assert [card.id for card in result[0].cards] == [21, 20]

    def test_does_not_mutate_source_collections(self, index, collections):
        index.filter_collections("bd")
        assert len(collections[0].cards) == 2


class TestLongFields:
    """Test matching inside fields of 200+ characters."""

    LONG_DESCRIPTION = (
        "A long reading list about running container workloads in production: "
        "notes on capacity planning, rolling deployments, service meshes, "
        "observability, incident response and cost control, plus a deep dive "
        "into how the kubernetes scheduler places pods across nodes, "
        "with links to talks, postmortems and further reading material."
    )

    @pytest.fixture
    def long_index(self):
        card = Card(id=1, title="Ops notes", url="https://ops.example.com",
                    description=self.LONG_DESCRIPTION, collection_id=1)
        return SearchIndex([CollectionWithCards(id=1, cards=[card])])

    def test_description_is_long(self):
        assert len(self.LONG_DESCRIPTION) > 300

    def test_prefix_in_long_field(self):
        assert field_score("kubernet", self.LONG_DESCRIPTION) == 0.0

    def test_misspelling_in_long_field(self):
        assert field_score("kubernetse", self.LONG_DESCRIPTION) <= 0.3

    def test_long_field_scores_like_short_one(self):
        short = "the kubernetes scheduler"
        assert field_score("kubernetse", self.LONG_DESCRIPTION) == field_score("kubernetse", short)

    def test_search_finds_card_by_long_description(self, long_index):
        assert [c.id for c in long_index.search("kubernet")] == [1]
