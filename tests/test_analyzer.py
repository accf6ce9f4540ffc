"""
Tests for tabdupe/analyzer.py

Tests tab set analysis including:
- Filtering of internal, empty and unparseable URLs
- Exact duplicate grouping by normalized URL and document identity
- Similar pair detection, ranking and the comparison pool cap
- Host helpers: badge count, close-all recommendation, pair resolution
"""
import pytest

from tabdupe.analyzer import (
    analyze,
    badge_text,
    count_exact_duplicates,
    find_duplicate_groups,
    parse_tabs,
    redundant_tab_ids,
    resolve_pair,
)
from tabdupe.models import SimilarPair, TabRecord


class TestParseTabs:
    """Test parse_tabs filtering."""

    def test_filters_unusable_tabs(self, sample_tabs):
        """Internal pages, empty URLs and unparseable URLs are dropped."""
        kept = [tab.id for tab, _ in parse_tabs(sample_tabs)]
        assert kept == [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]

    def test_preserves_order(self, make_tab):
        tabs = [make_tab("https://b.com"), make_tab("https://a.com"), make_tab("https://c.com")]
        assert [tab.id for tab, _ in parse_tabs(tabs)] == [1, 2, 3]


class TestDuplicateGroups:
    """Test exact duplicate grouping."""

    def test_three_identical_tabs(self, make_tab):
        """Three tabs with the same normalized URL form one group of three."""
        tabs = [
            make_tab("https://example.com/page"),
            make_tab("https://www.example.com/page/"),
            make_tab("https://example.com/page#comments"),
        ]
        result = analyze(tabs)

        assert len(result.duplicate_groups) == 1
        group = result.duplicate_groups[0]
        assert group.key == "https://example.com/page"
        assert group.count == 3
        assert [tab.id for tab in group.tabs] == [1, 2, 3]
        assert result.total_duplicate_tab_count == 2

    def test_document_identity_group(self, make_tab):
        """Edit and view URLs of one document are duplicates."""
        tabs = [
            make_tab("https://docs.google.com/document/d/ABC123/edit"),
            make_tab("https://docs.google.com/document/d/ABC123/view"),
        ]
        result = analyze(tabs)

        assert len(result.duplicate_groups) == 1
        group = result.duplicate_groups[0]
        assert group.key == "gdoc:doc:ABC123"
        assert group.count == 2
        assert group.is_document_group

    def test_document_identity_takes_priority(self, make_tab):
        """Tabs claimed by a document group do not form URL groups too."""
        tabs = [
            make_tab("https://docs.google.com/document/d/ABC/edit"),
            make_tab("https://docs.google.com/document/d/ABC/edit"),
            make_tab("https://docs.google.com/document/d/ABC/view"),
        ]
        result = analyze(tabs)

        assert [group.key for group in result.duplicate_groups] == ["gdoc:doc:ABC"]
        assert result.duplicate_groups[0].count == 3
        assert result.total_duplicate_tab_count == 2

    def test_url_groups_follow_document_groups(self, make_tab):
        """URL groups come after document groups and skip claimed tabs."""
        tabs = [
            make_tab("https://docs.google.com/spreadsheets/d/S1/edit"),
            make_tab("https://docs.google.com/spreadsheets/d/S1/edit#gid=0"),
            make_tab("https://example.com/"),
            make_tab("https://example.com"),
        ]
        result = analyze(tabs)

        keys = [group.key for group in result.duplicate_groups]
        assert keys == ["gdoc:sheet:S1", "https://example.com/"]

    def test_singletons_not_emitted(self, make_tab):
        tabs = [make_tab("https://a.com/1"), make_tab("https://b.com/2")]
        assert analyze(tabs).duplicate_groups == []

    def test_groups_are_disjoint(self, sample_tabs):
        """No tab id appears in more than one group."""
        groups = find_duplicate_groups(parse_tabs(sample_tabs))
        seen = set()
        for group in groups:
            ids = {tab.id for tab in group.tabs}
            assert not ids & seen
            seen |= ids
            assert group.count > 1

    def test_excluded_tabs_never_grouped(self, make_tab):
        tabs = [
            make_tab("chrome://newtab"),
            make_tab("chrome://newtab"),
            make_tab("chrome-extension://abc/popup.html"),
            make_tab("chrome-extension://abc/popup.html"),
            make_tab(""),
            make_tab(""),
        ]
        result = analyze(tabs)
        assert result.is_empty
        assert result.compared_tab_count == 0

    def test_unparseable_tabs_never_grouped(self, make_tab):
        """Identical malformed URLs are excluded, not grouped."""
        tabs = [make_tab("not a url"), make_tab("not a url")]
        result = analyze(tabs)
        assert result.duplicate_groups == []
        assert result.similar_pairs == []

    def test_padded_internal_urls_excluded(self, make_tab):
        """Surrounding whitespace does not hide an internal page."""
        tabs = [make_tab(" chrome://settings"), make_tab("chrome://settings ")]
        result = analyze(tabs)
        assert result.is_empty
        assert count_exact_duplicates(tabs) == 0

    def test_non_string_urls_excluded(self, make_tab):
        """Tabs whose url is not a string are skipped, not fatal."""
        tabs = [
            TabRecord(id=1, url=123),
            TabRecord(id=2, url=None),
            make_tab("https://a.com/x", tab_id=3),
            make_tab("https://a.com/x", tab_id=4),
        ]
        result = analyze(tabs)

        assert [tab.id for tab in result.duplicate_groups[0].tabs] == [3, 4]
        assert count_exact_duplicates(tabs) == 1


class TestSimilarPairs:
    """Test near-duplicate detection."""

    def test_sample_window(self, sample_tabs):
        result = analyze(sample_tabs, threshold=80)

        assert [group.key for group in result.duplicate_groups] == [
            "gdoc:doc:ABC123",
            "https://docs.python.org/3/library/re.html",
            "https://github.com/psf/requests",
        ]
        assert result.total_duplicate_tab_count == 3

        pairs = [(pair.a.id, pair.b.id, pair.score, pair.reason) for pair in result.similar_pairs]
        assert pairs == [
            (7, 8, 95, "Same page with tracking parameters"),
            (9, 10, 92, "Similar page paths (92% match)"),
        ]
        assert result.total_similar_pair_count == 2
        assert result.compared_tab_count == 4
        assert result.pool_truncated is False

    def test_grouped_tabs_not_paired(self, make_tab):
        """Tabs in a duplicate group do not show up in similar pairs."""
        tabs = [
            make_tab("https://a.com/page"),
            make_tab("https://a.com/page/"),
            make_tab("https://a.com/page?utm_source=x"),
        ]
        result = analyze(tabs)

        assert result.duplicate_groups[0].count == 2
        assert result.similar_pairs == []

    def test_document_platform_tabs_not_paired(self, make_tab):
        """Different documents on the platform are never similar pairs."""
        tabs = [
            make_tab("https://docs.google.com/document/d/AAA1/edit"),
            make_tab("https://docs.google.com/document/d/AAA2/edit"),
            make_tab("https://docs.google.com/forms/d/F1/viewform"),
            make_tab("https://docs.google.com/forms/d/F2/viewform"),
        ]
        result = analyze(tabs, threshold=0)
        assert result.similar_pairs == []
        assert result.compared_tab_count == 0

    def test_sorted_by_score_descending(self, make_tab):
        tabs = [
            make_tab("https://a.com/blog/post-1"),
            make_tab("https://a.com/blog/post-2"),
            make_tab("https://b.com/page?utm_source=x"),
            make_tab("https://b.com/page"),
        ]
        result = analyze(tabs)
        assert [pair.score for pair in result.similar_pairs] == [95, 92]

    def test_ties_keep_encounter_order(self, make_tab):
        tabs = [
            make_tab("https://a.com/p?x=1"),
            make_tab("https://a.com/p?x=2"),
            make_tab("https://a.com/p?x=3"),
        ]
        result = analyze(tabs)
        assert [(pair.a.id, pair.b.id) for pair in result.similar_pairs] == [(1, 2), (1, 3), (2, 3)]
        assert all(pair.score == 85 for pair in result.similar_pairs)

    def test_cross_domain_titles_ignored(self, make_tab):
        tabs = [make_tab("https://a.com/x", "Same"), make_tab("https://b.com/x", "Same")]
        assert analyze(tabs, threshold=0).similar_pairs == []

    def test_missing_title_does_not_fail(self, make_tab):
        tabs = [make_tab("https://a.com/abc", "Hello"), make_tab("https://a.com/xyz", None)]
        result = analyze(tabs, threshold=50)
        assert result.similar_pairs[0].reason == "50% overall similarity"

    def test_non_string_title_scores_zero(self):
        """A title that is not a string counts as missing."""
        tabs = [TabRecord(1, "https://a.com/abc", 5), TabRecord(2, "https://a.com/xyz", "Hi")]
        result = analyze(tabs, threshold=50)
        assert result.similar_pairs[0].score == 50

    def test_threshold_monotonic(self, sample_tabs, make_tab):
        """Raising the threshold never adds similar pairs."""
        tabs = sample_tabs + [
            make_tab("https://a.com/blog/post-10", "Post 10", tab_id=100),
            make_tab("https://a.com/about", "About", tab_id=101),
            make_tab("https://news.example.com/world", "World", tab_id=102),
            make_tab("https://news.example.com/story#comments", "Story", tab_id=103),
        ]
        counts = [analyze(tabs, threshold=t).total_similar_pair_count for t in range(0, 101, 5)]
        assert counts == sorted(counts, reverse=True)


class TestComparisonPool:
    """Test the pairwise comparison cap."""

    def test_pool_capped(self, make_tab):
        tabs = [make_tab(f"https://a.com/p?x={i}") for i in range(5)]
        result = analyze(tabs, max_pool=2)

        assert result.compared_tab_count == 2
        assert result.pool_truncated is True
        assert [(pair.a.id, pair.b.id) for pair in result.similar_pairs] == [(1, 2)]

    def test_cap_applies_after_grouping(self, make_tab):
        """Grouped tabs do not take up room in the pool."""
        tabs = [
            make_tab("https://dup.com/"),
            make_tab("https://dup.com/"),
            make_tab("https://a.com/p?x=1"),
            make_tab("https://a.com/p?x=2"),
        ]
        result = analyze(tabs, max_pool=2)
        assert result.pool_truncated is False
        assert result.total_similar_pair_count == 1

    def test_default_cap_is_100(self, make_tab):
        tabs = [make_tab(f"https://site{i}.com/") for i in range(101)]
        result = analyze(tabs)
        assert result.compared_tab_count == 100
        assert result.pool_truncated is True

    def test_zero_pool(self, make_tab):
        tabs = [make_tab("https://a.com/p?x=1"), make_tab("https://a.com/p?x=2")]
        result = analyze(tabs, max_pool=0)
        assert result.similar_pairs == []
        assert result.pool_truncated is True


class TestAnalyzeContract:
    """General guarantees of analyze()."""

    def test_empty_input(self):
        result = analyze([])
        assert result.is_empty
        assert result.total_duplicate_tab_count == 0
        assert result.total_similar_pair_count == 0

    def test_deterministic(self, sample_tabs):
        assert analyze(sample_tabs).to_dict() == analyze(sample_tabs).to_dict()

    def test_accepts_iterators(self, sample_tabs):
        assert analyze(iter(sample_tabs)).to_dict() == analyze(sample_tabs).to_dict()

    def test_input_not_modified(self, sample_tabs):
        before = [tab.to_dict() for tab in sample_tabs]
        analyze(sample_tabs)
        assert [tab.to_dict() for tab in sample_tabs] == before


class TestHostHelpers:
    """Test badge count, close-all and pair resolution helpers."""

    def test_count_exact_duplicates(self, sample_tabs):
        """Badge counting ignores document identity."""
        assert count_exact_duplicates(sample_tabs) == 2

    def test_count_three_identical(self, make_tab):
        tabs = [make_tab("https://a.com/x") for _ in range(3)]
        assert count_exact_duplicates(tabs) == 2

    def test_count_skips_internal_pages(self, make_tab):
        tabs = [make_tab("chrome://settings"), make_tab("chrome://settings")]
        assert count_exact_duplicates(tabs) == 0

    def test_badge_text(self):
        assert badge_text(0) == ""
        assert badge_text(3) == "3"

    def test_redundant_tab_ids(self, sample_tabs):
        """The first tab of each group is kept, the rest are closed."""
        result = analyze(sample_tabs)
        ids = redundant_tab_ids(result)
        assert ids == [6, 2, 4]
        assert len(ids) == result.total_duplicate_tab_count

    def test_resolve_pair(self):
        pair = SimilarPair(a=TabRecord(1, "https://a.com/1"), b=TabRecord(2, "https://a.com/2"),
                           score=90, reason="r")
        assert resolve_pair(pair, "a") == 2
        assert resolve_pair(pair, "B") == 1

    def test_resolve_pair_invalid_side(self):
        pair = SimilarPair(a=TabRecord(1, "https://a.com/1"), b=TabRecord(2, "https://a.com/2"),
                           score=90, reason="r")
        with pytest.raises(ValueError):
            resolve_pair(pair, "c")
