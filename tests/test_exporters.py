"""
Tests for result exporters.
"""
import json
import pytest

from tabdupe.analyzer import analyze
from tabdupe.exporters import export_file, render_ids, render_json, render_markdown, render_result


@pytest.fixture
def result(sample_tabs):
    return analyze(sample_tabs)


class TestRenderJson:
    """Test JSON rendering."""

    def test_structure(self, result):
        data = json.loads(render_json(result))

        assert data["total_duplicate_tab_count"] == 3
        assert data["total_similar_pair_count"] == 2
        assert data["duplicate_groups"][0]["key"] == "gdoc:doc:ABC123"
        assert data["duplicate_groups"][0]["count"] == 2
        assert data["similar_pairs"][0]["a"]["id"] == 7
        assert data["pool_truncated"] is False

    def test_limit_keeps_totals(self, result):
        data = json.loads(render_json(result, limit=1))
        assert len(data["similar_pairs"]) == 1
        assert data["total_similar_pair_count"] == 2


class TestRenderMarkdown:
    """Test Markdown rendering."""

    def test_sections(self, result):
        text = render_markdown(result)

        assert "## Exact duplicates (3 tabs to close)" in text
        assert "### gdoc:doc:ABC123 (2 tabs)" in text
        assert "(keep)" in text
        assert "## Similar tabs (2 pairs)" in text
        assert "**95%** Same page with tracking parameters" in text

    def test_limit_mentions_rest(self, result):
        assert "... and 1 more" in render_markdown(result, limit=1)

    def test_empty(self):
        assert "No duplicate or similar tabs found." in render_markdown(analyze([]))


class TestRenderIds:
    """Test redundant id rendering."""

    def test_ids(self, result):
        assert render_ids(result).splitlines() == ["6", "2", "4"]

    def test_empty(self):
        assert render_ids(analyze([])) == ""


class TestRenderResult:
    """Test format dispatch."""

    def test_dispatch(self, result):
        assert render_result(result, "ids") == render_ids(result)

    def test_unknown_format(self, result):
        with pytest.raises(ValueError, match="Unknown format"):
            render_result(result, "html")


class TestExportFile:
    """Test writing reports to files."""

    def test_json_by_extension(self, result, tmp_path):
        path = tmp_path / "out" / "report.json"
        export_file(result, path)
        assert json.loads(path.read_text())["total_duplicate_tab_count"] == 3

    def test_markdown_by_extension(self, result, tmp_path):
        path = tmp_path / "report.md"
        export_file(result, path)
        assert path.read_text().startswith("# Duplicate Tabs")

    def test_explicit_format(self, result, tmp_path):
        path = tmp_path / "close.list"
        export_file(result, path, format="ids")
        assert path.read_text() == "6\n2\n4\n"
