"""
Exporters for analysis results.

Each format has a render function returning text, so results can go to
stdout or to a file.
"""
import json
from pathlib import Path
from typing import Optional

from tabdupe.analyzer import redundant_tab_ids
from tabdupe.models import AnalysisResult, TabRecord


def _limited_pairs(result: AnalysisResult, limit: Optional[int]):
    if limit:
        return result.similar_pairs[:limit]
    return result.similar_pairs


def render_json(result: AnalysisResult, limit: Optional[int] = None) -> str:
    """Render a result as JSON. Totals always cover all pairs."""
    data = result.to_dict()
    data["similar_pairs"] = [pair.to_dict() for pair in _limited_pairs(result, limit)]
    return json.dumps(data, indent=2, ensure_ascii=False)


def _tab_link(tab: TabRecord) -> str:
    return f"[{tab.title or 'Untitled'}]({tab.url})"


def render_markdown(result: AnalysisResult, limit: Optional[int] = None) -> str:
    """Render a result as a Markdown report."""
    lines = ["# Duplicate Tabs", ""]

    if result.is_empty:
        lines.append("No duplicate or similar tabs found.")
        lines.append("")
        return "\n".join(lines)

    if result.duplicate_groups:
        total = result.total_duplicate_tab_count
        lines.append(f"## Exact duplicates ({total} tab{'s' if total != 1 else ''} to close)")
        lines.append("")
        for group in result.duplicate_groups:
            lines.append(f"### {group.key} ({group.count} tabs)")
            lines.append("")
            for index, tab in enumerate(group.tabs):
                badge = " (keep)" if index == 0 else ""
                lines.append(f"- {_tab_link(tab)}{badge}")
            lines.append("")

    pairs = _limited_pairs(result, limit)
    if pairs:
        total = result.total_similar_pair_count
        lines.append(f"## Similar tabs ({total} pair{'s' if total != 1 else ''})")
        lines.append("")
        for pair in pairs:
            lines.append(f"- **{pair.score}%** {pair.reason}")
            lines.append(f"  - A: {_tab_link(pair.a)}")
            lines.append(f"  - B: {_tab_link(pair.b)}")
        if len(pairs) < total:
            lines.append(f"- ... and {total - len(pairs)} more")
        lines.append("")

    return "\n".join(lines)


def render_ids(result: AnalysisResult, limit: Optional[int] = None) -> str:
    """One id per line: the tabs to close to leave one tab per duplicate group."""
    return "\n".join(str(tab_id) for tab_id in redundant_tab_ids(result))


RENDERERS = {
    "json": render_json,
    "markdown": render_markdown,
    "ids": render_ids,
}


def render_result(result: AnalysisResult, format: str, limit: Optional[int] = None) -> str:
    """
    Render a result in the given format.

    Args:
        result: Analysis result
        format: json, markdown or ids
        limit: Maximum number of similar pairs to include (None or 0 for all)

    Returns:
        Rendered text
    """
    renderer = RENDERERS.get(format)
    if not renderer:
        raise ValueError(f"Unknown format: {format}")
    return renderer(result, limit)


def export_file(result: AnalysisResult, path: Path, format: str = None,
                limit: Optional[int] = None) -> None:
    """
    Export a result to a file.

    Args:
        result: Analysis result
        path: Output file path
        format: Export format (auto-detected from extension if not specified)
        limit: Maximum number of similar pairs to include
    """
    path = Path(path)
    if format is None:
        format_map = {
            ".json": "json",
            ".md": "markdown",
            ".txt": "ids",
        }
        format = format_map.get(path.suffix.lower(), "json")

    text = render_result(result, format, limit)

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
        f.write("\n")
