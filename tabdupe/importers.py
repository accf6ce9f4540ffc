"""
Tab snapshot importers.

Read the list of open tabs from a file. A snapshot is usually the JSON dump
of a browser's tab query, but CSV exports and plain URL lists work too.
"""
import json
import csv
import logging
from pathlib import Path
from typing import List, Dict, Any

from tabdupe.models import TabRecord

logger = logging.getLogger(__name__)


def load_tabs(path: Path, format: str = None) -> List[TabRecord]:
    """
    Load tabs from a file.

    Args:
        path: File path to read
        format: Format override (auto-detected if not specified)

    Returns:
        Tabs in file order
    """
    if format is None:
        ext = path.suffix.lower()
        format_map = {
            ".json": "json",
            ".csv": "csv",
            ".txt": "text",
        }
        format = format_map.get(ext, "text")

    importers = {
        "json": import_json,
        "csv": import_csv,
        "text": import_text,
    }

    importer = importers.get(format)
    if not importer:
        raise ValueError(f"Unknown format: {format}")

    tabs = importer(path)
    logger.debug(f"Loaded {len(tabs)} tabs from {path}")
    return tabs


def _collect_tab_dicts(data: Any) -> List[Dict[str, Any]]:
    """Find tab objects in a list, a {"tabs": [...]} object or a windows dump."""
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        if "windows" in data:
            tabs = []
            for window in data["windows"]:
                for tab in _collect_tab_dicts(window):
                    tab.setdefault("windowId", window.get("id"))
                    tabs.append(tab)
            return tabs
        if "tabs" in data:
            return _collect_tab_dicts(data["tabs"])
    raise ValueError("JSON snapshot must be a list of tabs or an object with 'tabs' or 'windows'")


def _build_tabs(items: List[Dict[str, Any]]) -> List[TabRecord]:
    """
    Build tabs, giving entries without an id the lowest unused number.

    Raises:
        ValueError: If two entries carry the same id
    """
    taken = set()
    for item in items:
        if item.get("id") is not None:
            key = str(item["id"])
            if key in taken:
                raise ValueError(f"Duplicate tab id: {item['id']}")
            taken.add(key)

    tabs = []
    next_id = 1
    for item in items:
        default_id = None
        if item.get("id") is None:
            while str(next_id) in taken:
                next_id += 1
            default_id = next_id
            taken.add(str(next_id))
        tabs.append(TabRecord.from_dict(item, default_id=default_id))
    return tabs


def import_json(path: Path) -> List[TabRecord]:
    """Import tabs from a JSON snapshot."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return _build_tabs(_collect_tab_dicts(data))


def import_csv(path: Path) -> List[TabRecord]:
    """Import tabs from CSV with a header row containing at least ``url``."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or "url" not in reader.fieldnames:
            raise ValueError(f"CSV file {path} has no 'url' column")
        rows = [{
            "id": row.get("id") or None,
            "url": (row.get("url") or "").strip(),
            "title": row.get("title") or None,
        } for row in reader]
    return _build_tabs(rows)


def import_text(path: Path) -> List[TabRecord]:
    """Import one URL per line; blank lines and # comments are skipped."""
    tabs = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            url = line.strip()
            if not url or url.startswith("#"):
                continue
            tabs.append(TabRecord(id=len(tabs) + 1, url=url))
    return tabs
