import os
import json
import pytest

import tabdupe.config
from tabdupe.models import TabRecord


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from real user config, local config and TABDUPE_ env vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ.keys()):
        if key.startswith("TABDUPE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(tabdupe.config, "_config", None)
    yield


@pytest.fixture
def make_tab():
    """Factory for tabs with sequential ids."""
    counter = {"next": 1}

    def _make(url, title=None, tab_id=None):
        if tab_id is None:
            tab_id = counter["next"]
            counter["next"] += 1
        return TabRecord(id=tab_id, url=url, title=title)

    return _make


@pytest.fixture
def sample_tabs():
    """A realistic window full of tabs."""
    return [
        TabRecord(id=1, url="https://docs.python.org/3/library/re.html", title="re - Regular expressions"),
        TabRecord(id=2, url="https://docs.python.org/3/library/re.html#module-contents", title="re - Regular expressions"),
        TabRecord(id=3, url="https://www.github.com/psf/requests", title="psf/requests"),
        TabRecord(id=4, url="https://github.com/psf/requests/", title="psf/requests"),
        TabRecord(id=5, url="https://docs.google.com/document/d/ABC123/edit", title="Plan"),
        TabRecord(id=6, url="https://docs.google.com/document/d/ABC123/view", title="Plan"),
        TabRecord(id=7, url="https://news.example.com/story?utm_source=twitter", title="Story"),
        TabRecord(id=8, url="https://news.example.com/story", title="Story"),
        TabRecord(id=9, url="https://a.com/blog/post-1", title="Post 1"),
        TabRecord(id=10, url="https://a.com/blog/post-2", title="Post 2"),
        TabRecord(id=11, url="chrome://settings", title="Settings"),
        TabRecord(id=12, url="", title="New Tab"),
        TabRecord(id=13, url="not a url", title="Broken"),
    ]


@pytest.fixture
def snapshot_file(tmp_path, sample_tabs):
    """The sample tabs written as a JSON tab snapshot."""
    path = tmp_path / "tabs.json"
    path.write_text(json.dumps([tab.to_dict() for tab in sample_tabs]), encoding="utf-8")
    return path
