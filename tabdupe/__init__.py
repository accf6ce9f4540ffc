"""
tabdupe - duplicate tab finder

Detects duplicate and near-duplicate browser tabs from their URLs and titles
and groups them for cleanup.

Design Principles:
- Pure analysis: a snapshot of tabs in, a grouping result out
- No I/O, no persisted state, no tab closing in the engine
- Fixed matching tables kept as data in tabdupe.constants
- Malformed URLs degrade to "not compared", never to an exception

Example Usage:
    >>> from tabdupe import TabRecord, analyze
    >>> tabs = [TabRecord(1, "https://example.com/a"), TabRecord(2, "https://example.com/a/")]
    >>> result = analyze(tabs)
    >>> result.total_duplicate_tab_count
    1
"""

__version__ = "0.1.0"
__author__ = "tabdupe Contributors"

# Engine
from tabdupe.analyzer import (
    analyze,
    badge_text,
    count_exact_duplicates,
    redundant_tab_ids,
    resolve_pair,
)
from tabdupe.classifier import classify
from tabdupe.identity import extract_identity, identity_for_url
from tabdupe.similarity import edit_distance, similarity
from tabdupe.urls import normalize_url, normalize_url_base, parse_url

# Configuration
from tabdupe.config import TabdupeConfig, get_config, init_config

# Models
from tabdupe.models import (
    AnalysisResult,
    DocumentIdentity,
    DuplicateGroup,
    ParsedUrl,
    SimilarityVerdict,
    SimilarPair,
    TabRecord,
)

# Import/Export
from tabdupe.importers import load_tabs
from tabdupe.exporters import export_file, render_result

__all__ = [
    # Engine
    "analyze",
    "badge_text",
    "classify",
    "count_exact_duplicates",
    "edit_distance",
    "extract_identity",
    "identity_for_url",
    "normalize_url",
    "normalize_url_base",
    "parse_url",
    "redundant_tab_ids",
    "resolve_pair",
    "similarity",
    # Config
    "TabdupeConfig",
    "get_config",
    "init_config",
    # Models
    "AnalysisResult",
    "DocumentIdentity",
    "DuplicateGroup",
    "ParsedUrl",
    "SimilarityVerdict",
    "SimilarPair",
    "TabRecord",
    # Import/Export
    "load_tabs",
    "export_file",
    "render_result",
]
