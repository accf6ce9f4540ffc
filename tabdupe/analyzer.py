"""
Tab set analysis.

Turns one snapshot of open tabs into exact-duplicate groups and a ranked list
of similar pairs. Analysis is pure: it reads the tabs it is given, keeps no
state between calls and never raises on malformed tab data.
"""
import logging
from collections import Counter, OrderedDict
from typing import Any, Iterable, List, Tuple

from tabdupe.classifier import classify_parsed
from tabdupe.constants import DEFAULT_THRESHOLD, DOCUMENT_PLATFORM_HOST, MAX_COMPARISON_POOL
from tabdupe.identity import extract_identity
from tabdupe.models import AnalysisResult, DuplicateGroup, ParsedUrl, SimilarPair, TabRecord
from tabdupe.urls import canonical_url, is_excluded_url, parse_url

logger = logging.getLogger(__name__)


def parse_tabs(tabs: Iterable[TabRecord]) -> List[Tuple[TabRecord, ParsedUrl]]:
    """
    Keep the tabs that can be analyzed, paired with their parsed URL.

    Tabs without a URL, browser-internal pages and unparseable URLs are
    dropped. Input order is preserved.
    """
    parsed_tabs = []
    for tab in tabs:
        if is_excluded_url(tab.url):
            logger.debug(f"Skipping excluded tab {tab.id!r}")
            continue
        parsed = parse_url(tab.url)
        if parsed is None:
            logger.debug(f"Skipping tab {tab.id!r} with unparseable URL")
            continue
        parsed_tabs.append((tab, parsed))
    return parsed_tabs


def _group_by(keyed_tabs: Iterable[Tuple[str, TabRecord]]) -> "OrderedDict[str, List[TabRecord]]":
    groups = OrderedDict()
    for key, tab in keyed_tabs:
        groups.setdefault(key, []).append(tab)
    return groups


def find_duplicate_groups(parsed_tabs: List[Tuple[TabRecord, ParsedUrl]]) -> List[DuplicateGroup]:
    """
    Group exact duplicates.

    Document identity groups come first and claim their tabs; normalized-URL
    groups only keep the tabs that are still unclaimed. Groups with a single
    tab are dropped, so every tab ends up in at most one group.
    """
    url_groups = _group_by((canonical_url(parsed), tab) for tab, parsed in parsed_tabs)

    identity_groups = OrderedDict()
    for tab, parsed in parsed_tabs:
        identity = extract_identity(parsed.host, parsed.path)
        if identity is not None:
            identity_groups.setdefault(identity.key, []).append(tab)

    groups = []
    claimed = set()

    for key, members in identity_groups.items():
        if len(members) > 1:
            groups.append(DuplicateGroup(key=key, tabs=members))
            claimed.update(tab.id for tab in members)

    for key, members in url_groups.items():
        remaining = [tab for tab in members if tab.id not in claimed]
        if len(remaining) > 1:
            groups.append(DuplicateGroup(key=key, tabs=remaining))
            claimed.update(tab.id for tab in remaining)

    return groups


def find_similar_pairs(pool: List[Tuple[TabRecord, ParsedUrl]],
                       threshold: int = DEFAULT_THRESHOLD) -> List[SimilarPair]:
    """
    Classify every unordered pair in the pool.

    Returns the similar pairs sorted by score, highest first. Pairs with
    equal scores keep the order in which they were compared.
    """
    pairs = []
    for i in range(len(pool)):
        tab_a, url_a = pool[i]
        for j in range(i + 1, len(pool)):
            tab_b, url_b = pool[j]
            verdict = classify_parsed(tab_a, url_a, tab_b, url_b, threshold)
            if verdict.is_similar:
                pairs.append(SimilarPair(a=tab_a, b=tab_b, score=verdict.score,
                                         reason=verdict.reason))

    # list.sort is stable, also with reverse=True
    pairs.sort(key=lambda pair: pair.score, reverse=True)
    return pairs


def analyze(tabs: Iterable[TabRecord],
            threshold: int = DEFAULT_THRESHOLD,
            max_pool: int = MAX_COMPARISON_POOL) -> AnalysisResult:
    """
    Find duplicate and similar tabs.

    Args:
        tabs: Tabs in the order the host reports them; ids must be unique
        threshold: Similarity threshold (0-100)
        max_pool: Maximum number of tabs compared pairwise. Only the first
            ``max_pool`` eligible tabs are compared; the result reports
            whether that cut was applied.

    Returns:
        AnalysisResult
    """
    parsed_tabs = parse_tabs(tabs)
    groups = find_duplicate_groups(parsed_tabs)
    claimed = {tab.id for group in groups for tab in group.tabs}

    # Document platform tabs are settled by identity matching alone
    eligible = [(tab, parsed) for tab, parsed in parsed_tabs
                if tab.id not in claimed and parsed.host != DOCUMENT_PLATFORM_HOST]

    pool = eligible[:max(max_pool, 0)]
    truncated = len(eligible) > len(pool)
    if truncated:
        logger.debug(f"Comparing only the first {len(pool)} of {len(eligible)} tabs")

    pairs = find_similar_pairs(pool, threshold)

    result = AnalysisResult(
        duplicate_groups=groups,
        similar_pairs=pairs,
        compared_tab_count=len(pool),
        pool_truncated=truncated,
    )
    logger.debug(f"Analyzed {len(parsed_tabs)} tabs: {len(groups)} duplicate groups, "
                 f"{len(pairs)} similar pairs")
    return result


# ============================================================================
# Helpers for the host
# ============================================================================

def count_exact_duplicates(tabs: Iterable[TabRecord]) -> int:
    """
    Count redundant tabs by normalized URL only.

    This is the cheap count shown on the toolbar badge; it does not apply
    document identity or similarity matching.
    """
    counts = Counter(canonical_url(parsed) for _, parsed in parse_tabs(tabs))
    return sum(count - 1 for count in counts.values() if count > 1)


def badge_text(count: int) -> str:
    """Text for the toolbar badge; empty when there is nothing to report."""
    return str(count) if count > 0 else ''


def redundant_tab_ids(result: AnalysisResult) -> List[Any]:
    """
    Ids of the tabs to close so that each duplicate group keeps one tab.

    The first tab of every group is kept.
    """
    return [tab.id for group in result.duplicate_groups for tab in group.tabs[1:]]


def resolve_pair(pair: SimilarPair, keep: str) -> Any:
    """
    Id of the tab to close when the user keeps one side of a similar pair.

    Args:
        pair: Similar pair
        keep: ``"a"`` or ``"b"``

    Returns:
        Id of the other tab
    """
    keep = keep.lower()
    if keep == 'a':
        return pair.b.id
    if keep == 'b':
        return pair.a.id
    raise ValueError(f"keep must be 'a' or 'b', got {keep!r}")
