"""
Pairwise tab classification.

Two tabs are compared by an ordered chain of rules. Each rule inspects the
pair and either returns a verdict or passes (returns None); the first verdict
wins and later rules are not evaluated. The order is part of the contract:

1. subdomain_variant   - www.example.com vs example.com, same page
2. cross_domain        - different sites are never similar
3. fragment_only       - same page, different #section
4. query_difference    - same path, different query (tracking-only or not)
5. similar_path        - path similarity within [threshold, 100)
6. weighted_composite  - domain/path/title weighted score

URLs that fail to parse make the pair not similar before any rule runs.
"""
from typing import Callable, Dict, NamedTuple, Optional, Tuple

from tabdupe.constants import (
    COMPOSITE_REASON,
    DEFAULT_THRESHOLD,
    DOMAIN_WEIGHT,
    FRAGMENT_REASON,
    FRAGMENT_SCORE,
    PARAMETERS_REASON,
    PARAMETERS_SCORE,
    PATH_WEIGHT,
    SIMILAR_PATH_REASON,
    SUBDOMAIN_REASON,
    SUBDOMAIN_SCORE,
    TITLE_WEIGHT,
    TRACKING_PARAMS,
    TRACKING_REASON,
    TRACKING_SCORE,
)
from tabdupe.models import ParsedUrl, SimilarityVerdict, TabRecord
from tabdupe.similarity import round_half_up, similarity
from tabdupe.urls import parse_url, strip_www


class PairContext(NamedTuple):
    """Everything a rule may look at for one pair of tabs."""
    tab_a: TabRecord
    tab_b: TabRecord
    url_a: ParsedUrl
    url_b: ParsedUrl
    threshold: int

    @property
    def same_path(self) -> bool:
        return self.url_a.path == self.url_b.path

    @property
    def same_query(self) -> bool:
        return self.url_a.query == self.url_b.query

    @property
    def same_base_host(self) -> bool:
        return strip_www(self.url_a.host) == strip_www(self.url_b.host)


Rule = Callable[[PairContext], Optional[SimilarityVerdict]]


def strip_tracking_params(query: Dict[str, str]) -> Dict[str, str]:
    """Drop known tracking parameters (case-insensitive on the key)."""
    return {key: value for key, value in query.items()
            if key.lower() not in TRACKING_PARAMS}


def differs_by_tracking_only(query_a: Dict[str, str], query_b: Dict[str, str]) -> bool:
    return strip_tracking_params(query_a) == strip_tracking_params(query_b)


# ============================================================================
# Rules
# ============================================================================

def subdomain_variant(ctx: PairContext) -> Optional[SimilarityVerdict]:
    if (ctx.url_a.host != ctx.url_b.host and ctx.same_base_host
            and ctx.same_path and ctx.same_query):
        return SimilarityVerdict.similar(SUBDOMAIN_SCORE, SUBDOMAIN_REASON)
    return None


def cross_domain(ctx: PairContext) -> Optional[SimilarityVerdict]:
    if not ctx.same_base_host:
        return SimilarityVerdict.not_similar()
    return None


def fragment_only(ctx: PairContext) -> Optional[SimilarityVerdict]:
    if ctx.same_path and ctx.same_query and ctx.url_a.fragment != ctx.url_b.fragment:
        return SimilarityVerdict.similar(FRAGMENT_SCORE, FRAGMENT_REASON)
    return None


def query_difference(ctx: PairContext) -> Optional[SimilarityVerdict]:
    if not ctx.same_path or ctx.same_query:
        return None
    if differs_by_tracking_only(ctx.url_a.query, ctx.url_b.query):
        return SimilarityVerdict.similar(TRACKING_SCORE, TRACKING_REASON)
    return SimilarityVerdict.similar(PARAMETERS_SCORE, PARAMETERS_REASON)


def similar_path(ctx: PairContext) -> Optional[SimilarityVerdict]:
    # Identical paths were handled above or are exact duplicates
    score = similarity(ctx.url_a.path, ctx.url_b.path)
    if ctx.threshold <= score < 100:
        return SimilarityVerdict.similar(score, SIMILAR_PATH_REASON.format(score=score))
    return None


def weighted_composite(ctx: PairContext) -> SimilarityVerdict:
    domain_score = 100 if ctx.same_base_host else 0
    path_score = similarity(ctx.url_a.path, ctx.url_b.path)
    title_a, title_b = ctx.tab_a.title, ctx.tab_b.title
    if isinstance(title_a, str) and isinstance(title_b, str) and title_a and title_b:
        title_score = similarity(title_a, title_b)
    else:
        title_score = 0

    score = round_half_up(domain_score * DOMAIN_WEIGHT
                          + path_score * PATH_WEIGHT
                          + title_score * TITLE_WEIGHT)
    if score >= ctx.threshold:
        return SimilarityVerdict.similar(score, COMPOSITE_REASON.format(score=score))
    return SimilarityVerdict.not_similar(score)


RULES: Tuple[Rule, ...] = (
    subdomain_variant,
    cross_domain,
    fragment_only,
    query_difference,
    similar_path,
    weighted_composite,
)


# ============================================================================
# Entry points
# ============================================================================

def classify_parsed(tab_a: TabRecord, url_a: ParsedUrl,
                    tab_b: TabRecord, url_b: ParsedUrl,
                    threshold: int = DEFAULT_THRESHOLD) -> SimilarityVerdict:
    """Run the rule chain on two tabs whose URLs are already parsed."""
    ctx = PairContext(tab_a, tab_b, url_a, url_b, threshold)
    for rule in RULES:
        verdict = rule(ctx)
        if verdict is not None:
            return verdict
    return SimilarityVerdict.not_similar()


def classify(tab_a: TabRecord, tab_b: TabRecord,
             threshold: int = DEFAULT_THRESHOLD) -> SimilarityVerdict:
    """
    Decide whether two tabs are similar.

    Args:
        tab_a: First tab
        tab_b: Second tab
        threshold: Minimum score (0-100) for threshold-gated rules

    Returns:
        SimilarityVerdict; ``reason`` is set only when the tabs are similar
    """
    url_a = parse_url(tab_a.url)
    url_b = parse_url(tab_b.url)
    if url_a is None or url_b is None:
        return SimilarityVerdict.not_similar()
    return classify_parsed(tab_a, url_a, tab_b, url_b, threshold)
