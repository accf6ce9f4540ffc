"""
Constants for tabdupe.

Fixed lookup tables used by the matching engine, kept as plain data so they
can be inspected and tested without touching the classifier. Several defaults
are also exposed through the config system.
"""
import re
from typing import NamedTuple, Pattern


class PlatformPattern(NamedTuple):
    """A document platform recognized by its host + path shape."""
    regex: Pattern
    platform_type: str


# Applied to host + path, first match wins. Group 1 is the document id.
PLATFORM_PATTERNS = (
    PlatformPattern(re.compile(r'^docs\.google\.com/document/d/([^/]+)'), 'doc'),
    PlatformPattern(re.compile(r'^docs\.google\.com/spreadsheets/d/([^/]+)'), 'sheet'),
    PlatformPattern(re.compile(r'^docs\.google\.com/presentation/d/([^/]+)'), 'slides'),
)

# Prefix for document identity keys, e.g. "gdoc:doc:ABC123"
DOCUMENT_KEY_PREFIX = 'gdoc'

# Host that all platform patterns live on; tabs on it skip pairwise comparison
DOCUMENT_PLATFORM_HOST = 'docs.google.com'

# Marketing/analytics query keys, compared lower-cased
TRACKING_PARAMS = frozenset({
    'utm_source', 'utm_medium', 'utm_campaign', 'utm_term', 'utm_content',
    'fbclid', 'gclid', 'msclkid', 'dclid',
    'ref', 'source', 'mc_cid', 'mc_eid',
    '_ga', '_gl', 'yclid', 'wickedid',
    'twclid', 'igshid', 'zanpid',
})

# Browser-internal URL prefixes that are never analyzed
EXCLUDED_SCHEMES = (
    'chrome://',
    'chrome-extension://',
)

# Similarity
DEFAULT_THRESHOLD = 80
MIN_THRESHOLD = 0
MAX_THRESHOLD = 100

# Weights for the composite score (domain, path, title)
DOMAIN_WEIGHT = 0.4
PATH_WEIGHT = 0.4
TITLE_WEIGHT = 0.2

# Fixed scores and reasons of the rule-based verdicts
SUBDOMAIN_SCORE = 95
SUBDOMAIN_REASON = 'Same page on different subdomain'
FRAGMENT_SCORE = 90
FRAGMENT_REASON = 'Same page, different section'
TRACKING_SCORE = 95
TRACKING_REASON = 'Same page with tracking parameters'
PARAMETERS_SCORE = 85
PARAMETERS_REASON = 'Same page, different parameters'
SIMILAR_PATH_REASON = 'Similar page paths ({score}% match)'
COMPOSITE_REASON = '{score}% overall similarity'

# Limits
# Pairwise comparison is O(n^2); only the first N eligible tabs are compared.
MAX_COMPARISON_POOL = 100

# Display limits
DEFAULT_PAIR_DISPLAY_LIMIT = 20
