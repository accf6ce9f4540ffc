"""
URL parsing and normalization for duplicate detection.

Two tabs are exact duplicates when their normalized URLs are equal: same
scheme, host (ignoring a leading ``www.``), port, path (ignoring trailing
slashes) and query parameters (ignoring order). Fragments are dropped.
"""
import logging
import re
from typing import Dict, Optional
from urllib.parse import parse_qsl, urlsplit

from tabdupe.constants import EXCLUDED_SCHEMES
from tabdupe.models import ParsedUrl

logger = logging.getLogger(__name__)

# Schemes that must carry a host to be a valid URL
HOST_SCHEMES = {'http', 'https', 'ftp', 'ws', 'wss'}

DEFAULT_PORTS = {'http': 80, 'https': 443, 'ftp': 21, 'ws': 80, 'wss': 443}

_INVALID_HOST_CHARS = re.compile(r'[\s<>^|%\\]')


def parse_url(url: str) -> Optional[ParsedUrl]:
    """
    Parse a URL into the components used for comparison.

    Args:
        url: URL string

    Returns:
        ParsedUrl, or None when the string is not a valid absolute URL
    """
    if not url or not isinstance(url, str):
        return None

    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError as e:
        logger.debug(f"Unparseable URL {url!r}: {e}")
        return None

    scheme = parts.scheme.lower()
    if not scheme:
        logger.debug(f"Unparseable URL {url!r}: missing scheme")
        return None

    host = (parts.hostname or '').lower()
    if scheme in HOST_SCHEMES and not host:
        logger.debug(f"Unparseable URL {url!r}: missing host")
        return None
    if _INVALID_HOST_CHARS.search(host):
        logger.debug(f"Unparseable URL {url!r}: invalid host")
        return None
    if ':' in host:
        host = f"[{host}]"

    if port is not None and DEFAULT_PORTS.get(scheme) == port:
        port = None

    path = parts.path
    if not path and scheme in HOST_SCHEMES:
        path = '/'
    path = path.rstrip('/') or '/'

    # Repeated keys collapse to the last value
    query = dict(parse_qsl(parts.query, keep_blank_values=True))

    return ParsedUrl(
        scheme=scheme,
        host=host,
        port=port,
        path=path,
        query=query,
        fragment=parts.fragment,
        original=url,
    )


def strip_www(host: str) -> str:
    """Remove a leading ``www.`` label from a host."""
    return host[4:] if host.startswith('www.') else host


def serialize_query(query: Dict[str, str]) -> str:
    """Join query parameters sorted by key, values verbatim."""
    return '&'.join(f"{key}={query[key]}" for key in sorted(query))


def canonical_url(parsed: ParsedUrl, include_query: bool = True) -> str:
    """
    Build the canonical form of an already parsed URL.

    Args:
        parsed: Parsed URL
        include_query: Keep the sorted query string

    Returns:
        Canonical URL string without fragment
    """
    port = f":{parsed.port}" if parsed.port is not None else ''
    canonical = f"{parsed.scheme}://{strip_www(parsed.host)}{port}{parsed.path}"
    if include_query and parsed.query:
        canonical += '?' + serialize_query(parsed.query)
    return canonical


def normalize_url(url: str) -> str:
    """
    Normalize a URL for exact-duplicate matching.

    Lower-cases the host, strips ``www.``, strips trailing slashes, sorts
    query parameters and drops the fragment. Unparseable input is returned
    unchanged.
    """
    parsed = parse_url(url)
    if parsed is None:
        return url
    return canonical_url(parsed)


def normalize_url_base(url: str) -> str:
    """Normalize a URL like normalize_url() but without its query string."""
    parsed = parse_url(url)
    if parsed is None:
        return url
    return canonical_url(parsed, include_query=False)


def is_exact_duplicate(url_a: str, url_b: str) -> bool:
    """Check whether two URLs normalize to the same string."""
    parsed_a = parse_url(url_a)
    parsed_b = parse_url(url_b)
    if parsed_a is None or parsed_b is None:
        return False
    return canonical_url(parsed_a) == canonical_url(parsed_b)


def is_excluded_url(url: Optional[str]) -> bool:
    """True for empty or non-string URLs and browser-internal pages that are never analyzed."""
    if not isinstance(url, str) or not url.strip():
        return True
    return url.strip().lower().startswith(EXCLUDED_SCHEMES)
