"""
Document identity extraction.

Document platforms put a stable resource id in the path and append volatile
suffixes (edit/view mode, comment anchors, sharing tokens) around it. Two
tabs showing the same document share a DocumentIdentity even when their
URLs differ.
"""
import logging
from typing import Optional, Sequence

from tabdupe.constants import PLATFORM_PATTERNS, PlatformPattern
from tabdupe.models import DocumentIdentity
from tabdupe.urls import parse_url

logger = logging.getLogger(__name__)


def extract_identity(host: str, path: str,
                     patterns: Sequence[PlatformPattern] = PLATFORM_PATTERNS) -> Optional[DocumentIdentity]:
    """
    Match host + path against the platform table.

    Args:
        host: Lower-cased host
        path: URL path
        patterns: Ordered pattern table, first match wins

    Returns:
        DocumentIdentity, or None when no platform matches
    """
    target = host + path
    for pattern in patterns:
        match = pattern.regex.match(target)
        if match:
            return DocumentIdentity(platform_type=pattern.platform_type,
                                    document_id=match.group(1))
    return None


def identity_for_url(url: str) -> Optional[DocumentIdentity]:
    """Extract the document identity of a URL string, if it has one."""
    parsed = parse_url(url)
    if parsed is None:
        return None
    return extract_identity(parsed.host, parsed.path)
