"""
Data models for tabdupe.

Plain dataclasses describing the tabs handed to the engine and the grouping
result it returns. Nothing here is persisted; every instance lives for the
duration of a single analysis.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tabdupe.constants import DOCUMENT_KEY_PREFIX


# ============================================================================
# Input
# ============================================================================

def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass
class TabRecord:
    """A browser tab as supplied by the host tab API."""
    id: Any
    url: str
    title: Optional[str] = None
    favicon: Optional[str] = None
    window_id: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_id: Any = None) -> "TabRecord":
        """
        Build a tab from a dictionary.

        Accepts both snake_case keys and the camelCase keys used by browser
        tab APIs (``favIconUrl``, ``windowId``). Non-string text fields are
        dropped and ids that are neither strings nor integers are stringified,
        so a malformed snapshot entry becomes an excluded tab, not a failure.

        Args:
            data: Tab dictionary
            default_id: Identifier used when the dictionary has no ``id``

        Returns:
            TabRecord instance
        """
        tab_id = data.get('id')
        if tab_id is None:
            tab_id = default_id
        elif not isinstance(tab_id, (str, int)):
            tab_id = str(tab_id)
        return cls(
            id=tab_id,
            url=_string_or_none(data.get('url')) or '',
            title=_string_or_none(data.get('title')),
            favicon=_string_or_none(data.get('favicon') or data.get('favIconUrl')),
            window_id=data.get('window_id', data.get('windowId')),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {'id': self.id, 'url': self.url, 'title': self.title}
        if self.favicon:
            data['favicon'] = self.favicon
        if self.window_id is not None:
            data['window_id'] = self.window_id
        return data


# ============================================================================
# Derived facts
# ============================================================================

@dataclass(frozen=True)
class ParsedUrl:
    """
    Structured components of a URL, as compared by the classifier.

    Fields cannot be reassigned, but instances are not hashable since
    ``query`` is a dict.
    """
    scheme: str
    host: str
    port: Optional[int]
    path: str
    query: Dict[str, str]
    fragment: str
    original: str = field(default='', compare=False)


@dataclass(frozen=True)
class DocumentIdentity:
    """Stable identity of a document on a known document platform."""
    platform_type: str
    document_id: str

    @property
    def key(self) -> str:
        return f"{DOCUMENT_KEY_PREFIX}:{self.platform_type}:{self.document_id}"


# ============================================================================
# Results
# ============================================================================

@dataclass(frozen=True)
class SimilarityVerdict:
    """Outcome of comparing two tabs."""
    is_similar: bool
    score: int
    reason: Optional[str] = None

    @classmethod
    def similar(cls, score: int, reason: str) -> "SimilarityVerdict":
        return cls(True, score, reason)

    @classmethod
    def not_similar(cls, score: int = 0) -> "SimilarityVerdict":
        return cls(False, score, None)

    def to_dict(self) -> Dict[str, Any]:
        return {'is_similar': self.is_similar, 'score': self.score, 'reason': self.reason}


@dataclass
class DuplicateGroup:
    """Tabs that are exact duplicates of each other."""
    key: str
    tabs: List[TabRecord]

    @property
    def count(self) -> int:
        return len(self.tabs)

    @property
    def is_document_group(self) -> bool:
        """True when the group was formed by document identity."""
        return self.key.startswith(DOCUMENT_KEY_PREFIX + ':')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'count': self.count,
            'tabs': [tab.to_dict() for tab in self.tabs],
        }


@dataclass
class SimilarPair:
    """Two tabs judged similar but not exact duplicates."""
    a: TabRecord
    b: TabRecord
    score: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'a': self.a.to_dict(),
            'b': self.b.to_dict(),
            'score': self.score,
            'reason': self.reason,
        }


@dataclass
class AnalysisResult:
    """
    Result of analyzing one snapshot of tabs.

    ``compared_tab_count`` is the size of the pairwise comparison pool and
    ``pool_truncated`` tells whether eligible tabs were left out of it.
    """
    duplicate_groups: List[DuplicateGroup] = field(default_factory=list)
    similar_pairs: List[SimilarPair] = field(default_factory=list)
    compared_tab_count: int = 0
    pool_truncated: bool = False

    @property
    def total_duplicate_tab_count(self) -> int:
        """Number of tabs closed if every group kept one representative."""
        return sum(group.count - 1 for group in self.duplicate_groups)

    @property
    def total_similar_pair_count(self) -> int:
        return len(self.similar_pairs)

    @property
    def is_empty(self) -> bool:
        return not self.duplicate_groups and not self.similar_pairs

    def to_dict(self) -> Dict[str, Any]:
        return {
            'duplicate_groups': [group.to_dict() for group in self.duplicate_groups],
            'similar_pairs': [pair.to_dict() for pair in self.similar_pairs],
            'total_duplicate_tab_count': self.total_duplicate_tab_count,
            'total_similar_pair_count': self.total_similar_pair_count,
            'compared_tab_count': self.compared_tab_count,
            'pool_truncated': self.pool_truncated,
        }
