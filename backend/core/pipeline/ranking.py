"""
Ordering and citation rules for recipe suggestions.

Dataset items come first, by descending match ratio. Everything else keeps the
order it was collected in (web, video, encyclopedia, ai).
"""
from typing import List, Optional, Sequence, TypeVar
from urllib.parse import urlparse

from core.models.suggestion import Citation, RawCandidate, SourceType

T = TypeVar("T")

LOCAL_DATA_SOURCE_NAME = "Local Recipe Data"
WIKIPEDIA_SOURCE_NAME = "Wikipedia"
AI_SOURCE_NAME = "AI Creative Suggestion"
WEB_FALLBACK_SOURCE_NAME = "Web Search"


def rank(items: Sequence[T], limit: Optional[int] = None) -> List[T]:
    """
    Stable sort on (is-not-dataset, -match_ratio for dataset items).
    Works for anything with source_type and match_ratio attributes.
    """
    def key(item):
        if item.source_type == SourceType.DATASET:
            return (0, -(item.match_ratio or 0.0))
        return (1, 0.0)

    ordered = sorted(items, key=key)
    return ordered[:limit] if limit is not None else ordered


def domain_name(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    host = urlparse(url).hostname or ""
    if host.startswith("www."):
        host = host[4:]
    return host or None


def citation_for(candidate: RawCandidate) -> Citation:
    st = candidate.source_type
    if st == SourceType.DATASET:
        return Citation(LOCAL_DATA_SOURCE_NAME)
    if st == SourceType.VIDEO:
        return Citation(f"YouTube: {candidate.channel or 'Unknown Channel'}", candidate.source_url, is_video=True)
    if st == SourceType.ENCYCLOPEDIA:
        return Citation(WIKIPEDIA_SOURCE_NAME, candidate.source_url)
    if st == SourceType.AI:
        return Citation(AI_SOURCE_NAME)
    return Citation(domain_name(candidate.source_url) or WEB_FALLBACK_SOURCE_NAME, candidate.source_url)
