"""
Recipe suggestion data model: raw candidates from each source and the enriched
output unit returned to clients.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

TAG_KEYS = ("region", "difficulty", "time", "type")


class SourceType(str, Enum):
    DATASET = "dataset"
    WEB = "web"
    VIDEO = "video"
    ENCYCLOPEDIA = "encyclopedia"
    AI = "ai"


@dataclass
class RawCandidate:
    """Recipe reference collected from one source, before enrichment."""
    name: str
    source_type: SourceType
    source_url: Optional[str] = None
    snippet: Optional[str] = None
    dataset_ingredients: Optional[list[str]] = None  # dataset rows only
    matched_ingredients: Optional[list[str]] = None
    match_ratio: Optional[float] = None
    # Video results arrive with their own thumbnail and channel name
    image_url: Optional[str] = None
    channel: Optional[str] = None


@dataclass
class Citation:
    source_name: str
    source_url: Optional[str] = None
    is_video: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"sourceName": self.source_name, "isVideo": self.is_video}
        if self.source_url:
            out["sourceUrl"] = self.source_url
        return out


@dataclass
class EnrichedSuggestion:
    name: str
    description: str
    citation: Citation
    source_type: SourceType
    tags: dict[str, str] = field(default_factory=dict)
    image_url: Optional[str] = None
    match_ratio: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "tags": dict(self.tags),
            "citation": self.citation.to_dict(),
            "sourceType": self.source_type.value,
        }
        if self.image_url:
            out["imageUrl"] = self.image_url
        if self.match_ratio is not None:
            out["matchRatio"] = round(self.match_ratio, 4)
        return out


def clean_tags(raw: Any) -> dict[str, str]:
    """Keep only known tag keys with non-empty string values."""
    if not isinstance(raw, dict):
        return {}
    tags: dict[str, str] = {}
    for key in TAG_KEYS:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            tags[key] = value.strip()
    return tags
