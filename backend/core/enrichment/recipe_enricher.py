"""
Attach a short description and classification tags to each recipe candidate
with one generative call. Never raises: failures degrade to a fixed placeholder.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from core.llm_client import LLMBlockedError, LLMClient, LLMError, parse_json_response
from core.models.suggestion import RawCandidate, SourceType, clean_tags

DEGRADED_DESCRIPTION = "AI tips unavailable for this recipe."
DISABLED_DESCRIPTION = "AI enrichment disabled."
BLOCKED_DESCRIPTION = "AI could not provide tips due to safety settings ({reason})."

_SOURCE_HINTS = {
    SourceType.DATASET: "mention how well the user's ingredients match and what they may be missing",
    SourceType.WEB: "encourage the user to open the link for the full recipe",
    SourceType.VIDEO: "encourage the user to watch the video for step-by-step guidance",
    SourceType.ENCYCLOPEDIA: "briefly mention the dish's background and origin",
    SourceType.AI: "keep it playful and encourage experimenting",
}

_PROMPT_TEMPLATE = """You are an expert Vietnamese cooking assistant. Based on the following information:
{context}

Please provide:
1. "description": a short, engaging, encouraging description of this recipe suggestion (1-2 sentences in Vietnamese). Tailor it to the source: {hint}.
2. "tags": infer these tags as best as possible; omit a key if unsure:
   - "region": Vietnamese region (e.g. "Miền Bắc", "Miền Trung", "Miền Nam").
   - "difficulty": "Dễ", "Trung bình" or "Khó".
   - "time": estimated cooking time (e.g. "15 phút", "30-45 phút", "Trên 1 tiếng").
   - "type": dish type (e.g. "Món chính", "Món ăn vặt", "Món chay", "Món chiên", "Món nước", "Món canh", "Món xào").

Return ONLY a JSON object with keys "description" and "tags". Example:
{{"description": "Phở Gà thơm ngon, rất hợp với nguyên liệu bạn có!", "tags": {{"region": "Miền Bắc", "difficulty": "Trung bình", "time": "Trên 1 tiếng", "type": "Món nước"}}}}"""


@dataclass
class Enrichment:
    description: str
    tags: dict[str, str] = field(default_factory=dict)
    degraded: bool = False


def build_enrichment_prompt(candidate: RawCandidate, user_ingredients: Sequence[str]) -> str:
    lines = [
        f"Recipe name: {candidate.name}",
        f"User has these ingredients: {', '.join(user_ingredients)}",
        f"Source type: {candidate.source_type.value}",
    ]
    if candidate.source_type == SourceType.DATASET and candidate.dataset_ingredients:
        matched = set(candidate.matched_ingredients or [])
        missing = [i for i in candidate.dataset_ingredients if i not in matched]
        lines.append(f"Recipe requires (approximately): {', '.join(candidate.dataset_ingredients)}")
        lines.append(f"User might be missing: {', '.join(missing) or 'None'}")
    if candidate.snippet:
        lines.append(f"Source snippet: {candidate.snippet}")
    if candidate.source_url:
        lines.append(f"Source URL: {candidate.source_url}")
    return _PROMPT_TEMPLATE.format(
        context="\n".join(lines),
        hint=_SOURCE_HINTS.get(candidate.source_type, "keep it friendly"),
    )


class RecipeEnricher:
    def __init__(self, llm: Optional[LLMClient], logger: Optional[logging.Logger] = None):
        self.llm = llm
        self.logger = logger or logging.getLogger(__name__)

    def enrich(self, candidate: RawCandidate, user_ingredients: Sequence[str]) -> Enrichment:
        if self.llm is None:
            return Enrichment(DISABLED_DESCRIPTION, {}, degraded=True)

        prompt = build_enrichment_prompt(candidate, user_ingredients)
        try:
            raw = self.llm.generate(prompt, json_mode=True)
        except LLMBlockedError as e:
            self.logger.warning("ENRICHMENT blocked name=%s reason=%s", candidate.name[:60], e.reason)
            return Enrichment(BLOCKED_DESCRIPTION.format(reason=e.reason), {}, degraded=True)
        except LLMError as e:
            self.logger.warning("ENRICHMENT failed name=%s error=%s", candidate.name[:60], e)
            return Enrichment(DEGRADED_DESCRIPTION, {}, degraded=True)

        parsed = parse_json_response(raw)
        description = (parsed or {}).get("description")
        if not isinstance(description, str) or not description.strip():
            self.logger.warning("ENRICHMENT malformed response name=%s", candidate.name[:60])
            return Enrichment(DEGRADED_DESCRIPTION, {}, degraded=True)

        tags = clean_tags(parsed.get("tags"))
        self.logger.info("ENRICHMENT ok name=%s tags=%s", candidate.name[:60], sorted(tags))
        return Enrichment(description.strip(), tags)
