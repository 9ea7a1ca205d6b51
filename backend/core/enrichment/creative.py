"""
Creative fallback: invent one simple dish from the user's ingredients when no
real source produced a candidate.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from core.llm_client import LLMClient, LLMError, parse_json_response
from core.models.suggestion import clean_tags

DEFAULT_CREATIVE_TAGS = {"difficulty": "Dễ", "type": "Sáng tạo"}

_CREATIVE_PROMPT = """You are a creative Vietnamese cooking assistant. The user has these ingredients: {ingredients}. They couldn't find a standard recipe. Suggest ONE creative, simple dish they could make using primarily these ingredients. Provide:
1. "name": a catchy name for the dish (Vietnamese or Viet-English).
2. "description": a short (1-2 sentence) description of the idea.
3. "tags": basic tags, e.g. {{"difficulty": "Dễ", "type": "Sáng tạo"}}.

Return ONLY a JSON object like:
{{"name": "Cơm Chiên Trứng Kiểu Mới", "description": "Thử làm cơm chiên với trứng và các nguyên liệu bạn có!", "tags": {{"difficulty": "Dễ", "type": "Sáng tạo"}}}}"""


@dataclass
class CreativeIdea:
    name: str
    description: str
    tags: dict[str, str] = field(default_factory=dict)


class CreativeSuggester:
    def __init__(self, llm: Optional[LLMClient], logger: Optional[logging.Logger] = None):
        self.llm = llm
        self.logger = logger or logging.getLogger(__name__)

    def suggest(self, user_ingredients: Sequence[str]) -> Optional[CreativeIdea]:
        """One invented dish, or None if generation is disabled or fails."""
        if self.llm is None:
            self.logger.warning("CREATIVE skipped: no generative provider configured")
            return None
        try:
            raw = self.llm.generate(_CREATIVE_PROMPT.format(ingredients=", ".join(user_ingredients)), json_mode=True)
        except LLMError as e:
            self.logger.error("CREATIVE failed error=%s", e)
            return None

        parsed = parse_json_response(raw) or {}
        name = parsed.get("name")
        description = parsed.get("description")
        if not (isinstance(name, str) and name.strip() and isinstance(description, str) and description.strip()):
            self.logger.error("CREATIVE malformed response: %s", raw[:200])
            return None
        tags = clean_tags(parsed.get("tags")) or dict(DEFAULT_CREATIVE_TAGS)
        self.logger.info("CREATIVE ok name=%s", name[:60])
        return CreativeIdea(name.strip(), description.strip(), tags)
