"""
Deterministic ingredient normalization. No LLM, no fuzzy matching.
Used on both the user's ingredient list and each dataset row so the two sides
are compared with the same canonical tokens.
"""
import re
import logging
import unicodedata
from typing import Iterable, List

logger = logging.getLogger(__name__)

# Units that may follow a numeric quantity ("200g", "2 quả", "1 muỗng")
UNIT_WORDS = (
    "g", "kg", "mg", "ml", "l", "m", "quả", "trái", "củ", "cọng", "lá", "chén",
    "cây", "muỗng", "thìa", "tép", "miếng", "gói", "bát", "bó", "con", "lát",
    "nhánh", "tsp", "tbsp", "cup", "cups", "oz", "lb", "pcs", "pc",
)

_QUANTITY_RE = re.compile(
    r"\d+(?:[.,/]\d+)?\s*(?:(?:" + "|".join(re.escape(u) for u in UNIT_WORDS) + r")\b)?"
)
_PUNCT_RE = re.compile(r"[()\[\]{}\"“”:;]")
_SPLIT_RE = re.compile(r",|\s-\s|\s/\s")
_MIN_TOKEN_LEN = 3


def normalize_ingredient_text(text: str) -> List[str]:
    """
    Split one free-text ingredient string into canonical tokens.
    - NFC-normalize and lowercase, drop quantities with their unit, drop bracket/quote punctuation.
    - Split on comma, " - " and " / ".
    - Drop tokens shorter than 3 characters or purely numeric.
    Order of first appearance is kept; duplicates are removed.
    """
    if not text or not isinstance(text, str):
        return []
    t = unicodedata.normalize("NFC", text).lower()
    t = _QUANTITY_RE.sub("", t)
    t = _PUNCT_RE.sub("", t)
    t = re.sub(r"\s+", " ", t).strip()
    tokens: List[str] = []
    for part in _SPLIT_RE.split(t):
        token = part.strip()
        if len(token) < _MIN_TOKEN_LEN or token.isdigit():
            continue
        if token not in tokens:
            tokens.append(token)
    return tokens


def normalize_ingredients(raw: Iterable[str]) -> List[str]:
    """Normalize a list of raw ingredient strings into one deduplicated token list."""
    tokens: List[str] = []
    for item in raw or []:
        for token in normalize_ingredient_text(item):
            if token not in tokens:
                tokens.append(token)
    logger.debug("NORMALIZE tokens=%s", tokens)
    return tokens


def fold_raw_ingredients(raw: Iterable[str]) -> List[str]:
    """Lowercased, trimmed input strings with no other cleanup. Used when normalization leaves nothing."""
    tokens: List[str] = []
    for item in raw or []:
        if not isinstance(item, str):
            continue
        token = re.sub(r"\s+", " ", unicodedata.normalize("NFC", item)).strip().lower()
        if token and token not in tokens:
            tokens.append(token)
    return tokens
