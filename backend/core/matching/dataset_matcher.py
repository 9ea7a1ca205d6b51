"""
Streams the local recipe CSV and turns rows whose ingredients are sufficiently
covered by the user's ingredients into dataset candidates.
Rows are read one record at a time (quoted fields may span lines) so a single
malformed record never aborts the scan.
"""
import csv
import logging
import unicodedata
from pathlib import Path
from typing import List, Optional, Sequence

from core.config import (
    MIN_MATCH_RATIO,
    get_dataset_path,
    get_dataset_name_column,
    get_dataset_ingredients_column,
)
from core.matching.strategy import MatchStrategy, SubstringContainmentStrategy
from core.models.suggestion import RawCandidate, SourceType
from core.normalization.normalizer import normalize_ingredient_text


def _fold(name: str) -> str:
    return unicodedata.normalize("NFC", name).strip().lower()


class DatasetError(Exception):
    """Dataset header is unusable (required columns missing)."""


class DatasetMatcher:
    """
    Read-only matcher over a static CSV with a recipe-name column and an
    ingredients-text column. The file is re-read on every call; no index is kept.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        name_column: Optional[str] = None,
        ingredients_column: Optional[str] = None,
        strategy: Optional[MatchStrategy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.path = Path(path) if path else get_dataset_path()
        self.name_column = _fold(name_column or get_dataset_name_column())
        self.ingredients_column = _fold(ingredients_column or get_dataset_ingredients_column())
        self.strategy = strategy or SubstringContainmentStrategy()
        self.logger = logger or logging.getLogger(__name__)

    def _header_indexes(self, header: List[str]) -> tuple[int, int]:
        lowered = [_fold(h) for h in header]
        if self.name_column not in lowered or self.ingredients_column not in lowered:
            raise DatasetError(
                f"required columns {self.name_column!r}/{self.ingredients_column!r} not in header {header}"
            )
        return lowered.index(self.name_column), lowered.index(self.ingredients_column)

    def match(
        self,
        user_tokens: Sequence[str],
        min_match_ratio: float = MIN_MATCH_RATIO,
    ) -> List[RawCandidate]:
        """
        Return dataset candidates with match_ratio >= min_match_ratio, in file order.
        A missing file or unusable header yields an empty list (logged, not raised).
        """
        if not self.path.exists():
            self.logger.warning("DATASET_SCAN missing file path=%s", self.path)
            return []

        candidates: List[RawCandidate] = []
        rows = skipped = 0
        try:
            with open(self.path, encoding="utf-8-sig", newline="") as f:
                reader = csv.reader(f)
                try:
                    header = next(reader)
                except StopIteration:
                    raise DatasetError("empty file")
                name_idx, ing_idx = self._header_indexes(header)
                needed = max(name_idx, ing_idx)

                while True:
                    # A bad record is skipped; the reader resumes after it
                    try:
                        columns = next(reader)
                    except StopIteration:
                        break
                    except csv.Error as e:
                        rows += 1
                        skipped += 1
                        self.logger.warning("DATASET_SCAN bad line=%s error=%s", reader.line_num, e)
                        continue
                    line_no = reader.line_num
                    if not any(c.strip() for c in columns):
                        continue
                    rows += 1
                    if len(columns) <= needed:
                        skipped += 1
                        self.logger.debug("DATASET_SCAN short row line=%s columns=%s", line_no, len(columns))
                        continue
                    name = columns[name_idx].strip()
                    ingredients_text = columns[ing_idx].strip()
                    if not name or not ingredients_text:
                        skipped += 1
                        self.logger.debug("DATASET_SCAN empty field line=%s", line_no)
                        continue

                    recipe_tokens = normalize_ingredient_text(ingredients_text)
                    if not recipe_tokens:
                        continue
                    matched = self.strategy.matched(user_tokens, recipe_tokens)
                    ratio = self.strategy.score(user_tokens, recipe_tokens)
                    if ratio >= min_match_ratio:
                        candidates.append(
                            RawCandidate(
                                name=name,
                                source_type=SourceType.DATASET,
                                dataset_ingredients=recipe_tokens,
                                matched_ingredients=matched,
                                match_ratio=ratio,
                            )
                        )
        except (OSError, UnicodeDecodeError, DatasetError) as e:
            self.logger.error("DATASET_SCAN failed path=%s error=%s", self.path, e)
            return candidates

        self.logger.info(
            "DATASET_SCAN matched=%d rows=%d skipped=%d min_ratio=%.2f",
            len(candidates), rows, skipped, min_match_ratio,
        )
        return candidates
