"""
Unit tests for the CSV dataset matcher and match strategy.
Run from repo root: python -m pytest backend/tests/test_dataset_matcher.py -v
"""
import logging

import pytest

from core.matching.dataset_matcher import DatasetMatcher
from core.matching.strategy import SubstringContainmentStrategy
from core.models.suggestion import SourceType

HEADER = "Tiêu đề,Nguyên liệu,translated_ingredients\n"


def _write(tmp_path, body, header=HEADER):
    path = tmp_path / "recipes.csv"
    path.write_text(header + body, encoding="utf-8")
    return path


def test_strategy_containment_both_directions():
    s = SubstringContainmentStrategy()
    assert s.matched(["trứng"], ["trứng gà", "hành lá"]) == ["trứng gà"]
    assert s.matched(["thịt bò xay"], ["thịt bò"]) == ["thịt bò"]
    assert s.score(["trứng"], ["trứng gà", "hành lá"]) == 0.5
    assert s.score(["trứng"], []) == 0.0


def test_vietnamese_scenario_tomato_egg(tmp_path):
    """Egg + tomato against 'Trứng chiên cà chua' yields one dataset candidate."""
    path = _write(tmp_path, 'Trứng chiên cà chua,x,"2 trứng, 1 cà chua"\n')
    results = DatasetMatcher(path).match(["trứng", "cà chua"])
    assert len(results) == 1
    c = results[0]
    assert c.name == "Trứng chiên cà chua"
    assert c.source_type == SourceType.DATASET
    assert c.match_ratio == 1.0
    assert c.dataset_ingredients == ["trứng", "cà chua"]
    assert c.matched_ingredients == ["trứng", "cà chua"]


def test_partial_match_ratio(tmp_path):
    path = _write(tmp_path, 'Trứng chiên cà chua,x,"2 trứng, 1 cà chua, hành lá"\n')
    results = DatasetMatcher(path).match(["trứng", "cà chua"])
    assert len(results) == 1
    assert results[0].match_ratio == pytest.approx(2 / 3)
    assert results[0].matched_ingredients == ["trứng", "cà chua"]


def test_threshold_is_inclusive(tmp_path):
    path = _write(tmp_path, 'Canh,x,"trứng, cà chua, nước mắm, hành lá"\n')
    assert len(DatasetMatcher(path).match(["trứng", "cà chua"], min_match_ratio=0.5)) == 1
    assert DatasetMatcher(path).match(["trứng", "cà chua"], min_match_ratio=0.51) == []


def test_row_without_tokens_never_becomes_candidate(tmp_path):
    path = _write(tmp_path, 'Nước lọc,x,"1, 2, ab"\n')
    assert DatasetMatcher(path).match(["nước"], min_match_ratio=0.0) == []


def test_lowering_threshold_never_removes_candidates(tmp_path):
    path = _write(
        tmp_path,
        'A,x,"trứng, cà chua"\n'
        'B,x,"trứng, hành lá, nước mắm"\n'
        'C,x,"thịt bò, hành tây, gừng, quế"\n'
        'D,x,"trứng, cà chua, dầu ăn, muối hột"\n',
    )
    matcher = DatasetMatcher(path)
    previous = set()
    for threshold in (1.0, 0.75, 0.5, 0.3, 0.0):
        names = {c.name for c in matcher.match(["trứng", "cà chua"], min_match_ratio=threshold)}
        assert previous <= names
        previous = names
    assert previous == {"A", "B", "C", "D"}


def test_ratio_always_within_bounds(tmp_path):
    path = _write(tmp_path, 'A,x,"trứng, trứng gà, trứng vịt"\nB,x,"thịt heo, tiêu"\n')
    for c in DatasetMatcher(path).match(["trứng", "trứng gà", "heo"], min_match_ratio=0.0):
        assert 0.0 <= c.match_ratio <= 1.0


def test_malformed_rows_are_skipped_not_fatal(tmp_path, caplog):
    path = _write(
        tmp_path,
        "Only one column\n"
        ',x,"trứng, cà chua"\n'
        "Empty ingredients,x,\n"
        '"Unclosed quote,x,"trứng\n'
        'Good,x,"trứng, cà chua"\n',
    )
    with caplog.at_level(logging.DEBUG):
        results = DatasetMatcher(path).match(["trứng", "cà chua"])
    assert [c.name for c in results] == ["Good"]
    assert "DATASET_SCAN" in caplog.text


def test_missing_file_is_soft_failure(tmp_path, caplog):
    matcher = DatasetMatcher(tmp_path / "nope.csv")
    with caplog.at_level(logging.WARNING):
        assert matcher.match(["trứng"]) == []
    assert "missing file" in caplog.text


def test_missing_required_columns_is_soft_failure(tmp_path):
    path = _write(tmp_path, 'A,"trứng"\n', header="name,ingredients\n")
    assert DatasetMatcher(path).match(["trứng"]) == []


def test_custom_column_names(tmp_path):
    path = _write(tmp_path, 'Omelette,"eggs, milk"\n', header="Title,Ingredients\n")
    matcher = DatasetMatcher(path, name_column="title", ingredients_column="INGREDIENTS")
    results = matcher.match(["eggs", "milk"])
    assert [c.name for c in results] == ["Omelette"]


def test_injected_strategy_is_used(tmp_path):
    class Everything:
        def matched(self, user_tokens, recipe_tokens):
            return list(recipe_tokens)

        def score(self, user_tokens, recipe_tokens):
            return 1.0

    path = _write(tmp_path, 'A,x,"thịt bò, gừng"\n')
    results = DatasetMatcher(path, strategy=Everything()).match(["trứng"])
    assert results[0].match_ratio == 1.0


def test_injected_logger_receives_scan_summary(tmp_path):
    path = _write(tmp_path, 'A,x,"trứng"\n')
    logger = logging.getLogger("test.dataset")
    records = []

    class Capture(logging.Handler):
        def emit(self, record):
            records.append(record.getMessage())

    handler = Capture()
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        DatasetMatcher(path, logger=logger).match(["trứng"])
    finally:
        logger.removeHandler(handler)
    assert any(m.startswith("DATASET_SCAN matched=1") for m in records)


def test_quoted_field_spanning_lines_is_one_row(tmp_path):
    path = _write(tmp_path, 'Canh trứng,x,"trứng,\ncà chua, hành lá"\nGood,x,"trứng, cà chua"\n')
    results = DatasetMatcher(path).match(["trứng", "cà chua"])
    assert [c.name for c in results] == ["Canh trứng", "Good"]
    assert results[0].match_ratio == pytest.approx(2 / 3)
    assert results[0].dataset_ingredients == ["trứng", "cà chua", "hành lá"]


def test_empty_file_is_soft_failure(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    assert DatasetMatcher(path).match(["trứng"]) == []
