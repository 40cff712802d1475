from __future__ import annotations

import pytest

from csvbook.engine.normalizer import normalize_row, normalize_rows


def test_overflow_merges_into_last_column():
    assert normalize_row(["a", "b", "c", "d"], 2) == ("a", "b,c,d")


def test_short_row_is_padded():
    assert normalize_row(["a"], 3) == ("a", "", "")


def test_exact_row_unchanged():
    assert normalize_row(["a", 1.0], 2) == ("a", 1.0)


def test_five_fields_against_three_columns_keeps_all_data():
    row = ["Mario", 1.0, "x", 2.5, "y"]
    assert normalize_row(row, 3) == ("Mario", 1.0, "x,2.5,y")


def test_overflow_formats_numbers_without_trailing_zero():
    assert normalize_row(["a", 2000.0, 1.5], 2) == ("a", "2000,1.5")


def test_single_column_overflow():
    assert normalize_row(["a", "b"], 1) == ("a,b",)


def test_empty_row_is_padded():
    assert normalize_row([], 2) == ("", "")


def test_invalid_column_count():
    with pytest.raises(ValueError):
        normalize_row(["a"], 0)


def test_normalize_rows_every_row_matches_width():
    rows = [["a"], ["a", "b", "c", "d", "e"], ["a", "b", "c"], []]
    out = normalize_rows(rows, 3)
    assert all(len(r) == 3 for r in out)
    assert out[1] == ("a", "b", "c,d,e")
