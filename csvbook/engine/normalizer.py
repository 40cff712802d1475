from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.table import Cell, Row
from .lexer import format_cell

"""Row normalizer: reconcile ragged rows with the header column count.

- short rows are padded with empty text cells
- long rows keep their first C-1 cells; everything from index C-1 onward is
  joined with ',' into a single text cell at index C-1 (overflow merge)

The join character is always "," whatever separator the line was split on.
Only row lengths are inspected, never cell types.
"""

__all__ = [
    "OVERFLOW_JOINER",
    "normalize_row",
    "normalize_rows",
]

OVERFLOW_JOINER = ","


def normalize_row(row: Sequence[Cell], column_count: int) -> Row:
    if column_count < 1:
        raise ValueError(f"column_count must be >= 1, got {column_count}")
    length = len(row)
    if length < column_count:
        return (*row, *([""] * (column_count - length)))
    if length > column_count:
        keep = column_count - 1
        overflow = OVERFLOW_JOINER.join(format_cell(c) for c in row[keep:])
        return (*row[:keep], overflow)
    return tuple(row)


def normalize_rows(rows: Iterable[Sequence[Cell]], column_count: int) -> tuple[Row, ...]:
    return tuple(normalize_row(r, column_count) for r in rows)
