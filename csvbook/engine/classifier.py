from __future__ import annotations

from collections.abc import Sequence

from ..models.config_models import ExclusionRules, NumericPolicy
from ..models.table import Cell

"""Column type classifier: which columns get the two-decimal number format.

Per column:
1. Header matches an exclusion (exact "matricola", substring "nr." by
   default, case-folded) -> never formatted, even if every value is numeric.
2. Otherwise the data cells decide, by policy:
   - ALL_NUMBERS: every data cell must be a number. A cell missing from a
     ragged row counts as non-numeric. A header-only table flags all columns.
   - DECIMALS_ONLY: at least one data cell must hold a non-integer number.

Reads at most `column_count` cells per row, so it tolerates ragged input.
"""

__all__ = [
    "classify_columns",
]


def _header_text(cell: Cell) -> str:
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell)


def _column_values(rows: Sequence[Sequence[Cell]], col: int) -> list[Cell | None]:
    return [row[col] if col < len(row) else None for row in rows]


def _is_number(cell: Cell | None) -> bool:
    return isinstance(cell, float)


def _is_fractional(cell: Cell | None) -> bool:
    return isinstance(cell, float) and not cell.is_integer()


def classify_columns(
    header: Sequence[Cell],
    rows: Sequence[Sequence[Cell]],
    policy: NumericPolicy = NumericPolicy.ALL_NUMBERS,
    exclusions: ExclusionRules | None = None,
    column_count: int | None = None,
) -> tuple[bool, ...]:
    """Compute the column format map for one table.

    Args:
        header: Header row (index 0 of the table)
        rows: Data rows, normalized or not
        policy: Numeric policy of the run
        exclusions: Identifier-like header terms, defaults to ExclusionRules()
        column_count: Declared column count, defaults to len(header)

    Returns:
        One flag per column, True -> render data cells as "#,##0.00"
    """
    rules = exclusions if exclusions is not None else ExclusionRules()
    count = len(header) if column_count is None else column_count
    flags: list[bool] = []
    for col in range(count):
        title = _header_text(header[col]) if col < len(header) else ""
        if rules.matches(title):
            flags.append(False)
            continue
        values = _column_values(rows, col)
        if policy is NumericPolicy.ALL_NUMBERS:
            flags.append(all(_is_number(v) for v in values))
        else:
            flags.append(any(_is_fractional(v) for v in values))
    return tuple(flags)
