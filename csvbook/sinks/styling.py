from __future__ import annotations

from collections.abc import Sequence

from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

"""Worksheet formatting shared by every sink.

Contract for one written table (anchored at A1):
- header row bold
- flagged columns get NUMBER_FORMAT on data rows only, never on the header
- column widths fitted to the longest rendered value (bounded)

Row heights are left unset so the spreadsheet application sizes them.
"""

__all__ = [
    "NUMBER_FORMAT",
    "apply_table_format",
    "fit_column_widths",
]

NUMBER_FORMAT = "#,##0.00;[Red]-#,##0.00"
MIN_WIDTH = 6
MAX_WIDTH = 60


def _display_width(value: object) -> int:
    if value is None:
        return 0
    if isinstance(value, float):
        # two decimals plus thousands separators
        return len(f"{value:,.2f}")
    return len(str(value))


def fit_column_widths(ws: Worksheet) -> None:
    widths: dict[int, int] = {}
    for row in ws.iter_rows():
        for cell in row:
            w = _display_width(cell.value)
            if w > widths.get(cell.column, 0):
                widths[cell.column] = w
    for col, w in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = max(MIN_WIDTH, min(MAX_WIDTH, w + 2))


def apply_table_format(ws: Worksheet, numeric_columns: Sequence[bool], row_count: int) -> None:
    """Format a table already written at A1.

    Args:
        ws: Target worksheet
        numeric_columns: Column format map
        row_count: Total rows written, header included
    """
    bold = Font(bold=True)
    for col in range(1, len(numeric_columns) + 1):
        ws.cell(row=1, column=col).font = bold
    for idx, flagged in enumerate(numeric_columns, start=1):
        if not flagged:
            continue
        for r in range(2, row_count + 1):
            ws.cell(row=r, column=idx).number_format = NUMBER_FORMAT
    fit_column_widths(ws)
