from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    import pandas as pd

"""Table and ConversionUnit domain models.

A Table is rectangular once built by the assembler: the header row defines
the column count and every data row has exactly that length.
"""

__all__ = [
    "Cell",
    "Row",
    "Table",
    "ConversionUnit",
    "WorkbookBuffer",
]

Cell = Union[float, str]
Row = tuple[Cell, ...]


@dataclass(frozen=True)
class Table:
    header: Row
    rows: tuple[Row, ...]

    @property
    def column_count(self) -> int:
        return len(self.header)

    @property
    def row_count(self) -> int:
        """Number of data rows (header excluded)."""
        return len(self.rows)

    def grid(self) -> list[list[Cell]]:
        """Header plus data rows as a fresh list-of-lists."""
        return [list(self.header), *(list(r) for r in self.rows)]

    def to_frame(self) -> pd.DataFrame:
        import pandas as pd

        columns = [str(h) for h in self.header]
        return pd.DataFrame([list(r) for r in self.rows], columns=columns)


@dataclass(frozen=True)
class ConversionUnit:
    """One source file's table, ready for a sink."""
    file_name: str
    sheet_name: str
    table: Table
    numeric_columns: tuple[bool, ...]  # one flag per column, true -> "#,##0.00"

    @property
    def workbook_name(self) -> str:
        return f"{self.sheet_name}.xlsx"


@dataclass(frozen=True)
class WorkbookBuffer:
    """Serialized workbook held in memory until persisted."""
    file_name: str
    data: bytes
