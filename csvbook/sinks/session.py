from __future__ import annotations

import io
import logging
from typing import Any

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..engine.assembler import SHEET_NAME_LIMIT
from ..models.config_models import SinkKind
from ..models.table import ConversionUnit, WorkbookBuffer
from .base import SinkWriteError, WorkbookSink
from .styling import apply_table_format

"""Live workbook session sink.

Keeps one open openpyxl workbook for the whole run and writes every unit into
its own sheet:
- the first unit takes over the active (default) sheet and renames it
- later units get a new sheet appended after the existing ones
- a name already taken gets a "_1", "_2", ... suffix within 31 characters

Values can be read back (`read_back`) after a caller edited them, and the
whole session can be serialized (`save`).
"""

__all__ = [
    "SessionSink",
]

logger = logging.getLogger(__name__)


class SessionSink(WorkbookSink):
    kind = SinkKind.SESSION

    def __init__(self, workbook: Workbook | None = None) -> None:
        self.workbook = workbook if workbook is not None else Workbook()
        self._fresh = workbook is None  # active sheet still the untouched default
        self.titles: list[str] = []  # actual sheet titles, in write order

    def _unique_title(self, name: str) -> str:
        taken = set(self.workbook.sheetnames)
        if name not in taken:
            return name
        suffix = 1
        while True:
            tail = f"_{suffix}"
            candidate = f"{name[: SHEET_NAME_LIMIT - len(tail)]}{tail}"
            if candidate not in taken:
                return candidate
            suffix += 1

    def _target_sheet(self, sheet_name: str) -> Worksheet:
        if self._fresh:
            ws = self.workbook.active
            ws.title = sheet_name
            self._fresh = False
            return ws
        return self.workbook.create_sheet(title=self._unique_title(sheet_name))

    def _discard(self, ws: Worksheet, fresh_title: str | None) -> None:
        """Drop a half-written sheet; a taken-over default sheet comes back empty."""
        self.workbook.remove(ws)
        if fresh_title is not None:
            self.workbook.create_sheet(title=fresh_title, index=0)
            self.workbook.active = 0
            self._fresh = True

    def write(self, unit: ConversionUnit) -> None:
        fresh_title = self.workbook.active.title if self._fresh else None
        ws: Worksheet | None = None
        try:
            ws = self._target_sheet(unit.sheet_name)
            grid = unit.table.grid()
            for r, row in enumerate(grid, start=1):
                for c, value in enumerate(row, start=1):
                    ws.cell(row=r, column=c, value=value)
            apply_table_format(ws, unit.numeric_columns, len(grid))
        except Exception as e:
            if ws is not None:
                self._discard(ws, fresh_title)
            raise SinkWriteError(f"session write failed for '{unit.sheet_name}': {e}") from e
        self.titles.append(ws.title)
        logger.debug("session sheet=%s rows=%d", ws.title, len(grid))
        return None

    @property
    def last_title(self) -> str | None:
        return self.titles[-1] if self.titles else None

    def worksheet(self, title: str) -> Worksheet:
        if title not in self.workbook.sheetnames:
            raise KeyError(f"sheet not in session: {title}")
        return self.workbook[title]

    def read_back(self, title: str) -> list[list[Any]]:
        """Current values of a sheet's used range, row by row."""
        ws = self.worksheet(title)
        return [list(row) for row in ws.iter_rows(values_only=True)]

    def save(self, file_name: str) -> WorkbookBuffer:
        buffer = io.BytesIO()
        try:
            self.workbook.save(buffer)
        except Exception as e:
            raise SinkWriteError(f"session save failed: {e}") from e
        return WorkbookBuffer(file_name=file_name, data=buffer.getvalue())
