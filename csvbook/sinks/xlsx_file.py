from __future__ import annotations

import io
import logging

import pandas as pd

from ..models.config_models import SinkKind
from ..models.table import ConversionUnit, WorkbookBuffer
from .base import SinkWriteError, WorkbookSink
from .styling import apply_table_format

"""Standalone .xlsx file sink.

Each unit becomes its own one-sheet workbook named "<sheet name>.xlsx",
serialized in memory. Writing to disk is left to the persistence step.
"""

__all__ = [
    "XlsxFileSink",
    "render_workbook",
]

logger = logging.getLogger(__name__)


def render_workbook(unit: ConversionUnit) -> bytes:
    """Serialize one unit as a single-sheet workbook."""
    buffer = io.BytesIO()
    frame = pd.DataFrame(unit.table.grid())
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        # header is row 0 of the grid, not a DataFrame header
        frame.to_excel(writer, sheet_name=unit.sheet_name, header=False, index=False)
        ws = writer.sheets[unit.sheet_name]
        apply_table_format(ws, unit.numeric_columns, unit.table.row_count + 1)
    return buffer.getvalue()


class XlsxFileSink(WorkbookSink):
    kind = SinkKind.FILE

    def write(self, unit: ConversionUnit) -> WorkbookBuffer:
        try:
            data = render_workbook(unit)
        except Exception as e:
            raise SinkWriteError(f"xlsx render failed for '{unit.sheet_name}': {e}") from e
        logger.debug("rendered workbook=%s bytes=%d", unit.workbook_name, len(data))
        return WorkbookBuffer(file_name=unit.workbook_name, data=data)
