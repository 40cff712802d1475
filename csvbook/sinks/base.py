from __future__ import annotations

from abc import ABC, abstractmethod

from ..models.config_models import SinkKind
from ..models.table import ConversionUnit, WorkbookBuffer

"""Sink capability shared by the workbook backends.

Both variants consume the same ConversionUnit contract:
- XlsxFileSink returns one standalone workbook buffer per unit
- SessionSink writes into a long-lived workbook and returns nothing
"""

__all__ = [
    "SinkWriteError",
    "WorkbookSink",
    "create_sink",
]


class SinkWriteError(Exception):
    """Raised when a backend rejects a write."""


class WorkbookSink(ABC):
    kind: SinkKind

    @abstractmethod
    def write(self, unit: ConversionUnit) -> WorkbookBuffer | None:
        """Render one unit. Returns a buffer to persist, or None if held by the sink."""


def create_sink(kind: SinkKind | str) -> WorkbookSink:
    kind = SinkKind(kind)
    if kind is SinkKind.SESSION:
        from .session import SessionSink

        return SessionSink()
    from .xlsx_file import XlsxFileSink

    return XlsxFileSink()
