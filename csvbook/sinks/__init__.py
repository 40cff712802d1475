"""Workbook sinks: render a ConversionUnit into a spreadsheet backend."""

from .base import SinkWriteError, WorkbookSink, create_sink
from .session import SessionSink
from .xlsx_file import XlsxFileSink

__all__ = [
    "SinkWriteError",
    "WorkbookSink",
    "create_sink",
    "SessionSink",
    "XlsxFileSink",
]
