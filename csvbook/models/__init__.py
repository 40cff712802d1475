"""Domain models for the CSV -> workbook converter.

This package contains the table, configuration and run-result models shared
by the engine, the sinks and the orchestration layer.
"""

from .config_models import ConvertConfig, ExclusionRules, NumericPolicy, SinkKind
from .processing_result import FileStat, RunResult
from .source_file import FileStatus, SourceFile
from .table import Cell, ConversionUnit, Row, Table, WorkbookBuffer

__all__ = [
    # Configuration models
    "ConvertConfig",
    "ExclusionRules",
    "NumericPolicy",
    "SinkKind",
    # Table models
    "Cell",
    "Row",
    "Table",
    "ConversionUnit",
    "WorkbookBuffer",
    # Processing models
    "FileStatus",
    "SourceFile",
    "FileStat",
    "RunResult",
]
