from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

"""Processing result models for a conversion run.

RunResult carries everything the SUMMARY line and the CLI exit code need.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file conversion statistics."""
    file_name: str
    status: str  # converted / skipped / failed
    sheet_name: str | None = None
    rows: int = 0  # data rows, header excluded
    columns: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one multi-file run."""
    converted_files: int
    skipped_files: int
    failed_files: int
    total_rows: int
    workbooks: int  # buffers produced for persistence
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    persist_status: str = "not_requested"  # not_requested / saved / cancelled / failed
    saved_paths: list[Path] = field(default_factory=list)
    file_stats: list[FileStat] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return self.converted_files + self.skipped_files + self.failed_files
