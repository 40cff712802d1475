from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..engine.assembler import ConversionError, EmptyInputError, assemble, regenerate
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import ConvertConfig
from ..models.processing_result import FileStat, RunResult
from ..models.source_file import FileStatus, SourceFile
from ..models.table import ConversionUnit, WorkbookBuffer
from ..persistence.writer import (
    DirectoryChooser,
    PersistenceAbort,
    PersistenceError,
    persist_workbooks,
)
from ..sinks.base import SinkWriteError, WorkbookSink, create_sink
from ..sinks.session import SessionSink
from ..sinks.xlsx_file import XlsxFileSink
from .progress import ProgressTracker

"""Service orchestration for a multi-file conversion run.

convert_all() is the top-level loop:
1. Clear the caller's pending-workbook list
2. Convert each source in order (read -> assemble -> sink)
3. Session sink: read every sheet back, regenerate and export it, then add
   the whole session workbook
4. Persist the pending workbooks if a directory chooser was given

A failing file is recorded and skipped; units and buffers completed before it
are never touched. A cancelled directory choice keeps the pending list for a
retry.
"""

logger = logging.getLogger(__name__)

FILE_LEVEL = "<FILE_LEVEL>"


class ProcessingError(Exception):
    """Fatal error that stops the whole run."""


def scan_csv_files(directory: Path) -> list[Path]:
    """Scan a directory for .csv files (non-recursive, sorted by name).

    Raises:
        ProcessingError: If the directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _append_unique(pending: list[WorkbookBuffer], buffer: WorkbookBuffer) -> WorkbookBuffer:
    """Append a buffer, suffixing its file name if another pending one has it."""
    taken = {b.file_name for b in pending}
    name = buffer.file_name
    if name in taken:
        stem, dot, ext = name.rpartition(".")
        suffix = 1
        while f"{stem}_{suffix}{dot}{ext}" in taken:
            suffix += 1
        buffer = WorkbookBuffer(file_name=f"{stem}_{suffix}{dot}{ext}", data=buffer.data)
    pending.append(buffer)
    return buffer


def _elapsed(start: datetime) -> float:
    return (datetime.now(UTC) - start).total_seconds()


def _failed(source: SourceFile, start: datetime, error_type: str, message: str,
            error_log: ErrorLogBuffer, sheet: str = FILE_LEVEL) -> FileStat:
    error_log.append(ErrorRecord.create(
        file=source.name, sheet=sheet, row=-1, error_type=error_type, message=message,
    ))
    logger.error("file=%s %s: %s", source.name, error_type.lower(), message)
    return FileStat(
        file_name=source.name,
        status=FileStatus.FAILED.value,
        sheet_name=None if sheet == FILE_LEVEL else sheet,
        elapsed_seconds=_elapsed(start),
        error=message,
    )


def _convert_single_file(
    source: SourceFile,
    config: ConvertConfig,
    sink: WorkbookSink,
    pending: list[WorkbookBuffer],
    error_log: ErrorLogBuffer,
) -> tuple[FileStat, ConversionUnit | None]:
    """Convert one source and hand it to the sink.

    Returns:
        FileStat for the file and the unit written (None unless converted)
    """
    start = datetime.now(UTC)
    try:
        data = source.read_bytes()
    except (OSError, ValueError) as e:
        return _failed(source, start, "READ_ERROR", str(e), error_log), None

    try:
        unit = assemble(
            data,
            source.name,
            policy=config.numeric_policy,
            exclusions=config.exclusions,
            encoding=config.encoding,
        )
    except ConversionError as e:
        return _failed(source, start, "DECODE_ERROR", str(e), error_log), None

    if unit is None:
        return FileStat(
            file_name=source.name,
            status=FileStatus.SKIPPED.value,
            elapsed_seconds=_elapsed(start),
        ), None

    try:
        buffer = sink.write(unit)
    except SinkWriteError as e:
        return _failed(source, start, "SINK_WRITE_ERROR", str(e), error_log, sheet=unit.sheet_name), None
    if buffer is not None:
        _append_unique(pending, buffer)

    logger.info(
        "file=%s sheet=%s rows=%d columns=%d",
        source.name,
        unit.sheet_name,
        unit.table.row_count,
        unit.table.column_count,
    )
    return FileStat(
        file_name=source.name,
        status=FileStatus.CONVERTED.value,
        sheet_name=unit.sheet_name,
        rows=unit.table.row_count,
        columns=unit.table.column_count,
        elapsed_seconds=_elapsed(start),
    ), unit


def _collect_session_workbooks(
    sink: SessionSink,
    written: Sequence[tuple[ConversionUnit, str]],
    config: ConvertConfig,
    pending: list[WorkbookBuffer],
    error_log: ErrorLogBuffer,
) -> None:
    """Export session sheets (read back + regenerate) and the session workbook itself."""
    if not written:
        return
    if config.export_sheets:
        exporter = XlsxFileSink()
        for unit, title in written:
            try:
                edited = regenerate(sink.read_back(title), unit)
                buffer = exporter.write(edited)
            except (EmptyInputError, SinkWriteError, KeyError) as e:
                error_log.append(ErrorRecord.create(
                    file=unit.file_name, sheet=title, row=-1, error_type="EXPORT_ERROR", message=str(e),
                ))
                logger.error("sheet=%s export failed: %s", title, e)
                continue
            _append_unique(pending, WorkbookBuffer(file_name=f"{title}.xlsx", data=buffer.data))
    try:
        _append_unique(pending, sink.save(config.session_workbook))
    except SinkWriteError as e:
        raise ProcessingError(str(e)) from e


def _persist(
    pending: list[WorkbookBuffer],
    choose_directory: DirectoryChooser | None,
) -> tuple[str, list[Path]]:
    if choose_directory is None:
        return "not_requested", []
    if not pending:
        return "empty", []
    try:
        paths = persist_workbooks(pending, choose_directory)
    except PersistenceAbort:
        logger.warning("persistence cancelled, %d workbook(s) kept in memory", len(pending))
        return "cancelled", []
    except PersistenceError as e:
        logger.error("persistence failed: %s", e)
        return "failed", []
    pending.clear()
    return "saved", paths


def convert_all(
    sources: Sequence[SourceFile],
    config: ConvertConfig,
    pending: list[WorkbookBuffer],
    sink: WorkbookSink | None = None,
    choose_directory: DirectoryChooser | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Convert every source in order and optionally persist the results.

    Args:
        sources: Input files, processed in the given order
        config: Run configuration
        pending: Caller-owned list of finished workbooks; cleared first, then
            filled. Kept intact when persistence is cancelled or fails.
        sink: Workbook sink, defaults to create_sink(config.sink)
        choose_directory: Destination chooser; None skips persistence
        error_log: Error buffer, flushed at the end of the run

    Returns:
        RunResult with per-file stats and persistence outcome

    Raises:
        ProcessingError: With config.fail_fast on the first failing file, or
            when the session workbook cannot be serialized
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    sink = sink if sink is not None else create_sink(config.sink)
    pending.clear()

    file_stats: list[FileStat] = []
    written: list[tuple[ConversionUnit, str]] = []
    converted = skipped = failed = total_rows = 0

    try:
        with ProgressTracker(len(sources)) as progress:
            for source in sources:
                progress.start_file(source.name)
                stat, unit = _convert_single_file(source, config, sink, pending, error_log)
                file_stats.append(stat)
                if stat.status == FileStatus.CONVERTED.value:
                    converted += 1
                    total_rows += stat.rows
                    if isinstance(sink, SessionSink) and unit is not None and sink.last_title:
                        written.append((unit, sink.last_title))
                elif stat.status == FileStatus.SKIPPED.value:
                    skipped += 1
                else:
                    failed += 1
                    if config.fail_fast:
                        raise ProcessingError(f"{source.name}: {stat.error}")
                progress.set_postfix(converted=converted, skipped=skipped, failed=failed)
                progress.finish_file()

        if isinstance(sink, SessionSink):
            _collect_session_workbooks(sink, written, config, pending, error_log)
    finally:
        try:
            log_path = error_log.flush()
        except OSError as e:
            logger.warning("could not write error log: %s", e)
        else:
            if log_path is not None:
                logger.info("error log written to %s", log_path)

    workbooks = len(pending)
    persist_status, saved_paths = _persist(pending, choose_directory)

    end_time = datetime.now(UTC)
    return RunResult(
        converted_files=converted,
        skipped_files=skipped,
        failed_files=failed,
        total_rows=total_rows,
        workbooks=workbooks,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        persist_status=persist_status,
        saved_paths=saved_paths,
        file_stats=file_stats,
    )
