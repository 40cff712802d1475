from __future__ import annotations

import io
from pathlib import Path

import pytest
from openpyxl import load_workbook

from csvbook.logging.error_log import ErrorLogBuffer
from csvbook.models.config_models import ConvertConfig, SinkKind
from csvbook.models.source_file import SourceFile
from csvbook.models.table import WorkbookBuffer
from csvbook.persistence.writer import fixed_directory
from csvbook.services.orchestrator import ProcessingError, convert_all, scan_csv_files
from csvbook.sinks import SessionSink, SinkWriteError, XlsxFileSink

DEMO = 'Nome,Matricola,Importo\nMario,123,"1,50"\nLuigi,456,2000\n'.encode("utf-8")


def _src(name: str, data: bytes) -> SourceFile:
    return SourceFile(name=name, data=data)


def test_scan_csv_files(temp_workdir: Path):
    data_dir = temp_workdir / "data"
    (data_dir / "b.csv").write_text("x")
    (data_dir / "A.CSV").write_text("x")
    (data_dir / "readme.txt").write_text("x")
    (data_dir / "sub.csv").mkdir()
    assert [p.name for p in scan_csv_files(data_dir)] == ["A.CSV", "b.csv"]


def test_scan_csv_files_directory_not_found():
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_csv_files(Path("/non/existent/path"))


def test_scan_csv_files_not_a_directory(tmp_path: Path):
    f = tmp_path / "x.csv"
    f.write_text("a")
    with pytest.raises(ProcessingError, match="not a directory"):
        scan_csv_files(f)


def test_file_sink_run_preserves_order(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    sources = [_src("demo.csv", DEMO), _src("other.csv", b"a;b\n1;2\n")]
    result = convert_all(sources, ConvertConfig(), pending, error_log=ErrorLogBuffer(tmp_path))
    assert result.converted_files == 2
    assert result.total_rows == 3
    assert [b.file_name for b in pending] == ["demo.xlsx", "other.xlsx"]
    assert [s.file_name for s in result.file_stats] == ["demo.csv", "other.csv"]
    assert result.persist_status == "not_requested"


def test_pending_cleared_at_start(tmp_path: Path):
    pending = [WorkbookBuffer("stale.xlsx", b"old")]
    convert_all([_src("demo.csv", DEMO)], ConvertConfig(), pending, error_log=ErrorLogBuffer(tmp_path))
    assert [b.file_name for b in pending] == ["demo.xlsx"]


def test_failure_is_isolated(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    log = ErrorLogBuffer(tmp_path)
    sources = [_src("first.csv", DEMO), _src("bad.csv", b"\xff\xfe,\xfa"), _src("last.csv", DEMO)]
    result = convert_all(sources, ConvertConfig(), pending, error_log=log)
    assert (result.converted_files, result.failed_files) == (2, 1)
    assert [b.file_name for b in pending] == ["first.xlsx", "last.xlsx"]
    assert result.file_stats[1].status == "failed"
    log_file = next(tmp_path.glob("errors-*.log"))
    assert "DECODE_ERROR" in log_file.read_text(encoding="utf-8")


def test_empty_files_are_skipped(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    result = convert_all(
        [_src("empty.csv", b""), _src("blank.csv", b"\n \n")],
        ConvertConfig(), pending, error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.skipped_files == 2
    assert result.failed_files == 0
    assert pending == []


def test_missing_path_is_read_error(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    result = convert_all(
        [SourceFile.from_path(tmp_path / "gone.csv")],
        ConvertConfig(), pending, error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.failed_files == 1


def test_fail_fast_raises(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    cfg = ConvertConfig(fail_fast=True)
    with pytest.raises(ProcessingError, match="bad.csv"):
        convert_all(
            [_src("first.csv", DEMO), _src("bad.csv", b"\xff"), _src("last.csv", DEMO)],
            cfg, pending, error_log=ErrorLogBuffer(tmp_path),
        )
    assert [b.file_name for b in pending] == ["first.xlsx"]


class _RejectingSink(XlsxFileSink):
    def write(self, unit):
        if unit.sheet_name == "reject":
            raise SinkWriteError("rejected")
        return super().write(unit)


def test_sink_write_error_fails_that_file_only(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    result = convert_all(
        [_src("reject.csv", DEMO), _src("keep.csv", DEMO)],
        ConvertConfig(), pending, sink=_RejectingSink(), error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.failed_files == 1
    assert result.file_stats[0].error == "rejected"
    assert [b.file_name for b in pending] == ["keep.xlsx"]


def test_duplicate_workbook_names_suffixed(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    convert_all(
        [_src("x/demo.csv", DEMO), _src("y/demo.csv", DEMO)],
        ConvertConfig(), pending, error_log=ErrorLogBuffer(tmp_path),
    )
    assert [b.file_name for b in pending] == ["demo.xlsx", "demo_1.xlsx"]


def test_session_sink_exports_sheets_and_session(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    cfg = ConvertConfig(sink=SinkKind.SESSION)
    sink = SessionSink()
    result = convert_all(
        [_src("demo.csv", DEMO), _src("other.csv", b"a;b\n1;2,5\n")],
        cfg, pending, sink=sink, error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.converted_files == 2
    assert [b.file_name for b in pending] == ["demo.xlsx", "other.xlsx", "converted.xlsx"]
    session = load_workbook(io.BytesIO(pending[-1].data))
    assert session.sheetnames == ["demo", "other"]
    exported = load_workbook(io.BytesIO(pending[0].data))
    assert exported.sheetnames == ["demo"]


def test_session_sink_failed_file_absent_from_session(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    cfg = ConvertConfig(sink=SinkKind.SESSION)
    result = convert_all(
        [_src("demo.csv", DEMO), _src("bad.csv", b"a,b\n1,2\nx,\x01y\n")],
        cfg, pending, error_log=ErrorLogBuffer(tmp_path),
    )
    assert (result.converted_files, result.failed_files) == (1, 1)
    assert result.file_stats[1].status == "failed"
    assert [b.file_name for b in pending] == ["demo.xlsx", "converted.xlsx"]
    assert load_workbook(io.BytesIO(pending[-1].data)).sheetnames == ["demo"]


def test_session_sink_without_export(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    cfg = ConvertConfig(sink=SinkKind.SESSION, export_sheets=False, session_workbook="all.xlsx")
    convert_all([_src("demo.csv", DEMO)], cfg, pending, error_log=ErrorLogBuffer(tmp_path))
    assert [b.file_name for b in pending] == ["all.xlsx"]


def test_persistence_saved_clears_pending(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    out = tmp_path / "out"
    result = convert_all(
        [_src("demo.csv", DEMO)], ConvertConfig(), pending,
        choose_directory=fixed_directory(out), error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.persist_status == "saved"
    assert result.saved_paths == [out / "demo.xlsx"]
    assert (out / "demo.xlsx").exists()
    assert pending == []
    assert result.workbooks == 1


def test_persistence_cancel_keeps_pending(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    result = convert_all(
        [_src("demo.csv", DEMO)], ConvertConfig(), pending,
        choose_directory=lambda: None, error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.persist_status == "cancelled"
    assert result.failed_files == 0
    assert [b.file_name for b in pending] == ["demo.xlsx"]


def test_persistence_failure_reported(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    pending: list[WorkbookBuffer] = []
    result = convert_all(
        [_src("demo.csv", DEMO)], ConvertConfig(), pending,
        choose_directory=fixed_directory(blocker), error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.persist_status == "failed"
    assert len(pending) == 1


def test_nothing_to_persist(tmp_path: Path):
    pending: list[WorkbookBuffer] = []
    result = convert_all(
        [_src("empty.csv", b"")], ConvertConfig(), pending,
        choose_directory=fixed_directory(tmp_path / "out"), error_log=ErrorLogBuffer(tmp_path),
    )
    assert result.persist_status == "empty"
    assert not (tmp_path / "out").exists()
