from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering for a conversion run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Format:
    SUMMARY files={n} converted={c} skipped={s} failed={f} rows={r}
    workbooks={w} persist={status} elapsed_sec={e}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = RunResult(
        ...     converted_files=2, skipped_files=0, failed_files=1, total_rows=10,
        ...     workbooks=2, start_time=t, end_time=t, elapsed_seconds=1.5,
        ...     persist_status="saved",
        ... )
        >>> render_summary_line(r)
        'SUMMARY files=3 converted=2 skipped=0 failed=1 rows=10 workbooks=2 persist=saved elapsed_sec=1.5'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"converted={result.converted_files} "
        f"skipped={result.skipped_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"workbooks={result.workbooks} "
        f"persist={result.persist_status} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
