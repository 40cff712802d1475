from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from ..models.table import WorkbookBuffer

"""Persistence of finished workbook buffers.

The destination directory comes from a chooser callable. A chooser that
returns None means the user cancelled: PersistenceAbort is raised, which
callers treat as a benign outcome, and the buffers are left untouched so the
step can be retried. Filesystem failures raise PersistenceError.
"""

__all__ = [
    "DirectoryChooser",
    "PersistenceAbort",
    "PersistenceError",
    "fixed_directory",
    "prompt_directory",
    "persist_workbooks",
]

logger = logging.getLogger(__name__)

DirectoryChooser = Callable[[], "Path | None"]


class PersistenceAbort(Exception):
    """Destination selection was cancelled by the user."""


class PersistenceError(Exception):
    """Workbooks could not be written to the chosen directory."""


def fixed_directory(path: Path) -> DirectoryChooser:
    def choose() -> Path:
        return path
    return choose


def prompt_directory(input_fn: Callable[[str], str] | None = None) -> DirectoryChooser:
    """Chooser asking on the terminal; empty answer, EOF or Ctrl-C cancel."""
    def choose() -> Path | None:
        ask = input_fn if input_fn is not None else input
        try:
            answer = ask("Save workbooks to directory (empty to cancel): ")
        except (EOFError, KeyboardInterrupt):
            return None
        answer = answer.strip()
        return Path(answer).expanduser() if answer else None
    return choose


def persist_workbooks(buffers: Sequence[WorkbookBuffer], choose_directory: DirectoryChooser) -> list[Path]:
    """Write every buffer under its file name into the chosen directory.

    Returns:
        Paths written, in buffer order

    Raises:
        PersistenceAbort: If the chooser was cancelled
        PersistenceError: If the directory or a file cannot be written
    """
    directory = choose_directory()
    if directory is None:
        raise PersistenceAbort("destination selection cancelled")
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"cannot create directory {directory}: {e}") from e
    if not directory.is_dir():
        raise PersistenceError(f"not a directory: {directory}")

    written: list[Path] = []
    for buf in buffers:
        target = directory / buf.file_name
        try:
            target.write_bytes(buf.data)
        except OSError as e:
            raise PersistenceError(f"cannot write {target}: {e}") from e
        logger.info("saved %s", target)
        written.append(target)
    return written
