from __future__ import annotations

from pathlib import Path

import pytest

from csvbook.models.table import WorkbookBuffer
from csvbook.persistence.writer import (
    PersistenceAbort,
    PersistenceError,
    fixed_directory,
    persist_workbooks,
    prompt_directory,
)


def _buffers() -> list[WorkbookBuffer]:
    return [WorkbookBuffer("a.xlsx", b"one"), WorkbookBuffer("b.xlsx", b"two")]


def test_persist_writes_all_in_order(tmp_path: Path):
    paths = persist_workbooks(_buffers(), fixed_directory(tmp_path / "out"))
    assert [p.name for p in paths] == ["a.xlsx", "b.xlsx"]
    assert (tmp_path / "out" / "b.xlsx").read_bytes() == b"two"


def test_cancelled_choice_aborts_without_touching_buffers():
    buffers = _buffers()
    with pytest.raises(PersistenceAbort):
        persist_workbooks(buffers, lambda: None)
    assert len(buffers) == 2


def test_unwritable_target_is_persistence_error(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(PersistenceError):
        persist_workbooks(_buffers(), fixed_directory(blocker))


def test_prompt_directory_answer(tmp_path: Path):
    choose = prompt_directory(lambda _prompt: f"  {tmp_path}  ")
    assert choose() == tmp_path


@pytest.mark.parametrize("exc", [EOFError, KeyboardInterrupt])
def test_prompt_directory_interrupt_is_cancel(exc):
    def raiser(_prompt):
        raise exc

    assert prompt_directory(raiser)() is None


def test_prompt_directory_empty_is_cancel():
    assert prompt_directory(lambda _p: "")() is None
