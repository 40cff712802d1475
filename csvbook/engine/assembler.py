from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import PurePath
from typing import Any

from ..models.config_models import ExclusionRules, NumericPolicy
from ..models.table import Cell, ConversionUnit, Row, Table
from .classifier import classify_columns
from .normalizer import normalize_rows
from .splitter import split_row

"""Table assembler: drive one file from raw bytes to a ConversionUnit.

Steps:
1. Decode bytes (UTF-8 by default, a leading BOM is dropped)
2. Split into lines on any line ending, drop blank lines
3. Split + lex every line (row 0 is the header)
4. Normalize every row to the header width
5. Classify columns on the normalized shape
6. Derive the sheet name from the file name

An empty file is a no-op (None, INFO notice). A decode failure raises
DecodeError so the caller can fail that one file and move on.

`regenerate` is the second entry point: it takes a grid that is already typed
(values read back from a workbook session), skips lexing and splitting, and
reuses the format map of the unit it came from.
"""

__all__ = [
    "ConversionError",
    "DecodeError",
    "EmptyInputError",
    "SHEET_NAME_LIMIT",
    "decode_text",
    "split_lines",
    "derive_sheet_name",
    "build_table",
    "assemble",
    "regenerate",
]

logger = logging.getLogger(__name__)

SHEET_NAME_LIMIT = 31
INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ConversionError(Exception):
    """Base class for per-file conversion failures."""


class DecodeError(ConversionError):
    """Raised when file bytes cannot be decoded as text."""


class EmptyInputError(ConversionError):
    """Raised when a file has no non-blank lines."""


def decode_text(data: bytes, encoding: str = "utf-8") -> str:
    codec = "utf-8-sig" if encoding.lower().replace("_", "-") in ("utf-8", "utf8") else encoding
    try:
        return data.decode(codec)
    except (UnicodeDecodeError, LookupError) as e:
        raise DecodeError(f"cannot decode as {encoding}: {e}") from e


def split_lines(text: str) -> list[str]:
    """Split text into non-blank lines, accepting \\n, \\r\\n and \\r endings."""
    # only CR/LF end a line; form feeds or U+2028 stay inside their cell
    lines = [line for line in LINE_BREAK.split(text) if line.strip()]
    if not lines:
        raise EmptyInputError("no non-blank lines")
    return lines


def derive_sheet_name(file_name: str) -> str:
    """Sheet name from a file name: basename, no extension, max 31 chars.

    Characters a worksheet title cannot hold are replaced with '_'.
    """
    stem = PurePath(file_name.replace("\\", "/")).stem
    title = INVALID_SHEET_CHARS.sub("_", stem).strip()
    if not title:
        title = "Sheet"
    return title[:SHEET_NAME_LIMIT]


def build_table(typed_rows: Sequence[Sequence[Cell]]) -> Table:
    """Normalize typed rows into a rectangular Table (row 0 is the header)."""
    if not typed_rows:
        raise EmptyInputError("no rows to build a table from")
    header = tuple(typed_rows[0])
    rows = normalize_rows(typed_rows[1:], len(header))
    return Table(header=header, rows=rows)


def assemble(
    data: bytes,
    file_name: str,
    policy: NumericPolicy = NumericPolicy.ALL_NUMBERS,
    exclusions: ExclusionRules | None = None,
    encoding: str = "utf-8",
) -> ConversionUnit | None:
    """Convert one file's bytes into a ConversionUnit.

    Args:
        data: Raw file content
        file_name: Source file name (used for the sheet name)
        policy: Numeric policy shared by lexer and classifier
        exclusions: Header terms that are never number-formatted
        encoding: Text encoding of the file

    Returns:
        ConversionUnit, or None when the file has no content

    Raises:
        DecodeError: If the bytes are not valid text in `encoding`
    """
    if not data:
        logger.info("file=%s empty, nothing to convert", file_name)
        return None
    text = decode_text(data, encoding)
    try:
        lines = split_lines(text)
    except EmptyInputError:
        logger.info("file=%s has no non-blank lines, nothing to convert", file_name)
        return None

    typed_rows = [split_row(line, policy) for line in lines]
    table = build_table(typed_rows)
    numeric_columns = classify_columns(table.header, table.rows, policy, exclusions)
    sheet_name = derive_sheet_name(file_name)
    logger.debug(
        "file=%s sheet=%s columns=%d rows=%d numeric=%s",
        file_name,
        sheet_name,
        table.column_count,
        table.row_count,
        numeric_columns,
    )
    return ConversionUnit(
        file_name=file_name,
        sheet_name=sheet_name,
        table=table,
        numeric_columns=numeric_columns,
    )


def _coerce_value(value: Any) -> Cell:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return value
    return str(value)


def _is_blank_row(row: Row) -> bool:
    return all(c == "" for c in row)


def regenerate(grid: Sequence[Sequence[Any]], unit: ConversionUnit) -> ConversionUnit:
    """Rebuild a unit from edited, already-typed values.

    The format map is carried over from `unit`: columns added by the edit are
    not formatted, columns removed by the edit drop their flag.
    """
    typed = [tuple(_coerce_value(v) for v in row) for row in grid]
    while len(typed) > 1 and _is_blank_row(typed[-1]):
        typed.pop()
    if not typed or not typed[0] or _is_blank_row(typed[0]):
        raise EmptyInputError(f"sheet '{unit.sheet_name}' has no header after edit")
    table = build_table(typed)
    carried = unit.numeric_columns[: table.column_count]
    numeric_columns = carried + (False,) * (table.column_count - len(carried))
    return ConversionUnit(
        file_name=unit.file_name,
        sheet_name=unit.sheet_name,
        table=table,
        numeric_columns=numeric_columns,
    )
