from __future__ import annotations

import re

from ..models.config_models import NumericPolicy
from ..models.table import Cell
from .lexer import lex_cell

"""Row splitter: one non-empty line -> raw fragments -> typed cells.

Steps, in order:
1. Unquote quoted decimal numbers ("1,50" -> 1.50) so their comma is not
   taken for a separator
2. Pick the separator for this line: ';' if present, else ','
3. Split on it
4. Lex each fragment

The separator is chosen per line, so files mixing ';' and ',' lines are
accepted line by line.
"""

__all__ = [
    "QUOTED_DECIMAL",
    "substitute_quoted_decimals",
    "choose_separator",
    "split_raw",
    "split_row",
]

QUOTED_DECIMAL = re.compile(r'"(\d+),(\d+)"')


def substitute_quoted_decimals(line: str) -> str:
    return QUOTED_DECIMAL.sub(r"\1.\2", line)


def choose_separator(line: str) -> str:
    return ";" if ";" in line else ","


def split_raw(line: str) -> list[str]:
    """Split one line into raw text fragments (no typing)."""
    prepared = substitute_quoted_decimals(line)
    return prepared.split(choose_separator(prepared))


def split_row(line: str, policy: NumericPolicy = NumericPolicy.ALL_NUMBERS) -> list[Cell]:
    return [lex_cell(fragment, policy) for fragment in split_raw(line)]
