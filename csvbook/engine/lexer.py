from __future__ import annotations

import re

from ..models.config_models import NumericPolicy
from ..models.table import Cell

"""Cell lexer: one raw text fragment -> one typed cell.

Decimal commas are read as decimal points ("1,5" -> 1.5). Which strings count
as numbers depends on the NumericPolicy of the run:

- ALL_NUMBERS: any fully numeric literal (integers, decimals, exponents)
- DECIMALS_ONLY: only "<digits>.<digits>" forms; integers stay text

Text cells keep the trimmed, quote-stripped original string, commas included.
"""

__all__ = [
    "lex_cell",
    "format_cell",
    "strip_quotes",
]

DECIMAL_PATTERN = re.compile(r"[+-]?\d+\.\d+")
# float() alone would also accept "nan", "inf", "1_000" and surrounding spaces
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def strip_quotes(text: str) -> str:
    """Remove one layer of surrounding double quotes, if present on both ends."""
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def lex_cell(fragment: str, policy: NumericPolicy = NumericPolicy.ALL_NUMBERS) -> Cell:
    text = strip_quotes(fragment.strip())
    candidate = text.replace(",", ".")
    if DECIMAL_PATTERN.fullmatch(candidate):
        return float(candidate)
    if policy is NumericPolicy.ALL_NUMBERS and NUMBER_PATTERN.fullmatch(candidate):
        return float(candidate)
    return text


def format_cell(cell: Cell) -> str:
    """Render a cell back to text (2000.0 -> "2000", 1.5 -> "1.5")."""
    if isinstance(cell, float):
        if cell.is_integer():
            return str(int(cell))
        return repr(cell)
    return cell
