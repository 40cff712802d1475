from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Config dataclasses for the CSV -> workbook converter.

NumericPolicy is a single switch that drives both the cell lexer and the
column classifier so that one run never mixes the two numeric rules.
"""


class NumericPolicy(Enum):
    """How numeric-looking text is typed and which columns get number format.

    - ALL_NUMBERS: every fully numeric string becomes a number; a column is
      number-formatted only if all of its data cells are numbers.
    - DECIMALS_ONLY: only decimal-point numbers become numbers (integers stay
      text); a column is number-formatted if any data cell holds a
      non-integer value.
    """
    ALL_NUMBERS = "all_numbers"
    DECIMALS_ONLY = "decimals_only"


class SinkKind(Enum):
    FILE = "file"
    SESSION = "session"


@dataclass(frozen=True)
class ExclusionRules:
    """Header terms that force a column to stay unformatted (identifier columns)."""
    exact: frozenset[str] = frozenset({"matricola"})
    substring: frozenset[str] = frozenset({"nr."})

    def matches(self, header_text: str) -> bool:
        folded = header_text.casefold()
        if folded in self.exact:
            return True
        return any(term in folded for term in self.substring)


@dataclass(frozen=True)
class ConvertConfig:
    """Root configuration object for a conversion run."""
    source_directory: str | None = None  # scanned when no paths are given
    numeric_policy: NumericPolicy = NumericPolicy.ALL_NUMBERS
    exclusions: ExclusionRules = field(default_factory=ExclusionRules)
    sink: SinkKind = SinkKind.FILE
    session_workbook: str = "converted.xlsx"
    export_sheets: bool = True  # session sink: also export each sheet on its own
    output_directory: str | None = None
    encoding: str = "utf-8"
    fail_fast: bool = False
