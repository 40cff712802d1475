from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

"""SourceFile domain model and FileStatus enum.

A SourceFile is one input handed to a conversion run: either a path on disk
or an in-memory buffer (already uploaded bytes). Bytes are read lazily so
that a read failure is isolated to the file being processed.
"""


class FileStatus(Enum):
    """Status of a source file through one conversion run.

    State transitions: pending -> processing -> (converted | skipped | failed)

    - SKIPPED: empty file or no non-blank lines, nothing produced
    - FAILED: decode or sink failure, that file only
    """
    PENDING = "pending"
    PROCESSING = "processing"
    CONVERTED = "converted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceFile:
    name: str
    path: Path | None = None
    data: bytes | None = None

    @classmethod
    def from_path(cls, path: Path) -> SourceFile:
        return cls(name=path.name, path=path)

    def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"source '{self.name}' has neither data nor path")
        return self.path.read_bytes()
