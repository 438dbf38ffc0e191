from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .sheet_process import SheetProcess

"""ExcelFile domain model and FileStatus enum.

The ExcelFile is the processing context of one source workbook, from discovery
to mapped (success) or undecodable (failed). Row-level problems never fail a
file; only a workbook that cannot be read does.
"""


class FileStatus(Enum):
    """Lifecycle: pending -> processing -> (success | failed)."""
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ExcelFile:
    path: Path
    name: str
    sheets: list[SheetProcess]
    start_time: datetime | None = None  # UTC
    end_time: datetime | None = None  # UTC
    status: FileStatus = FileStatus.PENDING
    mapped_rows: int = 0
    diagnostics: int = 0
    skipped_sheets: int = 0  # configured sheets absent from the workbook
    error: str | None = None  # failure reason summary
