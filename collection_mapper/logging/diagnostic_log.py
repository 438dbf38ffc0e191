from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.diagnostic import Diagnostic

"""Diagnostic log buffering.

- JSON Lines, fixed key set (see Diagnostic.to_json_line)
- One `logs/diagnostics-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- Entries are written ordered by source row index within each flush so that
  audit output is reproducible
"""

__all__ = [
    "Diagnostic",
    "DiagnosticLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def _row_key(d: Diagnostic) -> tuple[str, int]:
    return (d.source_file or "", d.source_row_index if d.source_row_index is not None else 0)


class DiagnosticLogBuffer:
    """In-memory buffer of diagnostics. flush() appends them to the run's log file.

    Serial use only: the orchestrator flushes once per file.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[Diagnostic] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self.total = 0  # every diagnostic ever appended, across flushes

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"diagnostics-{stamp}.log"
        return self._file_path

    def append(self, record: Diagnostic) -> None:
        self._records.append(record)
        self.total += 1

    def extend(self, records: list[Diagnostic]) -> None:
        for r in records:
            self.append(r)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered diagnostics; returns the log path, or None if nothing was ever written."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        # sorted() is stable: events of one row keep their emission order
        ordered = sorted(self._records, key=_row_key)
        with fp.open("a", encoding="utf-8") as f:
            for r in ordered:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
