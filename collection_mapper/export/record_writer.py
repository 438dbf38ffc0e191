from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.collection_record import CollectionRecord

"""Record export for the downstream reconciliation layer.

Mapped records are appended as JSON Lines to one
`<output_directory>/collections-YYYYMMDD-HHMMSS.jsonl` file per run (UTC
stamp). Absent fields are not written (see CollectionRecord.to_dict).
"""

__all__ = [
    "RecordWriter",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class RecordWriter:
    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir
        self._file_path: Path | None = None
        self.written = 0

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._output_dir / f"collections-{stamp}.jsonl"
        return self._file_path

    def write(self, records: Iterable[CollectionRecord]) -> int:
        """Append records; returns how many were written by this call."""
        batch = list(records)
        if not batch:
            return 0
        with self.file_path.open("a", encoding="utf-8") as f:
            for r in batch:
                f.write(r.to_json_line() + "\n")
        self.written += len(batch)
        return len(batch)
