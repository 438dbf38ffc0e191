from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models: per-file statistics and the run summary."""


@dataclass(frozen=True)
class FileStat:
    """Per-file mapping statistics."""
    file_name: str
    status: str  # success/failed
    mapped_rows: int
    diagnostics: int  # diagnostics emitted while mapping this file
    elapsed_seconds: float


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one run, rendered as the SUMMARY line."""
    success_files: int
    failed_files: int
    total_mapped_rows: int
    total_diagnostics: int
    skipped_sheets: int  # configured sheets missing from a workbook
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float  # total_mapped_rows / elapsed
    file_stats: list[FileStat] | None = None
    records_path: str | None = None  # collections-*.jsonl, None if nothing was written
    diagnostics_path: str | None = None  # diagnostics-*.log, None if nothing was written
