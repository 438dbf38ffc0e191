from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering."""


def _format_seconds_like(value: float) -> str:
    """Integers without decimals, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render the SUMMARY line of a run.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed} rows={rows}
    diagnostics={diagnostics} skipped_sheets={skipped} elapsed_sec={elapsed} throughput_rps={throughput}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 3, 5, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 3, 5, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_mapped_rows=1000, total_diagnostics=3,
        ...     skipped_sheets=0, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=500.0
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 failed=0 rows=1000 diagnostics=3 skipped_sheets=0 elapsed_sec=2 throughput_rps=500'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_mapped_rows} "
        f"diagnostics={result.total_diagnostics} "
        f"skipped_sheets={result.skipped_sheets} "
        f"elapsed_sec={_format_seconds_like(result.elapsed_seconds)} "
        f"throughput_rps={_format_seconds_like(result.throughput_rows_per_sec)}"
    )
