from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ..excel.reader import SheetHeaderError, normalize_sheet, read_excel_file
from ..export.record_writer import RecordWriter
from ..logging.diagnostic_log import DiagnosticLogBuffer
from ..models.config_models import MapperConfig
from ..models.diagnostic import Diagnostic
from ..models.excel_file import ExcelFile, FileStatus
from ..models.processing_result import FileStat, ProcessingResult
from ..models.sheet_process import SheetProcess
from .fields import build_header_index, resolve_columns
from .progress import ProgressTracker
from .row_mapper import RowMapper

"""Batch orchestration: every row of every workbook in the source directory.

1. Scan the source directory for .xlsx files
2. Decode each workbook, map every data row with RowMapper
3. Write records (JSON Lines) and flush diagnostics after each file
4. Aggregate metrics into a ProcessingResult

Row problems are diagnostics and never fail a file. A workbook that cannot be
decoded is counted failed and the run continues with the next one.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal orchestration error (no usable source directory)."""


def scan_excel_files(directory: Path) -> list[Path]:
    """Sorted .xlsx files of a directory (non-recursive, Office lock files skipped)."""
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def map_sheet(
    df: pd.DataFrame,
    sheet_name: str,
    file_name: str,
    mapper: RowMapper,
    config: MapperConfig,
) -> SheetProcess:
    """Map all data rows of one raw sheet, in source order."""
    try:
        sheet = normalize_sheet(
            df,
            sheet_name,
            header_row=config.header_row,
            null_sentinels=config.null_sentinels,
        )
    except SheetHeaderError as e:
        return SheetProcess(sheet_name=sheet_name, error=str(e))

    resolved = resolve_columns(sheet.columns, build_header_index(config.column_aliases))
    claimed = set(resolved.values())
    unmatched = [c for c in sheet.columns if c not in claimed]
    if not resolved:
        return SheetProcess(
            sheet_name=sheet_name,
            unmatched_columns=unmatched,
            error=f"sheet '{sheet_name}' has no collection columns",
        )
    if unmatched:
        logger.debug("file=%s sheet=%s unmatched columns=%s", file_name, sheet_name, unmatched)

    records = []
    diagnostics: list[Diagnostic] = []
    for row in sheet.rows:
        records.append(mapper.map_row(row.values, file_name, row.row_number, diagnostics))
    return SheetProcess(
        sheet_name=sheet_name,
        records=records,
        diagnostics=diagnostics,
        unmatched_columns=unmatched,
    )


def _process_single_file(
    file_path: Path,
    mapper: RowMapper,
    config: MapperConfig,
    writer: RecordWriter,
    diagnostic_log: DiagnosticLogBuffer,
) -> ExcelFile:
    start_time = datetime.now(UTC)
    try:
        raw_sheets = read_excel_file(file_path, target_sheets=config.sheets)
    except Exception as e:  # corrupt / non-xlsx content: file fails, run continues
        logger.error("file=%s could not be read: %s", file_path.name, e)
        logger.debug("file=%s read failure details", file_path.name, exc_info=True)
        return ExcelFile(
            path=file_path,
            name=file_path.name,
            sheets=[],
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=FileStatus.FAILED,
            error=str(e),
        )

    skipped = 0
    if config.sheets is not None:
        skipped = sum(1 for s in config.sheets if s not in raw_sheets)

    sheets: list[SheetProcess] = []
    for sheet_name, df in raw_sheets.items():
        result = map_sheet(df, sheet_name, file_path.name, mapper, config)
        if result.error is not None:
            logger.warning("file=%s sheet skipped: %s", file_path.name, result.error)
            skipped += 1
            continue
        writer.write(result.records)
        diagnostic_log.extend(result.diagnostics)
        sheets.append(result)
        logger.info(
            "file=%s sheet=%s rows=%d diagnostics=%d",
            file_path.name,
            sheet_name,
            result.mapped_rows,
            len(result.diagnostics),
        )

    diagnostic_log.flush()
    return ExcelFile(
        path=file_path,
        name=file_path.name,
        sheets=sheets,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        mapped_rows=sum(s.mapped_rows for s in sheets),
        diagnostics=sum(len(s.diagnostics) for s in sheets),
        skipped_sheets=skipped,
    )


def process_all(config: MapperConfig) -> ProcessingResult:
    """Map every workbook of config.source_directory.

    Raises:
        ProcessingError: the source directory is missing or unreadable
    """
    start_time = datetime.now(UTC)
    file_paths = scan_excel_files(Path(config.source_directory))

    mapper = RowMapper(config.classification_policy, config.column_aliases)
    writer = RecordWriter(Path(config.output_directory))
    diagnostic_log = DiagnosticLogBuffer()

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_rows = 0
    total_diagnostics = 0
    total_skipped = 0

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            result = _process_single_file(file_path, mapper, config, writer, diagnostic_log)

            if result.status is FileStatus.SUCCESS:
                success_count += 1
            else:
                failed_count += 1
            total_rows += result.mapped_rows
            total_diagnostics += result.diagnostics
            total_skipped += result.skipped_sheets
            progress.finish_file(rows=total_rows, diagnostics=total_diagnostics)

            elapsed = (result.end_time - result.start_time).total_seconds() if result.end_time else 0.0
            file_stats.append(
                FileStat(
                    file_name=result.name,
                    status=result.status.value,
                    mapped_rows=result.mapped_rows,
                    diagnostics=result.diagnostics,
                    elapsed_seconds=elapsed,
                )
            )

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput = total_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    records_path = writer.file_path if writer.written else None
    diagnostics_path = diagnostic_log.file_path if diagnostic_log.total else None
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_mapped_rows=total_rows,
        total_diagnostics=total_diagnostics,
        skipped_sheets=total_skipped,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput,
        file_stats=file_stats,
        records_path=str(records_path) if records_path else None,
        diagnostics_path=str(diagnostics_path) if diagnostics_path else None,
    )
