from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..logging.init import log_summary, set_level, setup_logging
from ..services.orchestrator import ProcessingError, process_all
from ..services.summary import render_summary_line

"""CLI entrypoint: python -m collection_mapper.cli

Flow:
- Load .env (COLLECTION_MAPPER_CONFIG, COLLECTION_CLASSIFICATION_POLICY)
- Load and validate the config
- Map every workbook of the source directory
- Print the SUMMARY line and exit with 0 (all files mapped), 2 (some file
  failed) or 1 (fatal: config or source directory)
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

CONFIG_ENV_VAR = "COLLECTION_MAPPER_CONFIG"


def _load_env_file(path: Path) -> None:
    """Load .env without overriding variables already set in the process."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Bank collection spreadsheet -> normalized records")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default {DEFAULT_CONFIG_PATH})")
    p.add_argument(
        "--policy",
        choices=["cheque_number", "day_count"],
        default=None,
        help="Meaning of a bare number in No.CHq /Bd (overrides config and environment)",
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers and first rows, then exit")
    return p.parse_args(argv)


def _inspect_data(cfg) -> int:
    from ..excel.reader import normalize_sheet, read_excel_file
    from ..services.fields import build_header_index, resolve_columns
    from ..services.orchestrator import scan_excel_files

    header_index = build_header_index(cfg.column_aliases)
    for f in scan_excel_files(Path(cfg.source_directory)):
        print(f"FILE: {f.name}")
        try:
            raw = read_excel_file(f, target_sheets=cfg.sheets)
        except Exception as e:  # pragma: no cover
            print(f"  read_error: {e}")
            continue
        for sname, df in raw.items():
            try:
                sd = normalize_sheet(df, sname, header_row=cfg.header_row, null_sentinels=cfg.null_sentinels)
            except Exception as e:  # pragma: no cover
                print(f"  SHEET: {sname} error={e}")
                continue
            resolved = resolve_columns(sd.columns, header_index)
            print(f"  SHEET: {sname} cols={sd.columns}")
            print(f"    fields={resolved}")
            for row in sd.rows[:3]:
                safe = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.values.items()}
                print(f"    row {row.row_number}: {safe}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_level(logging.DEBUG)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    config_path = args.config or Path(os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    try:
        cfg = load_config(config_path, policy_override=args.policy)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    logger.info(f"Mapping files from: {directory} policy={cfg.classification_policy.value}")

    try:
        if args.inspect_data:
            return _inspect_data(cfg)
        result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.records_path:
        logger.info(f"records written to {result.records_path}")
    if result.diagnostics_path:
        logger.info(f"diagnostics written to {result.diagnostics_path}")

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
