from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.row_data import RowData

"""Spreadsheet decoder (thin glue in front of the row mapper).

Sheets are read raw (header=None) so that the header row can be chosen by
config and every data row keeps its physical row number. Cells keep their
decoded type: pandas/openpyxl already hand over datetimes for date-formatted
cells and floats for numbers, which is what the classifier needs.
"""

__all__ = [
    "SheetHeaderError",
    "SheetData",
    "read_excel_file",
    "normalize_sheet",
]

logger = logging.getLogger(__name__)


class SheetHeaderError(Exception):
    """Raised when the configured header row is missing."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RowData]


def read_excel_file(path: Path, target_sheets: Iterable[str] | None = None) -> dict[str, pd.DataFrame]:
    """Read a workbook returning raw DataFrames keyed by sheet name.

    Parameters
    ----------
    path: workbook path
    target_sheets: sheet names to keep (None = all sheets)
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    dfs: dict[str, pd.DataFrame] = {}
    with pd.ExcelFile(path) as xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            # only blank cells are NaN; "NA", "N/A"... stay text until null_sentinels decide
            dfs[str(name)] = xls.parse(name, header=None, keep_default_na=False, na_values=[""])
    return dfs


def normalize_sheet(
    df: pd.DataFrame,
    sheet_name: str,
    header_row: int = 1,
    null_sentinels: set[str] | None = None,
) -> SheetData:
    """Split a raw DataFrame into header and data rows.

    Steps:
    1. Validate the header row (1-based) exists
    2. Headers are stripped strings; unnamed columns become "col_<n>",
       repeated names get a ".<k>" suffix (Montant, Montant.1) and a WARN
    3. Fully empty rows are skipped; NaN and null sentinel strings become None
    """
    header_idx = header_row - 1
    if df.shape[0] <= header_idx:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header at row {header_row}")

    columns: list[str] = []
    seen: dict[str, int] = {}
    for pos, h in enumerate(df.iloc[header_idx].tolist()):
        name = ("" if pd.isna(h) else str(h).strip()) or f"col_{pos + 1}"
        if name in seen:
            seen[name] += 1
            unique = f"{name}.{seen[name]}"
            while unique in seen:
                seen[name] += 1
                unique = f"{name}.{seen[name]}"
            logger.warning("sheet '%s': duplicate header '%s' in column %d renamed to '%s'",
                           sheet_name, name, pos + 1, unique)
            name = unique
        seen[name] = 0
        columns.append(name)

    rows: list[RowData] = []
    for idx in range(header_idx + 1, df.shape[0]):
        raw = df.iloc[idx]
        if raw.isna().all():
            continue
        values: dict[str, Any] = {}
        for col, val in zip(columns, raw.tolist(), strict=False):
            if pd.isna(val):
                values[col] = None
            elif isinstance(val, str) and null_sentinels and val.strip().upper() in null_sentinels:
                values[col] = None
            else:
                values[col] = val
        rows.append(RowData(row_number=idx + 1, values=values, sheet_name=sheet_name))

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)
