from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model for decoded spreadsheet rows.

RowData is what the spreadsheet decoder hands to the row mapper: the raw cell
values of one data row keyed by header, plus the physical row number used as
the record's source row index.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """One decoded data row, before any field normalization.

    The row_number is the physical spreadsheet row (1-based, header row included
    in the count), so audit output points at the row a user sees in Excel.
    """
    row_number: int  # physical spreadsheet row number
    values: dict[str, Any]  # header -> raw cell value (None for empty cells)
    sheet_name: str | None = None
