from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from numbers import Integral, Real
from typing import Any, Union

import pandas as pd

"""Raw cell values at the decoder boundary.

A decoded spreadsheet row arrives as a mapping column name -> cell value of
unknown shape. Before classification every cell is tagged as one of
Empty | Text | Number | DateValue | Unknown so that the classifier and the
normalizers branch on the tag instead of probing arbitrary objects.
"""

__all__ = [
    "Empty",
    "Text",
    "Number",
    "DateValue",
    "Unknown",
    "RawValue",
    "RawRow",
    "EMPTY",
    "to_cell",
    "render",
]


@dataclass(frozen=True)
class Empty:
    """Missing cell (None, NaN, NaT or blank text)."""


@dataclass(frozen=True)
class Text:
    value: str  # raw text, untrimmed


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class DateValue:
    value: datetime | date


@dataclass(frozen=True)
class Unknown:
    value: Any


RawValue = Union[Empty, Text, Number, DateValue, Unknown]
RawRow = Mapping[str, Any]

EMPTY = Empty()

_TAGGED = (Empty, Text, Number, DateValue, Unknown)


def to_cell(value: Any) -> RawValue:
    """Tag a decoded cell value.

    Already tagged values are returned unchanged. Booleans are not numbers here:
    a TRUE/FALSE cell carries no amount, date or cheque number.
    """
    if isinstance(value, _TAGGED):
        return value
    if value is None or value is pd.NaT:
        return EMPTY
    if isinstance(value, bool):
        return Unknown(value)
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return EMPTY
        return DateValue(value.to_pydatetime())
    if isinstance(value, (datetime, date)):
        return DateValue(value)
    if isinstance(value, str):
        if value.strip() == "":
            return EMPTY
        return Text(value)
    # Decimal is not registered as a numbers.Real
    if isinstance(value, (Integral, Real, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return Unknown(value)
        if not math.isfinite(number):
            return EMPTY
        return Number(number)
    try:
        # NaT / pd.NA and friends
        if pd.isna(value):
            return EMPTY
    except (TypeError, ValueError):
        pass
    return Unknown(value)


def render(cell: RawValue) -> str | None:
    """String form of a cell, kept on records and diagnostics for traceability."""
    if isinstance(cell, Empty):
        return None
    if isinstance(cell, Text):
        return cell.value
    if isinstance(cell, Number):
        # 123.0 -> "123" so cheque numbers read back the way they were typed
        if cell.value.is_integer():
            return str(int(cell.value))
        return str(cell.value)
    if isinstance(cell, DateValue):
        value = cell.value
        if isinstance(value, datetime) and value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    return str(cell.value)
