from __future__ import annotations

import logging
import math
import re
import warnings
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pandas as pd

from ..models.cells import DateValue, Empty, Number, Text, render, to_cell
from ..models.diagnostic import Diagnostic, DiagnosticKind
from .fields import DateFallback

"""Field normalizers: date, number, string.

Each normalizer is total. Malformed input never raises: it becomes None
("absent"), or today's date for date fields whose fallback is TODAY, and a
PARSE_FALLBACK diagnostic is appended to the caller's list. Without a list the
event is logged as a warning instead.
"""

__all__ = [
    "normalize_date",
    "normalize_number",
    "normalize_string",
    "day_count_to_date",
    "round_half_up",
    "parse_french_date",
    "parse_year_first_date",
]

logger = logging.getLogger(__name__)

# DD/MM/YYYY, DD-MM-YY, D/M/YYYY ... (day first)
FRENCH_DATE_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})$")

# YYYY-MM-DD, YYYY/MM/DD, YYYY.MM.DD with an optional time part (year first)
YEAR_FIRST_DATE_RE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})(?:[T ]\S.*)?$")

# Spreadsheet serial dates count days from 1899-12-30
SERIAL_ORIGIN = date(1899, 12, 30)
MAX_SERIAL = (date.max - SERIAL_ORIGIN).days

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
_WHITESPACE_RE = re.compile(r"\s+")  # includes NBSP / narrow NBSP used by French number formats


def _today() -> date:
    return datetime.now(UTC).date()


def _report(
    diagnostics: list[Diagnostic] | None,
    field: str | None,
    cause: str,
    raw: str | None,
) -> None:
    if diagnostics is None:
        # no sink to hand the event to: log it where it can be seen
        logger.warning("PARSE_FALLBACK field=%s raw=%r cause=%s", field, raw, cause)
        return
    logger.debug("PARSE_FALLBACK field=%s raw=%r cause=%s", field, raw, cause)
    diagnostics.append(Diagnostic.create(DiagnosticKind.PARSE_FALLBACK, cause, field=field, raw_value=raw))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    whole = math.floor(value)
    # value - whole is exact, value + 0.5 can round up (0.49999999999999994)
    return whole + 1 if value - whole >= 0.5 else whole


def day_count_to_date(count: float) -> date | None:
    """Spreadsheet day count (serial date) -> date, None when out of range.

    The fractional part (time of day) is dropped.
    """
    if not math.isfinite(count):
        return None
    days = math.floor(count)
    if days < 1 or days > MAX_SERIAL:
        return None
    return SERIAL_ORIGIN + timedelta(days=days)


def parse_french_date(text: str) -> date | None:
    """Parse day-first DD/MM/YYYY or DD-MM-YY; None if the text does not match.

    Raises ValueError when the text matches but is not a calendar date (31/02/2024).
    Two-digit years pivot at 50: 25 -> 2025, 95 -> 1995.
    """
    match = FRENCH_DATE_RE.match(text)
    if match is None:
        return None
    day, month, year = (int(g) for g in match.groups())
    if len(match.group(3)) == 2:
        year += 2000 if year < 50 else 1900
    return date(year, month, day)


def parse_year_first_date(text: str) -> date | None:
    """Parse YYYY-MM-DD (also / or . separated, time part ignored); None if the text does not match.

    Raises ValueError when the text matches but is not a calendar date.
    """
    match = YEAR_FIRST_DATE_RE.match(text)
    if match is None:
        return None
    year, month, day = (int(g) for g in match.groups())
    return date(year, month, day)


def _general_parse(text: str) -> date | None:
    # only reached once the year-first forms are ruled out
    with warnings.catch_warnings():
        # pandas warns when it has to guess the format element by element
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce", dayfirst=True)
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def normalize_date(
    value: Any,
    *,
    field: str | None = None,
    fallback: DateFallback = DateFallback.TODAY,
    today: date | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> date | None:
    """Normalize a date cell to a calendar date.

    - empty -> None (the row mapper applies required-field defaults)
    - native date/datetime -> its calendar day
    - number -> spreadsheet serial day count
    - text -> French day-first form, then year-first (ISO) form, then a
      day-first general parse (dates with a time part, dotted dates)
    Anything else falls back per ``fallback``: TODAY (default) or ABSENT.
    """
    cell = to_cell(value)
    if isinstance(cell, Empty):
        return None
    if isinstance(cell, DateValue):
        v = cell.value
        return v.date() if isinstance(v, datetime) else v

    raw = render(cell)
    result: date | None = None
    cause = "unrecognized date value"
    if isinstance(cell, Number):
        result = day_count_to_date(cell.value)
        cause = "serial day count out of range"
    elif isinstance(cell, Text):
        text = cell.value.strip()
        try:
            result = parse_french_date(text)
            if result is None:
                result = parse_year_first_date(text)
        except ValueError as e:
            cause = f"invalid calendar date: {e}"
        else:
            if result is None:
                result = _general_parse(text)
                cause = "unparsable date text"

    if result is not None:
        return result
    if fallback is DateFallback.TODAY:
        _report(diagnostics, field, f"{cause}; using processing date", raw)
        return today if today is not None else _today()
    _report(diagnostics, field, f"{cause}; field left absent", raw)
    return None


def _clean_number_text(text: str) -> str:
    s = _WHITESPACE_RE.sub("", text)
    has_comma = "," in s
    has_dot = "." in s
    if has_comma and has_dot:
        # the last separator is the decimal mark: 1,234.56 / 1.234,56
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if has_comma:
        head, _, tail = s.rpartition(",")
        if s.count(",") > 1 or (len(tail) == 3 and head.lstrip("+-") != ""):
            return s.replace(",", "")  # 1,234 / 12,345,678
        return s.replace(",", ".")  # 1234,56
    if s.count(".") > 1:
        return s.replace(".", "")  # 1.234.567
    return s


def normalize_number(
    value: Any,
    *,
    field: str | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> int | None:
    """Normalize a numeric cell to a rounded integer.

    >>> normalize_number("1 234,56")
    1235
    >>> normalize_number("abc") is None
    True
    """
    cell = to_cell(value)
    if isinstance(cell, Empty):
        return None
    if isinstance(cell, Number):
        return round_half_up(cell.value)
    if isinstance(cell, Text):
        cleaned = _clean_number_text(cell.value)
        if _NUMERIC_RE.match(cleaned):
            number = float(cleaned)
            if math.isfinite(number):
                return round_half_up(number)
    _report(diagnostics, field, "unparsable number; field left absent", render(cell))
    return None


def normalize_string(value: Any) -> str | None:
    """Render a cell as trimmed text; None when empty."""
    rendered = render(to_cell(value))
    if rendered is None:
        return None
    text = rendered.strip()
    return text or None
