from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any

from ..models.cells import DateValue, Empty, Number, Text, render, to_cell
from ..models.classification import ClassificationPolicy, ClassificationResult, CollectionKind
from ..models.diagnostic import Diagnostic, DiagnosticKind
from .normalizers import day_count_to_date, parse_french_date

"""Type classifier for the No.CHq /Bd column.

The column holds a cheque number for cheque collections and a due date for
effets. Nothing but the value tells them apart, so the decision is purely
value driven, first match wins:

1. empty                      -> UNKNOWN (no raw value)
2. date-shaped                -> EFFET, due date parsed
3. number-shaped              -> CHEQUE (CHEQUE_NUMBER policy)
                                 or EFFET from a day count (DAY_COUNT policy)
4. anything else              -> UNKNOWN, raw value kept, diagnostic emitted
"""

__all__ = [
    "classify",
    "normalize_classification",
    "TypeClassifier",
]

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?$")
_FRENCH_FULL_YEAR_RE = re.compile(r"^\d{2}([/-])\d{2}\1\d{4}$")
_DIGITS_RE = re.compile(r"^[0-9]+$")


def _date_from_text(text: str) -> date | None:
    """Parse a date-shaped text; None if not date-shaped or not a calendar date."""
    iso = _ISO_DATE_RE.match(text)
    if iso is not None:
        try:
            return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
        except ValueError:
            return None
    if _FRENCH_FULL_YEAR_RE.match(text):
        try:
            return parse_french_date(text)
        except ValueError:
            return None
    return None


def _ambiguous(
    raw: str | None,
    cause: str,
    diagnostics: list[Diagnostic] | None,
) -> ClassificationResult:
    if diagnostics is None:
        logger.warning("AMBIGUOUS_CLASSIFICATION raw=%r cause=%s", raw, cause)
    else:
        logger.debug("AMBIGUOUS_CLASSIFICATION raw=%r cause=%s", raw, cause)
        diagnostics.append(
            Diagnostic.create(
                DiagnosticKind.AMBIGUOUS_CLASSIFICATION,
                cause,
                field="collection_type",
                raw_value=raw,
            )
        )
    return ClassificationResult(kind=CollectionKind.UNKNOWN, raw_value=raw)


def classify(
    value: Any,
    policy: ClassificationPolicy,
    diagnostics: list[Diagnostic] | None = None,
) -> ClassificationResult:
    """Classify a No.CHq /Bd cell as EFFET, CHEQUE or UNKNOWN. Never raises."""
    cell = to_cell(value)
    if isinstance(cell, Empty):
        return ClassificationResult(kind=CollectionKind.UNKNOWN)

    raw = render(cell)

    if isinstance(cell, DateValue):
        v = cell.value
        due = v.date() if isinstance(v, datetime) else v
        return ClassificationResult(kind=CollectionKind.EFFET, due_date=due, raw_value=raw)

    text = cell.value.strip() if isinstance(cell, Text) else None
    if text is not None:
        due = _date_from_text(text)
        if due is not None:
            return ClassificationResult(kind=CollectionKind.EFFET, due_date=due, raw_value=raw)

    number_shaped = isinstance(cell, Number) or (text is not None and _DIGITS_RE.match(text) is not None)
    if not number_shaped:
        return _ambiguous(raw, "value is neither a due date nor a cheque number", diagnostics)

    if policy is ClassificationPolicy.DAY_COUNT:
        count = cell.value if isinstance(cell, Number) else float(text)
        due = day_count_to_date(count)
        if due is None:
            return _ambiguous(raw, f"day count {raw} is outside the date range", diagnostics)
        return ClassificationResult(kind=CollectionKind.EFFET, due_date=due, raw_value=raw)

    # digit strings keep their leading zeros
    cheque_number = text if text is not None else raw
    return ClassificationResult(kind=CollectionKind.CHEQUE, cheque_number=cheque_number, raw_value=raw)


def normalize_classification(
    value: Any,
    policy: ClassificationPolicy,
    diagnostics: list[Diagnostic] | None = None,
) -> ClassificationResult:
    """Normalizer for the classification field kind; same as classify()."""
    return classify(value, policy, diagnostics)


class TypeClassifier:
    """classify() bound to a policy. Holds no other state."""

    def __init__(self, policy: ClassificationPolicy) -> None:
        self.policy = policy

    def __call__(self, value: Any, diagnostics: list[Diagnostic] | None = None) -> ClassificationResult:
        return classify(value, self.policy, diagnostics)
