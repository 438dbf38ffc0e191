from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

"""Classification result of the ambiguous "No.CHq /Bd" column.

Upstream producers reuse a single spreadsheet column for the cheque number of
cheque collections and for the due date of promissory notes (effets).
"""

__all__ = [
    "CollectionKind",
    "ClassificationPolicy",
    "ClassificationResult",
]


class CollectionKind(Enum):
    EFFET = "EFFET"
    CHEQUE = "CHEQUE"
    UNKNOWN = "UNKNOWN"


class ClassificationPolicy(Enum):
    """Meaning of a bare number in the No.CHq /Bd column.

    - CHEQUE_NUMBER: a number (or digit string) is a cheque number
    - DAY_COUNT: a number is a spreadsheet day count, i.e. an effet due date
    """
    CHEQUE_NUMBER = "cheque_number"
    DAY_COUNT = "day_count"


@dataclass(frozen=True)
class ClassificationResult:
    kind: CollectionKind
    due_date: date | None = None
    cheque_number: str | None = None
    raw_value: str | None = None  # kept whatever the kind, for audit

    def __post_init__(self) -> None:
        if (self.due_date is not None) != (self.kind is CollectionKind.EFFET):
            raise ValueError(f"due_date must be set iff kind is EFFET (kind={self.kind.value})")
        if (self.cheque_number is not None) != (self.kind is CollectionKind.CHEQUE):
            raise ValueError(f"cheque_number must be set iff kind is CHEQUE (kind={self.kind.value})")
