from __future__ import annotations

import json
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any

from .classification import CollectionKind

"""CollectionRecord: the normalized output entity, one per source row.

Records are frozen once built by the row mapper and handed to the persistence
or reconciliation layer. Optional and conditional fields that were not
provided are absent: they stay None on the dataclass and are left out of
to_dict() / to_json_line() entirely.
"""

__all__ = [
    "CollectionRecord",
    "UNKNOWN_CLIENT",
    "UNKNOWN_FILE",
    "STATUS_PENDING",
    "PROCESSING_STATUS_NEW",
    "TYPE_STATUS_PENDING",
]

UNKNOWN_CLIENT = "UNKNOWN"
UNKNOWN_FILE = "UNKNOWN_FILE"
STATUS_PENDING = "pending"
PROCESSING_STATUS_NEW = "NEW"
TYPE_STATUS_PENDING = "PENDING"  # effet_status / cheque_status

# Always serialized, even when None would never happen in practice
_ALWAYS_PRESENT = frozenset({
    "report_date",
    "client_code",
    "collection_amount",
    "status",
    "collection_type",
    "processing_status",
    "source_file_name",
    "source_row_index",
    "processed_at",
})


@dataclass(frozen=True)
class CollectionRecord:
    """Normalized bank collection record (cheque or effet)."""
    # Required
    report_date: date
    client_code: str
    collection_amount: int
    collection_type: CollectionKind
    # Provenance
    source_file_name: str
    source_row_index: int
    processed_at: datetime
    status: str = STATUS_PENDING
    processing_status: str = PROCESSING_STATUS_NEW
    # Conditional on collection_type
    effet_due_date: date | None = None
    effet_status: str | None = None
    cheque_number: str | None = None
    cheque_status: str | None = None
    # Optional
    bank_name: str | None = None
    facture_number: str | None = None
    deposit_reference: str | None = None
    day_count: int | None = None
    rate: int | None = None
    interest: int | None = None
    commission: int | None = None
    tax_on_transaction: int | None = None
    discount_fees: int | None = None
    bank_commission: int | None = None
    reference_number: str | None = None
    debit_note_amount: int | None = None
    income: int | None = None
    impaye_date: date | None = None
    settlement_remark: str | None = None
    remark: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain dict with absent fields omitted and dates as ISO strings."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.name not in _ALWAYS_PRESENT:
                continue
            if isinstance(value, CollectionKind):
                value = value.value
            elif isinstance(value, (date, datetime)):
                value = value.isoformat()
            out[f.name] = value
        return out

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
