from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from datetime import UTC, datetime
from enum import Enum

"""Diagnostic model for non-fatal mapping events.

A Diagnostic is the only way an anomaly leaves the mapping core: parse
fallbacks, unresolved EFFET/CHEQUE classification and missing provenance are
all recorded here and logged, never raised. The JSON Lines form has a fixed
key set so that audit tooling can rely on it.
"""

__all__ = [
    "DiagnosticKind",
    "Diagnostic",
]


class DiagnosticKind(Enum):
    """Classification of a non-fatal mapping event.

    - PARSE_FALLBACK: a field could not be parsed; absent or a default was used
    - AMBIGUOUS_CLASSIFICATION: the No.CHq /Bd value is neither a date nor a cheque number
    - MISSING_PROVENANCE: source file name or row index was missing and defaulted
    """
    PARSE_FALLBACK = "PARSE_FALLBACK"
    AMBIGUOUS_CLASSIFICATION = "AMBIGUOUS_CLASSIFICATION"
    MISSING_PROVENANCE = "MISSING_PROVENANCE"


@dataclass(frozen=True)
class Diagnostic:
    """Structured warning attached to the processing of one row.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        kind: DiagnosticKind of the event
        field: Record field concerned (None for row-level events)
        cause: Human readable cause
        raw_value: String form of the offending cell, if any
        client_code: Client code of the row (stamped by the row mapper)
        source_file: Source file name (stamped by the row mapper)
        source_row_index: Source row index (stamped by the row mapper)
    """
    timestamp: str  # ISO8601 UTC
    kind: DiagnosticKind
    field: str | None
    cause: str
    raw_value: str | None = None
    client_code: str | None = None
    source_file: str | None = None
    source_row_index: int | None = None

    @staticmethod
    def create(
        kind: DiagnosticKind,
        cause: str,
        *,
        field: str | None = None,
        raw_value: str | None = None,
    ) -> Diagnostic:
        """Create a Diagnostic with the current UTC timestamp and no provenance yet."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return Diagnostic(
            timestamp=ts,
            kind=kind,
            field=field,
            cause=cause,
            raw_value=raw_value,
        )

    def with_provenance(self, client_code: str, source_file: str, source_row_index: int) -> Diagnostic:
        return replace(
            self,
            client_code=client_code,
            source_file=source_file,
            source_row_index=source_row_index,
        )

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    def to_json_line(self) -> str:
        """Serialize to one JSON Lines entry (fixed key set)."""
        return json.dumps(self.to_dict(), ensure_ascii=False)
