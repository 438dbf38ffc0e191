from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from numbers import Integral
from typing import Any

from ..models.cells import EMPTY
from ..models.classification import ClassificationPolicy, CollectionKind
from ..models.collection_record import (
    TYPE_STATUS_PENDING,
    UNKNOWN_CLIENT,
    UNKNOWN_FILE,
    CollectionRecord,
)
from ..models.diagnostic import Diagnostic, DiagnosticKind
from .classifier import classify
from .fields import (
    CLASSIFICATION_FIELD,
    FIELD_SPECS,
    FieldKind,
    build_header_index,
    resolve_columns,
)
from .normalizers import normalize_date, normalize_number, normalize_string

"""Row mapper: one raw row -> one CollectionRecord.

map_row always returns a record. Whatever goes wrong in a row (unparsable
cells, an unresolvable No.CHq /Bd value, missing provenance) is recorded as a
Diagnostic, logged at WARN and appended to the caller's list; processing of
the row and of the batch continues.
"""

__all__ = [
    "RowMapper",
    "map_row",
]

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RowMapper:
    """Stateless mapper configured with a classification policy.

    The header index is built once at construction and never mutated, so one
    instance can be shared between threads.
    """

    def __init__(
        self,
        policy: ClassificationPolicy,
        aliases: Mapping[str, Iterable[str]] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.policy = policy
        self._header_index = build_header_index(aliases)
        self._clock = clock or _utc_now

    def map_row(
        self,
        row: Mapping[str, Any] | None,
        source_file_name: str | None = None,
        source_row_index: int | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ) -> CollectionRecord:
        processed_at = self._clock()
        today = processed_at.date()
        row = row if isinstance(row, Mapping) else {}
        events: list[Diagnostic] = []

        columns = resolve_columns(row.keys(), self._header_index)

        def cell(field_name: str) -> Any:
            col = columns.get(field_name)
            return row[col] if col is not None else EMPTY

        # 1. ambiguous column
        classification = classify(cell(CLASSIFICATION_FIELD), self.policy, events)

        # 2. every other known column
        values: dict[str, Any] = {}
        for spec in FIELD_SPECS.values():
            if spec.kind is FieldKind.CLASSIFICATION:
                continue
            raw = cell(spec.name)
            if spec.kind is FieldKind.DATE:
                value = normalize_date(
                    raw, field=spec.name, fallback=spec.date_fallback, today=today, diagnostics=events
                )
            elif spec.kind is FieldKind.NUMBER:
                value = normalize_number(raw, field=spec.name, diagnostics=events)
            else:
                value = normalize_string(raw)
            if value is not None:
                values[spec.name] = value

        # 3. required-field defaults
        values.setdefault("report_date", today)
        values.setdefault("client_code", UNKNOWN_CLIENT)
        values.setdefault("collection_amount", 0)

        # 4. conditional fields
        kind = classification.kind
        if kind is CollectionKind.EFFET:
            values["effet_due_date"] = classification.due_date
            values["effet_status"] = TYPE_STATUS_PENDING
        elif kind is CollectionKind.CHEQUE:
            values["cheque_number"] = classification.cheque_number
            values["cheque_status"] = TYPE_STATUS_PENDING

        # 5. provenance
        file_name, row_index = self._provenance(source_file_name, source_row_index, events)

        # 6. stamp, log and hand over diagnostics
        client_code = values["client_code"]
        for event in events:
            stamped = event.with_provenance(client_code, file_name, row_index)
            logger.warning(
                "%s client=%s file=%s row=%d field=%s raw=%r: %s",
                stamped.kind.value,
                client_code,
                file_name,
                row_index,
                stamped.field,
                stamped.raw_value,
                stamped.cause,
            )
            if diagnostics is not None:
                diagnostics.append(stamped)

        # 7. status / processing_status keep their initial values from CollectionRecord
        return CollectionRecord(
            collection_type=kind,
            source_file_name=file_name,
            source_row_index=row_index,
            processed_at=processed_at,
            **values,
        )

    @staticmethod
    def _provenance(
        source_file_name: Any,
        source_row_index: Any,
        events: list[Diagnostic],
    ) -> tuple[str, int]:
        file_name = source_file_name.strip() if isinstance(source_file_name, str) else ""
        if not file_name:
            file_name = UNKNOWN_FILE
            events.append(
                Diagnostic.create(
                    DiagnosticKind.MISSING_PROVENANCE,
                    f"source file name missing; defaulted to {UNKNOWN_FILE}",
                    field="source_file_name",
                )
            )
        if isinstance(source_row_index, Integral) and not isinstance(source_row_index, bool):
            row_index = int(source_row_index)
        else:
            row_index = 0
            events.append(
                Diagnostic.create(
                    DiagnosticKind.MISSING_PROVENANCE,
                    "source row index missing; defaulted to 0",
                    field="source_row_index",
                    raw_value=None if source_row_index is None else str(source_row_index),
                )
            )
        return file_name, row_index


def map_row(
    row: Mapping[str, Any] | None,
    source_file_name: str | None = None,
    source_row_index: int | None = None,
    *,
    policy: ClassificationPolicy,
    aliases: Mapping[str, Iterable[str]] | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> CollectionRecord:
    """One-off mapping without keeping a RowMapper around."""
    return RowMapper(policy, aliases).map_row(row, source_file_name, source_row_index, diagnostics)
