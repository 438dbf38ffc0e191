from __future__ import annotations

from dataclasses import dataclass, field

from .collection_record import CollectionRecord
from .diagnostic import Diagnostic

"""SheetProcess: mapping outcome of a single sheet."""

__all__ = [
    "SheetProcess",
]


@dataclass(frozen=True)
class SheetProcess:
    """Records and diagnostics produced from one sheet, in source row order."""
    sheet_name: str
    records: list[CollectionRecord] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    unmatched_columns: list[str] = field(default_factory=list)  # headers no field claims
    error: str | None = None  # sheet-level error (bad header)

    @property
    def mapped_rows(self) -> int:
        return len(self.records)
