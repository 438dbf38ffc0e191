from __future__ import annotations

import json
from pathlib import Path

from collection_mapper.logging.diagnostic_log import DiagnosticLogBuffer
from collection_mapper.models.diagnostic import Diagnostic, DiagnosticKind


def _diag(file: str, row: int, cause: str = "c") -> Diagnostic:
    return Diagnostic.create(DiagnosticKind.PARSE_FALLBACK, cause, field="rate").with_provenance(
        "C1", file, row
    )


def test_diagnostic_create_and_provenance():
    d = Diagnostic.create(DiagnosticKind.AMBIGUOUS_CLASSIFICATION, "why", field="collection_type", raw_value="x")
    assert d.timestamp.endswith("Z")
    assert d.client_code is None and d.source_file is None and d.source_row_index is None
    stamped = d.with_provenance("C7", "a.xlsx", 4)
    assert (stamped.client_code, stamped.source_file, stamped.source_row_index) == ("C7", "a.xlsx", 4)
    assert stamped.timestamp == d.timestamp
    assert d.client_code is None  # frozen original untouched


def test_buffer_flush_orders_by_file_and_row(tmp_path: Path):
    buf = DiagnosticLogBuffer(logs_dir=tmp_path)
    buf.append(_diag("b.xlsx", 2))
    buf.append(_diag("a.xlsx", 9, "first"))
    buf.append(_diag("a.xlsx", 3))
    buf.append(_diag("a.xlsx", 9, "second"))
    assert len(buf) == 4

    path = buf.flush()
    assert path is not None
    assert path.parent == tmp_path
    assert path.name.startswith("diagnostics-") and path.suffix == ".log"
    entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [(e["source_file"], e["source_row_index"]) for e in entries] == [
        ("a.xlsx", 3), ("a.xlsx", 9), ("a.xlsx", 9), ("b.xlsx", 2),
    ]
    assert [e["cause"] for e in entries[1:3]] == ["first", "second"]
    assert len(buf) == 0
    assert buf.total == 4


def test_flush_appends_to_same_file(tmp_path: Path):
    buf = DiagnosticLogBuffer(logs_dir=tmp_path)
    buf.append(_diag("a.xlsx", 1))
    first = buf.flush()
    buf.extend([_diag("b.xlsx", 1), _diag("b.xlsx", 2)])
    second = buf.flush()
    assert first == second
    assert len(first.read_text(encoding="utf-8").splitlines()) == 3
    assert buf.total == 3


def test_flush_without_entries_creates_nothing(tmp_path: Path):
    buf = DiagnosticLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()
