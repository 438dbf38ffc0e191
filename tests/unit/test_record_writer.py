from __future__ import annotations

import json
from pathlib import Path

from collection_mapper.export.record_writer import RecordWriter
from collection_mapper.models.classification import ClassificationPolicy
from collection_mapper.services.row_mapper import RowMapper


def test_write_appends_json_lines(tmp_path: Path, fixed_clock):
    mapper = RowMapper(ClassificationPolicy.CHEQUE_NUMBER, clock=fixed_clock)
    writer = RecordWriter(tmp_path / "out")

    assert writer.write([]) == 0
    assert not (tmp_path / "out").exists()

    assert writer.write([mapper.map_row({"Code client": "C1", "No.CHq /Bd": 42}, "f.xlsx", 2)]) == 1
    assert writer.write([mapper.map_row({"Code client": "C2"}, "f.xlsx", 3)]) == 1
    assert writer.written == 2

    path = writer.file_path
    assert path.name.startswith("collections-") and path.suffix == ".jsonl"
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [r["client_code"] for r in lines] == ["C1", "C2"]
    assert lines[0]["cheque_number"] == "42"
    assert "cheque_number" not in lines[1]
