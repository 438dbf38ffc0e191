from __future__ import annotations

import json
import re

from collection_mapper.models.classification import ClassificationPolicy
from collection_mapper.services.row_mapper import RowMapper

"""Contract: every diagnostic log entry carries the same key set.

Keys: timestamp, kind, field, cause, raw_value, client_code, source_file,
source_row_index. Absent values are JSON null, never missing keys.
"""

EXPECTED_KEYS = {
    "timestamp",
    "kind",
    "field",
    "cause",
    "raw_value",
    "client_code",
    "source_file",
    "source_row_index",
}
TS_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def test_diagnostic_json_key_set():
    diagnostics = []
    RowMapper(ClassificationPolicy.CHEQUE_NUMBER).map_row(
        {"Montant": "abc", "No.CHq /Bd": "???"}, None, None, diagnostics
    )
    kinds = {d.kind.value for d in diagnostics}
    assert kinds == {"PARSE_FALLBACK", "AMBIGUOUS_CLASSIFICATION", "MISSING_PROVENANCE"}

    for d in diagnostics:
        entry = json.loads(d.to_json_line())
        assert set(entry) == EXPECTED_KEYS
        assert TS_RE.match(entry["timestamp"])
        assert entry["client_code"] == "UNKNOWN"
        assert entry["source_file"] == "UNKNOWN_FILE"
        assert entry["source_row_index"] == 0
        assert isinstance(entry["cause"], str) and entry["cause"]
