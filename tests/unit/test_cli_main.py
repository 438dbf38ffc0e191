from __future__ import annotations

import json
from pathlib import Path

from collection_mapper.cli import main as cli_main


def _records(temp_workdir: Path) -> list[dict]:
    files = sorted((temp_workdir / "output").glob("collections-*.jsonl"))
    assert len(files) == 1
    return [json.loads(line) for line in files[0].read_text(encoding="utf-8").splitlines()]


def test_cli_no_files_success(write_config, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=0/0 success=0 failed=0 rows=0 diagnostics=0 skipped_sheets=0" in out


def test_cli_directory_missing(write_config: Path, capsys):
    text = write_config.read_text(encoding="utf-8").replace("./data", "./missing_dir")
    write_config.write_text(text, encoding="utf-8")
    code = cli_main([])
    assert code == 1
    assert "ERROR directory not found:" in capsys.readouterr().out


def test_cli_invalid_config(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "mapper.yml").write_text("source_directory: ./data\n", encoding="utf-8")
    code = cli_main([])
    assert code == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_cli_config_flag_and_env(temp_workdir: Path, write_config: Path, monkeypatch, capsys):
    other = temp_workdir / "other.yml"
    other.write_text(write_config.read_text(encoding="utf-8"), encoding="utf-8")
    write_config.unlink()

    assert cli_main(["--config", str(other)]) == 0
    monkeypatch.setenv("COLLECTION_MAPPER_CONFIG", str(other))
    assert cli_main([]) == 0
    assert cli_main(["--config", str(temp_workdir / "nope.yml")]) == 1


def test_cli_maps_rows_and_reports_diagnostics(temp_workdir: Path, write_config, workbook_factory, capsys):
    workbook_factory(
        temp_workdir / "data" / "a.xlsx",
        {
            "S": [
                ["Code client", "Montant", "No.CHq /Bd"],
                ["C1", "1 000,50", 7654321],
                ["C2", 250, "pas clair"],
            ]
        },
    )
    code = cli_main([])
    out = capsys.readouterr().out

    assert code == 0
    assert "WARN AMBIGUOUS_CLASSIFICATION client=C2 file=a.xlsx row=3" in out
    assert "SUMMARY files=1/1 success=1 failed=0 rows=2 diagnostics=1 skipped_sheets=0" in out
    records = _records(temp_workdir)
    assert records[0]["collection_type"] == "CHEQUE"
    assert records[0]["cheque_number"] == "7654321"
    assert records[0]["collection_amount"] == 1001


def test_cli_policy_flag_overrides_config(temp_workdir: Path, write_config, workbook_factory, capsys):
    workbook_factory(temp_workdir / "data" / "a.xlsx", {"S": [["Code client", "No.CHq /Bd"], ["C1", 45382]]})
    assert cli_main(["--policy", "day_count"]) == 0
    assert "policy=day_count" in capsys.readouterr().out
    record = _records(temp_workdir)[0]
    assert record["collection_type"] == "EFFET"
    assert record["effet_due_date"] == "2024-03-31"
    assert record["effet_status"] == "PENDING"


def test_cli_policy_from_dotenv(temp_workdir: Path, write_config, monkeypatch, capsys):
    # registered with monkeypatch so the value load_dotenv sets is removed afterwards
    monkeypatch.setenv("COLLECTION_CLASSIFICATION_POLICY", "placeholder")
    monkeypatch.delenv("COLLECTION_CLASSIFICATION_POLICY")
    (temp_workdir / ".env").write_text("COLLECTION_CLASSIFICATION_POLICY=day_count\n", encoding="utf-8")
    assert cli_main([]) == 0
    assert "policy=day_count" in capsys.readouterr().out


def test_cli_partial_failure(temp_workdir: Path, write_config, workbook_factory, capsys):
    workbook_factory(temp_workdir / "data" / "a.xlsx", {"S": [["Code client"], ["C1"]]})
    (temp_workdir / "data" / "b.xlsx").write_bytes(b"broken")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "ERROR file=b.xlsx could not be read" in out
    assert "SUMMARY files=2/2 success=1 failed=1 rows=1" in out


def test_cli_inspect_data(temp_workdir: Path, write_config, workbook_factory, capsys):
    workbook_factory(temp_workdir / "data" / "a.xlsx", {"S": [["Code client", "Montant"], ["C1", 10]]})
    assert cli_main(["--inspect-data"]) == 0
    out = capsys.readouterr().out
    assert "FILE: a.xlsx" in out
    assert "'client_code': 'Code client'" in out
    assert not (temp_workdir / "output").exists()


def test_cli_debug_mode(write_config, capsys):
    assert cli_main(["--debug"]) == 0
    assert "DEBUG debug mode enabled" in capsys.readouterr().out
