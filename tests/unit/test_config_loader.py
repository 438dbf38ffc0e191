from __future__ import annotations

from pathlib import Path

import pytest

from collection_mapper.config.loader import ConfigError, load_config
from collection_mapper.models.classification import ClassificationPolicy


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_directory == "./data"
    assert cfg.output_directory == "./output"
    assert cfg.classification_policy is ClassificationPolicy.CHEQUE_NUMBER
    assert cfg.header_row == 1
    assert cfg.sheets is None
    assert cfg.column_aliases == {"collection_amount": ["Mt encaisse"]}
    assert cfg.null_sentinels == {"N/A", "-"}


def test_defaults_for_optional_keys(temp_workdir: Path):
    p = temp_workdir / "config" / "min.yml"
    p.write_text("source_directory: ./data\nclassification_policy: day_count\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.classification_policy is ClassificationPolicy.DAY_COUNT
    assert cfg.output_directory == "./output"
    assert cfg.column_aliases == {}
    assert cfg.null_sentinels is None


def test_policy_is_mandatory(temp_workdir: Path):
    p = temp_workdir / "config" / "nopolicy.yml"
    p.write_text("source_directory: ./data\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="classification_policy"):
        load_config(p)


def test_invalid_policy_value(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("cheque_number", "guess")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_environment_overrides_policy(write_config: Path, monkeypatch):
    monkeypatch.setenv("COLLECTION_CLASSIFICATION_POLICY", "DAY_COUNT")
    assert load_config(write_config).classification_policy is ClassificationPolicy.DAY_COUNT


def test_explicit_override_beats_environment(write_config: Path, monkeypatch):
    monkeypatch.setenv("COLLECTION_CLASSIFICATION_POLICY", "day_count")
    cfg = load_config(write_config, policy_override="cheque_number")
    assert cfg.classification_policy is ClassificationPolicy.CHEQUE_NUMBER


def test_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "bad.yml"
    p.write_text("source_directory: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


def test_root_must_be_mapping(temp_workdir: Path):
    p = temp_workdir / "config" / "list.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_config(p)


def test_unknown_alias_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("collection_amount:", "amount_typo:")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="unknown fields"):
        load_config(write_config)
