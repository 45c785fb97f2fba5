"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `tests/test_escrutinio_config.py`.
Pruebas de la configuración por entorno y del YAML de reglas.

Componentes detectados:
  - test_load_config_validates_and_loads
  - test_load_config_rejects_missing_storage_path
  - test_load_rules_config_reads_toggles

======================== ENGLISH ========================
File: `tests/test_escrutinio_config.py`.
Tests for environment configuration and the rules YAML.

Detected components:
  - test_load_config_validates_and_loads
  - test_load_config_rejects_missing_storage_path
  - test_load_rules_config_reads_toggles
"""

from pathlib import Path

import pytest

from escrutinio.config import load_config, load_rules_config, load_yaml_mapping


def test_load_config_validates_and_loads(monkeypatch, tmp_path):
    """Español: Función test_load_config_validates_and_loads del módulo tests/test_escrutinio_config.py.

    English: Function test_load_config_validates_and_loads defined in tests/test_escrutinio_config.py.
    """
    monkeypatch.setenv("ESCRUTINIO_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("ESCRUTINIO_LOG_LEVEL", "debug")
    monkeypatch.setenv("ESCRUTINIO_REQUIRE_FINALIZED_RECORDS", "true")

    settings = load_config()

    assert settings.STORAGE_PATH == Path(tmp_path)
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.REQUIRE_FINALIZED_RECORDS is True
    assert settings.SEED_FILE is None


def test_load_config_rejects_missing_storage_path(monkeypatch):
    """Español: Función test_load_config_rejects_missing_storage_path del módulo tests/test_escrutinio_config.py.

    English: Function test_load_config_rejects_missing_storage_path defined in tests/test_escrutinio_config.py.
    """
    monkeypatch.delenv("ESCRUTINIO_STORAGE_PATH", raising=False)
    with pytest.raises(ValueError):
        load_config()


def test_load_config_rejects_unknown_log_level(monkeypatch, tmp_path):
    monkeypatch.setenv("ESCRUTINIO_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("ESCRUTINIO_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config()


def test_load_config_rejects_missing_seed_file(monkeypatch, tmp_path):
    monkeypatch.setenv("ESCRUTINIO_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("ESCRUTINIO_SEED_FILE", str(tmp_path / "missing.yaml"))
    with pytest.raises(ValueError, match="SEED_FILE"):
        load_config()


def test_load_rules_config_reads_toggles(tmp_path):
    """Español: Función test_load_rules_config_reads_toggles del módulo tests/test_escrutinio_config.py.

    English: Function test_load_rules_config_reads_toggles defined in tests/test_escrutinio_config.py.
    """
    rules_path = tmp_path / "rules.yaml"
    rules_path.write_text(
        "rules:\n  turnout_impossible:\n    enabled: false\n    max_turnout_pct: 90\n",
        encoding="utf-8",
    )

    config = load_rules_config(rules_path)

    assert config["rules"]["global_enabled"] is True
    assert config["rules"]["turnout_impossible"] == {"enabled": False, "max_turnout_pct": 90}
    assert load_rules_config(None) == {}


def test_load_yaml_mapping_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_mapping(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("rules: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml_mapping(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml_mapping(listing)
