# Config Module
# AUTO-DOC-INDEX
#
# ES: Índice rápido
#   1) Propósito del módulo
#   2) Componentes principales
#   3) Puntos de extensión
#
# EN: Quick index
#   1) Module purpose
#   2) Main components
#   3) Extension points
#
# Secciones / Sections:
#   - Configuración / Configuration

"""Configuración validada de Escrutinio.

Validated Escrutinio configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_PATH = Path(".env")
_ENV_LOCAL_PATH = Path(".env.local")
load_dotenv(_ENV_PATH, override=False)
load_dotenv(_ENV_LOCAL_PATH, override=False)

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class EscrutinioSettings(BaseSettings):
    """Variables de entorno y archivo .env para Escrutinio.

    English: Environment variables and .env file for Escrutinio.
    """

    model_config = SettingsConfigDict(
        env_prefix="ESCRUTINIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    STORAGE_PATH: Path
    LOG_LEVEL: str = "INFO"
    REQUIRE_FINALIZED_RECORDS: bool = False
    SEED_FILE: Optional[Path] = None
    RULES_FILE: Optional[Path] = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")
        return level

    def validate_paths(self) -> None:
        """Valida que las rutas configuradas existan. / Validate that configured paths exist."""
        if not self.STORAGE_PATH.exists():
            raise ValueError(f"STORAGE_PATH does not exist: {self.STORAGE_PATH}")
        if not self.STORAGE_PATH.is_dir():
            raise ValueError(f"STORAGE_PATH is not a directory: {self.STORAGE_PATH}")
        for label, path in (("SEED_FILE", self.SEED_FILE), ("RULES_FILE", self.RULES_FILE)):
            if path is not None and not path.is_file():
                raise ValueError(f"{label} does not exist: {path}")


def load_config() -> EscrutinioSettings:
    """Carga y valida configuración, fallando con detalle. / Load and validate configuration, failing with details."""
    try:
        settings = EscrutinioSettings()
        settings.validate_paths()
        return settings
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


class RuleToggle(BaseModel):
    """Entrada de regla en el YAML de reglas. (Rule entry in the rules YAML.)"""

    enabled: bool = True

    model_config = {"extra": "allow"}


class RulesConfig(BaseModel):
    """Esquema del YAML de reglas de auditoría. (Schema for the audit rules YAML.)"""

    global_enabled: bool = True
    rules: dict[str, RuleToggle] = Field(default_factory=dict)


def load_yaml_mapping(path: Path) -> dict[str, Any]:
    """Load a YAML mapping or raise a user-facing error.

    Carga un mapa YAML o lanza un error orientado al usuario.
    """
    if not path.exists():
        raise FileNotFoundError(f"Falta {path.as_posix()} (Missing {path.as_posix()}).")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"{path.name} tiene errores de sintaxis YAML ({path.name} has YAML syntax errors).") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name} debe ser un mapa YAML ({path.name} must be a YAML mapping).")
    return raw


def load_rules_config(path: Optional[Path]) -> dict[str, Any]:
    """Carga la configuración de reglas en el formato de ``RecordAuditor``.

    Returns an empty config (all rules enabled) when ``path`` is ``None``.

    English:
        Load the rules configuration in ``RecordAuditor`` format.
    """
    if path is None:
        return {}
    raw = load_yaml_mapping(path)
    try:
        parsed = RulesConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(
            f"{path.name} no cumple el esquema requerido ({path.name} does not meet the required schema)."
        ) from exc
    rules: dict[str, Any] = {"global_enabled": parsed.global_enabled}
    for key, toggle in parsed.rules.items():
        rules[key] = toggle.model_dump()
    logging.getLogger(__name__).debug("Reglas cargadas desde %s (Rules loaded from %s).", path, path)
    return {"rules": rules}
