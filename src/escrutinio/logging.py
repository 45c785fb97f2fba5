"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/escrutinio/logging.py`.
Configuración de logging estructurado para el motor de escrutinio.

Componentes detectados:
  - setup_logging
  - bind_context

Notas:
- Los módulos del motor registran con ``logging.getLogger(__name__)``;
  el servicio emite sus eventos de auditoría con ``bind_context``.

======================== ENGLISH ========================
File: `src/escrutinio/logging.py`.
Structured logging setup for the tally engine.

Detected components:
  - setup_logging
  - bind_context

Notes:
- Engine modules log through ``logging.getLogger(__name__)``; the service
  emits its audit events through ``bind_context``.
"""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import structlog


def setup_logging(log_level: str, storage_path: Optional[Path] = None) -> structlog.BoundLogger:
    """Configura structlog y handlers de consola/archivo.

    The rotating file handler is only added when ``storage_path`` is given.

    English: Configure structlog and console/file handlers.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if storage_path is not None:
        log_dir = storage_path / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(
                log_dir / "escrutinio.log",
                when="midnight",
                backupCount=30,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=log_level.upper(),
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(log_level.upper())),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def bind_context(
    logger: structlog.BoundLogger,
    election_id: Optional[str] = None,
    record_id: Optional[str] = None,
    station_id: Optional[str] = None,
) -> structlog.BoundLogger:
    """Adjunta contexto estándar al logger.

    English: Bind standard context to the logger.
    """
    context: dict[str, Any] = {}
    if election_id:
        context["election_id"] = election_id
    if record_id:
        context["record_id"] = record_id
    if station_id:
        context["station_id"] = station_id
    return logger.bind(**context)
