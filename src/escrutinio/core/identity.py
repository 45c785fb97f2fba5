# Identity Module
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
#   - Lógica principal / Core logic

"""Generación de identificadores y marcas de tiempo.

English: Identifier and timestamp generation.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Identificador opaco y único (UUID4). / Opaque unique identifier (UUID4)."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Instante actual con zona horaria UTC. / Current timezone-aware UTC instant."""
    return datetime.now(timezone.utc)
