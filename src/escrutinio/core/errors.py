# Errors Module
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

"""Jerarquía de errores del motor de escrutinio.

Error hierarchy for the tally engine.
"""

from __future__ import annotations

from typing import Optional


class EscrutinioError(Exception):
    """Error base del motor. / Base engine error."""


class EntityNotFoundError(EscrutinioError, LookupError):
    """Referencia a una entidad inexistente.

    English: Reference to an entity that does not exist.
    """

    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class AlreadyFinalizedError(EscrutinioError):
    """Mutación sobre un acta o elección ya finalizada.

    English: Mutation attempted on a finalized record or election.
    """

    def __init__(self, kind: str, entity_id: str, operation: Optional[str] = None) -> None:
        self.kind = kind
        self.entity_id = entity_id
        self.operation = operation
        message = f"{kind} {entity_id} is already finalized"
        if operation:
            message += f"; rejected operation: {operation}"
        super().__init__(message)


class DuplicateRecordError(EscrutinioError):
    """El acta ya fue agregada a la elección.

    English: The record was already aggregated into the election.
    """

    def __init__(self, election_id: str, record_id: str) -> None:
        self.election_id = election_id
        self.record_id = record_id
        super().__init__(f"record {record_id} already attached to election {election_id}")


class UnsealedRecordError(EscrutinioError):
    """Se requiere un acta finalizada. / A finalized record is required."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"record {record_id} must be finalized before aggregation")


class InvalidVoteCountError(EscrutinioError, ValueError):
    """Conteo de votos negativo o no entero.

    English: Negative or non-integer vote count.
    """

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a non-negative integer, got {value!r}")


class PermissionDeniedError(EscrutinioError, PermissionError):
    """El rol no tiene permiso para la acción. / Role lacks permission for the action."""

    def __init__(self, role: str, action: str) -> None:
        self.role = role
        self.action = action
        super().__init__(f"role {role} is not allowed to {action}")


class SnapshotIntegrityError(EscrutinioError):
    """El digest del snapshot no coincide. / Snapshot digest mismatch."""


def require_count(field: str, value: object) -> int:
    """Valida un conteo no negativo y lo devuelve.

    English: Validate a non-negative count and return it.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidVoteCountError(field, value)
    return value


def require_text(field: str, value: object) -> str:
    """Valida texto no vacío. / Validate non-empty text."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field} cannot be empty")
    return value
