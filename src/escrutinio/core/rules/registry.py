"""Registro y decorador para reglas de consistencia de actas.

Registry and decorator for record consistency rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, FrozenSet, List, Optional

if TYPE_CHECKING:
    from escrutinio.core.record import ElectoralRecord


@dataclass(frozen=True)
class RuleContext:
    """Contexto opcional para evaluar un acta.

    English:
        Optional context for evaluating a record. ``candidate_ids`` holds the
        candidates of the election the record belongs to, when known.
    """

    candidate_ids: Optional[FrozenSet[str]] = None
    election_id: Optional[str] = None
    extra: dict = field(default_factory=dict)


RuleFunc = Callable[["ElectoralRecord", RuleContext, dict], List[dict]]


@dataclass(frozen=True)
class RuleDefinition:
    """Metadatos de una regla registrada.

    Metadata for a registered rule.
    """

    name: str
    severity: str
    description: str
    config_key: str
    func: RuleFunc


_RULE_REGISTRY: List[RuleDefinition] = []


def rule(*, name: str, severity: str, description: str, config_key: str) -> Callable:
    """Decorador para registrar reglas con metadatos.

    Decorator to register rules with metadata.
    """

    def decorator(func: RuleFunc) -> RuleFunc:
        _RULE_REGISTRY.append(
            RuleDefinition(
                name=name,
                severity=severity,
                description=description,
                config_key=config_key,
                func=func,
            )
        )
        return func

    return decorator


def list_rules() -> List[RuleDefinition]:
    """Devuelve las reglas registradas.

    Returns the registered rules.
    """

    return list(_RULE_REGISTRY)


def build_alert(
    record: "ElectoralRecord",
    *,
    alert_type: str,
    severity: str,
    message: str,
    value: dict,
    threshold: Optional[dict] = None,
) -> dict:
    return {
        "type": alert_type,
        "severity": severity,
        "record_id": record.id,
        "record_number": record.record_number,
        "polling_station_id": record.polling_station.id,
        "message": message,
        "value": value,
        "threshold": threshold or {},
    }
