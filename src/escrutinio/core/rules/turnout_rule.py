"""Regla: participación imposible en el acta.

Rule: impossible turnout on a record.
"""

from __future__ import annotations

from typing import List

from escrutinio.core.record import ElectoralRecord
from escrutinio.core.rules.registry import RuleContext, build_alert, rule


@rule(
    name="Turnout Imposible",
    severity="CRITICAL",
    description="Votantes efectivos por encima del padrón de la mesa.",
    config_key="turnout_impossible",
)
def apply(record: ElectoralRecord, context: RuleContext, config: dict) -> List[dict]:
    """
    Detecta actas cuyo total emitido supera a los inscritos.

    English:
        Flags records whose effective voters exceed the registered voters.
        ``max_turnout_pct`` (default 100) sets the ceiling.
    """
    del context

    max_turnout = float(config.get("max_turnout_pct", 100))
    registered = record.total_registered_voters
    effective = record.total_effective_voters
    if effective == 0:
        return []
    if registered > 0 and record.get_turnout_percentage() <= max_turnout:
        return []

    return [
        build_alert(
            record,
            alert_type="Turnout Imposible",
            severity="CRITICAL",
            message="Participación superior al padrón de la mesa.",
            value={
                "registered_voters": registered,
                "effective_voters": effective,
                "turnout_pct": record.get_turnout_percentage(),
            },
            threshold={"max_turnout_pct": max_turnout},
        )
    ]
