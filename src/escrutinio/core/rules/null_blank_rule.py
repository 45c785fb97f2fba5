"""Regla: proporción elevada de votos nulos y blancos.

Rule: elevated share of null and blank votes.
"""

from __future__ import annotations

from typing import List

from escrutinio.core.record import ElectoralRecord
from escrutinio.core.rules.registry import RuleContext, build_alert, rule


@rule(
    name="Nulos y Blancos Elevados",
    severity="CRITICAL",
    description="Detecta porcentajes anómalos de votos nulos+blancos.",
    config_key="null_blank_votes",
)
def apply(record: ElectoralRecord, context: RuleContext, config: dict) -> List[dict]:
    """
    Detecta porcentajes elevados de votos nulos y blancos.

    Se calcula (nulos + blancos) / total emitido. CRITICAL si supera 12%,
    WARNING si supera 8%.

    English:
        Detects elevated null and blank vote percentages.

        Computes (null + blank) / total emitted. CRITICAL if above 12%,
        WARNING if above 8%.
    """
    del context

    total = record.total_effective_voters
    if not total:
        return []

    null_blank = record.null_votes + record.blank_votes
    ratio = null_blank / total

    warning_threshold = float(config.get("warning_pct", 8)) / 100
    critical_threshold = float(config.get("critical_pct", 12)) / 100

    if ratio > critical_threshold:
        severity = "CRITICAL"
    elif ratio > warning_threshold:
        severity = "WARNING"
    else:
        return []

    return [
        build_alert(
            record,
            alert_type="Nulos/Blancos Elevados",
            severity=severity,
            message="Porcentaje elevado de votos nulos y blancos.",
            value={"ratio": ratio, "null_blank": null_blank},
            threshold={"warning_pct": warning_threshold, "critical_pct": critical_threshold},
        )
    ]
