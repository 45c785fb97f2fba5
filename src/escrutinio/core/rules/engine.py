"""Motor de reglas de consistencia para actas.

Punto de entrada único: ``RecordAuditor.run()``. Las reglas se auto-registran
vía el decorador ``@rule`` al ser importadas aquí. Las alertas son
informativas: nunca bloquean la finalización de un acta.

Consistency rules engine for electoral records.

Single entry point: ``RecordAuditor.run()``. Rules self-register via the
``@rule`` decorator when imported here. Alerts are advisory and never block
record finalization.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from escrutinio.core.record import ElectoralRecord
from escrutinio.core.rules import (  # noqa: F401
    candidate_rule,
    null_blank_rule,
    station_rule,
    turnout_rule,
)
from escrutinio.core.rules.registry import RuleContext, RuleDefinition, list_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditResult:
    """Resultado agregado de la ejecución de reglas.

    Aggregated result from running rules.
    """

    record_id: str
    alerts: list[dict] = field(default_factory=list)
    critical_alerts: list[dict] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.alerts


class RecordAuditor:
    """Ejecuta las reglas registradas sobre un acta.

    ``config`` follows the shape ``{"rules": {"global_enabled": bool,
    <config_key>: {"enabled": bool, ...}}}``; every rule is enabled by
    default.

    English:
        Runs the registered rules against a record.
    """

    def __init__(self, config: Optional[dict] = None) -> None:
        self.config = config or {}

    def _get_rule_config(self, rule: RuleDefinition) -> dict:
        rules_config = self.config.get("rules", {})
        rule_config = rules_config.get(rule.config_key)
        return rule_config if rule_config is not None else {}

    def _rule_enabled(self, rule: RuleDefinition) -> bool:
        rules_config = self.config.get("rules", {})
        if not rules_config.get("global_enabled", True):
            return False
        return self._get_rule_config(rule).get("enabled", True)

    def run(self, record: ElectoralRecord, context: Optional[RuleContext] = None) -> AuditResult:
        """Ejecuta todas las reglas habilitadas sobre el acta.

        English:
            Run every enabled rule against the record.
        """
        context = context or RuleContext()
        alerts: list[dict] = []
        for rule in list_rules():
            if not self._rule_enabled(rule):
                continue
            rule_alerts = rule.func(record, context, self._get_rule_config(rule))
            for alert in rule_alerts:
                alert.setdefault("rule", rule.name)
            alerts.extend(rule_alerts)

        critical = [alert for alert in alerts if alert.get("severity") == "CRITICAL"]
        if critical:
            logger.warning(
                "record_audit_critical record_id=%s alerts=%s",
                record.id,
                [alert["type"] for alert in critical],
            )
        return AuditResult(record_id=record.id, alerts=alerts, critical_alerts=critical)
