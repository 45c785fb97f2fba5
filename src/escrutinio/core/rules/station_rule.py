"""Regla: acta y mesa reportan votantes efectivos distintos.

Rule: record and station report different effective voters.
"""

from __future__ import annotations

from typing import List

from escrutinio.core.record import ElectoralRecord
from escrutinio.core.rules.registry import RuleContext, build_alert, rule


@rule(
    name="Diferencia Mesa/Acta",
    severity="WARNING",
    description="El conteo de votantes de la mesa difiere del total del acta.",
    config_key="station_mismatch",
)
def apply(record: ElectoralRecord, context: RuleContext, config: dict) -> List[dict]:
    """
    Compara ``effective_voters`` de la mesa con el total del acta.

    Los dos contadores se mantienen por separado; la regla solo avisa. Una
    mesa sin conteo cargado (0) no se evalúa.

    English:
        Compares the station's ``effective_voters`` with the record total.
        ``tolerance`` (default 0) sets the allowed absolute difference.
    """
    del context
    station_count = record.polling_station.effective_voters
    if station_count == 0:
        return []
    tolerance = int(config.get("tolerance", 0))
    difference = record.total_effective_voters - station_count
    if abs(difference) <= tolerance:
        return []
    return [
        build_alert(
            record,
            alert_type="Diferencia Mesa/Acta",
            severity="WARNING",
            message="Los votantes efectivos de la mesa no coinciden con el acta.",
            value={
                "station_effective_voters": station_count,
                "record_effective_voters": record.total_effective_voters,
                "difference": difference,
            },
            threshold={"tolerance": tolerance},
        )
    ]
