"""Reglas sobre las líneas de votos por candidato.

Rules over the per-candidate vote lines.
"""

from __future__ import annotations

from typing import List

from escrutinio.core.record import ElectoralRecord
from escrutinio.core.rules.registry import RuleContext, build_alert, rule


@rule(
    name="Candidato Desconocido",
    severity="CRITICAL",
    description="Votos asignados a candidatos ajenos a la elección.",
    config_key="unknown_candidate",
)
def apply_unknown_candidate(record: ElectoralRecord, context: RuleContext, config: dict) -> List[dict]:
    """Votes for candidates outside the election are silently ignored by the
    aggregation, so they are surfaced here.
    """
    del config
    if context.candidate_ids is None:
        return []
    unknown = [entry for entry in record.vote_records if entry.candidate_id not in context.candidate_ids]
    if not unknown:
        return []
    return [
        build_alert(
            record,
            alert_type="Candidato Desconocido",
            severity="CRITICAL",
            message="El acta registra votos para candidatos que no pertenecen a la elección.",
            value={
                "candidate_ids": [entry.candidate_id for entry in unknown],
                "votes": sum(entry.votes for entry in unknown),
            },
        )
    ]


@rule(
    name="Preferenciales Excedidos",
    severity="WARNING",
    description="Votos preferenciales mayores que los votos del candidato.",
    config_key="preferential_overflow",
)
def apply_preferential_overflow(record: ElectoralRecord, context: RuleContext, config: dict) -> List[dict]:
    del context, config
    overflow = [entry for entry in record.vote_records if entry.preferential_votes > entry.votes]
    if not overflow:
        return []
    return [
        build_alert(
            record,
            alert_type="Preferenciales Excedidos",
            severity="WARNING",
            message="Hay candidatos con más votos preferenciales que votos.",
            value={
                "entries": [
                    {
                        "candidate_id": entry.candidate_id,
                        "votes": entry.votes,
                        "preferential_votes": entry.preferential_votes,
                    }
                    for entry in overflow
                ]
            },
        )
    ]
