# Report Module
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
#   - Integraciones / Integrations

"""Cálculos derivados: porcentajes, ranking, ganador y reporte.

Derived computations: percentages, ranking, winner and report snapshot.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .identity import utc_now
from .ledger import StationTotals
from .models import Candidate


@dataclass(frozen=True)
class CandidateResult:
    """Resultado de un candidato en el reporte.

    Attributes:
        candidate_id (str): Identificador del candidato.
        candidate_name (str): Nombre completo.
        party_acronym (str): Sigla del partido.
        votes (int): Votos totales.
        preferential_votes (int): Votos preferenciales.
        percentage (float): Porcentaje sobre el total de votos válidos.

    English:
        Candidate result within a report.
    """

    candidate_id: str
    candidate_name: str
    party_acronym: str
    votes: int
    preferential_votes: int
    percentage: float


@dataclass(frozen=True)
class PartyResult:
    """Votos de un partido sumando a sus candidatos.

    English: Party votes summed over its candidates in the election.
    """

    party_id: str
    party_acronym: str
    party_name: str
    candidates: int
    votes: int
    percentage: float


@dataclass(frozen=True)
class StationResult:
    """Resultado por mesa: votos válidos, blancos, nulos y participación.

    English: Per-station result with valid, blank and null votes and turnout.
    """

    station_id: str
    station_number: str
    location: str
    registered_voters: int
    valid_votes: int
    blank_votes: int
    null_votes: int
    total_votes: int
    turnout_percentage: float


@dataclass(frozen=True)
class ElectionReport:
    """Reporte inmutable de una elección en un instante dado.

    English:
        Immutable election report at a point in time. ``results`` and
        ``party_results`` are sorted by votes, ``station_results`` by
        turnout, all descending; ties keep their original order.
    """

    election_id: str
    election_name: str
    total_votes: int
    blank_votes: int
    null_votes: int
    results: Tuple[CandidateResult, ...]
    party_results: Tuple[PartyResult, ...]
    station_results: Tuple[StationResult, ...]
    records_counted: int
    turnout_percentage: float
    is_final: bool
    generated_at: datetime

    @property
    def winner(self) -> Optional[CandidateResult]:
        return self.results[0] if self.results else None


def percentage(part: int, whole: int) -> float:
    """Porcentaje de ``part`` sobre ``whole``; 0 si ``whole`` es 0."""
    if whole == 0:
        return 0.0
    return part * 100 / whole


def turnout_percentage(effective_voters: int, registered_voters: int) -> float:
    return percentage(effective_voters, registered_voters)


def pick_winner(candidates: Iterable[Candidate]) -> Optional[Candidate]:
    """Candidato con más votos; en empate gana el primero de la lista.

    English:
        Candidate with the most votes; ties go to the first in list order.
        No secondary key is used.
    """
    winner: Optional[Candidate] = None
    for candidate in candidates:
        if winner is None or candidate.votes > winner.votes:
            winner = candidate
    return winner


def rank_results(candidates: Sequence[Candidate], total_votes: int) -> Tuple[CandidateResult, ...]:
    results = [
        CandidateResult(
            candidate_id=candidate.id,
            candidate_name=candidate.full_name,
            party_acronym=candidate.political_party.acronym,
            votes=candidate.votes,
            preferential_votes=candidate.preferential_votes,
            percentage=percentage(candidate.votes, total_votes),
        )
        for candidate in candidates
    ]
    # sorted() is stable, so ties keep list order.
    return tuple(sorted(results, key=lambda result: result.votes, reverse=True))


def rank_parties(candidates: Sequence[Candidate], total_votes: int) -> Tuple[PartyResult, ...]:
    """Agrupa candidatos por partido en orden de primera aparición.

    English: Group candidates by party, in first-appearance order, then rank.
    """
    grouped: Dict[str, List[Candidate]] = {}
    for candidate in candidates:
        grouped.setdefault(candidate.political_party.id, []).append(candidate)
    results = []
    for members in grouped.values():
        party = members[0].political_party
        votes = sum(candidate.votes for candidate in members)
        results.append(
            PartyResult(
                party_id=party.id,
                party_acronym=party.acronym,
                party_name=party.name,
                candidates=len(members),
                votes=votes,
                percentage=percentage(votes, total_votes),
            )
        )
    return tuple(sorted(results, key=lambda result: result.votes, reverse=True))


def rank_stations(stations: Iterable[StationTotals]) -> Tuple[StationResult, ...]:
    results = [
        StationResult(
            station_id=totals.station_id,
            station_number=totals.station_number,
            location=totals.location,
            registered_voters=totals.registered_voters,
            valid_votes=totals.valid_votes,
            blank_votes=totals.blank_votes,
            null_votes=totals.null_votes,
            total_votes=totals.total_votes,
            turnout_percentage=percentage(totals.total_votes, totals.registered_voters),
        )
        for totals in stations
    ]
    return tuple(sorted(results, key=lambda result: result.turnout_percentage, reverse=True))


def build_report(
    *,
    election_id: str,
    election_name: str,
    candidates: Sequence[Candidate],
    blank_votes: int,
    null_votes: int,
    records_counted: int,
    registered_voters: int,
    effective_voters: int,
    is_final: bool,
    stations: Iterable[StationTotals] = (),
    generated_at: Optional[datetime] = None,
) -> ElectionReport:
    total_votes = sum(candidate.votes for candidate in candidates)
    return ElectionReport(
        election_id=election_id,
        election_name=election_name,
        total_votes=total_votes,
        blank_votes=blank_votes,
        null_votes=null_votes,
        results=rank_results(candidates, total_votes),
        party_results=rank_parties(candidates, total_votes),
        station_results=rank_stations(stations),
        records_counted=records_counted,
        turnout_percentage=turnout_percentage(effective_voters, registered_voters),
        is_final=is_final,
        generated_at=generated_at or utc_now(),
    )


def report_to_dict(report: ElectionReport) -> Dict[str, Any]:
    """Vista de datos planos del reporte para consumidores externos.

    English: Plain-data view of the report for external consumers.
    """
    payload = asdict(report)
    for key in ("results", "party_results", "station_results"):
        payload[key] = [dict(item) for item in payload[key]]
    payload["generated_at"] = report.generated_at.isoformat()
    return payload


def top_results(report: ElectionReport, limit: int) -> List[CandidateResult]:
    return list(report.results[: max(limit, 0)])
