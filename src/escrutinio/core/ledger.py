"""Libro de escrutinio: totales derivados de las actas agregadas.

Totals are never accumulated. Every query replays the attached records, so a
record can only contribute once and edits made to a draft record before the
election is sealed are reflected on the next read. ``freeze`` pins the
totals when the election is finalized.

English:
    Tally ledger: totals derived from the attached electoral records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Optional, Tuple

from .errors import DuplicateRecordError, UnsealedRecordError
from .record import ElectoralRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateTotals:
    votes: int = 0
    preferential_votes: int = 0


@dataclass(frozen=True)
class StationTotals:
    """Totales de una mesa sumando todas sus actas agregadas.

    ``registered_voters`` is the padrón captured by the station's first
    attached record, so several records of one station do not add it twice.

    English:
        Per-station totals across every attached record of that station.
    """

    station_id: str
    station_number: str
    location: str
    registered_voters: int
    valid_votes: int = 0
    blank_votes: int = 0
    null_votes: int = 0

    @property
    def total_votes(self) -> int:
        return self.valid_votes + self.blank_votes + self.null_votes


@dataclass(frozen=True)
class LedgerTotals:
    """Fotografía de los totales del libro. / Snapshot of ledger totals."""

    by_candidate: Dict[str, CandidateTotals]
    blank_votes: int
    null_votes: int
    registered_voters: int
    effective_voters: int
    by_station: Dict[str, StationTotals] = field(default_factory=dict)


class TallyLedger:
    """Conjunto ordenado de actas agregadas a una elección.

    Args:
        owner_id: Identificador de la elección dueña del libro.
        require_finalized: Si es verdadero, solo se aceptan actas selladas.

    English:
        Ordered set of records aggregated into an election.
    """

    def __init__(self, owner_id: str, require_finalized: bool = False) -> None:
        self.owner_id = owner_id
        self.require_finalized = require_finalized
        self._records: Dict[str, ElectoralRecord] = {}
        self._frozen: Optional[LedgerTotals] = None

    @property
    def records(self) -> Tuple[ElectoralRecord, ...]:
        return tuple(self._records.values())

    @property
    def is_frozen(self) -> bool:
        return self._frozen is not None

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def attach(self, record: ElectoralRecord) -> None:
        if record.id in self._records:
            logger.warning("ledger_duplicate_record election_id=%s record_id=%s", self.owner_id, record.id)
            raise DuplicateRecordError(self.owner_id, record.id)
        if self.require_finalized and not record.is_finalized:
            raise UnsealedRecordError(record.id)
        self._records[record.id] = record

    def restore_frozen(self, totals: LedgerTotals) -> None:
        """Fija totales congelados leídos de un snapshot persistido."""
        self._frozen = totals

    def freeze(self) -> LedgerTotals:
        if self._frozen is None:
            self._frozen = self._replay(self._records.values())
        return self._frozen

    def totals(self) -> LedgerTotals:
        if self._frozen is not None:
            return self._frozen
        return self._replay(self._records.values())

    @staticmethod
    def _replay(records: Iterable[ElectoralRecord]) -> LedgerTotals:
        votes: Dict[str, int] = {}
        preferential: Dict[str, int] = {}
        by_station: Dict[str, StationTotals] = {}
        blank = null = registered = effective = 0
        for record in records:
            # One consistent view per record while drafts may still change.
            with record.lock:
                entries = record.vote_records
                record_blank = record.blank_votes
                record_null = record.null_votes
                record_registered = record.total_registered_voters
                record_effective = record.total_effective_voters
            valid = 0
            for entry in entries:
                valid += entry.votes
                votes[entry.candidate_id] = votes.get(entry.candidate_id, 0) + entry.votes
                preferential[entry.candidate_id] = (
                    preferential.get(entry.candidate_id, 0) + entry.preferential_votes
                )
            blank += record_blank
            null += record_null
            registered += record_registered
            effective += record_effective

            station = record.polling_station
            current = by_station.get(station.id) or StationTotals(
                station_id=station.id,
                station_number=station.station_number,
                location=station.location,
                registered_voters=record_registered,
            )
            by_station[station.id] = replace(
                current,
                valid_votes=current.valid_votes + valid,
                blank_votes=current.blank_votes + record_blank,
                null_votes=current.null_votes + record_null,
            )
        by_candidate = {
            candidate_id: CandidateTotals(votes=count, preferential_votes=preferential[candidate_id])
            for candidate_id, count in votes.items()
        }
        return LedgerTotals(
            by_candidate=by_candidate,
            blank_votes=blank,
            null_votes=null,
            registered_voters=registered,
            effective_voters=effective,
            by_station=by_station,
        )
