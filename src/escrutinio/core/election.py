# Election Module
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

"""Elección: raíz de agregación de actas y generación de reportes.

Election: aggregation root for electoral records and report generation.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from .errors import AlreadyFinalizedError
from .ledger import LedgerTotals, TallyLedger
from .models import Candidate, ElectionType, Entity, LifecycleState, PollingStation
from .record import ElectoralRecord
from .report import ElectionReport, build_report, pick_winner

logger = logging.getLogger(__name__)


class Election(Entity):
    """Elección con candidatos, mesas y actas agregadas (Activa → Finalizada).

    Candidate totals come from the ``TallyLedger``: each read replays the
    attached records and publishes the result onto the owned candidates, so
    there is a single aggregation path and no counter is ever incremented.
    A record can be attached once; a second attempt raises
    ``DuplicateRecordError``. After ``finalize`` the candidate list, the
    station list, the record list and the totals are frozen.

    English:
        Election owning candidates, stations and aggregated records
        (Active → Finalized).
    """

    UPDATABLE_FIELDS = frozenset({"name", "date", "election_type", "description"})

    def __init__(
        self,
        name: str,
        date: date,
        election_type: Union[ElectionType, str],
        description: str = "",
        require_finalized_records: bool = False,
    ) -> None:
        super().__init__()
        self.name = name
        self.date = date
        self.election_type = election_type
        self.description = description
        self._candidates: List[Candidate] = []
        self._polling_stations: List[PollingStation] = []
        self._ledger = TallyLedger(self.id, require_finalized=require_finalized_records)
        self._is_finalized = False
        self._lock = threading.RLock()

    @property
    def election_type(self) -> ElectionType:
        return self._election_type

    @election_type.setter
    def election_type(self, value: Union[ElectionType, str]) -> None:
        self._election_type = ElectionType(value)

    @property
    def date(self) -> date:
        return self._date

    @date.setter
    def date(self, value: Union[date, str]) -> None:
        if isinstance(value, str):
            value = date.fromisoformat(value)
        elif isinstance(value, datetime):
            value = value.date()
        elif not isinstance(value, date):
            raise ValueError(f"date must be a date, got {value!r}")
        self._date = value

    @property
    def candidates(self) -> Tuple[Candidate, ...]:
        return tuple(self._candidates)

    @property
    def polling_stations(self) -> Tuple[PollingStation, ...]:
        return tuple(self._polling_stations)

    @property
    def electoral_records(self) -> Tuple[ElectoralRecord, ...]:
        return self._ledger.records

    @property
    def is_finalized(self) -> bool:
        return self._is_finalized

    @property
    def require_finalized_records(self) -> bool:
        return self._ledger.require_finalized

    # -- ownership lists -------------------------------------------------

    def add_candidate(self, candidate: Candidate) -> None:
        with self._lock:
            self._ensure_open("add_candidate")
            if any(existing.id == candidate.id for existing in self._candidates):
                return
            self._candidates.append(candidate)
            self.touch()

    def remove_candidate(self, candidate_id: str) -> None:
        with self._lock:
            self._ensure_open("remove_candidate")
            self._candidates = [c for c in self._candidates if c.id != candidate_id]
            self.touch()

    def add_polling_station(self, polling_station: PollingStation) -> None:
        with self._lock:
            self._ensure_open("add_polling_station")
            if any(existing.id == polling_station.id for existing in self._polling_stations):
                return
            self._polling_stations.append(polling_station)
            self.touch()

    def remove_polling_station(self, station_id: str) -> None:
        with self._lock:
            self._ensure_open("remove_polling_station")
            self._polling_stations = [ps for ps in self._polling_stations if ps.id != station_id]
            self.touch()

    # -- aggregation -----------------------------------------------------

    def add_electoral_record(self, record: ElectoralRecord) -> None:
        """Agrega un acta al libro de escrutinio.

        English: Attach a record to the tally ledger.
        """
        with self._lock:
            self._ensure_open("add_electoral_record")
            self._ledger.attach(record)
            self.touch()
            self._publish()
        logger.info(
            "election_record_attached election_id=%s record_id=%s records=%s",
            self.id,
            record.id,
            len(self._ledger),
        )

    def has_record(self, record_id: str) -> bool:
        return record_id in self._ledger

    def _publish(self) -> LedgerTotals:
        totals = self._ledger.totals()
        for candidate in self._candidates:
            entry = totals.by_candidate.get(candidate.id)
            if entry is None:
                candidate._publish_totals(0, 0)
            else:
                candidate._publish_totals(entry.votes, entry.preferential_votes)
        return totals

    def get_total_votes(self) -> int:
        with self._lock:
            self._publish()
            return sum(candidate.votes for candidate in self._candidates)

    def get_total_blank_votes(self) -> int:
        return self._ledger.totals().blank_votes

    def get_total_null_votes(self) -> int:
        return self._ledger.totals().null_votes

    def get_winner(self) -> Optional[Candidate]:
        with self._lock:
            self._publish()
            return pick_winner(self._candidates)

    def generate_report(self) -> ElectionReport:
        with self._lock:
            totals = self._publish()
            return build_report(
                election_id=self.id,
                election_name=self.name,
                candidates=self._candidates,
                blank_votes=totals.blank_votes,
                null_votes=totals.null_votes,
                records_counted=len(self._ledger),
                registered_voters=totals.registered_voters,
                effective_voters=totals.effective_voters,
                is_final=self._is_finalized,
                stations=totals.by_station.values(),
            )

    def finalize(self) -> None:
        """Cierra la elección y congela sus totales.

        English: Close the election and freeze its totals.
        """
        with self._lock:
            self._ensure_open("finalize")
            self._publish()
            self._ledger.freeze()
            self._is_finalized = True
            self.touch()
        logger.info("election_finalized election_id=%s records=%s", self.id, len(self._ledger))

    def restore_metadata(
        self,
        entity_id: str,
        state: LifecycleState,
        created_at: datetime,
        updated_at: datetime,
    ) -> None:
        super().restore_metadata(entity_id, state, created_at, updated_at)
        self._ledger.owner_id = entity_id

    def restore_final_state(self, totals: LedgerTotals) -> None:
        """Marca la elección como finalizada con los totales persistidos.

        English:
            Mark the election finalized with the persisted frozen totals.
        """
        with self._lock:
            self._ledger.restore_frozen(totals)
            self._is_finalized = True
            self._publish()

    def ledger_totals(self) -> LedgerTotals:
        return self._ledger.totals()

    def _ensure_open(self, operation: str) -> None:
        if self._is_finalized:
            logger.warning("election_mutation_rejected election_id=%s operation=%s", self.id, operation)
            raise AlreadyFinalizedError("election", self.id, operation)

    def __repr__(self) -> str:
        return f"<Election({self.name},{self.election_type.value})>"
