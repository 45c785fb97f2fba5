# Record Module
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

"""Acta electoral de una mesa: captura de votos y sellado.

Electoral record for one polling station: vote capture and sealing.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from .errors import AlreadyFinalizedError, require_count, require_text
from .identity import new_id, utc_now
from .models import PollingStation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteRecord:
    """Línea de votos de un candidato dentro del acta.

    Attributes:
        candidate_id (str): Identificador del candidato.
        votes (int): Votos registrados.
        preferential_votes (int): Votos preferenciales registrados.

    English:
        Per-candidate line item within a record.
    """

    candidate_id: str
    votes: int
    preferential_votes: int = 0


class ElectoralRecord:
    """Acta de escrutinio de una mesa (Borrador → Finalizada).

    The owning station is fixed at construction and its registered-voter
    count is copied, so later capacity changes on the station do not alter
    the record. Every mutator runs under the record lock and rejects the
    call with ``AlreadyFinalizedError`` once the record is sealed.

    English:
        Tally record of one polling station (Draft → Finalized).
    """

    UPDATABLE_FIELDS = frozenset({"title", "place", "record_number"})

    def __init__(
        self,
        title: str,
        polling_station: PollingStation,
        place: str,
        record_number: str,
    ) -> None:
        if polling_station is None:
            raise ValueError("polling_station is required")
        now = utc_now()
        self.id: str = new_id()
        self.title = title
        self.date = now.date()
        self.time = now.strftime("%H:%M:%S")
        self.place = place
        self.record_number = record_number
        self._polling_station = polling_station
        self._total_registered_voters = polling_station.registered_voters
        self._vote_records: Dict[str, VoteRecord] = {}
        self._blank_votes = 0
        self._null_votes = 0
        self._total_effective_voters = 0
        self.observations = ""
        self._signatures: List[str] = []
        self._official_seal = ""
        self._is_finalized = False
        self.created_at = now
        self.updated_at = now
        self._lock = threading.RLock()

    @classmethod
    def restore(
        cls,
        *,
        record_id: str,
        title: str,
        polling_station: PollingStation,
        place: str,
        record_number: str,
        total_registered_voters: int,
        vote_records: List[VoteRecord],
        blank_votes: int,
        null_votes: int,
        observations: str,
        signatures: List[str],
        official_seal: str,
        is_finalized: bool,
        record_date: date,
        record_time: str,
        created_at: datetime,
        updated_at: datetime,
    ) -> "ElectoralRecord":
        """Reconstruye un acta persistida sin pasar por los mutadores.

        The registered-voter snapshot is taken from the persisted value, not
        from the station's current capacity.

        English:
            Rebuild a persisted record without going through the mutators.
        """
        record = cls(title, polling_station, place, record_number)
        record.id = record_id
        record._total_registered_voters = require_count("total_registered_voters", total_registered_voters)
        record._vote_records = {
            require_text("candidate_id", entry.candidate_id): VoteRecord(
                candidate_id=entry.candidate_id,
                votes=require_count("votes", entry.votes),
                preferential_votes=require_count("preferential_votes", entry.preferential_votes),
            )
            for entry in vote_records
        }
        record._blank_votes = require_count("blank_votes", blank_votes)
        record._null_votes = require_count("null_votes", null_votes)
        record._total_effective_voters = record.get_total_valid_votes() + record._blank_votes + record._null_votes
        record.observations = observations
        record._signatures = list(signatures)
        record._official_seal = official_seal
        record._is_finalized = is_finalized
        record.date = record_date
        record.time = record_time
        record.created_at = created_at
        record.updated_at = updated_at
        return record

    # -- read-only views -------------------------------------------------

    @property
    def polling_station(self) -> PollingStation:
        return self._polling_station

    @property
    def total_registered_voters(self) -> int:
        return self._total_registered_voters

    @property
    def total_effective_voters(self) -> int:
        return self._total_effective_voters

    @property
    def blank_votes(self) -> int:
        return self._blank_votes

    @property
    def null_votes(self) -> int:
        return self._null_votes

    @property
    def vote_records(self) -> Tuple[VoteRecord, ...]:
        return tuple(self._vote_records.values())

    @property
    def signatures(self) -> Tuple[str, ...]:
        return tuple(self._signatures)

    @property
    def official_seal(self) -> str:
        return self._official_seal

    @property
    def is_finalized(self) -> bool:
        return self._is_finalized

    @property
    def lock(self) -> threading.RLock:
        """Lock re-entrante para agrupar varias mutaciones. / Re-entrant lock to batch mutations."""
        return self._lock

    def get_vote_record(self, candidate_id: str) -> Optional[VoteRecord]:
        return self._vote_records.get(candidate_id)

    # -- mutators --------------------------------------------------------

    def add_vote_record(self, candidate_id: str, votes: int, preferential_votes: int = 0) -> VoteRecord:
        """Registra (o reemplaza) los votos de un candidato.

        Re-submitting for the same candidate overwrites the entry, so a
        repeated submission never adds up.

        English:
            Register (or replace) a candidate's votes.
        """
        require_text("candidate_id", candidate_id)
        entry = VoteRecord(
            candidate_id=candidate_id,
            votes=require_count("votes", votes),
            preferential_votes=require_count("preferential_votes", preferential_votes),
        )
        with self._lock:
            self._ensure_draft("add_vote_record")
            replaced = candidate_id in self._vote_records
            self._vote_records[candidate_id] = entry
            self._recalculate()
        logger.debug(
            "record_vote_upserted record_id=%s candidate_id=%s votes=%s preferential=%s replaced=%s",
            self.id,
            candidate_id,
            votes,
            preferential_votes,
            replaced,
        )
        return entry

    def remove_vote_record(self, candidate_id: str) -> bool:
        with self._lock:
            self._ensure_draft("remove_vote_record")
            removed = self._vote_records.pop(candidate_id, None) is not None
            if removed:
                self._recalculate()
        return removed

    def set_blank_and_null_votes(self, blank_votes: int, null_votes: int) -> None:
        """Fija los votos blancos y nulos (valores absolutos, no deltas).

        English: Set blank and null votes (absolute values, not deltas).
        """
        blank = require_count("blank_votes", blank_votes)
        null = require_count("null_votes", null_votes)
        with self._lock:
            self._ensure_draft("set_blank_and_null_votes")
            self._blank_votes = blank
            self._null_votes = null
            self._recalculate()

    def update_info(self, **updates: object) -> None:
        """Actualiza datos descriptivos de un acta en borrador.

        English: Update descriptive fields of a draft record.
        """
        unknown = sorted(set(updates) - self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"ElectoralRecord fields cannot be updated: {', '.join(unknown)}")
        with self._lock:
            self._ensure_draft("update_info")
            for key, value in updates.items():
                setattr(self, key, require_text(key, value))
            self.updated_at = utc_now()

    def add_signature(self, signature: str) -> None:
        require_text("signature", signature)
        with self._lock:
            self._ensure_draft("add_signature")
            self._signatures.append(signature)
            self.updated_at = utc_now()

    def add_observation(self, observations: str) -> None:
        require_text("observations", observations)
        with self._lock:
            self._ensure_draft("add_observation")
            self.observations = observations
            self.updated_at = utc_now()

    def finalize(self, official_seal: str) -> None:
        """Sella el acta. Transición terminal e irreversible.

        English: Seal the record. Terminal, irreversible transition.
        """
        require_text("official_seal", official_seal)
        with self._lock:
            self._ensure_draft("finalize")
            self._official_seal = official_seal
            self._is_finalized = True
            self.updated_at = utc_now()
        logger.info(
            "record_finalized record_id=%s station_id=%s effective=%s",
            self.id,
            self._polling_station.id,
            self._total_effective_voters,
        )

    # -- derived ---------------------------------------------------------

    def get_total_valid_votes(self) -> int:
        return sum(entry.votes for entry in self._vote_records.values())

    def get_turnout_percentage(self) -> float:
        if self._total_registered_voters == 0:
            return 0.0
        return self._total_effective_voters * 100 / self._total_registered_voters

    # -- internals -------------------------------------------------------

    def _ensure_draft(self, operation: str) -> None:
        if self._is_finalized:
            logger.warning("record_mutation_rejected record_id=%s operation=%s", self.id, operation)
            raise AlreadyFinalizedError("record", self.id, operation)

    def _recalculate(self) -> None:
        self._total_effective_voters = self.get_total_valid_votes() + self._blank_votes + self._null_votes
        self.updated_at = utc_now()

    def __repr__(self) -> str:
        state = "finalized" if self._is_finalized else "draft"
        return f"<ElectoralRecord({self.record_number},{state})>"
