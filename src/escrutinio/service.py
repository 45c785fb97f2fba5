"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/escrutinio/service.py`.
Fachada de persistencia y orquestación del escrutinio: repositorios en
memoria por tipo de entidad, validación de entradas, autorización y
guardado en el snapshot.

Componentes detectados:
  - ElectoralService
  - open_service

Notas:
- `create_*` devuelve None si una referencia no existe.
- `get_*` solo devuelve entidades activas.
- `delete_*` es una baja lógica.

======================== ENGLISH ========================
File: `src/escrutinio/service.py`.
Persistence and orchestration façade for the tally: in-memory repositories
per entity kind, input validation, authorization and snapshot saving.

Detected components:
  - ElectoralService
  - open_service

Notes:
- `create_*` returns None when a referenced id does not exist.
- `get_*` only returns active entities.
- `delete_*` is a soft deactivation.
"""

# Service Module
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
#   - Configuración / Configuration
#   - Lógica principal / Core logic
#   - Integraciones / Integrations

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union

import structlog

from escrutinio.auth import Action, Authorizer, Role, RoleAuthorizer
from escrutinio.config import EscrutinioSettings, load_rules_config
from escrutinio.core.election import Election
from escrutinio.core.errors import EntityNotFoundError, EscrutinioError
from escrutinio.core.models import (
    Candidate,
    ElectionType,
    Entity,
    MemberType,
    PoliticalParty,
    PollingStation,
    PollingStationMember,
)
from escrutinio.core.record import ElectoralRecord
from escrutinio.core.report import ElectionReport
from escrutinio.core.rules.engine import AuditResult, RecordAuditor
from escrutinio.core.rules.registry import RuleContext
from escrutinio.core.seal import compute_seal
from escrutinio.logging import bind_context
from escrutinio.schemas import (
    CandidateInput,
    CandidateUpdate,
    ElectionInput,
    ElectionUpdate,
    MemberInput,
    MemberUpdate,
    PartialUpdate,
    PartyInput,
    PartyUpdate,
    RecordInput,
    RecordUpdate,
    SeedFile,
    StationInput,
    StationUpdate,
    VoteSubmission,
)
from escrutinio.seed import load_seed_file
from escrutinio.storage import SnapshotStore, StoreContents

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


class ElectoralService:
    """Fachada de casos de uso sobre el motor de escrutinio.

    Args:
        store: Snapshot donde se persiste el estado; opcional.
        authorizer: Colaborador que valida rol y acción.
        auditor: Motor de reglas de consistencia.
        require_finalized_records: Valor por defecto para nuevas elecciones.
        autosave: Guarda el snapshot tras cada mutación si hay ``store``.

    English:
        Use-case façade over the tally engine. Role-gated operations take a
        keyword-only ``role`` and ask the ``authorizer`` first.
    """

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        authorizer: Optional[Authorizer] = None,
        auditor: Optional[RecordAuditor] = None,
        require_finalized_records: bool = False,
        autosave: bool = False,
    ) -> None:
        self.store = store
        self.authorizer: Authorizer = authorizer or RoleAuthorizer()
        self.auditor = auditor or RecordAuditor()
        self.require_finalized_records = require_finalized_records
        self.autosave = autosave
        self._parties: Dict[str, PoliticalParty] = {}
        self._candidates: Dict[str, Candidate] = {}
        self._members: Dict[str, PollingStationMember] = {}
        self._stations: Dict[str, PollingStation] = {}
        self._records: Dict[str, ElectoralRecord] = {}
        self._elections: Dict[str, Election] = {}

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _active(repository: Dict[str, E]) -> List[E]:
        return [entity for entity in repository.values() if entity.is_active]

    @staticmethod
    def _find(repository: Dict[str, E], entity_id: str) -> Optional[E]:
        entity = repository.get(entity_id)
        if entity is None or not entity.is_active:
            return None
        return entity

    @staticmethod
    def _require(repository: Dict[str, E], kind: str, entity_id: str) -> E:
        entity = repository.get(entity_id)
        if entity is None or not entity.is_active:
            raise EntityNotFoundError(kind, entity_id)
        return entity

    def _authorize(self, role: Union[Role, str], action: Action) -> None:
        self.authorizer.check(role, action)

    def _commit(self) -> None:
        if self.autosave and self.store is not None:
            self.save()

    @staticmethod
    def _audit_log(**context: Optional[str]) -> structlog.BoundLogger:
        return bind_context(structlog.get_logger(__name__), **context)

    def _update(
        self,
        repository: Dict[str, E],
        entity_id: str,
        schema: Type[PartialUpdate],
        updates: Dict[str, Any],
    ) -> bool:
        """Valida la actualización parcial y la aplica a la entidad.

        Nothing is mutated when validation fails, so an invalid update never
        reaches the snapshot.

        English:
            Validate the partial update, then apply it to the entity.
        """
        changes = schema.model_validate(updates).changes()
        entity = repository.get(entity_id)
        if entity is None:
            return False
        entity.update_info(**changes)
        self._commit()
        return True

    def _delete(self, repository: Dict[str, E], kind: str, entity_id: str) -> bool:
        entity = repository.get(entity_id)
        if entity is None:
            return False
        entity.deactivate()
        logger.info("entity_deactivated kind=%s id=%s", kind, entity_id)
        self._commit()
        return True

    # -- political parties -----------------------------------------------

    def create_political_party(
        self,
        name: str,
        acronym: str,
        legal_representative: str,
        logo: Optional[str] = None,
        founded_date: Optional[date] = None,
    ) -> PoliticalParty:
        data = PartyInput(
            name=name,
            acronym=acronym,
            legal_representative=legal_representative,
            logo=logo,
            founded_date=founded_date,
        )
        party = PoliticalParty(**data.model_dump())
        self._parties[party.id] = party
        logger.info("party_created id=%s acronym=%s", party.id, party.acronym)
        self._commit()
        return party

    def get_political_parties(self) -> List[PoliticalParty]:
        return self._active(self._parties)

    def get_political_party(self, party_id: str) -> Optional[PoliticalParty]:
        return self._find(self._parties, party_id)

    def get_political_party_or_raise(self, party_id: str) -> PoliticalParty:
        return self._require(self._parties, "political_party", party_id)

    def update_political_party(self, party_id: str, **updates: Any) -> bool:
        return self._update(self._parties, party_id, PartyUpdate, updates)

    def delete_political_party(self, party_id: str) -> bool:
        return self._delete(self._parties, "political_party", party_id)

    # -- candidates ------------------------------------------------------

    def create_candidate(
        self,
        first_name: str,
        last_name: str,
        dni: str,
        party_id: str,
        position: str = "Candidato",
    ) -> Optional[Candidate]:
        data = CandidateInput(
            first_name=first_name,
            last_name=last_name,
            dni=dni,
            party_id=party_id,
            position=position,
        )
        party = self._parties.get(data.party_id)
        if party is None:
            logger.warning("candidate_rejected reason=party_not_found party_id=%s", data.party_id)
            return None
        candidate = Candidate(data.first_name, data.last_name, data.dni, party, data.position)
        self._candidates[candidate.id] = candidate
        logger.info("candidate_created id=%s party=%s", candidate.id, party.acronym)
        self._commit()
        return candidate

    def get_candidates(self) -> List[Candidate]:
        return self._active(self._candidates)

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        return self._find(self._candidates, candidate_id)

    def get_candidate_or_raise(self, candidate_id: str) -> Candidate:
        return self._require(self._candidates, "candidate", candidate_id)

    def update_candidate(self, candidate_id: str, **updates: Any) -> bool:
        """Actualiza un candidato; ``party_id`` se resuelve a un partido activo.

        Raises ``EntityNotFoundError`` when the referenced party does not exist.

        English:
            Update a candidate; ``party_id`` is resolved to an active party.
        """
        changes = CandidateUpdate.model_validate(updates).changes()
        candidate = self._candidates.get(candidate_id)
        if candidate is None:
            return False
        if "party_id" in changes:
            changes["political_party"] = self.get_political_party_or_raise(changes.pop("party_id"))
        candidate.update_info(**changes)
        self._commit()
        return True

    def delete_candidate(self, candidate_id: str) -> bool:
        return self._delete(self._candidates, "candidate", candidate_id)

    # -- elections -------------------------------------------------------

    def create_election(
        self,
        name: str,
        date: date,
        election_type: Union[ElectionType, str],
        description: str = "",
        require_finalized_records: Optional[bool] = None,
    ) -> Election:
        data = ElectionInput(name=name, date=date, election_type=election_type, description=description)
        if require_finalized_records is None:
            require_finalized_records = self.require_finalized_records
        election = Election(
            data.name,
            data.date,
            data.election_type,
            description=data.description,
            require_finalized_records=require_finalized_records,
        )
        self._elections[election.id] = election
        logger.info("election_created id=%s type=%s", election.id, election.election_type.value)
        self._commit()
        return election

    def get_elections(self) -> List[Election]:
        return self._active(self._elections)

    def get_election(self, election_id: str) -> Optional[Election]:
        return self._find(self._elections, election_id)

    def get_election_or_raise(self, election_id: str) -> Election:
        return self._require(self._elections, "election", election_id)

    def update_election(self, election_id: str, **updates: Any) -> bool:
        return self._update(self._elections, election_id, ElectionUpdate, updates)

    def delete_election(self, election_id: str) -> bool:
        return self._delete(self._elections, "election", election_id)

    def add_candidate_to_election(self, election_id: str, candidate_id: str) -> Election:
        election = self.get_election_or_raise(election_id)
        election.add_candidate(self.get_candidate_or_raise(candidate_id))
        self._commit()
        return election

    def add_polling_station_to_election(self, election_id: str, station_id: str) -> Election:
        election = self.get_election_or_raise(election_id)
        election.add_polling_station(self.get_polling_station_or_raise(station_id))
        self._commit()
        return election

    # -- polling stations ------------------------------------------------

    def create_polling_station(
        self,
        station_number: str,
        location: str,
        address: str = "",
        registered_voters: int = 0,
    ) -> PollingStation:
        data = StationInput(
            station_number=station_number,
            location=location,
            address=address,
            registered_voters=registered_voters,
        )
        station = PollingStation(**data.model_dump())
        self._stations[station.id] = station
        logger.info("station_created id=%s number=%s", station.id, station.station_number)
        self._commit()
        return station

    def get_polling_stations(self) -> List[PollingStation]:
        return self._active(self._stations)

    def get_polling_station(self, station_id: str) -> Optional[PollingStation]:
        return self._find(self._stations, station_id)

    def get_polling_station_or_raise(self, station_id: str) -> PollingStation:
        return self._require(self._stations, "polling_station", station_id)

    def update_polling_station(self, station_id: str, **updates: Any) -> bool:
        return self._update(self._stations, station_id, StationUpdate, updates)

    def delete_polling_station(self, station_id: str) -> bool:
        return self._delete(self._stations, "polling_station", station_id)

    def assign_member(self, station_id: str, member_id: str) -> PollingStation:
        """Asigna un miembro a la mesa; reemplaza al del mismo rol.

        English: Assign a member to the station, replacing the same role.
        """
        station = self.get_polling_station_or_raise(station_id)
        station.add_member(self.get_polling_station_member_or_raise(member_id))
        self._commit()
        return station

    # -- polling station members -----------------------------------------

    def create_polling_station_member(
        self,
        first_name: str,
        last_name: str,
        dni: str,
        member_type: Union[MemberType, str],
        phone_number: str = "",
        email: str = "",
    ) -> PollingStationMember:
        data = MemberInput(
            first_name=first_name,
            last_name=last_name,
            dni=dni,
            member_type=member_type,
            phone_number=phone_number,
            email=email,
        )
        member = PollingStationMember(**data.model_dump())
        self._members[member.id] = member
        self._commit()
        return member

    def get_polling_station_members(self) -> List[PollingStationMember]:
        return self._active(self._members)

    def get_polling_station_member(self, member_id: str) -> Optional[PollingStationMember]:
        return self._find(self._members, member_id)

    def get_polling_station_member_or_raise(self, member_id: str) -> PollingStationMember:
        return self._require(self._members, "polling_station_member", member_id)

    def update_polling_station_member(self, member_id: str, **updates: Any) -> bool:
        return self._update(self._members, member_id, MemberUpdate, updates)

    def delete_polling_station_member(self, member_id: str) -> bool:
        return self._delete(self._members, "polling_station_member", member_id)

    # -- electoral records -----------------------------------------------

    def create_electoral_record(
        self,
        title: str,
        polling_station_id: str,
        place: str,
        record_number: str,
    ) -> Optional[ElectoralRecord]:
        data = RecordInput(
            title=title,
            polling_station_id=polling_station_id,
            place=place,
            record_number=record_number,
        )
        station = self._stations.get(data.polling_station_id)
        if station is None:
            logger.warning("record_rejected reason=station_not_found station_id=%s", data.polling_station_id)
            return None
        record = ElectoralRecord(data.title, station, data.place, data.record_number)
        self._records[record.id] = record
        logger.info("record_created id=%s station_id=%s", record.id, station.id)
        self._commit()
        return record

    def get_electoral_records(self) -> List[ElectoralRecord]:
        return list(self._records.values())

    def get_electoral_record(self, record_id: str) -> Optional[ElectoralRecord]:
        return self._records.get(record_id)

    def get_electoral_record_or_raise(self, record_id: str) -> ElectoralRecord:
        record = self._records.get(record_id)
        if record is None:
            raise EntityNotFoundError("electoral_record", record_id)
        return record

    def update_electoral_record(self, record_id: str, **updates: Any) -> bool:
        """Actualiza título, lugar o número de un acta en borrador.

        Returns ``False`` when the record does not exist. A finalized record
        raises ``AlreadyFinalizedError``.

        English:
            Update title, place or number of a draft record.
        """
        changes = RecordUpdate.model_validate(updates).changes()
        record = self._records.get(record_id)
        if record is None:
            return False
        record.update_info(**changes)
        self._commit()
        return True

    def register_votes(
        self,
        record_id: str,
        submission: Union[VoteSubmission, Dict[str, Any]],
        *,
        role: Union[Role, str],
    ) -> ElectoralRecord:
        """Carga los votos de un acta en borrador.

        Each entry is an upsert, so re-submitting the same payload leaves the
        record unchanged.

        English:
            Load votes into a draft record.
        """
        self._authorize(role, Action.REGISTER_VOTES)
        payload = (
            submission if isinstance(submission, VoteSubmission) else VoteSubmission.model_validate(submission)
        )
        record = self.get_electoral_record_or_raise(record_id)
        with record.lock:
            for entry in payload.entries:
                record.add_vote_record(entry.candidate_id, entry.votes, entry.preferential_votes)
            if payload.blank_votes is not None and payload.null_votes is not None:
                record.set_blank_and_null_votes(payload.blank_votes, payload.null_votes)
        self._audit_log(record_id=record.id, station_id=record.polling_station.id).info(
            "votes_registered",
            role=Role(role).value,
            entries=len(payload.entries),
            effective=record.total_effective_voters,
        )
        self._commit()
        return record

    def finalize_record(
        self,
        record_id: str,
        *,
        role: Union[Role, str],
        official_seal: Optional[str] = None,
        signatures: Iterable[str] = (),
    ) -> ElectoralRecord:
        """Firma y sella un acta. Sin sello explícito se usa ``compute_seal``.

        English:
            Sign and seal a record. Without an explicit seal the content
            digest from ``compute_seal`` is used.
        """
        self._authorize(role, Action.FINALIZE_RECORD)
        record = self.get_electoral_record_or_raise(record_id)
        with record.lock:
            for signature in signatures:
                record.add_signature(signature)
            record.finalize(official_seal or compute_seal(record))
        self._audit_log(record_id=record.id, station_id=record.polling_station.id).info(
            "record_sealed", role=Role(role).value, signatures=len(record.signatures)
        )
        self._commit()
        return record

    # -- aggregation and reports -----------------------------------------

    def attach_record(self, election_id: str, record_id: str, *, role: Union[Role, str]) -> Election:
        self._authorize(role, Action.REGISTER_VOTES)
        election = self.get_election_or_raise(election_id)
        election.add_electoral_record(self.get_electoral_record_or_raise(record_id))
        self._audit_log(election_id=election.id, record_id=record_id).info(
            "record_attached", role=Role(role).value
        )
        self._commit()
        return election

    def finalize_election(self, election_id: str, *, role: Union[Role, str]) -> Election:
        self._authorize(role, Action.FINALIZE_ELECTION)
        election = self.get_election_or_raise(election_id)
        election.finalize()
        self._audit_log(election_id=election.id).info(
            "election_sealed", role=Role(role).value, records=len(election.electoral_records)
        )
        self._commit()
        return election

    def election_report(self, election_id: str, *, role: Union[Role, str] = Role.OBSERVER) -> ElectionReport:
        self._authorize(role, Action.VIEW_REPORTS)
        return self.get_election_or_raise(election_id).generate_report()

    def audit_record(self, record_id: str, election_id: Optional[str] = None) -> AuditResult:
        """Ejecuta las reglas de consistencia sobre un acta.

        When ``election_id`` is omitted the first election holding the record
        provides the candidate context; without one the unknown-candidate
        rule is skipped.

        English:
            Run the consistency rules against a record.
        """
        record = self.get_electoral_record_or_raise(record_id)
        if election_id is not None:
            election: Optional[Election] = self.get_election_or_raise(election_id)
        else:
            election = next(
                (item for item in self._elections.values() if item.has_record(record_id)),
                None,
            )
        context = RuleContext()
        if election is not None:
            context = RuleContext(
                candidate_ids=frozenset(candidate.id for candidate in election.candidates),
                election_id=election.id,
            )
        return self.auditor.run(record, context)

    # -- bootstrap and persistence ---------------------------------------

    def apply_seed(self, seed: SeedFile) -> None:
        """Registra partidos, candidatos y mesas de la semilla.

        English: Register the parties, candidates and stations of a seed.
        """
        autosave, self.autosave = self.autosave, False
        try:
            for seed_party in seed.parties:
                party = self.create_political_party(
                    seed_party.name,
                    seed_party.acronym,
                    seed_party.legal_representative,
                )
                for seed_candidate in seed_party.candidates:
                    self.create_candidate(
                        seed_candidate.first_name,
                        seed_candidate.last_name,
                        seed_candidate.dni,
                        party.id,
                        seed_candidate.position,
                    )
            for station in seed.polling_stations:
                self.create_polling_station(**station.model_dump())
        finally:
            self.autosave = autosave
        logger.info("seed_applied parties=%s stations=%s", len(seed.parties), len(seed.polling_stations))
        self._commit()

    def contents(self) -> StoreContents:
        return StoreContents(
            parties=list(self._parties.values()),
            candidates=list(self._candidates.values()),
            members=list(self._members.values()),
            polling_stations=list(self._stations.values()),
            electoral_records=list(self._records.values()),
            elections=list(self._elections.values()),
        )

    def save(self) -> str:
        if self.store is None:
            raise EscrutinioError("no snapshot store configured")
        return self.store.save(self.contents())

    def load(self) -> bool:
        """Reemplaza el estado en memoria con el snapshot persistido.

        Returns ``False`` when no snapshot exists yet.

        English:
            Replace in-memory state with the persisted snapshot.
        """
        if self.store is None:
            raise EscrutinioError("no snapshot store configured")
        contents = self.store.load()
        if contents is None:
            return False
        self._parties = {item.id: item for item in contents.parties}
        self._candidates = {item.id: item for item in contents.candidates}
        self._members = {item.id: item for item in contents.members}
        self._stations = {item.id: item for item in contents.polling_stations}
        self._records = {item.id: item for item in contents.electoral_records}
        self._elections = {item.id: item for item in contents.elections}
        return True


def open_service(settings: EscrutinioSettings, autosave: bool = True) -> ElectoralService:
    """Crea el servicio desde la configuración y carga (o siembra) el snapshot.

    English:
        Build the service from settings, then load the snapshot or, when
        none exists, apply the seed and save it.
    """
    service = ElectoralService(
        store=SnapshotStore(settings.STORAGE_PATH),
        auditor=RecordAuditor(load_rules_config(settings.RULES_FILE)),
        require_finalized_records=settings.REQUIRE_FINALIZED_RECORDS,
        autosave=autosave,
    )
    if not service.load():
        service.apply_seed(load_seed_file(settings.SEED_FILE))
        service.save()
    return service
