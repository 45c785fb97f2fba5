# Storage Module
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

"""Persistencia del escrutinio en un snapshot JSON plano con digest.

Entities are written as flat lists that reference each other by id. Loading
goes through an identity map, so every record of a station points to the
same ``PollingStation`` object and every candidate of a party to the same
``PoliticalParty`` object.

English:
    Tally persistence as a flat JSON snapshot with a digest.
"""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
import tempfile
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .core.election import Election
from .core.errors import SnapshotIntegrityError
from .core.identity import utc_now
from .core.ledger import CandidateTotals, LedgerTotals, StationTotals
from .core.models import (
    Candidate,
    Entity,
    LifecycleState,
    MemberType,
    PoliticalParty,
    PollingStation,
    PollingStationMember,
)
from .core.record import ElectoralRecord, VoteRecord

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT_VERSION = 1
SNAPSHOT_FILENAME = "escrutinio.json"
DIGEST_FILENAME = "escrutinio.sha256"


@dataclass
class StoreContents:
    """Todas las entidades persistidas, activas o dadas de baja.

    English: Every persisted entity, active or deactivated.
    """

    parties: List[PoliticalParty] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    members: List[PollingStationMember] = field(default_factory=list)
    polling_stations: List[PollingStation] = field(default_factory=list)
    electoral_records: List[ElectoralRecord] = field(default_factory=list)
    elections: List[Election] = field(default_factory=list)


def write_atomic(path: Path, content: bytes) -> None:
    """Escritura atómica usando archivo temporal.

    English: Atomic write using a temporary file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(delete=False, dir=str(path.parent)) as tmp_file:
        tmp_file.write(content)
        temp_name = tmp_file.name
    shutil.move(temp_name, path)


def canonical_bytes(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_digest(payload: Dict[str, Any]) -> str:
    return hashlib.sha256(canonical_bytes(payload)).hexdigest()


# -- serialization ---------------------------------------------------------


def _entity_fields(entity: Entity) -> Dict[str, Any]:
    return {
        "id": entity.id,
        "state": entity.state.value,
        "created_at": entity.created_at.isoformat(),
        "updated_at": entity.updated_at.isoformat(),
    }


def _party_to_dict(party: PoliticalParty) -> Dict[str, Any]:
    return {
        **_entity_fields(party),
        "name": party.name,
        "acronym": party.acronym,
        "legal_representative": party.legal_representative,
        "logo": party.logo,
        "founded_date": party.founded_date.isoformat(),
    }


def _candidate_to_dict(candidate: Candidate) -> Dict[str, Any]:
    return {
        **_entity_fields(candidate),
        "first_name": candidate.first_name,
        "last_name": candidate.last_name,
        "dni": candidate.dni,
        "party_id": candidate.political_party.id,
        "position": candidate.position,
    }


def _member_to_dict(member: PollingStationMember) -> Dict[str, Any]:
    return {
        **_entity_fields(member),
        "first_name": member.first_name,
        "last_name": member.last_name,
        "dni": member.dni,
        "member_type": member.member_type.value,
        "phone_number": member.phone_number,
        "email": member.email,
    }


def _station_to_dict(station: PollingStation) -> Dict[str, Any]:
    return {
        **_entity_fields(station),
        "station_number": station.station_number,
        "location": station.location,
        "address": station.address,
        "registered_voters": station.registered_voters,
        "effective_voters": station.effective_voters,
        "roster": {member.member_type.value: member.id for member in station.members},
    }


def _record_to_dict(record: ElectoralRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "title": record.title,
        "date": record.date.isoformat(),
        "time": record.time,
        "place": record.place,
        "polling_station_id": record.polling_station.id,
        "record_number": record.record_number,
        "total_registered_voters": record.total_registered_voters,
        "vote_records": [
            {
                "candidate_id": entry.candidate_id,
                "votes": entry.votes,
                "preferential_votes": entry.preferential_votes,
            }
            for entry in record.vote_records
        ],
        "blank_votes": record.blank_votes,
        "null_votes": record.null_votes,
        "observations": record.observations,
        "signatures": list(record.signatures),
        "official_seal": record.official_seal,
        "is_finalized": record.is_finalized,
        "created_at": record.created_at.isoformat(),
        "updated_at": record.updated_at.isoformat(),
    }


def _totals_to_dict(totals: LedgerTotals) -> Dict[str, Any]:
    return {
        "by_candidate": {
            candidate_id: {"votes": entry.votes, "preferential_votes": entry.preferential_votes}
            for candidate_id, entry in totals.by_candidate.items()
        },
        "blank_votes": totals.blank_votes,
        "null_votes": totals.null_votes,
        "registered_voters": totals.registered_voters,
        "effective_voters": totals.effective_voters,
        "by_station": {station_id: asdict(entry) for station_id, entry in totals.by_station.items()},
    }


def _election_to_dict(election: Election) -> Dict[str, Any]:
    return {
        **_entity_fields(election),
        "name": election.name,
        "date": election.date.isoformat(),
        "election_type": election.election_type.value,
        "description": election.description,
        "candidate_ids": [candidate.id for candidate in election.candidates],
        "polling_station_ids": [station.id for station in election.polling_stations],
        "record_ids": [record.id for record in election.electoral_records],
        "require_finalized_records": election.require_finalized_records,
        "is_finalized": election.is_finalized,
        "frozen_totals": _totals_to_dict(election.ledger_totals()) if election.is_finalized else None,
    }


def contents_to_dict(contents: StoreContents) -> Dict[str, Any]:
    return {
        "format_version": SNAPSHOT_FORMAT_VERSION,
        "software_version": __version__,
        "parties": [_party_to_dict(item) for item in contents.parties],
        "candidates": [_candidate_to_dict(item) for item in contents.candidates],
        "members": [_member_to_dict(item) for item in contents.members],
        "polling_stations": [_station_to_dict(item) for item in contents.polling_stations],
        "electoral_records": [_record_to_dict(item) for item in contents.electoral_records],
        "elections": [_election_to_dict(item) for item in contents.elections],
    }


# -- reconstruction --------------------------------------------------------


def _restore(entity: Entity, data: Dict[str, Any]) -> None:
    entity.restore_metadata(
        data["id"],
        LifecycleState(data.get("state", LifecycleState.ACTIVE.value)),
        datetime.fromisoformat(data["created_at"]),
        datetime.fromisoformat(data["updated_at"]),
    )


def _totals_from_dict(data: Dict[str, Any]) -> LedgerTotals:
    return LedgerTotals(
        by_candidate={
            candidate_id: CandidateTotals(votes=entry["votes"], preferential_votes=entry["preferential_votes"])
            for candidate_id, entry in data["by_candidate"].items()
        },
        blank_votes=data["blank_votes"],
        null_votes=data["null_votes"],
        registered_voters=data["registered_voters"],
        effective_voters=data["effective_voters"],
        by_station={
            station_id: StationTotals(**entry) for station_id, entry in data.get("by_station", {}).items()
        },
    )


def contents_from_dict(payload: Dict[str, Any]) -> StoreContents:
    """Reconstruye entidades desde el snapshot preservando identidad.

    Raises ``SnapshotIntegrityError`` when a reference points to an id that
    is not present in the snapshot.

    English:
        Rebuild entities from the snapshot, preserving object identity.
    """
    version = payload.get("format_version")
    if version != SNAPSHOT_FORMAT_VERSION:
        raise SnapshotIntegrityError(f"unsupported snapshot format_version: {version!r}")

    def resolve(index: Dict[str, Any], kind: str, entity_id: str) -> Any:
        try:
            return index[entity_id]
        except KeyError:
            raise SnapshotIntegrityError(f"dangling {kind} reference: {entity_id}") from None

    contents = StoreContents()

    parties: Dict[str, PoliticalParty] = {}
    for data in payload.get("parties", []):
        party = PoliticalParty(
            data["name"],
            data["acronym"],
            data["legal_representative"],
            logo=data.get("logo"),
            founded_date=date.fromisoformat(data["founded_date"]),
        )
        _restore(party, data)
        parties[party.id] = party
        contents.parties.append(party)

    candidates: Dict[str, Candidate] = {}
    for data in payload.get("candidates", []):
        candidate = Candidate(
            data["first_name"],
            data["last_name"],
            data["dni"],
            resolve(parties, "party", data["party_id"]),
            position=data.get("position", "Candidato"),
        )
        _restore(candidate, data)
        candidates[candidate.id] = candidate
        contents.candidates.append(candidate)

    members: Dict[str, PollingStationMember] = {}
    for data in payload.get("members", []):
        member = PollingStationMember(
            data["first_name"],
            data["last_name"],
            data["dni"],
            MemberType(data["member_type"]),
            phone_number=data.get("phone_number", ""),
            email=data.get("email", ""),
        )
        _restore(member, data)
        members[member.id] = member
        contents.members.append(member)

    stations: Dict[str, PollingStation] = {}
    for data in payload.get("polling_stations", []):
        station = PollingStation(
            data["station_number"],
            data["location"],
            data["address"],
            data["registered_voters"],
        )
        station.effective_voters = data.get("effective_voters", 0)
        for member_id in data.get("roster", {}).values():
            station.add_member(resolve(members, "member", member_id))
        _restore(station, data)
        stations[station.id] = station
        contents.polling_stations.append(station)

    records: Dict[str, ElectoralRecord] = {}
    for data in payload.get("electoral_records", []):
        record = ElectoralRecord.restore(
            record_id=data["id"],
            title=data["title"],
            polling_station=resolve(stations, "polling station", data["polling_station_id"]),
            place=data["place"],
            record_number=data["record_number"],
            total_registered_voters=data["total_registered_voters"],
            vote_records=[VoteRecord(**entry) for entry in data.get("vote_records", [])],
            blank_votes=data.get("blank_votes", 0),
            null_votes=data.get("null_votes", 0),
            observations=data.get("observations", ""),
            signatures=data.get("signatures", []),
            official_seal=data.get("official_seal", ""),
            is_finalized=data.get("is_finalized", False),
            record_date=date.fromisoformat(data["date"]),
            record_time=data["time"],
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
        records[record.id] = record
        contents.electoral_records.append(record)

    for data in payload.get("elections", []):
        election = Election(
            data["name"],
            date.fromisoformat(data["date"]),
            data["election_type"],
            description=data.get("description", ""),
            require_finalized_records=data.get("require_finalized_records", False),
        )
        _restore(election, data)
        for candidate_id in data.get("candidate_ids", []):
            election.add_candidate(resolve(candidates, "candidate", candidate_id))
        for station_id in data.get("polling_station_ids", []):
            election.add_polling_station(resolve(stations, "polling station", station_id))
        for record_id in data.get("record_ids", []):
            election.add_electoral_record(resolve(records, "record", record_id))
        if data.get("is_finalized"):
            election.restore_final_state(_totals_from_dict(data["frozen_totals"]))
        # restore_metadata again: the mutators above touch updated_at.
        _restore(election, data)
        contents.elections.append(election)

    return contents


class SnapshotStore:
    """Guarda y carga el snapshot completo del escrutinio.

    Args:
        base_path (Path): Directorio donde viven el snapshot y su digest.

    English:
        Saves and loads the full tally snapshot. The document embeds the
        SHA-256 of its canonical JSON data and ``load`` verifies against it,
        raising ``SnapshotIntegrityError`` on mismatch. The ``.sha256`` side
        file is an export for external tools and is never trusted on load.
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path)

    @property
    def snapshot_path(self) -> Path:
        return self.base_path / SNAPSHOT_FILENAME

    @property
    def digest_path(self) -> Path:
        return self.base_path / DIGEST_FILENAME

    def exists(self) -> bool:
        return self.snapshot_path.exists()

    def save(self, contents: StoreContents) -> str:
        payload = contents_to_dict(contents)
        digest = compute_digest(payload)
        document = {"saved_at": utc_now().isoformat(), "digest": digest, "data": payload}
        write_atomic(
            self.snapshot_path,
            json.dumps(document, ensure_ascii=False, indent=2).encode("utf-8"),
        )
        write_atomic(self.digest_path, f"{digest}\n".encode("utf-8"))
        logger.info(
            "snapshot_saved path=%s digest=%s records=%s elections=%s",
            self.snapshot_path,
            digest,
            len(contents.electoral_records),
            len(contents.elections),
        )
        return digest

    def load(self) -> Optional[StoreContents]:
        """Carga el snapshot; ``None`` si aún no existe.

        English: Load the snapshot; ``None`` when it does not exist yet.
        """
        if not self.snapshot_path.exists():
            return None
        try:
            document = json.loads(self.snapshot_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.error("snapshot_corrupt path=%s error=%s", self.snapshot_path, exc)
            raise SnapshotIntegrityError(f"snapshot is not valid JSON: {self.snapshot_path}") from exc

        payload = document.get("data")
        if not isinstance(payload, dict):
            raise SnapshotIntegrityError("snapshot has no data section")
        digest = compute_digest(payload)
        expected = document.get("digest")
        if expected != digest:
            logger.error("snapshot_digest_mismatch expected=%s computed=%s", expected, digest)
            raise SnapshotIntegrityError(f"snapshot digest mismatch: expected {expected}, computed {digest}")
        if self.digest_path.exists() and self.digest_path.read_text(encoding="utf-8").strip() != digest:
            # The side file is written after the snapshot; a stale one is only an export.
            logger.warning("snapshot_digest_file_stale path=%s digest=%s", self.digest_path, digest)

        contents = contents_from_dict(payload)
        logger.info("snapshot_loaded path=%s digest=%s", self.snapshot_path, digest)
        return contents
