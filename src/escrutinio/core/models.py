"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/escrutinio/core/models.py`.
Entidades de referencia del escrutinio: partidos, candidatos, miembros de
mesa y mesas de votación.

Componentes detectados:
  - LifecycleState
  - Entity
  - PoliticalParty
  - Candidate
  - MemberType
  - PollingStationMember
  - PollingStation
  - ElectionType

Notas:
- Los contadores de votos del candidato solo los publica el libro de
  escrutinio de la elección.
- La baja es lógica (estado DEACTIVATED); nada se borra físicamente.

======================== ENGLISH ========================
File: `src/escrutinio/core/models.py`.
Reference entities for the tally: parties, candidates, station members and
polling stations.

Detected components:
  - LifecycleState
  - Entity
  - PoliticalParty
  - Candidate
  - MemberType
  - PollingStationMember
  - PollingStation
  - ElectionType

Notes:
- Candidate vote counters are only published by the election ledger.
- Deletion is logical (DEACTIVATED state); nothing is physically removed.
"""

# Models Module
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

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Union

from .errors import require_count, require_text
from .identity import new_id, utc_now

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """Estado de ciclo de vida de una entidad.

    English: Entity lifecycle state.
    """

    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class ElectionType(str, Enum):
    MUNICIPAL = "municipal"
    NATIONAL = "national"
    REFERENDUM = "referendum"


class Entity:
    """Base común: identidad, estado y marcas de tiempo.

    Subclasses declare ``UPDATABLE_FIELDS`` to whitelist the attributes that
    ``update_info`` may change.

    English:
        Common base: identity, lifecycle state and timestamps.
    """

    UPDATABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self) -> None:
        self.id: str = new_id()
        self.state: LifecycleState = LifecycleState.ACTIVE
        self.created_at: datetime = utc_now()
        self.updated_at: datetime = self.created_at

    @property
    def is_active(self) -> bool:
        return self.state is LifecycleState.ACTIVE

    def touch(self) -> None:
        self.updated_at = utc_now()

    def deactivate(self) -> None:
        """Baja lógica. / Soft deactivation."""
        self.state = LifecycleState.DEACTIVATED
        self.touch()

    def activate(self) -> None:
        self.state = LifecycleState.ACTIVE
        self.touch()

    def restore_metadata(
        self,
        entity_id: str,
        state: LifecycleState,
        created_at: datetime,
        updated_at: datetime,
    ) -> None:
        """Restaura identidad y marcas de tiempo desde un snapshot persistido.

        English: Restore identity and timestamps from a persisted snapshot.
        """
        self.id = entity_id
        self.state = LifecycleState(state)
        self.created_at = created_at
        self.updated_at = updated_at

    def update_info(self, **updates: Any) -> None:
        """Actualiza campos permitidos.

        Raises ``ValueError`` for fields outside ``UPDATABLE_FIELDS``.

        English:
            Update whitelisted fields.
        """
        unknown = sorted(set(updates) - self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"{type(self).__name__} fields cannot be updated: {', '.join(unknown)}")
        for key, value in updates.items():
            setattr(self, key, value)
        self.touch()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}({self.id})>"


class PoliticalParty(Entity):
    """Partido político habilitado para competir.

    Args:
        name: Nombre del partido.
        acronym: Sigla; se normaliza a mayúsculas.
        legal_representative: Representante legal.
        logo: Referencia opcional al logo.
        founded_date: Fecha de fundación; hoy si se omite.

    English:
        Political party eligible to stand in elections. The acronym is
        normalized to uppercase, also when updated.
    """

    UPDATABLE_FIELDS = frozenset({"name", "acronym", "legal_representative", "logo", "founded_date"})

    def __init__(
        self,
        name: str,
        acronym: str,
        legal_representative: str,
        logo: Optional[str] = None,
        founded_date: Optional[date] = None,
    ) -> None:
        super().__init__()
        self.name = require_text("name", name)
        self.acronym = acronym
        self.legal_representative = legal_representative
        self.logo = logo or ""
        self.founded_date = founded_date or utc_now().date()

    @property
    def acronym(self) -> str:
        return self._acronym

    @acronym.setter
    def acronym(self, value: str) -> None:
        self._acronym = require_text("acronym", value).strip().upper()

    def __repr__(self) -> str:
        return f"<PoliticalParty({self.acronym})>"


class Candidate(Entity):
    """Candidato postulado por un partido.

    ``votes`` and ``preferential_votes`` are read-only; the election ledger
    publishes them by replaying its electoral records. They are independent
    counters and the subset relation between them is not enforced.

    English:
        Candidate nominated by a party.
    """

    UPDATABLE_FIELDS = frozenset({"first_name", "last_name", "dni", "position", "political_party"})

    def __init__(
        self,
        first_name: str,
        last_name: str,
        dni: str,
        political_party: PoliticalParty,
        position: str = "Candidato",
    ) -> None:
        super().__init__()
        self.first_name = first_name
        self.last_name = last_name
        self.dni = dni
        self.political_party = political_party
        self.position = position
        self._votes = 0
        self._preferential_votes = 0

    @property
    def political_party(self) -> PoliticalParty:
        return self._political_party

    @political_party.setter
    def political_party(self, value: PoliticalParty) -> None:
        if not isinstance(value, PoliticalParty):
            raise ValueError("political_party must be a PoliticalParty")
        self._political_party = value

    @property
    def votes(self) -> int:
        return self._votes

    @property
    def preferential_votes(self) -> int:
        return self._preferential_votes

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def get_full_name(self) -> str:
        return self.full_name

    def get_total_votes(self) -> int:
        return self._votes

    def _publish_totals(self, votes: int, preferential_votes: int) -> None:
        # Ledger-only entry point; assignment, never increment.
        self._votes = require_count("votes", votes)
        self._preferential_votes = require_count("preferential_votes", preferential_votes)

    def __repr__(self) -> str:
        return f"<Candidate({self.full_name},{self.political_party.acronym})>"


class MemberType(str, Enum):
    """Rol dentro de la mesa. / Role within the polling station."""

    PRESIDENTE = "presidente"
    SECRETARIO = "secretario"
    VOCAL = "vocal"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PollingStationMember(Entity):
    """Miembro de mesa (presidente, secretario o vocal).

    English: Polling station member (president, secretary or at-large).
    """

    UPDATABLE_FIELDS = frozenset({"first_name", "last_name", "dni", "phone_number", "email"})

    def __init__(
        self,
        first_name: str,
        last_name: str,
        dni: str,
        member_type: Union[MemberType, str],
        phone_number: str = "",
        email: str = "",
    ) -> None:
        super().__init__()
        self.first_name = first_name
        self.last_name = last_name
        self.dni = dni
        self.member_type = MemberType(member_type)
        self.phone_number = phone_number
        self.email = email

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def get_member_type_label(self) -> str:
        return self.member_type.label


class PollingStation(Entity):
    """Mesa de votación con su padrón y su integración.

    The roster is a fixed-key mapping with one slot per ``MemberType``:
    adding a member of an occupied type replaces the previous one.
    ``effective_voters`` is maintained through ``update_voter_count`` and is
    not synchronized with any electoral record.

    English:
        Polling station with registered-voter capacity and member roster.
    """

    UPDATABLE_FIELDS = frozenset({"station_number", "location", "address", "registered_voters"})

    def __init__(
        self,
        station_number: str,
        location: str,
        address: str,
        registered_voters: int = 0,
    ) -> None:
        super().__init__()
        self.station_number = require_text("station_number", station_number)
        self.location = location
        self.address = address
        self.registered_voters = registered_voters
        self.effective_voters = 0
        self._roster: Dict[MemberType, Optional[PollingStationMember]] = {
            member_type: None for member_type in MemberType
        }

    @property
    def registered_voters(self) -> int:
        return self._registered_voters

    @registered_voters.setter
    def registered_voters(self, value: int) -> None:
        self._registered_voters = require_count("registered_voters", value)

    @property
    def members(self) -> List[PollingStationMember]:
        return [member for member in self._roster.values() if member is not None]

    def add_member(self, member: PollingStationMember) -> None:
        replaced = self._roster[member.member_type]
        self._roster[member.member_type] = member
        if replaced is not None and replaced is not member:
            logger.info(
                "station_member_replaced station_id=%s member_type=%s previous=%s",
                self.id,
                member.member_type.value,
                replaced.id,
            )
        self.touch()

    def remove_member(self, member_type: Union[MemberType, str]) -> None:
        self._roster[MemberType(member_type)] = None
        self.touch()

    def get_president(self) -> Optional[PollingStationMember]:
        return self._roster[MemberType.PRESIDENTE]

    def get_secretary(self) -> Optional[PollingStationMember]:
        return self._roster[MemberType.SECRETARIO]

    def get_vocals(self) -> List[PollingStationMember]:
        vocal = self._roster[MemberType.VOCAL]
        return [vocal] if vocal is not None else []

    def update_voter_count(self, effective_voters: int) -> None:
        self.effective_voters = require_count("effective_voters", effective_voters)
        self.touch()

    def get_turnout_percentage(self) -> float:
        """Participación de la mesa; 0 si no hay inscritos.

        English: Station turnout; 0 when there are no registered voters.
        """
        if self.registered_voters == 0:
            return 0.0
        return self.effective_voters * 100 / self.registered_voters

    def __repr__(self) -> str:
        return f"<PollingStation({self.station_number})>"
