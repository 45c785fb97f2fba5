# Schemas Module
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

"""Esquemas Pydantic para validar entradas antes de llegar al motor.

Pydantic schemas that validate input at the boundary, before it reaches the
engine. ``ValidationError`` is a ``ValueError`` subclass, so callers can treat
malformed input uniformly.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from escrutinio.core.models import ElectionType, MemberType


def _strip_required(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Field cannot be empty")
    return cleaned


class PartyInput(BaseModel):
    """Alta de partido político. / Political party creation."""

    name: str = Field(min_length=1)
    acronym: str = Field(min_length=1, max_length=16)
    legal_representative: str = Field(min_length=1)
    logo: Optional[str] = None
    founded_date: Optional[dt.date] = None

    @field_validator("name", "acronym", "legal_representative")
    @classmethod
    def strip_text(cls, value: str) -> str:
        """Normaliza texto eliminando espacios y valida no vacío.

        English:
            Normalize text by trimming whitespace and validate non-empty.
        """
        return _strip_required(value)


class CandidateInput(BaseModel):
    """Alta de candidato. / Candidate creation."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    dni: str = Field(min_length=1)
    party_id: str = Field(min_length=1)
    position: str = "Candidato"

    @field_validator("first_name", "last_name", "dni", "party_id", "position")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class StationInput(BaseModel):
    """Alta de mesa de votación. / Polling station creation."""

    station_number: str = Field(min_length=1)
    location: str = Field(min_length=1)
    address: str = ""
    registered_voters: int = Field(default=0, ge=0)

    @field_validator("station_number", "location")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class MemberInput(BaseModel):
    """Alta de miembro de mesa. / Station member creation."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    dni: str = Field(min_length=1)
    member_type: MemberType
    phone_number: str = ""
    email: str = ""

    @field_validator("first_name", "last_name", "dni")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class ElectionInput(BaseModel):
    """Alta de elección. / Election creation."""

    name: str = Field(min_length=1)
    date: dt.date
    election_type: ElectionType
    description: str = ""

    @field_validator("name")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class RecordInput(BaseModel):
    """Alta de acta electoral. / Electoral record creation."""

    title: str = Field(min_length=1)
    polling_station_id: str = Field(min_length=1)
    place: str = Field(min_length=1)
    record_number: str = Field(min_length=1)

    @field_validator("title", "polling_station_id", "place", "record_number")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class PartialUpdate(BaseModel):
    """Base de las actualizaciones parciales.

    Only the fields the caller sends are applied; unknown fields and explicit
    nulls are rejected, so ``changes()`` never carries a value the entity
    could not hold.

    English:
        Base for partial updates.
    """

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return data

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class PartyUpdate(PartialUpdate):
    name: Optional[str] = Field(default=None, min_length=1)
    acronym: Optional[str] = Field(default=None, min_length=1, max_length=16)
    legal_representative: Optional[str] = Field(default=None, min_length=1)
    logo: Optional[str] = None
    founded_date: Optional[dt.date] = None

    @field_validator("name", "acronym", "legal_representative")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class CandidateUpdate(PartialUpdate):
    """Actualización de candidato; el partido se indica por id.

    English: Candidate update; the party is referenced by id.
    """

    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    dni: Optional[str] = Field(default=None, min_length=1)
    party_id: Optional[str] = Field(default=None, min_length=1)
    position: Optional[str] = Field(default=None, min_length=1)

    @field_validator("first_name", "last_name", "dni", "party_id", "position")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class StationUpdate(PartialUpdate):
    station_number: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    registered_voters: Optional[int] = Field(default=None, ge=0)

    @field_validator("station_number", "location")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class MemberUpdate(PartialUpdate):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    dni: Optional[str] = Field(default=None, min_length=1)
    phone_number: Optional[str] = None
    email: Optional[str] = None

    @field_validator("first_name", "last_name", "dni")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class ElectionUpdate(PartialUpdate):
    name: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None
    election_type: Optional[ElectionType] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class RecordUpdate(PartialUpdate):
    title: Optional[str] = Field(default=None, min_length=1)
    place: Optional[str] = Field(default=None, min_length=1)
    record_number: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title", "place", "record_number")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)


class VoteEntry(BaseModel):
    """Línea de votos enviada para un candidato. / Vote line submitted for a candidate."""

    candidate_id: str = Field(min_length=1)
    votes: int = Field(ge=0)
    preferential_votes: int = Field(default=0, ge=0)


class VoteSubmission(BaseModel):
    """Carga de votos de un acta.

    Blank and null counts are optional; when omitted the record keeps its
    current values. A candidate may appear only once per submission.

    English:
        Vote submission for a record.
    """

    entries: List[VoteEntry] = Field(default_factory=list)
    blank_votes: Optional[int] = Field(default=None, ge=0)
    null_votes: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def unique_candidates(self) -> "VoteSubmission":
        seen: set[str] = set()
        for entry in self.entries:
            if entry.candidate_id in seen:
                raise ValueError(f"candidate_id repeated in submission: {entry.candidate_id}")
            seen.add(entry.candidate_id)
        return self

    @model_validator(mode="after")
    def blank_and_null_together(self) -> "VoteSubmission":
        if (self.blank_votes is None) != (self.null_votes is None):
            raise ValueError("blank_votes and null_votes must be provided together")
        return self


class SeedCandidate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    dni: str = Field(min_length=1)
    position: str = "Candidato"


class SeedParty(BaseModel):
    name: str = Field(min_length=1)
    acronym: str = Field(min_length=1)
    legal_representative: str = Field(min_length=1)
    candidates: List[SeedCandidate] = Field(default_factory=list)


class SeedFile(BaseModel):
    """Esquema del archivo YAML de datos iniciales. / Schema for the seed YAML file."""

    parties: List[SeedParty] = Field(default_factory=list)
    polling_stations: List[StationInput] = Field(default_factory=list)
