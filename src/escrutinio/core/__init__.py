"""Núcleo del motor de escrutinio.

Tally engine core: entities, ledger, report derivation and record seal.
"""

from .election import Election
from .errors import (
    AlreadyFinalizedError,
    DuplicateRecordError,
    EntityNotFoundError,
    EscrutinioError,
    InvalidVoteCountError,
    PermissionDeniedError,
    SnapshotIntegrityError,
    UnsealedRecordError,
)
from .ledger import CandidateTotals, LedgerTotals, TallyLedger
from .models import (
    Candidate,
    ElectionType,
    Entity,
    LifecycleState,
    MemberType,
    PoliticalParty,
    PollingStation,
    PollingStationMember,
)
from .record import ElectoralRecord, VoteRecord
from .report import CandidateResult, ElectionReport, report_to_dict
from .seal import compute_seal, verify_seal

__all__ = [
    "AlreadyFinalizedError",
    "Candidate",
    "CandidateResult",
    "CandidateTotals",
    "DuplicateRecordError",
    "Election",
    "ElectionReport",
    "ElectionType",
    "ElectoralRecord",
    "Entity",
    "EntityNotFoundError",
    "EscrutinioError",
    "InvalidVoteCountError",
    "LedgerTotals",
    "LifecycleState",
    "MemberType",
    "PermissionDeniedError",
    "PoliticalParty",
    "PollingStation",
    "PollingStationMember",
    "SnapshotIntegrityError",
    "TallyLedger",
    "UnsealedRecordError",
    "VoteRecord",
    "compute_seal",
    "report_to_dict",
    "verify_seal",
]
