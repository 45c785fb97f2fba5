"""Pruebas de la fachada ElectoralService."""

from __future__ import annotations

from datetime import date

import pytest
import structlog
from pydantic import ValidationError
from structlog.testing import capture_logs

from escrutinio.auth import Role
from escrutinio.config import EscrutinioSettings
from escrutinio.core.errors import (
    AlreadyFinalizedError,
    EntityNotFoundError,
    EscrutinioError,
    PermissionDeniedError,
)
from escrutinio.core.models import ElectionType
from escrutinio.core.seal import verify_seal
from escrutinio.seed import default_seed
from escrutinio.service import ElectoralService, open_service
from escrutinio.storage import SnapshotStore


@pytest.fixture
def scenario(service):
    party = service.create_political_party("Partido Nacional", "PN", "Juan Pérez")
    other = service.create_political_party("Frente Amplio", "FA", "Carlos Rodriguez")
    cand_a = service.create_candidate("Ana", "Silva", "12345678", party.id)
    cand_b = service.create_candidate("Laura", "Fernández", "11223344", other.id)
    station = service.create_polling_station("001", "Escuela 12", "Av. Italia 1234", 100)
    election = service.create_election("Municipales", date(2025, 5, 11), "municipal")
    service.add_candidate_to_election(election.id, cand_a.id)
    service.add_candidate_to_election(election.id, cand_b.id)
    service.add_polling_station_to_election(election.id, station.id)
    record = service.create_electoral_record("Acta 001", station.id, "Escuela 12", "A-001")
    return {
        "cand_a": cand_a,
        "cand_b": cand_b,
        "station": station,
        "election": election,
        "record": record,
    }


def _submission(scenario, votes_a=50, votes_b=30):
    return {
        "entries": [
            {"candidate_id": scenario["cand_a"].id, "votes": votes_a},
            {"candidate_id": scenario["cand_b"].id, "votes": votes_b},
        ],
        "blank_votes": 5,
        "null_votes": 2,
    }


def test_create_with_missing_reference_returns_none(service):
    """Español: Función test_create_with_missing_reference_returns_none del módulo tests/test_escrutinio_service.py.

    English: Function test_create_with_missing_reference_returns_none defined in tests/test_escrutinio_service.py.
    """
    assert service.create_candidate("Ana", "Silva", "1", "missing-party") is None
    assert service.create_electoral_record("Acta", "missing-station", "Escuela", "A-1") is None
    assert service.get_candidates() == []
    assert service.get_electoral_records() == []


def test_create_rejects_malformed_input(service):
    with pytest.raises(ValidationError):
        service.create_political_party("", "PN", "Juan Pérez")
    with pytest.raises(ValueError):
        service.create_polling_station("002", "Club", registered_voters=-5)


def test_soft_delete_hides_entities(service):
    """Español: Función test_soft_delete_hides_entities del módulo tests/test_escrutinio_service.py.

    English: Function test_soft_delete_hides_entities defined in tests/test_escrutinio_service.py.
    """
    party = service.create_political_party("Partido Nacional", "PN", "Juan Pérez")
    assert service.delete_political_party(party.id) is True
    assert service.get_political_parties() == []
    assert service.get_political_party(party.id) is None
    assert party.is_active is False
    with pytest.raises(EntityNotFoundError):
        service.get_political_party_or_raise(party.id)
    assert service.delete_political_party("unknown") is False


def test_update_entities(service):
    party = service.create_political_party("Partido Nacional", "PN", "Juan Pérez")
    assert service.update_political_party(party.id, acronym="pnu") is True
    assert party.acronym == "PNU"
    assert service.update_political_party("unknown", name="X") is False
    with pytest.raises(ValueError):
        service.update_political_party(party.id, id="forged")


def test_update_coerces_typed_fields_and_persists(tmp_path):
    """Las actualizaciones tipadas se guardan y recargan sin romper el snapshot.

    English: Typed updates are saved and reloaded without breaking the snapshot.
    """
    store = SnapshotStore(tmp_path)
    service = ElectoralService(store=store, autosave=True)
    party = service.create_political_party("Partido Nacional", "PN", "Juan Pérez")
    other = service.create_political_party("Frente Amplio", "FA", "Carlos Rodriguez")
    candidate = service.create_candidate("Ana", "Silva", "12345678", party.id)
    election = service.create_election("Municipales", date(2025, 5, 11), "municipal")
    service.add_candidate_to_election(election.id, candidate.id)

    assert service.update_election(election.id, election_type="national", date="2025-06-01") is True
    assert service.update_political_party(party.id, founded_date="2020-01-01") is True
    assert service.update_candidate(candidate.id, party_id=other.id) is True

    assert election.election_type is ElectionType.NATIONAL
    assert election.date == date(2025, 6, 1)
    assert party.founded_date == date(2020, 1, 1)
    assert candidate.political_party is other
    assert service.election_report(election.id).results[0].party_acronym == "FA"

    loaded = ElectoralService(store=store)
    assert loaded.load() is True
    assert loaded.get_election_or_raise(election.id).election_type is ElectionType.NATIONAL
    assert loaded.get_candidate_or_raise(candidate.id).political_party.acronym == "FA"


def test_update_rejects_invalid_values_without_mutation(service, scenario):
    candidate = scenario["cand_a"]
    station = scenario["station"]
    election = scenario["election"]
    member = service.create_polling_station_member("Luis", "Suárez", "1", "presidente")

    with pytest.raises(ValueError):
        service.update_candidate(candidate.id, first_name="")
    with pytest.raises(ValueError):
        service.update_candidate(candidate.id, last_name="   ")
    with pytest.raises(ValueError):
        service.update_candidate(candidate.id, political_party="not-a-party")
    with pytest.raises(EntityNotFoundError):
        service.update_candidate(candidate.id, party_id="missing")
    with pytest.raises(ValueError):
        service.update_political_party(candidate.political_party.id, legal_representative="")
    with pytest.raises(ValueError):
        service.update_election(election.id, election_type="regional")
    with pytest.raises(ValueError):
        service.update_polling_station(station.id, registered_voters=-1)
    with pytest.raises(ValueError):
        service.update_polling_station(station.id, location=None)
    with pytest.raises(ValueError):
        service.update_polling_station_member(member.id, dni="")
    with pytest.raises(ValueError):
        service.update_polling_station_member(member.id, member_type="vocal")
    with pytest.raises(ValueError):
        service.update_electoral_record(scenario["record"].id, title="")

    assert candidate.full_name == "Ana Silva"
    assert candidate.political_party.acronym == "PN"
    assert election.election_type is ElectionType.MUNICIPAL
    assert station.registered_voters == 100
    assert station.location == "Escuela 12"
    assert member.dni == "1"
    assert scenario["record"].title == "Acta 001"


@pytest.fixture
def structlog_defaults():
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


def test_role_gated_operations_log_bound_context(service, scenario, structlog_defaults):
    record = scenario["record"]
    election = scenario["election"]
    with capture_logs() as logs:
        service.register_votes(record.id, _submission(scenario), role=Role.OPERATOR)
        service.finalize_record(record.id, role=Role.ADMIN)
        service.attach_record(election.id, record.id, role=Role.OPERATOR)
        service.finalize_election(election.id, role=Role.ADMIN)

    events = {entry["event"]: entry for entry in logs}
    assert events["votes_registered"]["record_id"] == record.id
    assert events["votes_registered"]["station_id"] == scenario["station"].id
    assert events["votes_registered"]["effective"] == 87
    assert events["record_sealed"]["role"] == "admin"
    assert events["record_attached"]["election_id"] == election.id
    assert events["election_sealed"]["records"] == 1


def test_member_assignment_replaces_role(service):
    station = service.create_polling_station("001", "Escuela 12", "Av. Italia 1234", 100)
    first = service.create_polling_station_member("Luis", "Suárez", "1", "presidente")
    second = service.create_polling_station_member("Diego", "Forlán", "2", "presidente")
    service.assign_member(station.id, first.id)
    service.assign_member(station.id, second.id)
    assert station.get_president() is second
    with pytest.raises(EntityNotFoundError):
        service.assign_member(station.id, "missing")


def test_register_votes_requires_operator(service, scenario):
    """Español: Función test_register_votes_requires_operator del módulo tests/test_escrutinio_service.py.

    English: Function test_register_votes_requires_operator defined in tests/test_escrutinio_service.py.
    """
    with pytest.raises(PermissionDeniedError):
        service.register_votes(scenario["record"].id, _submission(scenario), role=Role.OBSERVER)
    assert scenario["record"].vote_records == ()


def test_register_votes_is_idempotent(service, scenario):
    record_id = scenario["record"].id
    service.register_votes(record_id, _submission(scenario), role=Role.OPERATOR)
    record = service.register_votes(record_id, _submission(scenario), role="operator")

    assert record.get_total_valid_votes() == 80
    assert record.total_effective_voters == 87
    assert len(record.vote_records) == 2


def test_register_votes_unknown_record(service):
    with pytest.raises(EntityNotFoundError):
        service.register_votes("missing", {"entries": []}, role=Role.OPERATOR)


def test_finalize_record_requires_admin_and_computes_seal(service, scenario):
    """Español: Función test_finalize_record_requires_admin_and_computes_seal del módulo tests/test_escrutinio_service.py.

    English: Function test_finalize_record_requires_admin_and_computes_seal defined in tests/test_escrutinio_service.py.
    """
    record_id = scenario["record"].id
    service.register_votes(record_id, _submission(scenario), role=Role.OPERATOR)
    with pytest.raises(PermissionDeniedError):
        service.finalize_record(record_id, role=Role.OPERATOR)

    record = service.finalize_record(record_id, role=Role.ADMIN, signatures=["Presidente", "Secretario"])

    assert record.is_finalized is True
    assert record.signatures == ("Presidente", "Secretario")
    assert verify_seal(record) is True
    with pytest.raises(AlreadyFinalizedError):
        service.register_votes(record_id, _submission(scenario, votes_a=1), role=Role.OPERATOR)
    with pytest.raises(AlreadyFinalizedError):
        service.update_electoral_record(record_id, title="Corregida")
    assert record.get_vote_record(scenario["cand_a"].id).votes == 50


def test_end_to_end_report(service, scenario):
    """Español: Función test_end_to_end_report del módulo tests/test_escrutinio_service.py.

    English: Function test_end_to_end_report defined in tests/test_escrutinio_service.py.
    """
    election_id = scenario["election"].id
    record_id = scenario["record"].id
    service.register_votes(record_id, _submission(scenario), role=Role.OPERATOR)
    service.finalize_record(record_id, role=Role.ADMIN)
    service.attach_record(election_id, record_id, role=Role.OPERATOR)

    report = service.election_report(election_id)

    assert report.total_votes == 80
    assert report.blank_votes == 5
    assert report.null_votes == 2
    assert report.winner.candidate_id == scenario["cand_a"].id
    assert report.results[0].percentage == 62.5

    with pytest.raises(PermissionDeniedError):
        service.finalize_election(election_id, role=Role.OPERATOR)
    service.finalize_election(election_id, role=Role.ADMIN)
    assert service.election_report(election_id).is_final is True

    other = service.create_electoral_record("Acta 002", scenario["station"].id, "Escuela 12", "A-002")
    with pytest.raises(AlreadyFinalizedError):
        service.attach_record(election_id, other.id, role=Role.OPERATOR)


def test_require_finalized_records_default():
    service = ElectoralService(require_finalized_records=True)
    election = service.create_election("Nacionales", date(2024, 10, 27), "national")
    assert election.require_finalized_records is True
    override = service.create_election("Internas", date(2024, 6, 30), "national", require_finalized_records=False)
    assert override.require_finalized_records is False


def test_audit_record_uses_election_candidates(service, scenario):
    """Español: Función test_audit_record_uses_election_candidates del módulo tests/test_escrutinio_service.py.

    English: Function test_audit_record_uses_election_candidates defined in tests/test_escrutinio_service.py.
    """
    record_id = scenario["record"].id
    submission = _submission(scenario)
    submission["entries"].append({"candidate_id": "ghost", "votes": 4})
    service.register_votes(record_id, submission, role=Role.OPERATOR)

    assert all(alert["type"] != "Candidato Desconocido" for alert in service.audit_record(record_id).alerts)

    service.attach_record(scenario["election"].id, record_id, role=Role.OPERATOR)
    result = service.audit_record(record_id)

    assert "Candidato Desconocido" in [alert["type"] for alert in result.critical_alerts]


def test_apply_default_seed(service):
    service.apply_seed(default_seed())
    assert [party.acronym for party in service.get_political_parties()] == ["PN", "PC", "FA"]
    assert [candidate.full_name for candidate in service.get_candidates()] == [
        "Ana Silva",
        "Pedro López",
        "Laura Fernández",
    ]
    assert {candidate.position for candidate in service.get_candidates()} == {"Alcalde"}


def test_save_requires_store(service):
    with pytest.raises(EscrutinioError):
        service.save()
    with pytest.raises(EscrutinioError):
        service.load()


def test_autosave_writes_snapshot(tmp_path):
    store = SnapshotStore(tmp_path)
    service = ElectoralService(store=store, autosave=True)
    service.create_political_party("Partido Nacional", "PN", "Juan Pérez")
    assert store.exists()


def test_open_service_seeds_then_loads(tmp_path):
    """Español: Función test_open_service_seeds_then_loads del módulo tests/test_escrutinio_service.py.

    English: Function test_open_service_seeds_then_loads defined in tests/test_escrutinio_service.py.
    """
    settings = EscrutinioSettings(STORAGE_PATH=tmp_path)
    first = open_service(settings)
    party_ids = [party.id for party in first.get_political_parties()]
    assert len(party_ids) == 3

    second = open_service(settings)
    assert [party.id for party in second.get_political_parties()] == party_ids
