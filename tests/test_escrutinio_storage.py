"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `tests/test_escrutinio_storage.py`.
Pruebas del snapshot JSON: digest, identidad de objetos y estado congelado.

Componentes detectados:
  - test_save_snapshot_creates_files
  - test_load_preserves_object_identity
  - test_load_rejects_tampered_snapshot
  - test_load_ignores_stale_digest_file

======================== ENGLISH ========================
File: `tests/test_escrutinio_storage.py`.
JSON snapshot tests: digest, object identity and frozen state.

Detected components:
  - test_save_snapshot_creates_files
  - test_load_preserves_object_identity
  - test_load_rejects_tampered_snapshot
  - test_load_ignores_stale_digest_file
"""

from __future__ import annotations

import json
from datetime import date

import pytest

from escrutinio.auth import Role
from escrutinio.core.errors import SnapshotIntegrityError
from escrutinio.core.seal import verify_seal
from escrutinio.service import ElectoralService
from escrutinio.storage import SnapshotStore


def _populated_service(store: SnapshotStore) -> ElectoralService:
    service = ElectoralService(store=store)
    party = service.create_political_party("Partido Nacional", "PN", "Juan Pérez")
    other = service.create_political_party("Partido Colorado", "PC", "María González")
    cand_a = service.create_candidate("Ana", "Silva", "12345678", party.id, "Alcalde")
    cand_b = service.create_candidate("Pedro", "López", "87654321", other.id, "Alcalde")
    station = service.create_polling_station("001", "Escuela 12", "Av. Italia 1234", 100)
    president = service.create_polling_station_member("Rosa", "Díaz", "333", "presidente")
    service.assign_member(station.id, president.id)
    election = service.create_election("Municipales", date(2025, 5, 11), "municipal")
    service.add_candidate_to_election(election.id, cand_a.id)
    service.add_candidate_to_election(election.id, cand_b.id)
    service.add_polling_station_to_election(election.id, station.id)
    for number, votes in (("A-001", (50, 30)), ("A-002", (10, 20))):
        record = service.create_electoral_record("Acta", station.id, "Escuela 12", number)
        service.register_votes(
            record.id,
            {
                "entries": [
                    {"candidate_id": cand_a.id, "votes": votes[0]},
                    {"candidate_id": cand_b.id, "votes": votes[1]},
                ],
                "blank_votes": 5,
                "null_votes": 2,
            },
            role=Role.OPERATOR,
        )
        service.finalize_record(record.id, role=Role.ADMIN)
        service.attach_record(election.id, record.id, role=Role.OPERATOR)
    return service


def test_save_snapshot_creates_files(tmp_path):
    """Español: Función test_save_snapshot_creates_files del módulo tests/test_escrutinio_storage.py.

    English: Function test_save_snapshot_creates_files defined in tests/test_escrutinio_storage.py.
    """
    store = SnapshotStore(tmp_path)
    digest = _populated_service(store).save()

    assert store.snapshot_path.exists()
    assert store.digest_path.read_text(encoding="utf-8").strip() == digest
    document = json.loads(store.snapshot_path.read_text(encoding="utf-8"))
    assert document["digest"] == digest
    assert len(document["data"]["electoral_records"]) == 2


def test_load_missing_snapshot_returns_none(tmp_path):
    assert SnapshotStore(tmp_path / "empty").load() is None


def test_load_preserves_object_identity(tmp_path):
    """Español: Función test_load_preserves_object_identity del módulo tests/test_escrutinio_storage.py.

    English: Function test_load_preserves_object_identity defined in tests/test_escrutinio_storage.py.
    """
    store = SnapshotStore(tmp_path)
    original = _populated_service(store)
    original.save()

    loaded = ElectoralService(store=store)
    assert loaded.load() is True

    station = loaded.get_polling_stations()[0]
    records = loaded.get_electoral_records()
    assert all(record.polling_station is station for record in records)
    party_ids = {party.id: party for party in loaded.get_political_parties()}
    for candidate in loaded.get_candidates():
        assert candidate.political_party is party_ids[candidate.political_party.id]
    election = loaded.get_elections()[0]
    assert election.candidates == tuple(loaded.get_candidates())
    assert station.get_president().first_name == "Rosa"
    assert [record.id for record in election.electoral_records] == [
        record.id for record in original.get_electoral_records()
    ]
    assert all(verify_seal(record) for record in records)


def test_load_restores_report_and_soft_deletes(tmp_path):
    store = SnapshotStore(tmp_path)
    original = _populated_service(store)
    election_id = original.get_elections()[0].id
    expected = original.election_report(election_id)
    original.delete_political_party(original.get_political_parties()[1].id)
    original.save()

    loaded = ElectoralService(store=store)
    loaded.load()
    report = loaded.election_report(election_id)

    assert report.total_votes == expected.total_votes == 110
    assert [result.votes for result in report.results] == [60, 50]
    assert len(loaded.get_political_parties()) == 1


def test_finalized_election_stays_frozen_after_load(tmp_path):
    """Español: Función test_finalized_election_stays_frozen_after_load del módulo tests/test_escrutinio_storage.py.

    English: Function test_finalized_election_stays_frozen_after_load defined in tests/test_escrutinio_storage.py.
    """
    store = SnapshotStore(tmp_path)
    original = _populated_service(store)
    election_id = original.get_elections()[0].id
    original.finalize_election(election_id, role=Role.ADMIN)
    original.save()

    loaded = ElectoralService(store=store)
    loaded.load()
    election = loaded.get_election_or_raise(election_id)

    assert election.is_finalized is True
    assert election.get_total_votes() == 110
    report = election.generate_report()
    assert report.is_final is True
    assert [(row.total_votes, row.registered_voters) for row in report.station_results] == [(124, 100)]


def test_load_rejects_tampered_snapshot(tmp_path):
    """Español: Función test_load_rejects_tampered_snapshot del módulo tests/test_escrutinio_storage.py.

    English: Function test_load_rejects_tampered_snapshot defined in tests/test_escrutinio_storage.py.
    """
    store = SnapshotStore(tmp_path)
    _populated_service(store).save()

    document = json.loads(store.snapshot_path.read_text(encoding="utf-8"))
    document["data"]["electoral_records"][0]["blank_votes"] = 999
    store.snapshot_path.write_text(json.dumps(document), encoding="utf-8")

    with pytest.raises(SnapshotIntegrityError):
        store.load()


def test_load_rejects_invalid_json(tmp_path):
    store = SnapshotStore(tmp_path)
    store.snapshot_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotIntegrityError):
        store.load()


def test_load_ignores_stale_digest_file(tmp_path):
    """El archivo .sha256 desactualizado no impide cargar el snapshot.

    English: A stale .sha256 side file does not block loading the snapshot.
    """
    store = SnapshotStore(tmp_path)
    service = _populated_service(store)
    service.save()
    stale = store.digest_path.read_text(encoding="utf-8")
    service.create_political_party("Frente Amplio", "FA", "Carlos Rodriguez")
    digest = service.save()
    store.digest_path.write_text(stale, encoding="utf-8")

    loaded = ElectoralService(store=store)

    assert loaded.load() is True
    assert [party.acronym for party in loaded.get_political_parties()] == ["PN", "PC", "FA"]
    assert stale.strip() != digest
