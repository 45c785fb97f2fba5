"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `conftest.py`.
Fixtures compartidas de pruebas: entorno aislado y un escenario electoral
mínimo (partidos, candidatos, mesa y elección).

Componentes detectados:
  - isolate_environment
  - parties
  - candidates
  - station
  - election
  - service

Notas:
- Las variables ESCRUTINIO_* del entorno real no afectan a las pruebas.

======================== ENGLISH ========================
File: `conftest.py`.
Shared test fixtures: isolated environment and a minimal election scenario
(parties, candidates, station and election).

Detected components:
  - isolate_environment
  - parties
  - candidates
  - station
  - election
  - service

Notes:
- ESCRUTINIO_* variables from the real environment do not leak into tests.
"""

# Conftest Module
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

from __future__ import annotations

import os
import sys
from datetime import date
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from escrutinio.core.election import Election  # noqa: E402
from escrutinio.core.models import Candidate, ElectionType, PoliticalParty, PollingStation  # noqa: E402
from escrutinio.service import ElectoralService  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Elimina variables ESCRUTINIO_* del entorno durante cada prueba.

    English:
        Removes ESCRUTINIO_* variables from the environment for each test.
    """
    for key in list(os.environ):
        if key.startswith("ESCRUTINIO_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def parties() -> list[PoliticalParty]:
    return [
        PoliticalParty("Partido Nacional", "pn", "Juan Pérez"),
        PoliticalParty("Partido Colorado", "PC", "María González"),
    ]


@pytest.fixture
def candidates(parties: list[PoliticalParty]) -> list[Candidate]:
    return [
        Candidate("Ana", "Silva", "12345678", parties[0], "Alcalde"),
        Candidate("Pedro", "López", "87654321", parties[1], "Alcalde"),
    ]


@pytest.fixture
def station() -> PollingStation:
    return PollingStation("001", "Escuela 12", "Av. Italia 1234", registered_voters=100)


@pytest.fixture
def election(candidates: list[Candidate], station: PollingStation) -> Election:
    election = Election("Municipales 2025", date(2025, 5, 11), ElectionType.MUNICIPAL)
    for candidate in candidates:
        election.add_candidate(candidate)
    election.add_polling_station(station)
    return election


@pytest.fixture
def service() -> ElectoralService:
    return ElectoralService()
