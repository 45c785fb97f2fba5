"""Datos iniciales: partidos, candidatos y mesas de arranque.

The built-in seed registers three parties with one mayoral candidate each.
A YAML file validated by ``SeedFile`` replaces it entirely.

English:
    Initial data: bootstrap parties, candidates and polling stations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from escrutinio.config import load_yaml_mapping
from escrutinio.schemas import SeedFile

logger = logging.getLogger(__name__)

DEFAULT_SEED = {
    "parties": [
        {
            "name": "Partido Nacional",
            "acronym": "PN",
            "legal_representative": "Juan Pérez",
            "candidates": [
                {"first_name": "Ana", "last_name": "Silva", "dni": "12345678", "position": "Alcalde"},
            ],
        },
        {
            "name": "Partido Colorado",
            "acronym": "PC",
            "legal_representative": "María González",
            "candidates": [
                {"first_name": "Pedro", "last_name": "López", "dni": "87654321", "position": "Alcalde"},
            ],
        },
        {
            "name": "Frente Amplio",
            "acronym": "FA",
            "legal_representative": "Carlos Rodriguez",
            "candidates": [
                {"first_name": "Laura", "last_name": "Fernández", "dni": "11223344", "position": "Alcalde"},
            ],
        },
    ],
    "polling_stations": [],
}


def default_seed() -> SeedFile:
    return SeedFile.model_validate(DEFAULT_SEED)


def load_seed_file(path: Optional[Path]) -> SeedFile:
    """Carga el YAML de datos iniciales o la semilla por defecto.

    Args:
        path: Ruta al YAML; ``None`` devuelve la semilla integrada.

    Returns:
        SeedFile validado.

    English:
        Load the seed YAML, or the built-in seed when ``path`` is ``None``.
    """
    if path is None:
        return default_seed()
    raw = load_yaml_mapping(path)
    try:
        seed = SeedFile.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(
            f"{path.name} no cumple el esquema de semilla ({path.name} does not meet the seed schema): {exc}"
        ) from exc
    logger.info(
        "seed_loaded path=%s parties=%s stations=%s",
        path,
        len(seed.parties),
        len(seed.polling_stations),
    )
    return seed
