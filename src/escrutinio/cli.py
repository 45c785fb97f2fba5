"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/escrutinio/cli.py`.
Interfaz de línea de comandos sobre el snapshot del escrutinio.

Componentes detectados:
  - main
  - init
  - parties
  - report
  - verify_seals

Notas:
- La configuración se lee de ESCRUTINIO_* y de .env.
- Los errores de configuración terminan con código 2.

======================== ENGLISH ========================
File: `src/escrutinio/cli.py`.
Command line interface over the tally snapshot.

Detected components:
  - main
  - init
  - parties
  - report
  - verify_seals

Notes:
- Configuration is read from ESCRUTINIO_* and .env.
- Configuration errors exit with code 2.
"""

# Cli Module
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

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer

from escrutinio.config import EscrutinioSettings, load_config
from escrutinio.core.errors import EscrutinioError
from escrutinio.core.report import report_to_dict, top_results
from escrutinio.core.seal import verify_seal
from escrutinio.logging import setup_logging
from escrutinio.service import ElectoralService, open_service

app = typer.Typer(help="Escrutinio CLI")


def _settings() -> EscrutinioSettings:
    try:
        settings = load_config()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    setup_logging(settings.LOG_LEVEL, settings.STORAGE_PATH)
    return settings


def _service() -> ElectoralService:
    try:
        return open_service(_settings())
    except (EscrutinioError, ValueError, FileNotFoundError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def main() -> None:
    """Interfaz de línea de comandos de Escrutinio.

    English: Escrutinio command line interface.
    """


@app.command()
def init(
    seed: Optional[Path] = typer.Option(None, "--seed", help="YAML de datos iniciales / Seed YAML file."),
) -> None:
    """Crea el snapshot, sembrado por defecto o desde YAML.

    English: Create the snapshot, seeded with defaults or from YAML.
    """
    settings = _settings()
    if seed is not None:
        settings = settings.model_copy(update={"SEED_FILE": seed})
    try:
        service = open_service(settings)
    except (EscrutinioError, ValueError, FileNotFoundError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(
        f"snapshot={service.store.snapshot_path} parties={len(service.get_political_parties())} "
        f"candidates={len(service.get_candidates())}"
    )


@app.command()
def parties() -> None:
    """Lista los partidos activos. / List active parties."""
    service = _service()
    for party in service.get_political_parties():
        typer.echo(f"{party.acronym}\t{party.name}\t{party.legal_representative}")


@app.command()
def report(
    election_id: str = typer.Argument(..., help="Identificador de la elección / Election id."),
    limit: int = typer.Option(0, "--limit", help="Máximo de resultados (0 = todos) / Max results (0 = all)."),
) -> None:
    """Imprime el reporte de una elección en JSON.

    English: Print an election report as JSON.
    """
    service = _service()
    try:
        election_report = service.election_report(election_id)
    except EscrutinioError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    payload = report_to_dict(election_report)
    if limit > 0:
        payload["results"] = [asdict(result) for result in top_results(election_report, limit)]
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command("verify-seals")
def verify_seals() -> None:
    """Verifica el sello de cada acta finalizada.

    English: Verify the seal of every finalized record.
    """
    service = _service()
    failures = [
        record
        for record in service.get_electoral_records()
        if record.is_finalized and not verify_seal(record)
    ]
    for record in failures:
        typer.echo(f"seal_mismatch record_id={record.id} record_number={record.record_number}")
    if failures:
        typer.echo("verification=FAIL")
        raise typer.Exit(code=1)
    typer.echo("verification=PASS")


if __name__ == "__main__":
    app()
