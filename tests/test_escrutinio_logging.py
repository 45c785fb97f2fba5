from __future__ import annotations

import logging

import pytest
import structlog

from escrutinio.logging import bind_context, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(saved_level)
    structlog.reset_defaults()


def test_setup_logging_creates_rotating_file(tmp_path) -> None:
    setup_logging("info", tmp_path)

    logging.getLogger("escrutinio.test").info("election_finalized election_id=%s", "e-1")

    log_file = tmp_path / "logs" / "escrutinio.log"
    assert log_file.exists()
    assert "election_finalized election_id=e-1" in log_file.read_text(encoding="utf-8")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_without_storage_only_uses_console(tmp_path) -> None:
    setup_logging("WARNING")
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert all(type(handler) is logging.StreamHandler for handler in root.handlers)


def test_bind_context_skips_empty_values() -> None:
    logger = setup_logging("DEBUG")
    bound = bind_context(logger, election_id="e-1", record_id="r-9")
    assert structlog.get_context(bound) == {"election_id": "e-1", "record_id": "r-9"}
