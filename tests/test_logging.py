"""
Tests for logging configuration.
"""
import json
import logging

import pytest

from lead_manager.core.logging import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:

    def test_json_format(self, restore_root_logger, capsys):
        configure_logging("debug", "json")

        logging.getLogger("lead_manager.test").info("imported %d leads", 3)

        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["level"] == "INFO"
        assert entry["logger"] == "lead_manager.test"
        assert entry["message"] == "imported 3 leads"
        assert restore_root_logger.level == logging.DEBUG

    def test_text_format_and_single_handler(self, restore_root_logger, capsys):
        configure_logging("info", "text")
        configure_logging("info", "text")

        logging.getLogger("lead_manager.test").warning("sync failed")

        assert len(restore_root_logger.handlers) == 1
        assert "WARNING lead_manager.test: sync failed" in capsys.readouterr().err

    def test_quiets_noisy_libraries(self, restore_root_logger):
        configure_logging("debug", "text")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging("chatty", "text")
        assert restore_root_logger.level == logging.INFO

    def test_context_fields_in_json(self, restore_root_logger, capsys):
        configure_logging("info", "json")

        logging.getLogger("lead_manager.test").info(
            "imported", extra={"tenant": "CraftyCode", "campaign_id": "c1", "lead_id": None}
        )

        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["tenant"] == "CraftyCode"
        assert entry["campaign_id"] == "c1"
        assert "lead_id" not in entry

    def test_context_fields_in_text(self, restore_root_logger, capsys):
        configure_logging("info", "text")

        logging.getLogger("lead_manager.test").error("sync failed", extra={"tenant": "Avalern"})

        assert capsys.readouterr().err.rstrip().endswith("sync failed tenant=Avalern")

    def test_uvicorn_logs_go_through_root(self, restore_root_logger):
        uvicorn_access = logging.getLogger("uvicorn.access")
        uvicorn_access.addHandler(logging.NullHandler())
        uvicorn_access.propagate = False

        configure_logging("info", "text")

        assert uvicorn_access.handlers == []
        assert uvicorn_access.propagate is True
