"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from themectl.config.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    themectl = logging.getLogger("themectl")
    themectl_level = themectl.level
    devserver = logging.getLogger("themectl.infrastructure.devserver")
    devserver_level = devserver.level
    yield
    devserver.setLevel(devserver_level)
    root.handlers = original_handlers
    root.setLevel(original_level)
    themectl.setLevel(themectl_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("themectl").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("themectl").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("themectl.test")
        log.warning("task.failed", task="compileStylesheets")
        captured = capfd.readouterr()
        parsed = json.loads(captured.err.strip())
        assert parsed["event"] == "task.failed"
        assert parsed["task"] == "compileStylesheets"
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "themectl.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("themectl.services.runner").debug("plain stdlib record")

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "plain stdlib record"
        assert parsed["level"] == "debug"

    def test_server_noise_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("livereload").info("Browser Connected")
        logging.getLogger("tornado.access").info("200 GET /")
        logging.getLogger("watchfiles.main").info("1 change detected")

        assert capfd.readouterr().err == ""

    def test_announce_shows_reload_events(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True, announce=True)
        structlog.get_logger("themectl.infrastructure.devserver").info(
            "devserver.notify", files=2
        )
        structlog.get_logger("themectl.services.runner").info("task.start")

        lines = capfd.readouterr().err.strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["devserver.notify"]

    def test_announce_off_keeps_reload_events_quiet(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=False, log_json=True, announce=True)
        configure_logging(verbose=False, log_json=True)
        structlog.get_logger("themectl.infrastructure.devserver").info("devserver.notify")

        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1
