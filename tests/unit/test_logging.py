"""Unit tests for crossfade.utils.logging."""

from __future__ import annotations

import logging

import structlog

from crossfade.utils.logging import (
    _redact_credentials,
    batch_context,
    configure_logging,
    get_logger,
    new_batch_id,
)


class TestRedaction:
    def test_credentials_are_masked(self) -> None:
        event = _redact_credentials(
            None, "info", {"event": "x", "apikey": "secret", "Authorization": "Bearer t", "artist": "Bicep"}
        )
        assert event["apikey"] == "***"
        assert event["Authorization"] == "***"
        assert event["artist"] == "Bicep"

    def test_empty_credentials_left_alone(self) -> None:
        assert _redact_credentials(None, "info", {"access_token": ""})["access_token"] == ""


class TestBatchContext:
    def test_binds_and_unbinds_operation(self) -> None:
        with batch_context("concert_ranking", batch_id="abc123"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["operation"] == "concert_ranking"
            assert bound["batch_id"] == "abc123"
        assert "operation" not in structlog.contextvars.get_contextvars()

    def test_batch_ids_are_short_and_unique(self) -> None:
        first, second = new_batch_id(), new_batch_id()
        assert len(first) == 12
        assert first != second


class TestGetLogger:
    def test_does_not_touch_host_logging_setup(self) -> None:
        structlog.reset_defaults()
        root = logging.getLogger()
        host_handler = logging.NullHandler()
        root.addHandler(host_handler)
        try:
            get_logger("host.module").info("test_event")

            assert host_handler in root.handlers
            assert not structlog.is_configured()
        finally:
            root.removeHandler(host_handler)


class TestConfigureLogging:
    def test_quiets_http_client_logs(self) -> None:
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger().level == logging.DEBUG

    def test_get_logger_returns_usable_logger(self) -> None:
        configure_logging(log_level="INFO", json_output=True)
        get_logger(__name__).info("test_event", key="value")
