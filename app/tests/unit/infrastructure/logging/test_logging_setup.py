"""Unit tests for logging setup, context binding and masking."""

from unittest.mock import patch

import pytest
import structlog

from infrastructure.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_correlation_id,
    get_module_logger,
    mask_sensitive_data,
)
from infrastructure.logging.setup import _is_test_environment


@pytest.mark.unit
class TestConfigureLogging:
    def test_detects_pytest(self):
        assert _is_test_environment() is True

    def test_configure_returns_logger_under_pytest(self):
        logger = configure_logging()

        assert logger is not None

    def test_production_mode_renders_json(self):
        with patch("infrastructure.logging.setup._is_test_environment", return_value=False):
            configure_logging(log_level="INFO", is_production=True)
        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        configure_logging()

    def test_development_mode_renders_console(self):
        with patch("infrastructure.logging.setup._is_test_environment", return_value=False):
            configure_logging(log_level="DEBUG", is_production=False)
        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        configure_logging()

    def test_module_logger_binds_component(self):
        logger = get_module_logger()
        context = structlog.get_context(logger)

        assert context["module_path"] == __name__
        assert context["component"] == __name__.split(".")[-1]


@pytest.mark.unit
class TestRequestContext:
    def test_binds_and_clears_correlation_id(self):
        with bind_request_context(correlation_id="req-1", actor_email="a@b.c") as cid:
            assert cid == "req-1"
            assert get_correlation_id() == "req-1"
            assert structlog.contextvars.get_contextvars()["actor_email"] == "a@b.c"

        assert get_correlation_id() is None

    def test_generates_correlation_id(self):
        with bind_request_context() as cid:
            assert cid
            assert get_correlation_id() == cid

    def test_clear_request_context(self):
        structlog.contextvars.bind_contextvars(correlation_id="x")

        clear_request_context()

        assert get_correlation_id() is None


@pytest.mark.unit
class TestMaskSensitiveData:
    def test_masks_key_hash_and_secrets(self):
        processor = mask_sensitive_data()

        result = processor(
            None,
            "info",
            {"event": "api_key_saved", "key_hash": "abc", "password": "p", "api_key_id": "1"},
        )

        assert result["key_hash"] == "***REDACTED***"
        assert result["password"] == "***REDACTED***"
        assert result["api_key_id"] == "1"
        assert result["event"] == "api_key_saved"

    def test_additional_patterns(self):
        processor = mask_sensitive_data(additional_patterns=frozenset({"email"}))

        assert processor(None, "info", {"user_email": "a@b.c"})["user_email"] == "***REDACTED***"
