"""Test suite for structured logging configuration.

This module validates the generated dictConfig: renderers per environment, the
routing of the service loggers, and the request context helpers.
"""
import pytest
import structlog

from pinger.core.logging_config import (
    ERROR_LOGGER,
    SERVER_LOGGER,
    SERVICE_LOGGER,
    UVICORN_LOGGER,
    bind_contextvars,
    clear_contextvars,
    get_logging_config,
    shared_processors,
)


@pytest.mark.parametrize("environment", ["production", "staging"])
def test_config_generates_json_in_production(settings_factory, environment):
    """Verify production-like environments use the JSON renderer."""
    config = get_logging_config(settings_factory(environment=environment))

    processor = config["formatters"]["structured"]["processor"]
    assert isinstance(processor, structlog.processors.JSONRenderer)


def test_config_generates_console_in_development(settings_factory):
    config = get_logging_config(settings_factory(environment="development"))

    processor = config["formatters"]["structured"]["processor"]
    assert isinstance(processor, structlog.dev.ConsoleRenderer)


@pytest.mark.parametrize("name", [SERVICE_LOGGER, SERVER_LOGGER, UVICORN_LOGGER])
def test_service_loggers_write_to_stdout_once(settings_factory, name):
    config = get_logging_config(settings_factory(log_level="debug"))

    assert config["loggers"][name] == {
        "handlers": ["stdout"],
        "level": "DEBUG",
        "propagate": False,
    }
    assert config["handlers"]["stdout"]["stream"] == "ext://sys.stdout"


def test_error_logger_writes_to_stderr(settings_factory):
    config = get_logging_config(settings_factory(log_level="warning"))

    error_logger = config["loggers"][ERROR_LOGGER]
    assert error_logger["handlers"] == ["stderr"]
    assert error_logger["level"] == "WARNING"
    assert error_logger["propagate"] is False
    assert config["handlers"]["stderr"]["stream"] == "ext://sys.stderr"


def test_root_logger_follows_log_level(settings_factory):
    config = get_logging_config(settings_factory(log_level="DEBUG"))

    assert config["root"] == {"handlers": ["stdout"], "level": "DEBUG"}


def test_noisy_modules_are_pinned_to_warning(settings_factory):
    config = get_logging_config(settings_factory(logging_noisy_modules=["httpx", "uvicorn.access"]))

    assert config["loggers"]["httpx"] == {"level": "WARNING"}
    assert config["loggers"]["uvicorn.access"] == {"level": "WARNING"}


def test_shared_processors_include_context_merge():
    """Without merge_contextvars, request IDs never reach log entries."""
    assert structlog.contextvars.merge_contextvars in shared_processors()


def test_contextvars_binding_and_clearing():
    """Verify context variable binding and clearing utilities function correctly."""
    bind_contextvars(request_id="test-123")
    ctx = structlog.contextvars.get_contextvars()
    assert ctx["request_id"] == "test-123"

    clear_contextvars()
    ctx = structlog.contextvars.get_contextvars()
    assert "request_id" not in ctx
