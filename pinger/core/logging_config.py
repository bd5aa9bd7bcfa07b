"""Logging setup for the pinger service.

The service writes through three named loggers, each a structlog wrapper over
a stdlib logger of the same name:

    - ``service``: lifecycle events and probe results;
    - ``server``: HTTP server start/stop and one line per completed request;
    - ``error``: probe failures, listen failures and fatal errors, on stderr.

`get_logging_config` only builds the `dictConfig` dictionary; `configure_logging`
applies it together with the structlog processor chain.
"""

import logging.config
from typing import Any

import structlog
from structlog.types import Processor

from pinger.config import Settings

SERVICE_LOGGER = "service"
SERVER_LOGGER = "server"
ERROR_LOGGER = "error"

# uvicorn's own startup/shutdown messages belong with the server logger.
UVICORN_LOGGER = "uvicorn.error"


def shared_processors() -> list[Processor]:
    """Return the processors run for both structlog and foreign (stdlib) records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def _renderer(settings: Settings) -> Processor:
    # Machine-readable output wherever logs are shipped somewhere.
    if settings.environment in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def get_logging_config(settings: Settings) -> dict[str, Any]:
    """Build the `logging.config.dictConfig` dictionary for the service loggers.

    ``service``, ``server`` and uvicorn's error logger write to stdout,
    ``error`` writes to stderr. None of them propagate, so every record is
    emitted once. Third-party loggers fall through to the root logger, with
    the noisy ones pinned at WARNING.

    Args:
        settings: Service settings providing log_level, environment and the
            noisy module list.

    Returns:
        dict[str, Any]: Configuration dictionary compatible with dictConfig.
    """
    log_level = settings.log_level.upper()

    def stdout_logger() -> dict[str, Any]:
        return {"handlers": ["stdout"], "level": log_level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": "structlog.stdlib.ProcessorFormatter",
                "processor": _renderer(settings),
                "foreign_pre_chain": shared_processors(),
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {
            SERVICE_LOGGER: stdout_logger(),
            SERVER_LOGGER: stdout_logger(),
            UVICORN_LOGGER: stdout_logger(),
            ERROR_LOGGER: {"handlers": ["stderr"], "level": log_level, "propagate": False},
            **{lib: {"level": "WARNING"} for lib in settings.logging_noisy_modules},
        },
    }


def configure_logging(settings: Settings) -> None:
    """Apply the stdlib configuration and route structlog through it."""
    logging.config.dictConfig(get_logging_config(settings))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return the structlog logger bound to the stdlib logger ``name``."""
    return structlog.get_logger(name)


# Request-scoped context (request IDs) merged into every entry.
bind_contextvars = structlog.contextvars.bind_contextvars
clear_contextvars = structlog.contextvars.clear_contextvars
