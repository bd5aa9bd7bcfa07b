"""Error taxonomy and process exit codes.

Errors are logged where they occur; only initialization and unrecovered loop
failures reach the entry point, which maps them to an exit code.
"""

from typing import Any

EXIT_CODE_SUCCESS = 0
EXIT_CODE_INIT_FAILED = 1
EXIT_CODE_MAIN_FAILED = 2


class PingerError(Exception):
    """Base class for errors raised by the service."""


class ConfigurationError(PingerError):
    """Raised when the settings cannot be loaded or validated."""


def handle_error(error: BaseException | None, logger: Any) -> None:
    """Log ``error`` once on ``logger`` and carry on.

    Args:
        error: The error to report. ``None`` means nothing happened.
        logger: A structlog or stdlib logger.
    """
    if error is not None:
        logger.error(str(error) or type(error).__name__)
