"""Process entry point: ``python -m pinger``.

Load settings, configure logging, build the application context, and run the
lifecycle loop. Failures are mapped to exit codes here and nowhere else.
"""

import asyncio
import sys

from pydantic import ValidationError
from pydantic_settings import SettingsError

from pinger.config import Settings, get_settings
from pinger.core.context import AppContext
from pinger.core.errors import (
    EXIT_CODE_INIT_FAILED,
    EXIT_CODE_MAIN_FAILED,
    ConfigurationError,
)
from pinger.core.lifecycle import Lifecycle
from pinger.core.logging_config import ERROR_LOGGER, configure_logging, get_logger
from pinger.core.prober import TargetProber
from pinger.core.server import HTTPServer
from pinger.main import create_app


def load_settings() -> Settings:
    """Load and validate the settings.

    Raises:
        ConfigurationError: If the environment holds invalid or unparsable values.
    """
    try:
        return get_settings()
    except (ValidationError, SettingsError) as exc:
        raise ConfigurationError(str(exc)) from exc


def build_lifecycle(context: AppContext) -> Lifecycle:
    """Wire the HTTP server and the prober around a shared context."""
    settings = context.settings
    server = HTTPServer(create_app(context), settings)
    prober = TargetProber(settings, context.readiness)
    return Lifecycle(server, prober, interval=settings.ping_interval.total_seconds())


def main() -> int:
    """Run the service and return its exit code."""
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        # Defaults are enough to report the failure.
        configure_logging(Settings.model_construct())
        get_logger(ERROR_LOGGER).error("invalid configuration", error=str(exc))
        return EXIT_CODE_INIT_FAILED

    configure_logging(settings)
    context = AppContext(settings=settings)
    try:
        return asyncio.run(build_lifecycle(context).run())
    except Exception:
        get_logger(ERROR_LOGGER).exception("service failed")
        return EXIT_CODE_MAIN_FAILED


if __name__ == "__main__":
    sys.exit(main())
