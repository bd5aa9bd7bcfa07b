"""FastAPI application factory for the pinger service.

Build the application instance, register middleware, and configure the
application lifespan. The application context (settings and readiness state)
is attached to ``app.state`` so route handlers never touch module globals.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from pinger import __version__
from pinger.api.middleware import RequestLoggingMiddleware, RequestTimeoutMiddleware
from pinger.core.context import AppContext
from pinger.core.logging_config import SERVER_LOGGER, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log HTTP application startup and shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control returns to the application after startup completes.
    """
    logger = get_logger(SERVER_LOGGER)
    settings = app.state.context.settings
    logger.info("HTTP application started", bind_address=settings.bind_address)

    yield

    logger.info("HTTP application stopped")


def create_app(context: AppContext) -> FastAPI:
    """Build the FastAPI application serving the greeting and probe routes.

    Args:
        context: Application context shared with the lifecycle loop.

    Returns:
        FastAPI: The configured application.
    """
    app = FastAPI(
        title="pinger",
        version=__version__,
        description="Liveness/readiness endpoints backed by a periodic target probe",
        lifespan=lifespan,
    )
    app.state.context = context

    # Middleware added last runs first: the logger sees timed-out responses too.
    app.add_middleware(
        RequestTimeoutMiddleware,
        timeout=context.settings.server_timeout.total_seconds(),
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/", response_class=PlainTextResponse)
    async def hello() -> str:
        return "hello world"

    @app.get("/healthz", response_class=PlainTextResponse)
    async def liveness_probe() -> str:
        """Return liveness status for container orchestration.

        Does not look at the readiness state: a process that can answer is alive.
        """
        return "alive"

    @app.get("/readyz", response_class=PlainTextResponse)
    async def readiness_probe(request: Request) -> PlainTextResponse:
        """Return readiness status for traffic routing decisions.

        Answer 200 once every readiness check passed (the last probe reached
        the target), 418 otherwise.
        """
        readiness = request.app.state.context.readiness
        if readiness.is_ready():
            return PlainTextResponse("ready", status_code=status.HTTP_200_OK)
        return PlainTextResponse("not ready", status_code=status.HTTP_418_IM_A_TEAPOT)

    return app
