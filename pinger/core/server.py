"""uvicorn server embedded in the lifecycle loop.

The server runs as a task on the lifecycle loop's event loop so it never blocks
the loop, and it leaves signal handling to the loop.
"""

import asyncio
import contextlib
import math
from typing import Iterator

import uvicorn
from fastapi import FastAPI

from pinger.config import Settings
from pinger.core.logging_config import ERROR_LOGGER, SERVER_LOGGER, get_logger

CLOSE_TIMEOUT = 1.0

logger = get_logger(SERVER_LOGGER)
error_logger = get_logger(ERROR_LOGGER)


class EmbeddedServer(uvicorn.Server):
    """uvicorn server that does not install its own signal handlers."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class HTTPServer:
    """Serve a FastAPI application on the configured interface and port.

    Args:
        app: Application to serve.
        settings: Service settings providing the bind address and timeouts.
    """

    def __init__(self, app: FastAPI, settings: Settings) -> None:
        self.address = settings.bind_address
        config = uvicorn.Config(
            app,
            host=settings.interface,
            port=settings.port,
            log_config=None,
            access_log=False,
            timeout_keep_alive=max(1, math.ceil(settings.server_timeout.total_seconds())),
        )
        self._server = EmbeddedServer(config)
        self._task: asyncio.Task | None = None

    @property
    def started(self) -> bool:
        return self._server.started

    @property
    def port(self) -> int | None:
        """Return the port actually bound, or None before the server listens."""
        for server in getattr(self._server, "servers", []):
            for sock in server.sockets:
                return sock.getsockname()[1]
        return None

    async def serve(self) -> None:
        """Run the server until it is closed.

        A failure to listen is logged and does not propagate.
        """
        try:
            await self._server.serve()
        except SystemExit as exc:
            # uvicorn exits when it cannot bind or load the application
            error_logger.error(
                f"HTTP server failed to listen on '{self.address}'", exit_code=exc.code
            )
        except OSError as exc:
            error_logger.error(f"HTTP server failed on '{self.address}': {exc}")
        else:
            logger.info("HTTP server stopped")

    def start(self) -> asyncio.Task:
        """Schedule the server on the running event loop."""
        logger.info(f"attempting to listen on '{self.address}'...")
        self._task = asyncio.create_task(self.serve(), name="http-server")
        return self._task

    async def close(self, timeout: float = CLOSE_TIMEOUT) -> None:
        """Close listening sockets and open connections without draining them.

        Args:
            timeout: Upper bound on the wait for the server task to finish
                before it is cancelled.
        """
        self._server.should_exit = True
        self._server.force_exit = True
        if self._task is None:
            return
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except asyncio.TimeoutError:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
