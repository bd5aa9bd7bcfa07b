"""Lifecycle loop: the single dispatcher owning the process lifetime.

The loop multiplexes three event sources and handles exactly one event per
iteration:

    - a periodic tick, which runs one probe of the target;
    - an OS termination signal (SIGINT/SIGTERM), which requests shutdown;
    - a shutdown request, which closes the HTTP server and ends the loop.

The HTTP server runs concurrently as its own task. Probes are awaited inline,
so a slow target delays the next tick by up to the probe timeout.
"""

import asyncio
import contextlib
import enum
import signal
from typing import Any

from pinger.core.errors import EXIT_CODE_SUCCESS
from pinger.core.logging_config import SERVICE_LOGGER, get_logger
from pinger.core.prober import TargetProber
from pinger.core.server import HTTPServer

TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGINT)

TICK = "tick"
OS_SIGNAL = "os_signal"
DONE = "done"

logger = get_logger(SERVICE_LOGGER)


class LifecycleState(str, enum.Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class Lifecycle:
    """Coordinate the probe ticker, termination signals and shutdown.

    Args:
        server: HTTP server started when the loop starts.
        prober: Prober run on every tick.
        interval: Seconds between two ticks.
        signals: OS signals that trigger shutdown.
    """

    def __init__(
        self,
        server: HTTPServer,
        prober: TargetProber,
        interval: float,
        signals: tuple[signal.Signals, ...] = TERMINATION_SIGNALS,
    ) -> None:
        self.server = server
        self.prober = prober
        self.interval = interval
        self.signals = signals
        self.state = LifecycleState.RUNNING
        self.ticks = 0
        # A single slot per source: extra ticks and repeated signals are dropped.
        self._tick: asyncio.Queue[float] = asyncio.Queue(maxsize=1)
        self._ossig: asyncio.Queue[signal.Signals] = asyncio.Queue(maxsize=1)
        self._done: asyncio.Queue[bool] = asyncio.Queue(maxsize=1)

    # =========================================================================
    # EVENT SOURCES
    # =========================================================================

    async def _ticker(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            next_at += self.interval
            with contextlib.suppress(asyncio.QueueFull):
                self._tick.put_nowait(loop.time())

    def notify_signal(self, sig: signal.Signals) -> None:
        """Enqueue a received OS signal. Safe to call from a signal handler."""
        with contextlib.suppress(asyncio.QueueFull):
            self._ossig.put_nowait(sig)

    def request_shutdown(self) -> None:
        """Enqueue a shutdown request for the loop to consume."""
        with contextlib.suppress(asyncio.QueueFull):
            self._done.put_nowait(True)

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self.notify_signal, sig)
            except NotImplementedError:
                # Event loops without add_signal_handler (Windows)
                signal.signal(
                    sig, lambda signum, frame: loop.call_soon_threadsafe(
                        self.notify_signal, signal.Signals(signum)
                    )
                )

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self.signals:
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                signal.signal(sig, signal.SIG_DFL)

    # =========================================================================
    # EVENT HANDLERS
    # =========================================================================

    async def _on_tick(self) -> None:
        self.ticks += 1
        await self.prober.probe()

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info(
            f"received termination signal '{sig.name}', shutting down server now"
        )
        self.state = LifecycleState.SHUTTING_DOWN
        self.request_shutdown()

    async def _on_done(self) -> None:
        self.state = LifecycleState.SHUTTING_DOWN
        await self.server.close()
        logger.info("exiting now...")
        self.state = LifecycleState.TERMINATED

    async def _dispatch(self, source: str, event: Any) -> None:
        if source == TICK:
            await self._on_tick()
        elif source == OS_SIGNAL:
            self._on_signal(event)
        elif source == DONE:
            await self._on_done()

    # =========================================================================
    # LOOP
    # =========================================================================

    async def run(self) -> int:
        """Run until a shutdown request has been handled.

        Returns:
            The process exit code for a normal shutdown.
        """
        logger.info("initialising service...")
        self._install_signal_handlers()
        self.server.start()
        ticker = asyncio.create_task(self._ticker(), name="ticker")

        sources = {TICK: self._tick, OS_SIGNAL: self._ossig, DONE: self._done}
        waiters: dict[str, asyncio.Task] = {}
        try:
            while self.state is not LifecycleState.TERMINATED:
                for name, queue in sources.items():
                    if name not in waiters:
                        waiters[name] = asyncio.create_task(queue.get(), name=name)

                finished, _ = await asyncio.wait(
                    waiters.values(), return_when=asyncio.FIRST_COMPLETED
                )
                # Handle one event; the other finished waits stay for the next round.
                task = next(iter(finished))
                source = task.get_name()
                del waiters[source]
                await self._dispatch(source, task.result())
        finally:
            ticker.cancel()
            for task in waiters.values():
                task.cancel()
            await asyncio.gather(ticker, *waiters.values(), return_exceptions=True)
            self._remove_signal_handlers()
            if self.state is not LifecycleState.TERMINATED:
                await self.server.close()
            await self.prober.aclose()

        return EXIT_CODE_SUCCESS
