"""Target prober: one outbound GET per lifecycle tick."""

import httpx

from pinger.config import Settings
from pinger.core.errors import handle_error
from pinger.core.logging_config import ERROR_LOGGER, SERVICE_LOGGER, get_logger
from pinger.core.readiness import TARGET_UP, ReadinessState

logger = get_logger(SERVICE_LOGGER)
error_logger = get_logger(ERROR_LOGGER)


class TargetProber:
    """Check reachability of the configured target and record it as readiness.

    Errors are logged and mark the target as down; there is no retry and no
    backoff, the next tick simply probes again.

    Args:
        settings: Service settings providing the target URL and probe timeout.
        readiness: Readiness state receiving the ``target_up`` result.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        settings: Settings,
        readiness: ReadinessState,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = settings.target_url
        self.readiness = readiness
        self._client = httpx.AsyncClient(
            timeout=settings.ping_timeout.total_seconds(),
            transport=transport,
        )

    async def probe(self) -> bool:
        """Send one GET to the target.

        Returns:
            True when the target answered with a 2xx status.
        """
        try:
            response = await self._client.get(self.url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            handle_error(exc, error_logger)
            self.readiness.set(TARGET_UP, False)
            return False

        logger.info(f"> {self.url} -> '{response.status_code} {response.reason_phrase}'")
        reachable = response.is_success
        self.readiness.set(TARGET_UP, reachable)
        return reachable

    async def aclose(self) -> None:
        await self._client.aclose()
