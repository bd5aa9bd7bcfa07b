"""Application context shared by the HTTP server, the prober and the lifecycle loop."""

from dataclasses import dataclass, field

from pinger.config import Settings
from pinger.core.readiness import ReadinessState


@dataclass(frozen=True)
class AppContext:
    """Everything built once at startup and handed to the running components.

    Attributes:
        settings: Immutable service configuration.
        readiness: Readiness checks written by the prober, read by ``/readyz``.
    """

    settings: Settings
    readiness: ReadinessState = field(default_factory=ReadinessState)
