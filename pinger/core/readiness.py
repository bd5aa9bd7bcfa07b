"""Readiness state shared between the prober and the HTTP handlers."""

import threading
from collections.abc import Iterable

TARGET_UP = "target_up"

DEFAULT_CHECKS = (TARGET_UP,)


class ReadinessState:
    """Thread-safe mapping of readiness check names to their status.

    The set of check names is fixed at construction. Every check starts as
    not ready. Request handlers may read from any thread while the lifecycle
    loop is the only writer.
    """

    def __init__(self, checks: Iterable[str] = DEFAULT_CHECKS) -> None:
        self._lock = threading.Lock()
        self._checks: dict[str, bool] = {name: False for name in checks}

    def get(self, name: str) -> bool:
        with self._lock:
            return self._checks[name]

    def set(self, name: str, value: bool) -> None:
        """Record the status of a known check.

        Raises:
            KeyError: If ``name`` is not one of the configured checks.
        """
        with self._lock:
            if name not in self._checks:
                raise KeyError(name)
            self._checks[name] = bool(value)

    def is_ready(self) -> bool:
        with self._lock:
            return all(self._checks.values())
