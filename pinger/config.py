"""Application configuration management via pydantic-settings.

Centralize all configuration parameters for the pinger service. Load settings
from environment variables (case-insensitive) and/or a `.env` file. Provide type
validation, default values, and construction of the bind address and probe
target URL.
"""

import re
from datetime import timedelta
from functools import lru_cache
from typing import Any, Literal

import httpx
from pydantic import Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INTERFACE = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_PING_TIMEOUT = timedelta(seconds=10)
DEFAULT_PING_INTERVAL = timedelta(seconds=1)
DEFAULT_SERVER_TIMEOUT = timedelta(seconds=5)
DEFAULT_TARGET_PROTO = "http"
DEFAULT_TARGET_HOST = "localhost"

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration string such as ``"10s"`` or ``"1m30s"``.

    Args:
        value: Duration string made of one or more ``<number><unit>`` parts.

    Returns:
        The equivalent timedelta.

    Raises:
        ValueError: If the string is not a well-formed duration.
    """
    text = value.strip()
    negative = text.startswith("-")
    text = text.lstrip("+-")
    if text == "0":
        return timedelta(0)

    position = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if not text or position != len(text):
        raise ValueError(f"invalid duration '{value}'")
    return timedelta(seconds=-seconds if negative else seconds)


class Settings(BaseSettings):
    """Service-wide configuration settings.

    Attributes:
        interface: Network interface the HTTP server binds to.
        port: TCP port the HTTP server binds to (0 picks a free port).
        ping_timeout: Timeout of a single probe request.
        ping_interval: Delay between two probe ticks.
        server_timeout: Per-request read/header/write timeout of the HTTP server.
        target_proto: Scheme of the probed target.
        target_host: Host name of the probed target.
        target_port: Port of the probed target.
        target_path: Path of the probed target, without the leading slash.
        environment: Deployment environment identifier.
        log_level: Minimum logging verbosity level.
        logging_noisy_modules: Third-party loggers pinned at WARNING.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # ==========================================================================
    # HTTP SERVER
    # ==========================================================================
    interface: str = DEFAULT_INTERFACE
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    server_timeout: timedelta = DEFAULT_SERVER_TIMEOUT

    # ==========================================================================
    # PROBE TARGET
    # ==========================================================================
    ping_timeout: timedelta = DEFAULT_PING_TIMEOUT
    ping_interval: timedelta = DEFAULT_PING_INTERVAL
    target_proto: Literal["http", "https"] = DEFAULT_TARGET_PROTO
    target_host: str = DEFAULT_TARGET_HOST
    target_port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    target_path: str = ""

    # ==========================================================================
    # ENVIRONMENT & LOGGING
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    logging_noisy_modules: list[str] = [
        "uvicorn.access",
        "httpx",
        "httpcore",
        "asyncio",
    ]

    @field_validator("ping_timeout", "ping_interval", "server_timeout", mode="before")
    @classmethod
    def parse_go_duration(cls, v: Any) -> Any:
        """Accept Go-style duration strings next to seconds and ISO 8601.

        Args:
            v: Raw value from the environment or constructor.

        Returns:
            Seconds for numeric strings (Go would read them as nanoseconds),
            a timedelta for Go-style strings, otherwise the value unchanged so
            pydantic's own timedelta parsing applies.
        """
        if not isinstance(v, str):
            return v
        text = v.strip()
        try:
            return float(text)
        except ValueError:
            pass
        # ISO 8601 durations start with "P"
        if text.lstrip("+-").upper().startswith("P"):
            return v
        return parse_duration(text)

    @field_validator("ping_timeout", "ping_interval", "server_timeout")
    @classmethod
    def validate_positive(cls, v: timedelta) -> timedelta:
        """Reject zero or negative durations.

        Raises:
            ValueError: If the duration is not strictly positive.
        """
        if v <= timedelta(0):
            raise ValueError("duration must be positive")
        return v

    @field_validator("target_proto", "log_level", "environment", mode="before")
    @classmethod
    def lowercase(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def bind_address(self) -> str:
        """Return the ``interface:port`` address the HTTP server listens on."""
        return f"{self.interface}:{self.port}"

    @computed_field
    @property
    def target_url(self) -> str:
        """Construct the exact URL the prober sends its GET request to.

        Returns:
            ``{target_proto}://{target_host}:{target_port}/{target_path}``.
        """
        return f"{self.target_proto}://{self.target_host}:{self.target_port}/{self.target_path}"

    @model_validator(mode="after")
    def validate_target_url(self) -> "Settings":
        """Reject target parts that do not combine into a usable URL.

        Raises:
            ValueError: If the target URL cannot be parsed or has no host.
        """
        try:
            url = httpx.URL(self.target_url)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid target URL '{self.target_url}': {exc}") from exc
        if not url.host:
            raise ValueError(f"target URL '{self.target_url}' has no host")
        return self


# ==============================================================================
# DEPENDENCY INJECTION
# ==============================================================================


@lru_cache()
def get_settings() -> Settings:
    """Return a cached singleton instance of the service settings.

    Returns:
        The singleton Settings instance.

    Raises:
        pydantic.ValidationError: If the environment holds invalid values.
    """
    return Settings()
