"""HTTP health check probe for container orchestration.

Execute a lightweight HTTP GET request against the service's /healthz
endpoint. Return appropriate exit codes for container runtime health probes.

Exit Codes:
    0: Healthy - Endpoint returned HTTP 200.
    1: Unhealthy - Connection failed or non-200 response.

Environment Variables:
    HEALTHCHECK_HOST: Target host address (default: 127.0.0.1).
    HEALTHCHECK_PORT: Target port number (default: 8000).
    HEALTHCHECK_PATH: Endpoint to query (default: /healthz).
"""

import os
import sys
import urllib.error
import urllib.request

TIMEOUT = 2  # seconds


def healthcheck_url() -> str:
    """Build the probe URL from the environment with local defaults."""
    host = os.environ.get("HEALTHCHECK_HOST", "127.0.0.1")
    port = os.environ.get("HEALTHCHECK_PORT", "8000")
    path = os.environ.get("HEALTHCHECK_PATH", "/healthz")
    return f"http://{host}:{port}{path}"


def check(url: str, timeout: float = TIMEOUT) -> int:
    """Return 0 when ``url`` answers 200, 1 otherwise."""
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            return 0 if response.status == 200 else 1
    except (urllib.error.URLError, OSError):
        # Network errors and non-success HTTP responses (HTTPError is a URLError).
        return 1


if __name__ == "__main__":
    sys.exit(check(healthcheck_url()))
