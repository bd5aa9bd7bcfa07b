"""
Middleware test suite for request logging, correlation IDs and deadlines.
"""
import asyncio
import uuid

from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from pinger.core.context import AppContext
from pinger.main import create_app


def test_request_id_generation(client: TestClient):
    """Verify middleware generates a valid UUID when X-Request-ID is not provided."""
    response = client.get("/healthz")

    assert response.status_code == 200
    req_id = response.headers.get("X-Request-ID")
    assert req_id is not None
    assert uuid.UUID(req_id)


def test_request_id_passthrough(client: TestClient):
    """Verify middleware preserves client-provided X-Request-ID headers."""
    custom_trace_id = "trace-abc-123"
    response = client.get("/healthz", headers={"X-Request-ID": custom_trace_id})

    assert response.headers.get("X-Request-ID") == custom_trace_id


def test_completed_request_is_logged(client: TestClient):
    """Verify one log line with host, remote address, protocol, method and path."""
    with capture_logs() as logs:
        client.get("/readyz")

    request_logs = [entry for entry in logs if entry["event"].startswith("< ")]
    assert len(request_logs) == 1
    entry = request_logs[0]
    assert entry["event"].startswith("< testserver <- testclient:")
    assert entry["event"].endswith("| HTTP/1.1 GET /readyz")
    assert entry["status_code"] == 418
    assert entry["log_level"] == "info"


def test_slow_request_times_out(settings_factory):
    """Verify a handler exceeding the server timeout is answered with 503."""
    context = AppContext(settings=settings_factory(server_timeout="50ms"))
    app = create_app(context)

    @app.get("/slow")
    async def slow() -> str:
        await asyncio.sleep(1)
        return "late"

    with TestClient(app) as client:
        response = client.get("/slow")

    assert response.status_code == 503
    assert response.text == "request timeout"
