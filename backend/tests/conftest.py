import pytest
from fastapi.testclient import TestClient

from debug_server.core.config import Settings
from debug_server.main import create_app


@pytest.fixture
def sample_event():
    return {
        "location": "cart.js:42",
        "message": "total before discount",
        "data": {"total": 120, "items": ["a", "b"]},
        "timestamp": 1718000000000,
        "sessionId": "checkout-bug",
        "runId": "initial",
        "hypothesisId": "A",
    }


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / ".claude-logs" / "debug.ndjson"


@pytest.fixture
def settings(log_path):
    return Settings(ENV="test", PORT=3947, LOG_FILE=str(log_path))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient with lifespan running (log file truncated, counter at zero)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def collector(app, client):
    return app.state.collector
