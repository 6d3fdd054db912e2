import pytest
from fastapi.testclient import TestClient

DELAY_VARS = (
    "IDENTIFY_DELAY_SECONDS",
    "QR_SCAN_DELAY_SECONDS",
    "REPORT_DELAY_SECONDS",
    "NOTIFY_DELAY_SECONDS",
)


@pytest.fixture
def client(monkeypatch):
    """Test client with simulated latencies disabled and fresh stores."""
    for var in DELAY_VARS:
        monkeypatch.setenv(var, "0")
    from greenhome.main import app
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def report_payload():
    return {
        "title": "Overflowing bin on Oak Street",
        "description": "The communal bin has not been emptied for a week.",
        "category": "overflowing_bin",
        "location": "Oak Street & 5th",
        "priority": "high",
    }
