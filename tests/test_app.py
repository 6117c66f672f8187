"""
Tests for app wiring: health, error bodies, scheduler lifecycle
"""
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from tracker_api import main


def test_health(client):
    assert client.get("/api/health").json() == {"status": "OK"}
    assert client.get("/").json()["status"] == "OK"


def test_unknown_route_uses_error_body(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_startup_builds_and_stops_scheduler(monkeypatch):
    monkeypatch.setattr(main.settings, "SCHEDULER_ENABLED", True)
    fake = MagicMock()
    with patch.object(main, "ReminderScheduler", return_value=fake) as factory:
        with TestClient(main.app):
            factory.assert_called_once_with(main.SessionLocal)
            fake.start.assert_called_once()
            assert main.app.state.reminder_scheduler is fake
    fake.shutdown.assert_called_once()
    assert main.app.state.reminder_scheduler is None


def test_startup_survives_scheduler_failure(monkeypatch):
    monkeypatch.setattr(main.settings, "SCHEDULER_ENABLED", True)
    fake = MagicMock()
    fake.start.side_effect = RuntimeError("no threads")
    with patch.object(main, "ReminderScheduler", return_value=fake):
        with TestClient(main.app) as client:
            assert client.get("/api/health").status_code == 200
    fake.shutdown.assert_not_called()
