from fastapi.testclient import TestClient

from app.main import create_app


class _Toggler:
    def try_toggle_with_recurrence(self, line, document_path):
        return None


def test_health_endpoint(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TASKS_MCP_VAULT_PATH", str(tmp_path))

    with TestClient(create_app()) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "tasksApiAvailable": False}


def test_health_reports_recurrence_capability(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TASKS_MCP_VAULT_PATH", str(tmp_path))
    app = create_app()
    app.state.recurrence_toggler = _Toggler()

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.json()["tasksApiAvailable"] is True
