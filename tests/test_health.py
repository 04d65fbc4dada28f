from collections.abc import Sequence
from typing import Any

from fastapi.testclient import TestClient

from jobly.main import app
from jobly.services.database import get_executor
from jobly.services.errors import RepositoryUnavailableError


class _StaticExecutor:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def fetch(self, query: str, params: Sequence[Any]) -> list[dict[str, Any]]:
        if self.error is not None:
            raise self.error
        return [{"ok": 1}]


def test_healthz() -> None:
    client = TestClient(app)
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_readyz_reports_database() -> None:
    app.dependency_overrides[get_executor] = lambda: _StaticExecutor()
    try:
        response = TestClient(app).get("/readyz")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_readyz_without_database_is_unavailable() -> None:
    error = RepositoryUnavailableError("JOBLY_DATABASE_URL is required")
    app.dependency_overrides[get_executor] = lambda: _StaticExecutor(error)
    try:
        response = TestClient(app).get("/readyz")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["detail"] == "JOBLY_DATABASE_URL is required"
