from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from jobly.main import app
from jobly.services.errors import RepositoryNotFoundError, RepositoryUnavailableError, RepositoryValidationError
from jobly.services.repository import get_organization_repository
from jobly.services.sql import OrganizationFilters, compile_organization_filters


class FakeOrganizationRepository:
    def __init__(self) -> None:
        self._organizations: dict[str, dict[str, Any]] = {
            "c1": {
                "handle": "c1",
                "name": "C1",
                "description": "Desc1",
                "employee_count": 1,
                "logo_url": "http://c1.img",
            },
            "c2": {
                "handle": "c2",
                "name": "C2",
                "description": "Desc2",
                "employee_count": 2,
                "logo_url": None,
            },
        }
        self.last_filters: OrganizationFilters | None = None
        self.last_update: dict[str, Any] | None = None

    async def create(self, **data: Any) -> dict[str, Any]:
        if data["handle"] in self._organizations:
            raise RepositoryValidationError(f"duplicate organization: {data['handle']}")
        self._organizations[data["handle"]] = dict(data)
        return dict(data)

    async def find_all(self, filters: OrganizationFilters | None = None) -> list[dict[str, Any]]:
        compile_organization_filters(filters)
        self.last_filters = filters
        rows = sorted(self._organizations.values(), key=lambda row: row["name"])
        if filters and filters.name_like:
            rows = [row for row in rows if filters.name_like.lower() in row["name"].lower()]
        return rows

    async def get(self, handle: str) -> dict[str, Any]:
        if handle not in self._organizations:
            raise RepositoryNotFoundError(f"no organization: {handle}")
        return {**self._organizations[handle], "jobs": []}

    async def update(self, handle: str, attributes: dict[str, Any]) -> dict[str, Any]:
        self.last_update = dict(attributes)
        if not attributes:
            raise RepositoryValidationError("no fields supplied")
        if handle not in self._organizations:
            raise RepositoryNotFoundError(f"no organization: {handle}")
        self._organizations[handle].update(attributes)
        return self._organizations[handle]

    async def delete(self, handle: str) -> None:
        if self._organizations.pop(handle, None) is None:
            raise RepositoryNotFoundError(f"no organization: {handle}")


class UnavailableOrganizationRepository:
    async def find_all(self, filters: OrganizationFilters | None = None) -> list[dict[str, Any]]:
        raise RepositoryUnavailableError("JOBLY_DATABASE_URL is required")


@pytest.fixture
def fake_repo() -> FakeOrganizationRepository:
    return FakeOrganizationRepository()


@pytest.fixture
def client(fake_repo: FakeOrganizationRepository) -> TestClient:
    app.dependency_overrides[get_organization_repository] = lambda: fake_repo

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


NEW_ORGANIZATION = {
    "handle": "new",
    "name": "New",
    "description": "DescNew",
    "employee_count": 10,
    "logo_url": "http://new.img",
}


def test_create_organization_allows_admin(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post("/organizations", json=NEW_ORGANIZATION, headers=admin_headers)

    assert response.status_code == 201
    assert response.json() == NEW_ORGANIZATION


def test_create_organization_denies_user(client: TestClient, user_headers: dict[str, str]) -> None:
    response = client.post("/organizations", json=NEW_ORGANIZATION, headers=user_headers)

    assert response.status_code == 403


def test_create_organization_denies_anonymous(client: TestClient) -> None:
    response = client.post("/organizations", json=NEW_ORGANIZATION)

    assert response.status_code == 401


def test_create_organization_treats_forged_token_as_anonymous(client: TestClient, make_token) -> None:
    token = make_token("admin", is_admin=True, secret="wrong")

    response = client.post(
        "/organizations",
        json=NEW_ORGANIZATION,
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


def test_create_organization_duplicate_is_bad_request(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post("/organizations", json={**NEW_ORGANIZATION, "handle": "c1"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "duplicate organization: c1"


def test_create_organization_rejects_unknown_fields(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post("/organizations", json={**NEW_ORGANIZATION, "ceo": "x"}, headers=admin_headers)

    assert response.status_code == 422


def test_list_organizations_is_public(client: TestClient) -> None:
    response = client.get("/organizations")

    assert response.status_code == 200
    assert [row["handle"] for row in response.json()] == ["c1", "c2"]


def test_list_organizations_passes_typed_filters(
    client: TestClient,
    fake_repo: FakeOrganizationRepository,
) -> None:
    response = client.get("/organizations", params={"name_like": "2", "min_employees": "1", "max_employees": "5"})

    assert response.status_code == 200
    assert [row["handle"] for row in response.json()] == ["c2"]
    assert fake_repo.last_filters == OrganizationFilters(name_like="2", min_employees=1, max_employees=5)


def test_list_organizations_inverted_bounds_is_bad_request(client: TestClient) -> None:
    response = client.get("/organizations", params={"min_employees": 5, "max_employees": 1})

    assert response.status_code == 400


def test_list_organizations_rejects_negative_bounds(client: TestClient) -> None:
    response = client.get("/organizations", params={"min_employees": -1})

    assert response.status_code == 422


def test_get_organization_includes_jobs(client: TestClient) -> None:
    response = client.get("/organizations/c1")

    assert response.status_code == 200
    body = response.json()
    assert body["handle"] == "c1"
    assert body["jobs"] == []


def test_get_organization_not_found(client: TestClient) -> None:
    response = client.get("/organizations/nope")

    assert response.status_code == 404
    assert response.json()["detail"] == "no organization: nope"


def test_patch_organization_sends_only_supplied_fields(
    client: TestClient,
    fake_repo: FakeOrganizationRepository,
    admin_headers: dict[str, str],
) -> None:
    response = client.patch("/organizations/c1", json={"name": "C1-new"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["name"] == "C1-new"
    assert response.json()["description"] == "Desc1"
    assert fake_repo.last_update == {"name": "C1-new"}


def test_patch_organization_rejects_handle_change(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.patch("/organizations/c1", json={"handle": "c1-new"}, headers=admin_headers)

    assert response.status_code == 422


def test_patch_organization_rejects_null_name(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.patch("/organizations/c1", json={"name": None}, headers=admin_headers)

    assert response.status_code == 422


def test_patch_organization_empty_body_is_bad_request(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.patch("/organizations/c1", json={}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "no fields supplied"


def test_patch_organization_denies_user(client: TestClient, user_headers: dict[str, str]) -> None:
    response = client.patch("/organizations/c1", json={"name": "x"}, headers=user_headers)

    assert response.status_code == 403


def test_delete_organization(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.delete("/organizations/c1", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"deleted": "c1"}

    missing = client.get("/organizations/c1")
    assert missing.status_code == 404


def test_delete_organization_not_found(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.delete("/organizations/nope", headers=admin_headers)

    assert response.status_code == 404


def test_list_organizations_reports_unavailable_database() -> None:
    app.dependency_overrides[get_organization_repository] = lambda: UnavailableOrganizationRepository()
    try:
        with TestClient(app) as test_client:
            response = test_client.get("/organizations")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
