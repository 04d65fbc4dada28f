from fastapi import APIRouter, Depends, Query, status

from jobly.api.errors import raise_http_error
from jobly.core.security import require_admin
from jobly.schemas.organizations import (
    OrganizationCreateRequest,
    OrganizationDeletedOut,
    OrganizationDetailOut,
    OrganizationOut,
    OrganizationPatchRequest,
)
from jobly.services.errors import RepositoryError
from jobly.services.repository import get_organization_repository
from jobly.services.sql import OrganizationFilters

router = APIRouter()


@router.post("", response_model=OrganizationOut, status_code=status.HTTP_201_CREATED)
async def create_organization(
    payload: OrganizationCreateRequest,
    _admin=Depends(require_admin),
    repository=Depends(get_organization_repository),
) -> OrganizationOut:
    try:
        row = await repository.create(**payload.model_dump())
    except RepositoryError as exc:
        raise_http_error(exc)
    return OrganizationOut(**row)


@router.get("", response_model=list[OrganizationOut])
async def list_organizations(
    name_like: str | None = Query(default=None),
    min_employees: int | None = Query(default=None, ge=0),
    max_employees: int | None = Query(default=None, ge=0),
    repository=Depends(get_organization_repository),
) -> list[OrganizationOut]:
    filters = OrganizationFilters(
        name_like=name_like,
        min_employees=min_employees,
        max_employees=max_employees,
    )
    try:
        rows = await repository.find_all(filters)
    except RepositoryError as exc:
        raise_http_error(exc)
    return [OrganizationOut(**row) for row in rows]


@router.get("/{handle}", response_model=OrganizationDetailOut)
async def get_organization(handle: str, repository=Depends(get_organization_repository)) -> OrganizationDetailOut:
    try:
        row = await repository.get(handle)
    except RepositoryError as exc:
        raise_http_error(exc)
    return OrganizationDetailOut(**row)


@router.patch("/{handle}", response_model=OrganizationOut)
async def patch_organization(
    handle: str,
    payload: OrganizationPatchRequest,
    _admin=Depends(require_admin),
    repository=Depends(get_organization_repository),
) -> OrganizationOut:
    try:
        row = await repository.update(handle, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise_http_error(exc)
    return OrganizationOut(**row)


@router.delete("/{handle}", response_model=OrganizationDeletedOut)
async def delete_organization(
    handle: str,
    _admin=Depends(require_admin),
    repository=Depends(get_organization_repository),
) -> OrganizationDeletedOut:
    try:
        await repository.delete(handle)
    except RepositoryError as exc:
        raise_http_error(exc)
    return OrganizationDeletedOut(deleted=handle)
