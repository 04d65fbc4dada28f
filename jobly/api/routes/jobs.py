from fastapi import APIRouter, Depends, Query, status

from jobly.api.errors import raise_http_error
from jobly.core.security import require_admin
from jobly.schemas.jobs import (
    JobPostingCreateRequest,
    JobPostingDeletedOut,
    JobPostingDetailOut,
    JobPostingListOut,
    JobPostingOut,
    JobPostingPatchRequest,
)
from jobly.services.errors import RepositoryError
from jobly.services.repository import get_job_posting_repository
from jobly.services.sql import JobPostingFilters

router = APIRouter()


@router.post("", response_model=JobPostingOut, status_code=status.HTTP_201_CREATED)
async def create_job_posting(
    payload: JobPostingCreateRequest,
    _admin=Depends(require_admin),
    repository=Depends(get_job_posting_repository),
) -> JobPostingOut:
    try:
        row = await repository.create(**payload.model_dump())
    except RepositoryError as exc:
        raise_http_error(exc)
    return JobPostingOut(**row)


@router.get("", response_model=list[JobPostingListOut])
async def list_job_postings(
    title: str | None = Query(default=None),
    min_salary: int | None = Query(default=None, ge=0),
    has_equity: bool | None = Query(default=None),
    repository=Depends(get_job_posting_repository),
) -> list[JobPostingListOut]:
    filters = JobPostingFilters(title=title, min_salary=min_salary, has_equity=has_equity)
    try:
        rows = await repository.find_all(filters)
    except RepositoryError as exc:
        raise_http_error(exc)
    return [JobPostingListOut(**row) for row in rows]


@router.get("/{job_id}", response_model=JobPostingDetailOut)
async def get_job_posting(job_id: int, repository=Depends(get_job_posting_repository)) -> JobPostingDetailOut:
    try:
        row = await repository.get(job_id)
    except RepositoryError as exc:
        raise_http_error(exc)
    return JobPostingDetailOut(**row)


@router.patch("/{job_id}", response_model=JobPostingOut)
async def patch_job_posting(
    job_id: int,
    payload: JobPostingPatchRequest,
    _admin=Depends(require_admin),
    repository=Depends(get_job_posting_repository),
) -> JobPostingOut:
    try:
        row = await repository.update(job_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise_http_error(exc)
    return JobPostingOut(**row)


@router.delete("/{job_id}", response_model=JobPostingDeletedOut)
async def delete_job_posting(
    job_id: int,
    _admin=Depends(require_admin),
    repository=Depends(get_job_posting_repository),
) -> JobPostingDeletedOut:
    try:
        await repository.delete(job_id)
    except RepositoryError as exc:
        raise_http_error(exc)
    return JobPostingDeletedOut(deleted=job_id)
