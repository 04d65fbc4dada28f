from fastapi import APIRouter, Depends

from jobly.api.errors import raise_http_error
from jobly.core.security import require_self_or_admin
from jobly.schemas.users import ApplicationOut
from jobly.services.errors import RepositoryError
from jobly.services.repository import get_application_repository

router = APIRouter()


@router.post("/{username}/jobs/{job_id}", response_model=ApplicationOut)
async def apply_for_job(
    username: str,
    job_id: int,
    _caller=Depends(require_self_or_admin),
    repository=Depends(get_application_repository),
) -> ApplicationOut:
    try:
        application = await repository.apply(username, job_id)
    except RepositoryError as exc:
        raise_http_error(exc)
    return ApplicationOut(applied=application["job_id"])
