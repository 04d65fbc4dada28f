from fastapi import APIRouter, Depends, HTTPException, status

from jobly.services.database import get_executor
from jobly.services.errors import RepositoryStoreError

router = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(executor=Depends(get_executor)) -> dict[str, str]:
    try:
        await executor.fetch("select 1 as ok", [])
    except RepositoryStoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return {"status": "ok", "database": "ok"}
