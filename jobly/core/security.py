import logging
from typing import Any

from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt

from jobly.core.auth import (
    AccessRequirement,
    AuthorizationError,
    CallerClass,
    Principal,
    authorize,
    principal_from_claims,
)
from jobly.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


async def get_principal(
    settings: Settings = Depends(get_settings),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Principal | None:
    """Resolve the caller from a bearer token.

    A missing, malformed or unverifiable token leaves the caller anonymous;
    routes that need an identity reject it through ``authorize``.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        return None

    token = authorization.split(" ", maxsplit=1)[1].strip()
    if not token:
        return None

    claims = _decode_token(token, settings=settings)
    if claims is None:
        return None
    return principal_from_claims(claims)


def _decode_token(token: str, *, settings: Settings) -> dict[str, Any] | None:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.debug("bearer token rejected: %s", exc)
        return None


def _enforce(
    principal: Principal | None,
    requirement: AccessRequirement,
    *,
    target_username: str | None = None,
) -> None:
    try:
        authorize(principal, requirement, target_username=target_username)
    except AuthorizationError as exc:
        if exc.caller_class is CallerClass.ANONYMOUS:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


async def require_admin(principal: Principal | None = Depends(get_principal)) -> Principal:
    _enforce(principal, AccessRequirement.ADMIN)
    return principal


async def require_self_or_admin(
    username: str,
    principal: Principal | None = Depends(get_principal),
) -> Principal:
    _enforce(principal, AccessRequirement.SELF_OR_ADMIN, target_username=username)
    return principal
