from dataclasses import dataclass
from enum import Enum
from typing import Any


class CallerClass(str, Enum):
    ANONYMOUS = "anonymous"
    USER = "user"
    ADMIN = "admin"


class AccessRequirement(str, Enum):
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    SELF_OR_ADMIN = "self_or_admin"


class AuthorizationError(PermissionError):
    def __init__(self, message: str, *, caller_class: CallerClass) -> None:
        super().__init__(message)
        self.caller_class = caller_class


@dataclass(slots=True, frozen=True)
class Principal:
    username: str
    is_admin: bool = False


def principal_from_claims(claims: dict[str, Any]) -> Principal | None:
    username = claims.get("username")
    if not isinstance(username, str) or not username:
        return None
    return Principal(username=username, is_admin=claims.get("is_admin") is True)


def classify(principal: Principal | None) -> CallerClass:
    if principal is None:
        return CallerClass.ANONYMOUS
    if principal.is_admin:
        return CallerClass.ADMIN
    return CallerClass.USER


def authorize(
    principal: Principal | None,
    requirement: AccessRequirement,
    *,
    target_username: str | None = None,
) -> None:
    """Raise AuthorizationError unless the caller meets ``requirement``.

    ``target_username`` is the identity named by the request path and is only
    consulted for SELF_OR_ADMIN.
    """
    caller_class = classify(principal)
    if caller_class is CallerClass.ADMIN:
        return

    if requirement is AccessRequirement.AUTHENTICATED and caller_class is CallerClass.USER:
        return

    if (
        requirement is AccessRequirement.SELF_OR_ADMIN
        and principal is not None
        and target_username is not None
        and principal.username == target_username
    ):
        return

    raise AuthorizationError(f"{requirement.value} access required", caller_class=caller_class)
