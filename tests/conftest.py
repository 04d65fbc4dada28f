from __future__ import annotations

from collections.abc import Callable

import pytest
from jose import jwt

from jobly.core.config import get_settings

TokenFactory = Callable[..., str]


@pytest.fixture
def make_token() -> TokenFactory:
    def _make_token(username: str, *, is_admin: bool = False, secret: str | None = None) -> str:
        settings = get_settings()
        return jwt.encode(
            {"username": username, "is_admin": is_admin},
            secret or settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

    return _make_token


@pytest.fixture
def user_headers(make_token: TokenFactory) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('u1')}"}


@pytest.fixture
def admin_headers(make_token: TokenFactory) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('admin', is_admin=True)}"}
