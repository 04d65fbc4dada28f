from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from typing import Any, Protocol

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc
from opentelemetry import trace

from jobly.core.config import get_settings
from jobly.services.errors import (
    RepositoryConstraintError,
    RepositoryStoreError,
    RepositoryUnavailableError,
)

tracer = trace.get_tracer(__name__)


class QueryExecutor(Protocol):
    async def fetch(self, query: str, params: Sequence[Any]) -> list[dict[str, Any]]: ...


class PostgresExecutor:
    def __init__(
        self,
        database_url: str | None,
        min_pool_size: int,
        max_pool_size: int,
        command_timeout: float,
    ) -> None:
        self.database_url = database_url
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def fetch(self, query: str, params: Sequence[Any]) -> list[dict[str, Any]]:
        pool = await self._get_pool()
        with tracer.start_as_current_span("db.fetch") as span:
            span.set_attribute("db.system", "postgresql")
            span.set_attribute("db.statement", query)
            try:
                rows = await pool.fetch(query, *params)
            except pg_exc.UniqueViolationError as exc:
                raise RepositoryConstraintError(
                    str(exc),
                    constraint_kind="unique",
                    constraint_name=getattr(exc, "constraint_name", None),
                ) from exc
            except pg_exc.ForeignKeyViolationError as exc:
                raise RepositoryConstraintError(
                    str(exc),
                    constraint_kind="foreign_key",
                    constraint_name=getattr(exc, "constraint_name", None),
                ) from exc
            except pg_exc.IntegrityConstraintViolationError as exc:
                raise RepositoryConstraintError(
                    str(exc),
                    constraint_kind="integrity",
                    constraint_name=getattr(exc, "constraint_name", None),
                ) from exc
            except (OSError, pg_exc.PostgresConnectionError) as exc:
                raise RepositoryUnavailableError("database unavailable") from exc
            except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
                raise RepositoryStoreError(str(exc)) from exc
            span.set_attribute("db.row_count", len(rows))
        return [dict(row) for row in rows]

    async def _get_pool(self) -> asyncpg.Pool:
        if not self.database_url:
            raise RepositoryUnavailableError("JOBLY_DATABASE_URL is required")

        if self._pool is not None:
            return self._pool

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.database_url,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
                command_timeout=self.command_timeout,
            )
            return self._pool
        except Exception as exc:  # pragma: no cover - depends on environment
            raise RepositoryUnavailableError("database unavailable") from exc


@lru_cache
def get_executor() -> PostgresExecutor:
    settings = get_settings()
    return PostgresExecutor(
        database_url=settings.database_url,
        min_pool_size=settings.database_pool_min_size,
        max_pool_size=settings.database_pool_max_size,
        command_timeout=settings.database_command_timeout_seconds,
    )
