from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from functools import lru_cache
from typing import Any

from jobly.services.database import QueryExecutor, get_executor
from jobly.services.errors import (
    RepositoryConstraintError,
    RepositoryNotFoundError,
    RepositoryValidationError,
)
from jobly.services.sql import (
    JobPostingFilters,
    OrganizationFilters,
    compile_job_posting_filters,
    compile_organization_filters,
    compile_partial_update,
)

logger = logging.getLogger(__name__)

ORGANIZATION_MUTABLE_FIELDS = ("name", "description", "employee_count", "logo_url")
ORGANIZATION_COLUMN_NAMES = {"employee_count": "num_employees"}
ORGANIZATION_RETURNING_SQL = "handle, name, description, num_employees as employee_count, logo_url"

JOB_POSTING_MUTABLE_FIELDS = ("title", "salary", "equity")
JOB_POSTING_RETURNING_SQL = "id, title, salary, equity, org_handle as organization_handle"


class OrganizationRepository:
    def __init__(self, executor: QueryExecutor) -> None:
        self.executor = executor

    async def create(
        self,
        *,
        handle: str,
        name: str,
        description: str,
        employee_count: int | None = None,
        logo_url: str | None = None,
    ) -> dict[str, Any]:
        existing = await self.executor.fetch(
            """
            select handle
            from organizations
            where handle = $1
            """,
            [handle],
        )
        if existing:
            raise RepositoryValidationError(f"duplicate organization: {handle}")

        try:
            rows = await self.executor.fetch(
                f"""
                insert into organizations (handle, name, description, num_employees, logo_url)
                values ($1, $2, $3, $4, $5)
                returning {ORGANIZATION_RETURNING_SQL}
                """,
                [handle, name, description, employee_count, logo_url],
            )
        except RepositoryConstraintError as exc:
            if exc.constraint_kind != "unique":
                raise
            raise RepositoryValidationError(f"duplicate organization: {handle}") from exc

        logger.info("organization created handle=%s", handle)
        return self._organization_row_to_dict(rows[0])

    async def find_all(self, filters: OrganizationFilters | None = None) -> list[dict[str, Any]]:
        where_sql, params = compile_organization_filters(filters)
        where_clause = f"where {where_sql}" if where_sql is not None else ""

        rows = await self.executor.fetch(
            f"""
            select {ORGANIZATION_RETURNING_SQL}
            from organizations
            {where_clause}
            order by name, handle
            """,
            params,
        )
        return [self._organization_row_to_dict(row) for row in rows]

    async def get(self, handle: str) -> dict[str, Any]:
        rows = await self.executor.fetch(
            f"""
            select {ORGANIZATION_RETURNING_SQL}
            from organizations
            where handle = $1
            """,
            [handle],
        )
        if not rows:
            raise RepositoryNotFoundError(f"no organization: {handle}")

        organization = self._organization_row_to_dict(rows[0])
        job_rows = await self.executor.fetch(
            f"""
            select {JOB_POSTING_RETURNING_SQL}
            from job_postings
            where org_handle = $1
            order by id
            """,
            [handle],
        )
        organization["jobs"] = [_job_posting_row_to_dict(row) for row in job_rows]
        return organization

    async def update(self, handle: str, attributes: Mapping[str, Any]) -> dict[str, Any]:
        _reject_unknown_fields(attributes, ORGANIZATION_MUTABLE_FIELDS)
        set_sql, params = compile_partial_update(attributes, ORGANIZATION_COLUMN_NAMES)
        params.append(handle)

        rows = await self.executor.fetch(
            f"""
            update organizations
            set {set_sql}
            where handle = ${len(params)}
            returning {ORGANIZATION_RETURNING_SQL}
            """,
            params,
        )
        if not rows:
            raise RepositoryNotFoundError(f"no organization: {handle}")

        logger.info("organization updated handle=%s fields=%s", handle, ",".join(attributes))
        return self._organization_row_to_dict(rows[0])

    async def delete(self, handle: str) -> None:
        rows = await self.executor.fetch(
            """
            delete from organizations
            where handle = $1
            returning handle
            """,
            [handle],
        )
        if not rows:
            raise RepositoryNotFoundError(f"no organization: {handle}")
        logger.info("organization deleted handle=%s", handle)

    @staticmethod
    def _organization_row_to_dict(row: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "handle": row["handle"],
            "name": row["name"],
            "description": row["description"],
            "employee_count": row["employee_count"],
            "logo_url": row["logo_url"],
        }


class JobPostingRepository:
    def __init__(self, executor: QueryExecutor) -> None:
        self.executor = executor

    async def create(
        self,
        *,
        title: str,
        salary: int | None,
        equity: Decimal | None,
        organization_handle: str,
    ) -> dict[str, Any]:
        try:
            rows = await self.executor.fetch(
                f"""
                insert into job_postings (title, salary, equity, org_handle)
                values ($1, $2, $3, $4)
                returning {JOB_POSTING_RETURNING_SQL}
                """,
                [title, salary, equity, organization_handle],
            )
        except RepositoryConstraintError as exc:
            if exc.constraint_kind != "foreign_key":
                raise
            raise RepositoryValidationError(f"no organization: {organization_handle}") from exc

        job_posting = _job_posting_row_to_dict(rows[0])
        logger.info("job posting created id=%s organization=%s", job_posting["id"], organization_handle)
        return job_posting

    async def find_all(self, filters: JobPostingFilters | None = None) -> list[dict[str, Any]]:
        where_sql, params = compile_job_posting_filters(filters)
        where_clause = f"where {where_sql}" if where_sql is not None else ""

        rows = await self.executor.fetch(
            f"""
            select
              j.id,
              j.title,
              j.salary,
              j.equity,
              j.org_handle as organization_handle,
              o.name as organization_name
            from job_postings j
            join organizations o on o.handle = j.org_handle
            {where_clause}
            order by j.title, j.id
            """,
            params,
        )
        return [
            {**_job_posting_row_to_dict(row), "organization_name": row["organization_name"]}
            for row in rows
        ]

    async def get(self, job_id: int) -> dict[str, Any]:
        rows = await self.executor.fetch(
            f"""
            select {JOB_POSTING_RETURNING_SQL}
            from job_postings
            where id = $1
            """,
            [job_id],
        )
        if not rows:
            raise RepositoryNotFoundError(f"no job posting: {job_id}")

        job_posting = _job_posting_row_to_dict(rows[0])
        organization_rows = await self.executor.fetch(
            """
            select name, num_employees as employee_count, description, logo_url
            from organizations
            where handle = $1
            """,
            [job_posting["organization_handle"]],
        )
        job_posting["organization"] = (
            self._organization_profile_row_to_dict(organization_rows[0]) if organization_rows else None
        )
        return job_posting

    async def update(self, job_id: int, attributes: Mapping[str, Any]) -> dict[str, Any]:
        _reject_unknown_fields(attributes, JOB_POSTING_MUTABLE_FIELDS)
        set_sql, params = compile_partial_update(attributes)
        params.append(job_id)

        rows = await self.executor.fetch(
            f"""
            update job_postings
            set {set_sql}
            where id = ${len(params)}
            returning {JOB_POSTING_RETURNING_SQL}
            """,
            params,
        )
        if not rows:
            raise RepositoryNotFoundError(f"no job posting: {job_id}")

        logger.info("job posting updated id=%s fields=%s", job_id, ",".join(attributes))
        return _job_posting_row_to_dict(rows[0])

    async def delete(self, job_id: int) -> None:
        rows = await self.executor.fetch(
            """
            delete from job_postings
            where id = $1
            returning id
            """,
            [job_id],
        )
        if not rows:
            raise RepositoryNotFoundError(f"no job posting: {job_id}")
        logger.info("job posting deleted id=%s", job_id)

    @staticmethod
    def _organization_profile_row_to_dict(row: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "name": row["name"],
            "employee_count": row["employee_count"],
            "description": row["description"],
            "logo_url": row["logo_url"],
        }


class ApplicationRepository:
    def __init__(self, executor: QueryExecutor) -> None:
        self.executor = executor

    async def apply(self, username: str, job_id: int) -> dict[str, Any]:
        """Record that `username` applied for job posting `job_id`.

        A single insert; the store's foreign keys decide whether the user and
        the job posting exist, and its primary key rejects a second application.
        """
        try:
            rows = await self.executor.fetch(
                """
                insert into applications (username, job_id)
                values ($1, $2)
                returning username, job_id
                """,
                [username, job_id],
            )
        except RepositoryConstraintError as exc:
            if exc.constraint_kind == "unique":
                raise RepositoryValidationError(f"duplicate application: {username} -> {job_id}") from exc
            if exc.constraint_kind != "foreign_key":
                raise
            if "job_id" in (exc.constraint_name or ""):
                raise RepositoryNotFoundError(f"no job posting: {job_id}") from exc
            raise RepositoryNotFoundError(f"no user: {username}") from exc

        logger.info("application recorded username=%s job_id=%s", username, job_id)
        return {"username": rows[0]["username"], "job_id": rows[0]["job_id"]}


def _job_posting_row_to_dict(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": row["id"],
        "title": row["title"],
        "salary": row["salary"],
        "equity": row["equity"],
        "organization_handle": row["organization_handle"],
    }


def _reject_unknown_fields(attributes: Mapping[str, Any], allowed: tuple[str, ...]) -> None:
    unknown = [name for name in attributes if name not in allowed]
    if unknown:
        raise RepositoryValidationError(f"cannot update fields: {', '.join(unknown)}")


@lru_cache
def get_organization_repository() -> OrganizationRepository:
    return OrganizationRepository(get_executor())


@lru_cache
def get_job_posting_repository() -> JobPostingRepository:
    return JobPostingRepository(get_executor())


@lru_cache
def get_application_repository() -> ApplicationRepository:
    return ApplicationRepository(get_executor())
