"""Builders for the dynamic parts of repository statements.

Every caller-supplied value is bound to a positional ``$n`` placeholder. The
only text interpolated into a statement is a column identifier, and those come
from the repositories' fixed attribute sets.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jobly.services.errors import RepositoryValidationError


@dataclass(slots=True, frozen=True)
class OrganizationFilters:
    name_like: str | None = None
    min_employees: int | None = None
    max_employees: int | None = None


@dataclass(slots=True, frozen=True)
class JobPostingFilters:
    title: str | None = None
    min_salary: int | None = None
    has_equity: bool | None = None


class _Binder:
    """Appends a value and hands back the placeholder that points at it."""

    def __init__(self) -> None:
        self.params: list[Any] = []

    def __call__(self, value: Any) -> str:
        self.params.append(value)
        return f"${len(self.params)}"


def compile_partial_update(
    attributes: Mapping[str, Any],
    column_names: Mapping[str, str] | None = None,
) -> tuple[str, list[Any]]:
    """Turn a sparse attribute map into a ``set`` clause and its values.

    ``{"name": "Acme", "employee_count": 50}`` with
    ``{"employee_count": "num_employees"}`` gives
    ``('"name"=$1, "num_employees"=$2', ["Acme", 50])``.

    Columns follow the mapping's insertion order.
    """
    pairs = list(attributes.items())
    if not pairs:
        raise RepositoryValidationError("no fields supplied")

    column_names = column_names or {}
    bind = _Binder()
    assignments = [f'"{column_names.get(name, name)}"={bind(value)}' for name, value in pairs]
    return ", ".join(assignments), bind.params


def compile_organization_filters(filters: OrganizationFilters | None) -> tuple[str | None, list[Any]]:
    """Build the ``where`` predicate for an organization search.

    Returns ``(None, [])`` when no filter applies.
    """
    if filters is None:
        return None, []

    if (
        filters.min_employees is not None
        and filters.max_employees is not None
        and filters.min_employees > filters.max_employees
    ):
        raise RepositoryValidationError("min_employees cannot be greater than max_employees")

    bind = _Binder()
    conditions: list[str] = []

    if _has_text(filters.name_like):
        conditions.append(f"name ilike {bind(f'%{filters.name_like}%')}")
    if filters.min_employees:
        conditions.append(f"num_employees >= {bind(filters.min_employees)}")
    if filters.max_employees:
        conditions.append(f"num_employees <= {bind(filters.max_employees)}")

    return _join(conditions), bind.params


def compile_job_posting_filters(filters: JobPostingFilters | None) -> tuple[str | None, list[Any]]:
    """Build the ``where`` predicate for a job posting search.

    ``has_equity`` only narrows the search when it is exactly ``True``; ``False``
    does not mean "postings without equity".
    """
    if filters is None:
        return None, []

    bind = _Binder()
    conditions: list[str] = []

    if _has_text(filters.title):
        conditions.append(f"title ilike {bind(f'%{filters.title}%')}")
    if filters.min_salary:
        conditions.append(f"salary >= {bind(filters.min_salary)}")
    if filters.has_equity is True:
        conditions.append(f"equity > {bind(0)}")

    return _join(conditions), bind.params


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _join(conditions: list[str]) -> str | None:
    if not conditions:
        return None
    return " and ".join(conditions)
