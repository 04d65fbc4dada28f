from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobPostingCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    salary: int | None = Field(default=None, ge=0)
    equity: Decimal | None = Field(default=None, ge=0, le=1, decimal_places=3)
    organization_handle: str = Field(min_length=1, max_length=25)

    model_config = ConfigDict(extra="forbid")


class JobPostingPatchRequest(BaseModel):
    """Fields a job posting may change after creation.

    The owning organization is fixed once the posting exists.
    """

    title: str | None = Field(default=None, min_length=1)
    salary: int | None = Field(default=None, ge=0)
    equity: Decimal | None = Field(default=None, ge=0, le=1, decimal_places=3)

    model_config = ConfigDict(extra="forbid")

    @field_validator("title")
    @classmethod
    def _reject_null_title(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("must not be null")
        return value


class JobPostingOut(BaseModel):
    id: int
    title: str
    salary: int | None = None
    equity: Decimal | None = None
    organization_handle: str


class JobPostingListOut(JobPostingOut):
    organization_name: str


class OrganizationProfileOut(BaseModel):
    name: str
    employee_count: int | None = None
    description: str
    logo_url: str | None = None


class JobPostingDetailOut(JobPostingOut):
    organization: OrganizationProfileOut | None = None


class JobPostingDeletedOut(BaseModel):
    deleted: int
