from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobly.schemas.jobs import JobPostingOut


class OrganizationCreateRequest(BaseModel):
    handle: str = Field(min_length=1, max_length=25)
    name: str = Field(min_length=1)
    description: str
    employee_count: int | None = Field(default=None, ge=0)
    logo_url: str | None = None

    model_config = ConfigDict(extra="forbid")


class OrganizationPatchRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    employee_count: int | None = Field(default=None, ge=0)
    logo_url: str | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "description")
    @classmethod
    def _reject_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("must not be null")
        return value


class OrganizationOut(BaseModel):
    handle: str
    name: str
    description: str
    employee_count: int | None = None
    logo_url: str | None = None


class OrganizationDetailOut(OrganizationOut):
    jobs: list[JobPostingOut] = Field(default_factory=list)


class OrganizationDeletedOut(BaseModel):
    deleted: str
