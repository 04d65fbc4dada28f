class RepositoryError(Exception):
    """Base repository error."""


class RepositoryValidationError(RepositoryError):
    """Raised when the caller supplies an unusable payload or filter."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when the requested entity does not exist."""


class RepositoryStoreError(RepositoryError):
    """Raised when the database rejects a statement."""


class RepositoryConstraintError(RepositoryStoreError):
    """Raised when a statement violates an integrity constraint."""

    def __init__(self, message: str, *, constraint_kind: str, constraint_name: str | None = None) -> None:
        super().__init__(message)
        self.constraint_kind = constraint_kind
        self.constraint_name = constraint_name


class RepositoryUnavailableError(RepositoryStoreError):
    """Raised when the database is unavailable or not configured."""
