class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""


class InvalidRangeError(ValidationError):
    """Raised when a date range ends before it starts."""


class ConflictError(DomainError):
    """Raised when a write would break a uniqueness or overlap rule."""


class NotFoundError(DomainError):
    """Raised when the requested record does not exist."""


class InvalidStateError(DomainError):
    """Raised when a record is not in a state that allows the operation."""


class DependencyError(DomainError):
    """Raised when a delete is blocked by records that still reference the target."""


class AuthenticationError(DomainError):
    """Raised when there is no signed-in user or the credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageError(Exception):
    """Base exception for persistence failures."""


class DuplicateRecordError(StorageError):
    """Raised by repositories when a unique key is violated."""


class StorageUnavailableError(StorageError):
    """Raised by repositories when the database or a table cannot be reached."""
