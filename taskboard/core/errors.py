"""Storage error taxonomy.

Not-found is never an exception: point lookups return ``None`` and deletes
return ``False``. Everything else a backend can go wrong with is turned into
one of the errors below before it leaves the storage layer.
"""

from typing import Any, List, Optional

from pydantic import ValidationError


class StorageError(Exception):
    """Base class for every error raised by a storage backend."""


class ValidationFailure(StorageError):
    """Malformed input given to a create/update operation."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, entity: str, exc: ValidationError) -> "ValidationFailure":
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        return cls(f"Invalid {entity} data", errors=errors)


class IntegrityViolation(StorageError):
    """A write would break a reference or uniqueness rule."""


class BackendUnavailable(StorageError):
    """The persistent backend could not be reached or failed to execute."""
