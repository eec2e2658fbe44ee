"""Error taxonomy for registry operations.

Every failure a registry operation can report is one of the classes below.
Each carries a stable ``error_code`` and a user-facing message so callers
can tell "you can't do this" apart from "someone already reviewed this"
without parsing text.
"""

from typing import Optional

# Field key reserved for whole-submission errors
ROOT_FIELD = "root"


class RegistryError(Exception):
    """Base class for all registry errors."""

    error_code = "REGISTRY_ERROR"
    default_message = "Something went wrong, please try again"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        """Initialize error.

        Args:
            message: User-facing message (defaults to the class message)
            detail: Diagnostic detail, not stable for programmatic matching
        """
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    @property
    def field_errors(self) -> dict[str, list[str]]:
        """Errors keyed by field name."""
        return {ROOT_FIELD: [self.message]}


class ValidationError(RegistryError):
    """Submitted values failed shape, length or enum rules."""

    error_code = "VALIDATION_ERROR"
    default_message = "Invalid submission"

    def __init__(self, errors: dict[str, list[str]], message: Optional[str] = None):
        """Initialize validation error.

        Args:
            errors: Mapping of field name to human-readable messages
            message: Optional summary message
        """
        self.errors = {field: list(messages) for field, messages in errors.items()}
        super().__init__(message)

    @property
    def field_errors(self) -> dict[str, list[str]]:
        return self.errors

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Build an error carrying a single message for one field."""
        return cls({field: [message]})


class AuthorizationError(RegistryError):
    """Valid identity, insufficient privilege."""

    error_code = "NOT_AUTHORIZED"
    default_message = "Admin access required"


class AuthenticationError(RegistryError):
    """No valid caller identity."""

    error_code = "AUTHENTICATION_REQUIRED"
    default_message = "Authentication required"


class InvalidStateError(RegistryError):
    """Entity is not in the state the operation requires."""

    error_code = "INVALID_STATE"
    default_message = "This request has already been reviewed"


class NotFoundError(RegistryError):
    """Requested entity does not exist."""

    error_code = "NOT_FOUND"
    default_message = "Not found"


class PersistenceError(RegistryError):
    """External store failure, including partial failures."""

    error_code = "PERSISTENCE_ERROR"
    default_message = "Something went wrong, please try again"
