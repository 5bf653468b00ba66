"""
DApp Registry Exception Hierarchy.

Defines all custom exceptions raised by the registry.
Every rejected operation surfaces as a distinct, typed failure.
"""

from typing import Any


class DappRegistryError(Exception):
    """
    Base exception for all DApp Registry errors.

    All custom exceptions inherit from this class, allowing
    generic catch blocks and consistent error handling.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize a DappRegistryError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class RecordError(DappRegistryError):
    """
    Errors in registry record operations.

    Raised when a publish, verify, transfer or read is rejected.
    The registry state is unchanged whenever one of these is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        record_id: int | None = None,
        caller: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a RecordError.

        Args:
            message: Human-readable error message
            record_id: ID of the record involved
            caller: Identity that invoked the operation
            operation: Operation being performed
            details: Optional structured data for debugging
        """
        details = details or {}
        if record_id is not None:
            details["record_id"] = record_id
        if caller:
            details["caller"] = caller
        if operation:
            details["operation"] = operation

        super().__init__(message, details=details)
        self.record_id = record_id
        self.caller = caller
        self.operation = operation


class InvalidInputError(RecordError):
    """Raised when a required text field is empty or an identity is null."""

    def __init__(
        self,
        message: str = "Invalid input",
        *,
        field: str | None = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {}) or {}
        if field:
            details["field"] = field
        kwargs["details"] = details

        super().__init__(message, **kwargs)
        self.field = field


class NotFoundError(RecordError):
    """Raised when a record id is outside 1..record_count."""

    def __init__(self, message: str = "Record not found", **kwargs):
        super().__init__(message, **kwargs)


class UnauthorizedError(RecordError):
    """
    Raised when the caller lacks the role an operation requires.

    Verification requires the admin; transfer requires the current owner.
    """

    def __init__(
        self,
        message: str = "Caller is not authorized",
        *,
        required_role: str | None = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {}) or {}
        if required_role:
            details["required_role"] = required_role
        kwargs["details"] = details

        super().__init__(message, **kwargs)
        self.required_role = required_role


class AlreadyVerifiedError(RecordError):
    """Raised when verify is called on a record that is already verified."""

    def __init__(self, message: str = "Record already verified", **kwargs):
        super().__init__(message, operation="verify", **kwargs)


class StorageError(DappRegistryError):
    """
    Errors reading or writing persisted registry state.

    Raised when:
    - The state file cannot be parsed
    - The state file cannot be written
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if path:
            details["path"] = path

        super().__init__(message, details=details)
        self.path = path


class ChecksumMismatchError(StorageError):
    """Raised when persisted state does not match its stored checksum."""

    def __init__(
        self,
        message: str = "Checksum mismatch",
        *,
        path: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ):
        details = {"expected": expected, "actual": actual}
        super().__init__(message, path=path, details=details)
        self.expected = expected
        self.actual = actual


class ConfigurationError(DappRegistryError):
    """
    Errors in configuration loading or validation.

    Raised when:
    - Environment variables hold invalid values
    - A configured admin contradicts the persisted admin
    """

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if env_var:
            details["env_var"] = env_var
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details=details)
        self.env_var = env_var
        self.config_key = config_key


def format_exception(error: Exception) -> str:
    """
    Format an exception for user-friendly display.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, DappRegistryError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"
