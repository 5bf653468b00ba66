"""
DApp Registry Core Module.

Provides foundational types and the exception hierarchy.
"""

__all__ = [
    "DappRecord",
    "RegistryOperation",
    "RegistryState",
    "NULL_IDENTITY",
    "is_null_identity",
    # Exceptions
    "DappRegistryError",
    "RecordError",
    "InvalidInputError",
    "NotFoundError",
    "UnauthorizedError",
    "AlreadyVerifiedError",
    "StorageError",
    "ChecksumMismatchError",
    "ConfigurationError",
]

from dapp_registry.core.exceptions import (
    AlreadyVerifiedError,
    ChecksumMismatchError,
    ConfigurationError,
    DappRegistryError,
    InvalidInputError,
    NotFoundError,
    RecordError,
    StorageError,
    UnauthorizedError,
)
from dapp_registry.core.models import (
    NULL_IDENTITY,
    DappRecord,
    RegistryOperation,
    RegistryState,
    is_null_identity,
)
