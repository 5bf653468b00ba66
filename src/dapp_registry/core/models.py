"""
Core data models for the DApp Registry.

Records are frozen values; every change produces a new record through
one of the guarded transition methods.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dapp_registry.core.exceptions import AlreadyVerifiedError, InvalidInputError

NULL_IDENTITY = "0x0000000000000000000000000000000000000000"


class RegistryOperation(Enum):
    """Operations exposed by the registry."""

    PUBLISH = "publish"
    VERIFY = "verify"
    TRANSFER_OWNERSHIP = "transfer_ownership"
    GET = "get"


def is_null_identity(identity: str | None) -> bool:
    """Return True for the empty identity or the all-zero address."""
    if identity is None:
        return True
    value = identity.strip()
    if not value:
        return True
    return value.lower() == NULL_IDENTITY


def is_blank(value: str | None) -> bool:
    """Return True if a text field is missing or whitespace only."""
    return value is None or not value.strip()


class DappRecord(BaseModel):
    """A single published DApp entry."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0, description="Sequential record identifier, starting at 1")
    owner: str = Field(description="Identity currently controlling the record")
    name: str
    description: str
    repo_link: str = Field(description="Uninterpreted URI or string")
    verified: bool = False
    created_at: str = Field(default_factory=lambda: _iso_timestamp())

    def mark_verified(self) -> "DappRecord":
        """
        Return a verified copy of this record.

        Raises:
            AlreadyVerifiedError: If the record is already verified
        """
        if self.verified:
            raise AlreadyVerifiedError(
                f"Record {self.id} is already verified",
                record_id=self.id,
            )
        return self.model_copy(update={"verified": True})

    def with_owner(self, new_owner: str) -> "DappRecord":
        """
        Return a copy of this record owned by ``new_owner``.

        Raises:
            InvalidInputError: If new_owner is the null identity
        """
        if is_null_identity(new_owner):
            raise InvalidInputError(
                "New owner must be a non-null identity",
                field="new_owner",
                record_id=self.id,
                operation=RegistryOperation.TRANSFER_OWNERSHIP.value,
            )
        return self.model_copy(update={"owner": new_owner})

    def to_summary(self) -> dict[str, Any]:
        """Convert to summary for listing."""
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner,
            "verified": self.verified,
            "created_at": self.created_at,
        }


class RegistryState(BaseModel):
    """Complete state of a registry: admin, counter and records."""

    admin: str
    record_count: int = Field(default=0, ge=0)
    records: dict[int, DappRecord] = Field(default_factory=dict)

    def has_record(self, record_id: int) -> bool:
        """Return True if record_id lies within 1..record_count."""
        return 1 <= record_id <= self.record_count

    def is_consistent(self) -> bool:
        """Check that records hold exactly ids 1..record_count."""
        if set(self.records) != set(range(1, self.record_count + 1)):
            return False
        return all(record.id == key for key, record in self.records.items())


def _iso_timestamp() -> str:
    """Return current ISO8601 timestamp in UTC."""
    return datetime.now(timezone.utc).isoformat()
