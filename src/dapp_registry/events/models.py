"""
Notification event models for the DApp Registry.

One event is emitted per successful mutation so external observers
can follow what happened to each record.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class RegistryEventType(str, Enum):
    """Types of events emitted by the registry."""

    PUBLISHED = "published"
    VERIFIED = "verified"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"


def _iso_timestamp() -> str:
    """Return current ISO8601 timestamp in UTC."""
    return datetime.now(timezone.utc).isoformat()


class RegistryEvent(BaseModel):
    """Base event: what happened, when, and to which record."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: f"evt_{uuid.uuid4().hex[:12]}")
    event_type: RegistryEventType
    timestamp: str = Field(default_factory=_iso_timestamp)
    record_id: int

    def to_log_line(self) -> str:
        """Serialize the event as a single JSON line."""
        return self.model_dump_json()

    def summary(self) -> dict[str, Any]:
        """Event fields without the envelope."""
        return self.model_dump(mode="json", exclude={"event_id", "timestamp"})


class PublishedEvent(RegistryEvent):
    """A new record was published."""

    event_type: Literal[RegistryEventType.PUBLISHED] = RegistryEventType.PUBLISHED
    developer: str
    name: str
    repo_link: str


class VerifiedEvent(RegistryEvent):
    """The admin verified a record."""

    event_type: Literal[RegistryEventType.VERIFIED] = RegistryEventType.VERIFIED
    verifier: str


class OwnershipTransferredEvent(RegistryEvent):
    """A record changed owner."""

    event_type: Literal[RegistryEventType.OWNERSHIP_TRANSFERRED] = (
        RegistryEventType.OWNERSHIP_TRANSFERRED
    )
    old_developer: str
    new_developer: str
