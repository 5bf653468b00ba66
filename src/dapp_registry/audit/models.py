"""
Audit data models for the DApp Registry.

Every registry call, accepted or rejected, produces one AuditEntry.
"""

import hashlib
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AuditResult(str, Enum):
    """Result status of audited operations."""

    SUCCESS = "success"
    FAILURE = "failure"


def _utc_now() -> str:
    """Return current UTC timestamp as ISO8601 string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class AuditEntry(BaseModel):
    """
    A single audit log entry.

    Immutable record of one registry operation.
    """

    timestamp: str = Field(default_factory=_utc_now)
    operation: str = Field(description="Registry operation name")
    caller: str | None = Field(default=None, description="Identity that invoked the operation")
    record_id: int | None = Field(default=None, description="Record affected, if known")
    result: AuditResult = Field(default=AuditResult.SUCCESS)
    error_type: str | None = Field(default=None, description="Exception class on failure")
    error_message: str | None = Field(default=None, description="Error details on failure")
    metadata: dict[str, Any] = Field(default_factory=dict)
    checksum: str | None = Field(default=None, description="SHA256 hash for integrity verification")

    model_config = {"frozen": True}

    def compute_checksum(self) -> str:
        """Compute SHA256 checksum of entry data for integrity verification."""
        data = self.model_dump(mode="json", exclude={"checksum"})
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()

    def with_checksum(self) -> "AuditEntry":
        """Return a new entry with checksum computed."""
        return self.model_copy(update={"checksum": self.compute_checksum()})

    def to_log_line(self) -> str:
        """Convert to JSONL string for file storage."""
        return self.with_checksum().model_dump_json(exclude_none=True)
