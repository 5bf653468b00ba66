"""
Registry Storage - durable state file for the DApp registry.

Persists admin, record counter and records as a single JSON document
with an integrity checksum. Writes use the write-replace pattern so a
crash leaves either the previous or the new state on disk.
"""

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from dapp_registry.core.exceptions import ChecksumMismatchError, StorageError
from dapp_registry.core.models import RegistryState

logger = logging.getLogger(__name__)


class StoredState(BaseModel):
    """On-disk envelope around the registry state."""

    version: str = "1.0"
    last_updated: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    checksum: str = ""
    state: RegistryState


def compute_checksum(state: RegistryState) -> str:
    """Compute SHA256 checksum of the canonical state JSON."""
    data_str = json.dumps(state.model_dump(mode="json"), sort_keys=True)
    return hashlib.sha256(data_str.encode()).hexdigest()


class RegistryStore:
    """
    File-backed store for registry state.

    Layout:
    - {state_file} (current state envelope)
    - {state_file}.tmp (transient, only during a save)
    """

    DEFAULT_STATE_FILE = Path("var/registry/state.json")

    def __init__(self, state_file: Path | None = None):
        """Initialize store, creating the parent directory if needed."""
        self._state_file = Path(state_file) if state_file else self.DEFAULT_STATE_FILE
        self._state_file.parent.mkdir(parents=True, exist_ok=True)

    @property
    def state_file(self) -> Path:
        """Path of the persisted state."""
        return self._state_file

    def exists(self) -> bool:
        """Return True if a state file has been written."""
        return self._state_file.exists()

    def load(self) -> RegistryState | None:
        """
        Load state from disk.

        Returns:
            The persisted state, or None if nothing has been saved yet

        Raises:
            StorageError: If the file cannot be read or parsed
            ChecksumMismatchError: If content does not match its checksum
        """
        if not self._state_file.exists():
            return None

        try:
            stored = StoredState.model_validate_json(self._state_file.read_text())
        except (OSError, ValidationError, ValueError) as e:
            raise StorageError(
                f"Failed to load registry state: {e}",
                path=str(self._state_file),
            ) from e

        actual = compute_checksum(stored.state)
        if stored.checksum != actual:
            raise ChecksumMismatchError(
                "Persisted registry state failed integrity check",
                path=str(self._state_file),
                expected=stored.checksum,
                actual=actual,
            )

        if not stored.state.is_consistent():
            raise StorageError(
                "Persisted records do not match record count",
                path=str(self._state_file),
                details={"record_count": stored.state.record_count},
            )

        logger.debug(
            "Loaded registry state from %s (%d records)",
            self._state_file,
            stored.state.record_count,
        )
        return stored.state

    def save(self, state: RegistryState) -> None:
        """
        Persist state to disk atomically using write-replace pattern.

        Raises:
            StorageError: If the write fails; the previous file is left intact
        """
        stored = StoredState(state=state, checksum=compute_checksum(state))
        temp_path = self._state_file.with_name(f"{self._state_file.name}.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(stored.model_dump_json(indent=2))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._state_file)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise StorageError(
                f"Failed to save registry state: {e}",
                path=str(self._state_file),
            ) from e

        logger.debug("Saved registry state to %s", self._state_file)
