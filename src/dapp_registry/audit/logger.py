"""
Audit log writer for the DApp Registry.

Provides thread-safe append-only audit logging to a JSONL file.
"""

import fcntl
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from .models import AuditEntry, AuditResult

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """Result of a log write operation."""

    success: bool
    log_file: str
    error: str | None = None
    bytes_written: int = 0


class AuditLogger:
    """
    Thread-safe audit log writer.

    Appends one JSON line per registry operation to
    {audit_dir}/registry_audit.jsonl.
    """

    DEFAULT_AUDIT_DIR = Path("var/audit")
    LOG_FILE = "registry_audit.jsonl"

    def __init__(self, audit_dir: Path | None = None):
        """
        Initialize the audit logger.

        Args:
            audit_dir: Directory for the audit log (default: var/audit/)
        """
        self._audit_dir = Path(audit_dir) if audit_dir else self.DEFAULT_AUDIT_DIR
        self._audit_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def log_file(self) -> Path:
        """Path of the audit log."""
        return self._audit_dir / self.LOG_FILE

    def log(self, entry: AuditEntry) -> WriteResult:
        """Append an entry to the audit log."""
        log_file = self.log_file
        log_line = entry.to_log_line() + "\n"
        bytes_to_write = len(log_line.encode("utf-8"))

        try:
            with self._lock:
                with open(log_file, "a", encoding="utf-8") as f:
                    # Cross-process exclusion
                    try:
                        fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                    except OSError:
                        pass

                    try:
                        f.write(log_line)
                        f.flush()
                        os.fsync(f.fileno())
                    finally:
                        try:
                            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                        except OSError:
                            pass
        except OSError as e:
            logger.warning("Failed to write audit entry to %s: %s", log_file, e)
            return WriteResult(success=False, log_file=str(log_file), error=str(e))

        return WriteResult(success=True, log_file=str(log_file), bytes_written=bytes_to_write)

    def success(
        self,
        operation: str,
        caller: str | None = None,
        record_id: int | None = None,
        **metadata,
    ) -> WriteResult:
        """Log a successful operation."""
        return self.log(
            AuditEntry(
                operation=operation,
                caller=caller,
                record_id=record_id,
                result=AuditResult.SUCCESS,
                metadata=metadata,
            )
        )

    def failure(
        self,
        operation: str,
        error: Exception,
        caller: str | None = None,
        record_id: int | None = None,
        **metadata,
    ) -> WriteResult:
        """Log a rejected operation."""
        return self.log(
            AuditEntry(
                operation=operation,
                caller=caller,
                record_id=record_id,
                result=AuditResult.FAILURE,
                error_type=error.__class__.__name__,
                error_message=str(error),
                metadata=metadata,
            )
        )

    def read(self, limit: int | None = None) -> list[AuditEntry]:
        """
        Read entries back from the audit log, oldest first.

        Malformed lines are skipped.
        """
        if not self.log_file.exists():
            return []

        entries = []
        with self._lock:
            with open(self.log_file, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(AuditEntry.model_validate_json(line))
                    except ValidationError:
                        logger.debug("Skipping malformed audit line in %s", self.log_file)

        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def verify_entry(self, entry: AuditEntry) -> bool:
        """Check an entry read from disk against its stored checksum."""
        return entry.checksum is not None and entry.checksum == entry.compute_checksum()
