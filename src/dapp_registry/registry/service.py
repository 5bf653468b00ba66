"""
DApp Registry - the registry state machine.

Owns the admin identity, the record counter and all records. Every
mutating operation runs under one lock covering validation, persistence,
commit and event emission, so operations are applied in a strict total
order and a rejected call leaves no trace in the state.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator

from dapp_registry.audit.logger import AuditLogger
from dapp_registry.core.exceptions import (
    ConfigurationError,
    DappRegistryError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from dapp_registry.core.models import (
    DappRecord,
    RegistryOperation,
    RegistryState,
    is_blank,
    is_null_identity,
)
from dapp_registry.events.dispatcher import EventDispatcher
from dapp_registry.events.models import (
    OwnershipTransferredEvent,
    PublishedEvent,
    RegistryEvent,
    VerifiedEvent,
)
from dapp_registry.registry.storage import RegistryStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DappRegistry:
    """
    Registry of published DApp records.

    A registry is created once with a fixed admin. When a store is given,
    state is loaded from it if present and every successful mutation is
    persisted before it becomes visible.
    """

    def __init__(
        self,
        admin: str | None = None,
        *,
        store: RegistryStore | None = None,
        dispatcher: EventDispatcher | None = None,
        audit: AuditLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize or reopen a registry.

        Args:
            admin: Admin identity; required when no persisted state exists
            store: Durable store (in-memory only when omitted)
            dispatcher: Receives one event per successful mutation
            audit: Audit trail for accepted and rejected operations
            clock: Source of creation timestamps

        Raises:
            ConfigurationError: If admin is missing/null for a new registry,
                or contradicts the persisted admin
            StorageError: If persisted state cannot be loaded
        """
        self._lock = threading.RLock()
        self._store = store
        self._dispatcher = dispatcher or EventDispatcher()
        self._audit = audit
        self._clock = clock or _utc_now

        loaded = store.load() if store else None
        if loaded is not None:
            if admin is not None and admin != loaded.admin:
                raise ConfigurationError(
                    "Configured admin does not match the persisted registry admin",
                    config_key="admin",
                    details={"persisted_admin": loaded.admin, "configured_admin": admin},
                )
            self._state = loaded
            logger.info(
                "Reopened registry with %d records (admin=%s)",
                loaded.record_count,
                loaded.admin,
            )
            return

        if is_null_identity(admin):
            raise ConfigurationError(
                "A new registry requires a non-null admin identity",
                config_key="admin",
            )

        self._state = RegistryState(admin=admin)
        if store:
            store.save(self._state)
        logger.info("Created registry (admin=%s)", admin)

    # Read-only properties

    @property
    def admin(self) -> str:
        """Admin identity, fixed at creation."""
        return self._state.admin

    @property
    def record_count(self) -> int:
        """Number of records published so far."""
        with self._lock:
            return self._state.record_count

    @property
    def dispatcher(self) -> EventDispatcher:
        """Event dispatcher receiving registry notifications."""
        return self._dispatcher

    @property
    def store(self) -> RegistryStore | None:
        """Durable store, if any."""
        return self._store

    # Mutations

    def publish(self, name: str, description: str, repo_link: str, caller: str) -> int:
        """
        Publish a new DApp record owned by the caller.

        Returns:
            The new record id

        Raises:
            InvalidInputError: If a text field is empty or caller is null
        """
        with self._operation(RegistryOperation.PUBLISH, caller):
            for field_name, value in (
                ("name", name),
                ("description", description),
                ("repo_link", repo_link),
            ):
                if is_blank(value):
                    raise InvalidInputError(
                        f"Field '{field_name}' must not be empty",
                        field=field_name,
                        caller=caller,
                        operation=RegistryOperation.PUBLISH.value,
                    )
            if is_null_identity(caller):
                raise InvalidInputError(
                    "Publisher must be a non-null identity",
                    field="caller",
                    operation=RegistryOperation.PUBLISH.value,
                )

            record_id = self._state.record_count + 1
            record = DappRecord(
                id=record_id,
                owner=caller,
                name=name,
                description=description,
                repo_link=repo_link,
                created_at=self._clock().isoformat(),
            )
            new_state = self._state.model_copy(
                update={
                    "record_count": record_id,
                    "records": {**self._state.records, record_id: record},
                }
            )
            self._commit(
                new_state,
                PublishedEvent(
                    record_id=record_id,
                    developer=caller,
                    name=name,
                    repo_link=repo_link,
                ),
            )
            self._audit_success(RegistryOperation.PUBLISH, caller, record_id, name=name)
            logger.info("Published record %d '%s' (owner=%s)", record_id, name, caller)
            return record_id

    def verify(self, record_id: int, caller: str) -> None:
        """
        Mark a record as verified. Admin only.

        Raises:
            UnauthorizedError: If caller is not the admin
            NotFoundError: If the record does not exist
            AlreadyVerifiedError: If the record is already verified
        """
        with self._operation(RegistryOperation.VERIFY, caller, record_id):
            if caller != self._state.admin:
                raise UnauthorizedError(
                    "Only the registry admin can verify records",
                    required_role="admin",
                    record_id=record_id,
                    caller=caller,
                    operation=RegistryOperation.VERIFY.value,
                )
            record = self._require_record(record_id, RegistryOperation.VERIFY)
            verified = record.mark_verified()

            self._commit(
                self._replace_record(verified),
                VerifiedEvent(record_id=record_id, verifier=caller),
            )
            self._audit_success(RegistryOperation.VERIFY, caller, record_id)
            logger.info("Verified record %d", record_id)

    def transfer_ownership(self, record_id: int, new_owner: str, caller: str) -> None:
        """
        Hand a record over to another identity. Current owner only.

        Raises:
            NotFoundError: If the record does not exist
            UnauthorizedError: If caller is not the current owner
            InvalidInputError: If new_owner is the null identity
        """
        with self._operation(RegistryOperation.TRANSFER_OWNERSHIP, caller, record_id):
            record = self._require_record(record_id, RegistryOperation.TRANSFER_OWNERSHIP)
            if caller != record.owner:
                raise UnauthorizedError(
                    "Only the record owner can transfer ownership",
                    required_role="owner",
                    record_id=record_id,
                    caller=caller,
                    operation=RegistryOperation.TRANSFER_OWNERSHIP.value,
                )
            transferred = record.with_owner(new_owner)

            self._commit(
                self._replace_record(transferred),
                OwnershipTransferredEvent(
                    record_id=record_id,
                    old_developer=record.owner,
                    new_developer=new_owner,
                ),
            )
            self._audit_success(
                RegistryOperation.TRANSFER_OWNERSHIP,
                caller,
                record_id,
                new_owner=new_owner,
            )
            logger.info(
                "Transferred record %d from %s to %s", record_id, record.owner, new_owner
            )

    # Reads

    def get(self, record_id: int) -> DappRecord:
        """
        Look up a record by id.

        Raises:
            NotFoundError: If the record does not exist
        """
        with self._lock:
            return self._require_record(record_id, RegistryOperation.GET)

    def list_records(
        self,
        verified: bool | None = None,
        owner: str | None = None,
    ) -> list[DappRecord]:
        """List records in id order, optionally filtered."""
        with self._lock:
            records = [self._state.records[i] for i in range(1, self._state.record_count + 1)]

        if verified is not None:
            records = [r for r in records if r.verified == verified]
        if owner is not None:
            records = [r for r in records if r.owner == owner]
        return records

    def records_by_owner(self, owner: str) -> list[DappRecord]:
        """All records currently owned by an identity."""
        return self.list_records(owner=owner)

    def stats(self) -> dict[str, Any]:
        """Summary counts for status displays."""
        with self._lock:
            records = list(self._state.records.values())
            return {
                "admin": self._state.admin,
                "record_count": self._state.record_count,
                "verified_count": sum(1 for r in records if r.verified),
                "owner_count": len({r.owner for r in records}),
            }

    def snapshot(self) -> RegistryState:
        """Consistent copy of the whole registry state."""
        with self._lock:
            return self._state.model_copy(deep=True)

    def events(self, record_id: int | None = None) -> list[RegistryEvent]:
        """Events emitted by this registry, oldest first."""
        return self._dispatcher.history(record_id=record_id)

    # Internals

    @contextmanager
    def _operation(
        self,
        operation: RegistryOperation,
        caller: str,
        record_id: int | None = None,
    ) -> Iterator[None]:
        """Serialize a mutation and audit it if it is rejected or fails to persist."""
        with self._lock:
            try:
                yield
            except DappRegistryError as e:
                logger.warning("Rejected %s: %s", operation.value, e)
                if self._audit:
                    self._audit.failure(
                        operation.value,
                        e,
                        caller=caller,
                        record_id=record_id if isinstance(record_id, int) else None,
                    )
                raise

    def _require_record(self, record_id: int, operation: RegistryOperation) -> DappRecord:
        """Return the record or raise NotFoundError."""
        if (
            not isinstance(record_id, int)
            or isinstance(record_id, bool)
            or not self._state.has_record(record_id)
        ):
            raise NotFoundError(
                f"Record {record_id} does not exist",
                record_id=record_id if isinstance(record_id, int) else None,
                operation=operation.value,
                details={"record_count": self._state.record_count},
            )
        return self._state.records[record_id]

    def _replace_record(self, record: DappRecord) -> RegistryState:
        """Build a new state with one record swapped in."""
        return self._state.model_copy(
            update={"records": {**self._state.records, record.id: record}}
        )

    def _commit(self, new_state: RegistryState, event: RegistryEvent) -> None:
        """Persist, then publish the new state in memory, then notify."""
        if self._store:
            self._store.save(new_state)
        self._state = new_state
        self._dispatcher.emit(event)

    def _audit_success(
        self,
        operation: RegistryOperation,
        caller: str,
        record_id: int,
        **metadata,
    ) -> None:
        if self._audit:
            self._audit.success(operation.value, caller=caller, record_id=record_id, **metadata)
