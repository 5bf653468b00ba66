"""Tests for registry events and the dispatcher."""

import logging

import pytest

from helpers import ADMIN, ALICE, BOB
from dapp_registry.events.dispatcher import EventDispatcher
from dapp_registry.events.models import (
    OwnershipTransferredEvent,
    PublishedEvent,
    RegistryEvent,
    RegistryEventType,
    VerifiedEvent,
)
from dapp_registry.registry.service import DappRegistry


class TestEventModels:
    """Tests for event models."""

    def test_event_types_defined(self) -> None:
        """All expected event types are defined."""
        expected = {"published", "verified", "ownership_transferred"}
        assert {t.value for t in RegistryEventType} == expected

    def test_event_type_is_fixed_per_class(self) -> None:
        """Each event class carries its own type."""
        assert PublishedEvent(record_id=1, developer=ALICE, name="n", repo_link="r").event_type == (
            RegistryEventType.PUBLISHED
        )
        assert VerifiedEvent(record_id=1, verifier=ADMIN).event_type == RegistryEventType.VERIFIED
        assert OwnershipTransferredEvent(
            record_id=1, old_developer=ALICE, new_developer=BOB
        ).event_type == RegistryEventType.OWNERSHIP_TRANSFERRED

    def test_event_ids_unique(self) -> None:
        """Every event gets its own id."""
        a = VerifiedEvent(record_id=1, verifier=ADMIN)
        b = VerifiedEvent(record_id=1, verifier=ADMIN)
        assert a.event_id != b.event_id
        assert a.event_id.startswith("evt_")

    def test_summary_excludes_envelope(self) -> None:
        """summary() keeps only the event payload."""
        event = VerifiedEvent(record_id=7, verifier=ADMIN)
        assert event.summary() == {
            "event_type": "verified",
            "record_id": 7,
            "verifier": ADMIN,
        }


class TestEventDispatcher:
    """Tests for EventDispatcher."""

    def test_subscriber_receives_events(self) -> None:
        """Subscribers are called with each emitted event."""
        dispatcher = EventDispatcher()
        received: list[RegistryEvent] = []
        dispatcher.subscribe(received.append)

        event = VerifiedEvent(record_id=1, verifier=ADMIN)
        dispatcher.emit(event)

        assert received == [event]
        assert dispatcher.stats.total_delivered == 1

    def test_type_filter(self) -> None:
        """Subscriptions can be limited to event types."""
        dispatcher = EventDispatcher()
        received: list[RegistryEvent] = []
        dispatcher.subscribe(received.append, [RegistryEventType.PUBLISHED])

        dispatcher.emit(VerifiedEvent(record_id=1, verifier=ADMIN))
        dispatcher.emit(PublishedEvent(record_id=2, developer=ALICE, name="n", repo_link="r"))

        assert [e.record_id for e in received] == [2]

    def test_unsubscribe(self) -> None:
        """Unsubscribed handlers are no longer called."""
        dispatcher = EventDispatcher()
        received: list[RegistryEvent] = []
        sub_id = dispatcher.subscribe(received.append)

        assert dispatcher.unsubscribe(sub_id) is True
        assert dispatcher.unsubscribe(sub_id) is False

        dispatcher.emit(VerifiedEvent(record_id=1, verifier=ADMIN))
        assert received == []

    def test_failing_handler_is_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        """One broken handler neither raises nor blocks the others."""
        dispatcher = EventDispatcher()
        received: list[RegistryEvent] = []

        def broken(event: RegistryEvent) -> None:
            raise RuntimeError("handler exploded")

        dispatcher.subscribe(broken)
        dispatcher.subscribe(received.append)

        with caplog.at_level(logging.WARNING, logger="dapp_registry.events.dispatcher"):
            dispatcher.emit(VerifiedEvent(record_id=1, verifier=ADMIN))

        assert len(received) == 1
        assert dispatcher.stats.total_failed == 1
        assert "handler exploded" in caplog.text

    def test_history_bounded(self) -> None:
        """Only the most recent events are retained."""
        dispatcher = EventDispatcher(history_size=3)
        for i in range(1, 6):
            dispatcher.emit(VerifiedEvent(record_id=i, verifier=ADMIN))

        assert [e.record_id for e in dispatcher.history()] == [3, 4, 5]
        assert dispatcher.stats.total_emitted == 5

    def test_history_filters(self) -> None:
        """history() filters by record, type and limit."""
        dispatcher = EventDispatcher()
        dispatcher.emit(PublishedEvent(record_id=1, developer=ALICE, name="n", repo_link="r"))
        dispatcher.emit(PublishedEvent(record_id=2, developer=ALICE, name="n", repo_link="r"))
        dispatcher.emit(VerifiedEvent(record_id=1, verifier=ADMIN))

        assert len(dispatcher.history(record_id=1)) == 2
        assert len(dispatcher.history(event_type=RegistryEventType.PUBLISHED)) == 2
        assert [e.record_id for e in dispatcher.history(limit=1)] == [1]
        assert dispatcher.history(limit=0) == []

    def test_clear_history(self) -> None:
        """clear_history() drops retained events."""
        dispatcher = EventDispatcher()
        dispatcher.emit(VerifiedEvent(record_id=1, verifier=ADMIN))
        dispatcher.clear_history()

        assert dispatcher.history() == []


class TestRegistryNotifications:
    """Tests for events emitted through the registry."""

    def test_event_sequence(self, registry: DappRegistry) -> None:
        """One event per successful mutation, in order."""
        registry.publish("Foo", "desc", "http://x", caller=ALICE)
        registry.verify(1, caller=ADMIN)
        registry.transfer_ownership(1, BOB, caller=ALICE)

        assert [e.event_type for e in registry.events()] == [
            RegistryEventType.PUBLISHED,
            RegistryEventType.VERIFIED,
            RegistryEventType.OWNERSHIP_TRANSFERRED,
        ]

    def test_no_event_on_failure(self, registry: DappRegistry) -> None:
        """Rejected operations emit nothing."""
        registry.publish("Foo", "desc", "http://x", caller=ALICE)
        received: list[RegistryEvent] = []
        registry.dispatcher.subscribe(received.append)

        for call in (
            lambda: registry.verify(1, caller=ALICE),
            lambda: registry.transfer_ownership(1, BOB, caller=BOB),
            lambda: registry.publish("", "d", "r", caller=ALICE),
        ):
            with pytest.raises(Exception):
                call()

        assert received == []

    def test_handler_failure_does_not_undo_mutation(self, registry: DappRegistry) -> None:
        """A broken subscriber cannot roll back a committed change."""

        def broken(event: RegistryEvent) -> None:
            raise RuntimeError("nope")

        registry.dispatcher.subscribe(broken)
        registry.publish("Foo", "desc", "http://x", caller=ALICE)

        assert registry.record_count == 1
