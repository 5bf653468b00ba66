"""
DApp Registry Events Module.

Event models and the in-process dispatcher that delivers them.

Example:
    >>> dispatcher = EventDispatcher()
    >>> dispatcher.subscribe(print, [RegistryEventType.VERIFIED])
"""

__all__ = [
    "EventDispatcher",
    "DispatcherStats",
    "RegistryEvent",
    "RegistryEventType",
    "PublishedEvent",
    "VerifiedEvent",
    "OwnershipTransferredEvent",
]

from dapp_registry.events.dispatcher import DispatcherStats, EventDispatcher
from dapp_registry.events.models import (
    OwnershipTransferredEvent,
    PublishedEvent,
    RegistryEvent,
    RegistryEventType,
    VerifiedEvent,
)
