"""
DApp Registry Registry Module.

The registry state machine and its durable store.
"""

__all__ = [
    "DappRegistry",
    "RegistryStore",
    "StoredState",
]

from dapp_registry.registry.service import DappRegistry
from dapp_registry.registry.storage import RegistryStore, StoredState
