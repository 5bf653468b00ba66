"""
DApp Registry - publish, verify and transfer decentralized application records.

A single registry holds every record; one admin identity may verify
records and each record's owner may hand it over to someone else.
"""

__version__ = "0.1.0"

__all__ = [
    "DappRegistry",
    "DappRecord",
]

from dapp_registry.core.models import DappRecord
from dapp_registry.registry.service import DappRegistry
