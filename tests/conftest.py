"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from dapp_registry.audit.logger import AuditLogger
from dapp_registry.events.dispatcher import EventDispatcher
from dapp_registry.registry.service import DappRegistry
from dapp_registry.registry.storage import RegistryStore

from helpers import ADMIN


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry() -> DappRegistry:
    """In-memory registry administered by ADMIN."""
    return DappRegistry(admin=ADMIN)


@pytest.fixture
def store(temp_dir: Path) -> RegistryStore:
    """Store writing to a temporary state file."""
    return RegistryStore(temp_dir / "registry" / "state.json")


@pytest.fixture
def audit_logger(temp_dir: Path) -> AuditLogger:
    """Audit logger writing to a temporary directory."""
    return AuditLogger(temp_dir / "audit")


@pytest.fixture
def persistent_registry(store: RegistryStore, audit_logger: AuditLogger) -> DappRegistry:
    """Registry backed by a temporary state file and audit trail."""
    return DappRegistry(
        admin=ADMIN,
        store=store,
        dispatcher=EventDispatcher(),
        audit=audit_logger,
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep registry environment variables from leaking into tests."""
    for var in (
        "DAPP_REGISTRY_STATE_FILE",
        "DAPP_REGISTRY_AUDIT_DIR",
        "DAPP_REGISTRY_ADMIN",
        "DAPP_REGISTRY_IDENTITY",
        "DAPP_REGISTRY_EVENT_HISTORY",
        "DAPP_REGISTRY_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
