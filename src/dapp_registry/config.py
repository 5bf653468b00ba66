"""
Configuration - environment-driven settings and registry wiring.

Environment variables:
- DAPP_REGISTRY_STATE_FILE: Persisted state path (default var/registry/state.json)
- DAPP_REGISTRY_AUDIT_DIR: Audit log directory (default var/audit, empty disables)
- DAPP_REGISTRY_ADMIN: Admin identity for a newly created registry
- DAPP_REGISTRY_IDENTITY: Default caller identity for the CLI
- DAPP_REGISTRY_EVENT_HISTORY: Max events kept in memory (default 1000)
- DAPP_REGISTRY_LOG_LEVEL: Logging level name (default WARNING)
"""

import logging
import os
from pathlib import Path

from pydantic import BaseModel

from dapp_registry.audit.logger import AuditLogger
from dapp_registry.core.exceptions import ConfigurationError
from dapp_registry.events.dispatcher import EventDispatcher
from dapp_registry.registry.service import DappRegistry
from dapp_registry.registry.storage import RegistryStore

ENV_PREFIX = "DAPP_REGISTRY_"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class RegistryConfig(BaseModel):
    """Configuration for a registry instance."""

    state_file: Path = RegistryStore.DEFAULT_STATE_FILE
    audit_dir: Path | None = AuditLogger.DEFAULT_AUDIT_DIR
    admin: str | None = None
    identity: str | None = None
    event_history: int = EventDispatcher.DEFAULT_HISTORY_SIZE
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """
        Load configuration from environment.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        state_file = os.getenv(f"{ENV_PREFIX}STATE_FILE")
        audit_dir = os.getenv(f"{ENV_PREFIX}AUDIT_DIR")

        history_var = f"{ENV_PREFIX}EVENT_HISTORY"
        history_str = os.getenv(history_var, str(EventDispatcher.DEFAULT_HISTORY_SIZE))
        try:
            event_history = int(history_str)
        except ValueError:
            raise ConfigurationError(
                f"{history_var} must be an integer, got {history_str!r}",
                env_var=history_var,
            ) from None
        if event_history <= 0:
            raise ConfigurationError(
                f"{history_var} must be positive",
                env_var=history_var,
            )

        level_var = f"{ENV_PREFIX}LOG_LEVEL"
        log_level = os.getenv(level_var, "WARNING").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(
                f"Unknown log level {log_level!r}",
                env_var=level_var,
            )

        return cls(
            state_file=Path(state_file) if state_file else RegistryStore.DEFAULT_STATE_FILE,
            audit_dir=(
                AuditLogger.DEFAULT_AUDIT_DIR
                if audit_dir is None
                else (Path(audit_dir) if audit_dir else None)
            ),
            admin=os.getenv(f"{ENV_PREFIX}ADMIN") or None,
            identity=os.getenv(f"{ENV_PREFIX}IDENTITY") or None,
            event_history=event_history,
            log_level=log_level,
        )


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_registry(config: RegistryConfig | None = None, admin: str | None = None) -> DappRegistry:
    """
    Wire store, audit trail and dispatcher into a registry.

    Args:
        config: Settings (loaded from environment when omitted)
        admin: Admin override; falls back to config.admin
    """
    config = config or RegistryConfig.from_env()
    return DappRegistry(
        admin=admin or config.admin,
        store=RegistryStore(config.state_file),
        dispatcher=EventDispatcher(history_size=config.event_history),
        audit=AuditLogger(config.audit_dir) if config.audit_dir else None,
    )
