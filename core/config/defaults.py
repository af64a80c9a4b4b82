# ============================================================================
# HEALTHCHECK DEFAULTS
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Core - Default probe and server values
# PURPOSE: Centralized timeouts and thresholds for probes and the listener
# CREATED: 17 OCT 2026
# ============================================================================
"""
Healthcheck Defaults

Fixed probe timeouts, the execution unit threshold and the listener's
connection hygiene timeouts. All values are in seconds unless noted.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ProbeDefaults:
    """
    Defaults for dependency and process probes.
    """
    storage_timeout: float = 5.0   # 5000 ms
    broker_timeout: float = 5.0    # 5000 ms
    database_timeout: float = 1.0  # 1000 ms

    # Max live asyncio tasks + threads before liveness fails
    execution_unit_threshold: int = 100

    @classmethod
    def from_env(cls) -> "ProbeDefaults":
        """Create from environment variables."""
        return cls(
            storage_timeout=float(os.getenv("HEALTH_STORAGE_TIMEOUT", 5.0)),
            broker_timeout=float(os.getenv("HEALTH_BROKER_TIMEOUT", 5.0)),
            database_timeout=float(os.getenv("HEALTH_DATABASE_TIMEOUT", 1.0)),
            execution_unit_threshold=int(os.getenv("HEALTH_UNIT_THRESHOLD", 100)),
        )


@dataclass(frozen=True)
class ServerTimeouts:
    """
    Connection hygiene timeouts for the health listener.

    Protects the probe endpoint itself from slow clients.
    """
    read: float = 5.0
    write: float = 5.0
    idle: float = 30.0
    read_header: float = 3.0

    @classmethod
    def from_env(cls) -> "ServerTimeouts":
        """Create from environment variables."""
        return cls(
            read=float(os.getenv("HEALTH_READ_TIMEOUT", 5.0)),
            write=float(os.getenv("HEALTH_WRITE_TIMEOUT", 5.0)),
            idle=float(os.getenv("HEALTH_IDLE_TIMEOUT", 30.0)),
            read_header=float(os.getenv("HEALTH_READ_HEADER_TIMEOUT", 3.0)),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    probes: ProbeDefaults = field(default_factory=ProbeDefaults)
    server: ServerTimeouts = field(default_factory=ServerTimeouts)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            probes=ProbeDefaults.from_env(),
            server=ServerTimeouts.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ProbeDefaults",
    "ServerTimeouts",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
