# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 17 OCT 2026
# ============================================================================
"""
Configuration Module

Provides the inbox settings and the healthcheck defaults.
"""

from core.config.defaults import (
    ProbeDefaults,
    ServerTimeouts,
    Defaults,
    get_defaults,
    reset_defaults,
)
from core.config.settings import (
    StorageConfig,
    BrokerConfig,
    ServerConfig,
    InboxConfig,
    TLSSettings,
    DatabaseConfig,
)

__all__ = [
    "ProbeDefaults",
    "ServerTimeouts",
    "Defaults",
    "get_defaults",
    "reset_defaults",
    "StorageConfig",
    "BrokerConfig",
    "ServerConfig",
    "InboxConfig",
    "TLSSettings",
    "DatabaseConfig",
]
