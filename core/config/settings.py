# ============================================================================
# INBOX CONFIGURATION
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Core - Environment-based configuration
# PURPOSE: Storage, broker, server, TLS and database settings
# CREATED: 17 OCT 2026
# ============================================================================
"""
Inbox Configuration

Loads the health-relevant part of the inbox service configuration from
environment variables. Only string assembly happens here; nothing is
validated or dialed until a probe runs.

Environment variables:
    INBOX_URL, INBOX_PORT, INBOX_READYPATH   - S3 backend location
    INBOX_CACERT                             - CA bundle trusted for S3
    BROKER_HOST, BROKER_PORT                 - message broker location
    SERVER_CERT, SERVER_KEY                  - TLS pair for the health listener
    DATABASE_URL or DB_*                     - PostgreSQL connection
"""

import os
import ssl
import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """S3 backend location."""
    url: str = ""          # includes scheme, e.g. https://s3.example.org
    port: int = 0          # 0 means "use the scheme's default"
    readypath: str = ""    # e.g. /minio/health/ready

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            url=os.environ.get("INBOX_URL", ""),
            port=int(os.environ.get("INBOX_PORT", "0") or 0),
            readypath=os.environ.get("INBOX_READYPATH", ""),
        )


@dataclass
class BrokerConfig:
    """Message broker location."""
    host: str = ""
    port: int = 0

    @classmethod
    def from_env(cls) -> "BrokerConfig":
        return cls(
            host=os.environ.get("BROKER_HOST", ""),
            port=int(os.environ.get("BROKER_PORT", "0") or 0),
        )


@dataclass
class ServerConfig:
    """Optional TLS certificate/key pair for the health listener."""
    cert: str = ""
    key: str = ""

    @property
    def tls_enabled(self) -> bool:
        """Both cert and key must be set to serve over TLS."""
        return bool(self.cert and self.key)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        return cls(
            cert=os.environ.get("SERVER_CERT", ""),
            key=os.environ.get("SERVER_KEY", ""),
        )


@dataclass
class InboxConfig:
    """
    Configuration consumed by the healthcheck.

    Mirrors the sections of the inbox service config that the
    healthcheck needs: the S3 backend, the broker and the server TLS pair.
    """
    storage: StorageConfig = field(default_factory=StorageConfig)
    broker: BrokerConfig = field(default_factory=BrokerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> "InboxConfig":
        """Load configuration from environment variables."""
        return cls(
            storage=StorageConfig.from_env(),
            broker=BrokerConfig.from_env(),
            server=ServerConfig.from_env(),
        )


@dataclass
class TLSSettings:
    """
    Trust material for outbound TLS connections.

    When a CA bundle (file or PEM data) is supplied, only those roots are
    trusted. With neither set, the system trust store is used.
    """
    ca_file: Optional[str] = None
    ca_data: Optional[str] = None

    def client_context(self) -> ssl.SSLContext:
        """Build a client SSLContext with TLS 1.2 as the floor."""
        if self.ca_file or self.ca_data:
            context = ssl.create_default_context(
                cafile=self.ca_file,
                cadata=self.ca_data,
            )
        else:
            logger.debug("No CA bundle configured, using system trust store")
            context = ssl.create_default_context()

        context.minimum_version = ssl.TLSVersion.TLSv1_2
        return context

    @classmethod
    def from_env(cls) -> "TLSSettings":
        return cls(
            ca_file=os.environ.get("INBOX_CACERT") or None,
        )


@dataclass
class DatabaseConfig:
    """PostgreSQL connection settings for the pool handed to the healthcheck."""
    database_url: Optional[str] = None
    host: str = "localhost"
    port: str = "5432"
    user: str = "postgres"
    password: str = ""
    database: str = "postgres"
    sslmode: str = "require"

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        return cls(
            database_url=os.environ.get("DATABASE_URL"),
            host=os.environ.get("DB_HOST", "localhost"),
            port=os.environ.get("DB_PORT", "5432"),
            user=os.environ.get("DB_USER", "postgres"),
            password=os.environ.get("DB_PASSWORD", ""),
            database=os.environ.get("DB_DATABASE", "postgres"),
            sslmode=os.environ.get("DB_SSLMODE", "require"),
        )

    def get_connection_string(self) -> str:
        """
        Get database connection string.

        An explicit DATABASE_URL overrides the individual DB_* values.
        """
        if self.database_url:
            return self.database_url

        return (
            f"host={self.host} "
            f"port={self.port} "
            f"dbname={self.database} "
            f"user={self.user} "
            f"password={self.password} "
            f"sslmode={self.sslmode}"
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "StorageConfig",
    "BrokerConfig",
    "ServerConfig",
    "InboxConfig",
    "TLSSettings",
    "DatabaseConfig",
]
