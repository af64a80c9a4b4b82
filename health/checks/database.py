# ============================================================================
# DATABASE HEALTH CHECK
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - PostgreSQL reachability
# PURPOSE: Ping the shared connection pool
# CREATED: 17 OCT 2026
# ============================================================================
"""
Database Health Check

Pings PostgreSQL through the pool the inbox service already owns.
One pooled connection is borrowed for a trivial round-trip; no schema
or data is inspected.

Both psycopg_pool flavours are accepted:
- AsyncConnectionPool: pinged on the current event loop
- ConnectionPool: pinged in a worker thread (safe to share across loops)
"""

import asyncio
import logging
from typing import Union

import psycopg
from psycopg_pool import AsyncConnectionPool, ConnectionPool, PoolTimeout

from health.core import (
    HealthCheckPlugin,
    HealthCheckResult,
    HealthCheckCategory,
)

logger = logging.getLogger(__name__)

DatabaseHandle = Union[AsyncConnectionPool, ConnectionPool]

PING_QUERY = "SELECT 1"


class DatabasePingCheck(HealthCheckPlugin):
    """
    PostgreSQL reachability check.

    Args:
        pool: Pre-constructed psycopg_pool pool
        timeout_seconds: Ping timeout
    """

    category = HealthCheckCategory.READINESS

    def __init__(
        self,
        pool: DatabaseHandle,
        timeout_seconds: float = 1.0,
        name: str = "database",
    ):
        self.name = name
        self.pool = pool
        self.timeout_seconds = timeout_seconds

    async def _ping_async(self) -> None:
        async with self.pool.connection(timeout=self.timeout_seconds) as conn:
            await conn.execute(PING_QUERY)

    def _ping_sync(self) -> None:
        with self.pool.connection(timeout=self.timeout_seconds) as conn:
            conn.execute(PING_QUERY)

    async def ping(self) -> None:
        if isinstance(self.pool, AsyncConnectionPool):
            await self._ping_async()
        else:
            await asyncio.to_thread(self._ping_sync)

    async def check(self) -> HealthCheckResult:
        if self.pool is None:
            return HealthCheckResult.unhealthy(
                message="Database handle not initialized",
            )

        try:
            await asyncio.wait_for(self.ping(), timeout=self.timeout_seconds)

        except (asyncio.TimeoutError, PoolTimeout):
            return HealthCheckResult.unhealthy(
                message=f"Database ping timed out after {self.timeout_seconds}s",
            )

        except psycopg.Error as e:
            return HealthCheckResult.unhealthy(
                message=f"Database ping failed: {e}",
                exception_type=type(e).__name__,
            )

        return HealthCheckResult.healthy(message="Database reachable")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DatabasePingCheck",
    "DatabaseHandle",
]
