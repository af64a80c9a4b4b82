# ============================================================================
# INBOX HEALTHCHECK - MAIN ENTRY POINT
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Core - Standalone process entry point
# PURPOSE: Load config, open the database pool, serve the probes
# CREATED: 17 OCT 2026
# ============================================================================
"""
Inbox Healthcheck Main

Runs the probe listener as a standalone process. Embedding services call
HealthCheck(...).start_background() instead.

Usage:
    python main.py
"""

import asyncio
import os
import sys

from psycopg_pool import AsyncConnectionPool

from __version__ import __version__, BUILD_DATE
from core.config import DatabaseConfig, InboxConfig, TLSSettings, get_defaults
from core.logging import configure_logging, get_logger
from health import HealthCheck, ListenerError

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)


async def main() -> None:
    logger.info(f"Starting inbox healthcheck v{__version__} (Build {BUILD_DATE})")

    defaults = get_defaults()
    port = int(os.environ.get("HEALTH_PORT", "8001"))

    pool = AsyncConnectionPool(
        conninfo=DatabaseConfig.from_env().get_connection_string(),
        min_size=1,
        max_size=2,
        open=False,
    )
    # Do not wait for a connection; an unreachable database is a probe result
    await pool.open(wait=False)

    try:
        health = HealthCheck(
            port,
            pool,
            InboxConfig.from_env(),
            TLSSettings.from_env(),
            probes=defaults.probes,
            timeouts=defaults.server,
        )
        await health.serve()
    finally:
        await pool.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except ListenerError as e:
        logger.critical(f"Healthcheck listener failed: {e}")
        sys.exit(1)
