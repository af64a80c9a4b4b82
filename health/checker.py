# ============================================================================
# INBOX HEALTHCHECK
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Healthcheck wiring
# PURPOSE: Build the check set from config and run the probe listener
# CREATED: 17 OCT 2026
# ============================================================================
"""
Inbox Healthcheck

HealthCheck knows where the S3 backend and the message broker live, holds
the database pool and the TLS trust material, and turns them into the
liveness and readiness check sets served by the probe listener.

Usage:
    health = HealthCheck(8001, pool, InboxConfig.from_env(), TLSSettings.from_env())

    # Blocking, in the calling thread
    health.run()

    # Or next to the main service, in its own thread
    health.start_background()
"""

import asyncio
import logging
import os
import threading
from typing import Optional

from core.config.defaults import ProbeDefaults, ServerTimeouts
from core.config.settings import InboxConfig, TLSSettings
from health.checks import (
    BrokerTCPCheck,
    DatabaseHandle,
    DatabasePingCheck,
    ExecutionUnitThresholdCheck,
    StorageHTTPCheck,
)
from health.executor import HealthCheckExecutor
from health.registry import HealthCheckRegistry
from health.server import ListenerError, build_server_config, create_app, serve_app

logger = logging.getLogger(__name__)


def build_storage_url(url: str, port: int = 0, readypath: str = "") -> str:
    """scheme://host[:port][readypath]; port only if non-zero, path only if set."""
    if port:
        url = f"{url}:{port}"
    if readypath:
        url += readypath
    return url


def build_broker_address(host: str, port: int) -> str:
    return f"{host}:{port}"


class HealthCheck:
    """
    Healthcheck for the inbox service.

    Constructed once at startup; read-only afterwards and shared by all
    probe requests. Addresses are only assembled here. A malformed one
    shows up as a failing probe, not as a construction error.
    """

    def __init__(
        self,
        port: int,
        db: Optional[DatabaseHandle],
        conf: InboxConfig,
        tls_settings: TLSSettings,
        probes: Optional[ProbeDefaults] = None,
        timeouts: Optional[ServerTimeouts] = None,
        service_loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.port = port
        self.db = db
        self.s3_url = build_storage_url(
            conf.storage.url,
            conf.storage.port,
            conf.storage.readypath,
        )
        self.broker_url = build_broker_address(conf.broker.host, conf.broker.port)
        self.tls_settings = tls_settings
        self.server_cert = conf.server.cert
        self.server_key = conf.server.key
        self.probes = probes or ProbeDefaults()
        self.timeouts = timeouts or ServerTimeouts()
        # Main service loop; its tasks count toward the execution unit threshold
        self.service_loop = service_loop

    @property
    def tls_enabled(self) -> bool:
        return bool(self.server_cert and self.server_key)

    def build_registry(self) -> HealthCheckRegistry:
        """Construct and register the liveness and readiness checks."""
        registry = HealthCheckRegistry()

        registry.add_liveness_check(
            ExecutionUnitThresholdCheck(
                threshold=self.probes.execution_unit_threshold,
                loops=(self.service_loop,),
            )
        )

        registry.add_readiness_check(
            StorageHTTPCheck(
                self.s3_url,
                ssl_context=self.tls_settings.client_context(),
                timeout_seconds=self.probes.storage_timeout,
            )
        )
        registry.add_readiness_check(
            BrokerTCPCheck(self.broker_url, timeout_seconds=self.probes.broker_timeout)
        )
        registry.add_readiness_check(
            DatabasePingCheck(self.db, timeout_seconds=self.probes.database_timeout)
        )

        return registry

    def create_app(self):
        """FastAPI app serving this healthcheck's probes."""
        executor = HealthCheckExecutor(self.build_registry())
        return create_app(executor, self.timeouts)

    async def serve(self) -> None:
        """
        Serve the probe endpoints on the current event loop.

        Raises:
            ListenerError: If the listener cannot bind or stops serving
        """
        config = build_server_config(
            self.create_app(),
            port=self.port,
            server_cert=self.server_cert,
            server_key=self.server_key,
            timeouts=self.timeouts,
        )
        await serve_app(config)

    def run(self) -> None:
        """Serve in the calling thread until shutdown."""
        asyncio.run(self.serve())

    def start_background(
        self,
        service_loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> threading.Thread:
        """
        Serve from a daemon thread with its own event loop.

        Pass a sync ConnectionPool as the database handle in this mode; an
        AsyncConnectionPool is bound to the main service's loop. A listener
        failure terminates the whole process.

        Args:
            service_loop: Main service loop whose tasks the liveness check
                counts. Defaults to the loop running the caller, if any.
        """
        if service_loop is None:
            try:
                service_loop = asyncio.get_running_loop()
            except RuntimeError:
                service_loop = None
        if service_loop is not None:
            self.service_loop = service_loop

        def _run():
            try:
                self.run()
            except ListenerError:
                logger.critical("Health listener failed, terminating process", exc_info=True)
                os._exit(1)

        thread = threading.Thread(target=_run, name="healthcheck", daemon=True)
        thread.start()
        return thread


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthCheck",
    "build_storage_url",
    "build_broker_address",
]
