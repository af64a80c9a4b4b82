# ============================================================================
# HEALTH CHECK PLUGINS
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Health check implementations
# PURPOSE: Probes for the inbox's dependencies and the process itself
# CREATED: 17 OCT 2026
# ============================================================================
"""
Health Check Plugins

Liveness:
- goroutine-threshold: live asyncio tasks + threads at or below a threshold

Readiness:
- S3-backend-http: HTTPS GET against the S3 backend's ready path
- broker-tcp: TCP dial to the message broker
- database: ping through the PostgreSQL pool

Checks are constructed with their configuration and registered by
health.checker.HealthCheck; importing this module registers nothing.
"""

from health.checks.process import ExecutionUnitThresholdCheck, count_execution_units
from health.checks.storage import StorageHTTPCheck
from health.checks.broker import BrokerTCPCheck, split_address
from health.checks.database import DatabasePingCheck, DatabaseHandle

__all__ = [
    # Liveness
    "ExecutionUnitThresholdCheck",
    "count_execution_units",
    # Readiness
    "StorageHTTPCheck",
    "BrokerTCPCheck",
    "split_address",
    "DatabasePingCheck",
    "DatabaseHandle",
]
