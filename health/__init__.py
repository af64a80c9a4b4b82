# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Health check system
# PURPOSE: Kubernetes liveness and readiness probes for the inbox
# CREATED: 17 OCT 2026
# ============================================================================
"""
Health Check Module

Liveness and readiness probes for the inbox service:
- /health: Readiness (S3 backend, broker, database, plus liveness)
- HEAD /:  Same as /health
- /live:   Liveness (process self-health only)

Architecture:
- HealthCheckPlugin: Base class for health checks
- HealthCheckRegistry: Liveness and readiness check sets
- HealthCheckExecutor: Concurrent execution with per-check timeouts
- HealthCheck: Builds the checks from config and runs the listener

Usage:
    from health import HealthCheck

    HealthCheck(8001, pool, conf, tls_settings).start_background()
"""

from health.core import (
    HealthStatus,
    HealthCheckResult,
    AggregatedHealthResult,
    HealthCheckPlugin,
    HealthCheckCategory,
)
from health.registry import HealthCheckRegistry, FunctionCheck
from health.executor import HealthCheckExecutor
from health.router import health_router
from health.server import ListenerError, create_app
from health.checker import HealthCheck

__all__ = [
    # Core types
    "HealthStatus",
    "HealthCheckResult",
    "AggregatedHealthResult",
    "HealthCheckPlugin",
    "HealthCheckCategory",
    # Registry
    "HealthCheckRegistry",
    "FunctionCheck",
    # Executor
    "HealthCheckExecutor",
    # HTTP
    "health_router",
    "create_app",
    "ListenerError",
    # Wiring
    "HealthCheck",
]
