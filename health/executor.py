# ============================================================================
# HEALTH CHECK EXECUTOR
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Concurrent health check execution
# PURPOSE: Execute a category of checks with timeouts and aggregation
# CREATED: 17 OCT 2026
# ============================================================================
"""
Health Check Executor

Executes health checks with:
- Concurrent execution of every check in the category
- Per-check timeouts (asyncio.wait_for)
- Result aggregation with 'worst wins' semantics

Every registered check in the category runs to completion (or timeout)
before the aggregated result is returned. Since checks run concurrently,
one evaluation takes at most as long as the slowest check's timeout.
Nothing is cached: each call is one fresh round of probes.
"""

import asyncio
import logging
import time
from typing import Dict, List

from core.logging import log_context
from health.core import (
    HealthStatus,
    HealthCheckCategory,
    HealthCheckResult,
    HealthCheckPlugin,
    AggregatedHealthResult,
)
from health.registry import HealthCheckRegistry

logger = logging.getLogger(__name__)


class HealthCheckExecutor:
    """
    Runs registered checks and aggregates their results.

    Holds no state besides the registry it reads from.
    """

    def __init__(self, registry: HealthCheckRegistry):
        self.registry = registry

    async def execute_liveness(self) -> AggregatedHealthResult:
        """Evaluate liveness checks only."""
        with log_context(category=HealthCheckCategory.LIVENESS.value):
            return await self._execute(self.registry.get_liveness_checks())

    async def execute_readiness(self) -> AggregatedHealthResult:
        """Evaluate readiness checks (liveness checks included)."""
        with log_context(category=HealthCheckCategory.READINESS.value):
            return await self._execute(self.registry.get_readiness_checks())

    async def _execute(
        self,
        checks: List[HealthCheckPlugin],
    ) -> AggregatedHealthResult:
        start_time = time.monotonic()

        if not checks:
            return AggregatedHealthResult(
                status=HealthStatus.HEALTHY,
                checks={},
                total_duration_ms=0.0,
            )

        outcomes = await asyncio.gather(
            *(self._execute_check(check) for check in checks)
        )
        results: Dict[str, HealthCheckResult] = {
            check.name: result for check, result in zip(checks, outcomes)
        }

        total_duration_ms = (time.monotonic() - start_time) * 1000
        overall_status = HealthStatus.aggregate([r.status for r in results.values()])

        if overall_status == HealthStatus.UNHEALTHY:
            failing = sorted(n for n, r in results.items() if not r.passed)
            logger.warning(f"Health evaluation failed: {', '.join(failing)}")

        return AggregatedHealthResult(
            status=overall_status,
            checks=results,
            total_duration_ms=total_duration_ms,
        )

    async def _execute_check(
        self,
        check: HealthCheckPlugin,
    ) -> HealthCheckResult:
        """Execute a single check with timeout."""
        start_time = time.monotonic()

        with log_context(check_name=check.name):
            try:
                result = await asyncio.wait_for(
                    check.check(),
                    timeout=check.timeout_seconds,
                )

            except asyncio.TimeoutError:
                logger.warning(
                    f"Health check {check.name} timed out after {check.timeout_seconds}s"
                )
                result = HealthCheckResult.unhealthy(
                    f"Timeout after {check.timeout_seconds}s"
                )

            except Exception as e:
                logger.warning(f"Health check {check.name} raised: {e!r}")
                result = HealthCheckResult.from_exception(e)

            result.duration_ms = (time.monotonic() - start_time) * 1000

            if result.passed:
                logger.debug(
                    f"Health check {check.name}: {result.status.value} "
                    f"({result.duration_ms:.1f}ms)"
                )
            else:
                logger.warning(
                    f"Health check {check.name}: {result.status.value} - {result.message}"
                )

            return result


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthCheckExecutor",
]
