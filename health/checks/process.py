# ============================================================================
# PROCESS HEALTH CHECK
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Process self-health
# PURPOSE: Catch runaway concurrent work before resources run out
# CREATED: 17 OCT 2026
# ============================================================================
"""
Process Health Check

Liveness check with no external I/O. Counts the process's live
lightweight execution units (unfinished asyncio tasks plus live threads)
and fails once the count exceeds a threshold.

Tasks are counted on the loop the check runs on and on any extra loops
it is given. When the probe listener runs on its own loop next to the
main service, pass the service's loop so its tasks are counted too.
"""

import asyncio
import functools
import threading
from typing import Callable, Iterable, Optional

from health.core import (
    HealthCheckPlugin,
    HealthCheckResult,
    HealthCheckCategory,
)


def count_execution_units(*loops: asyncio.AbstractEventLoop) -> int:
    """Unfinished tasks on the running loop and on `loops`, plus live threads."""
    counted = {loop for loop in loops if loop is not None}
    try:
        counted.add(asyncio.get_running_loop())
    except RuntimeError:
        # No running loop
        pass

    tasks = sum(len(asyncio.all_tasks(loop)) for loop in counted)
    return tasks + threading.active_count()


class ExecutionUnitThresholdCheck(HealthCheckPlugin):
    """
    Fails when more than `threshold` execution units are alive.

    Args:
        threshold: Highest passing count
        counter: Returns the current count (injectable for tests)
        loops: Extra event loops whose tasks are counted
    """

    category = HealthCheckCategory.LIVENESS
    timeout_seconds = 1.0

    def __init__(
        self,
        threshold: int = 100,
        counter: Optional[Callable[[], int]] = None,
        name: str = "goroutine-threshold",
        loops: Iterable[Optional[asyncio.AbstractEventLoop]] = (),
    ):
        self.name = name
        self.threshold = threshold
        self.loops = tuple(loop for loop in loops if loop is not None)
        self.counter = counter or functools.partial(count_execution_units, *self.loops)

    async def check(self) -> HealthCheckResult:
        count = self.counter()
        if count > self.threshold:
            return HealthCheckResult.unhealthy(
                message=f"too many execution units ({count} > {self.threshold})",
                count=count,
                threshold=self.threshold,
            )
        return HealthCheckResult.healthy(count=count, threshold=self.threshold)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ExecutionUnitThresholdCheck",
    "count_execution_units",
]
