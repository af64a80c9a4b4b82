# ============================================================================
# HEALTH CHECK REGISTRY
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Health check registration
# PURPOSE: Hold the liveness and readiness check sets
# CREATED: 17 OCT 2026
# ============================================================================
"""
Health Check Registry

In-memory mapping from check name to check, split into the liveness and
readiness categories. Filled once at startup and only read afterwards.

Usage:
    registry = HealthCheckRegistry()

    # Plugin instance
    registry.register(BrokerTCPCheck("mq:5672"))

    # Plain coroutine function
    registry.register_function("cache", ping_cache, category="readiness")

    # Checks for evaluation
    checks = registry.get_readiness_checks()
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional, Union

from health.core import (
    HealthCheckCategory,
    HealthCheckPlugin,
    HealthCheckResult,
)

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[Optional[HealthCheckResult]]]


class FunctionCheck(HealthCheckPlugin):
    """
    Adapts a zero-argument coroutine function to the plugin interface.

    The function signals failure by raising; returning None counts as a pass.
    """

    def __init__(
        self,
        name: str,
        probe: Probe,
        category: HealthCheckCategory = HealthCheckCategory.READINESS,
        timeout_seconds: float = 5.0,
    ):
        self.name = name
        self.probe = probe
        self.category = category
        self.timeout_seconds = timeout_seconds

    async def check(self) -> HealthCheckResult:
        result = await self.probe()
        if result is None:
            return HealthCheckResult.healthy()
        return result


class HealthCheckRegistry:
    """
    Registry for health check plugins.

    Names are unique across the registry. Readiness evaluation also runs the
    liveness checks, so a name shared between categories would be ambiguous.
    """

    def __init__(self):
        self._checks: Dict[HealthCheckCategory, Dict[str, HealthCheckPlugin]] = {
            category: {} for category in HealthCheckCategory
        }

    def register(self, check: HealthCheckPlugin) -> None:
        """
        Register a health check plugin instance.

        Raises:
            ValueError: If a check with the same name is already registered
        """
        if check.name in self:
            raise ValueError(f"Health check already registered: {check.name}")

        self._checks[check.category][check.name] = check
        logger.debug(
            f"Registered health check: {check.name} "
            f"(category={check.category.value}, timeout={check.timeout_seconds}s)"
        )

    def register_function(
        self,
        name: str,
        probe: Probe,
        category: Union[str, HealthCheckCategory] = HealthCheckCategory.READINESS,
        timeout_seconds: float = 5.0,
    ) -> HealthCheckPlugin:
        """Wrap a coroutine function in a FunctionCheck and register it."""
        check = FunctionCheck(
            name=name,
            probe=probe,
            category=HealthCheckCategory(category),
            timeout_seconds=timeout_seconds,
        )
        self.register(check)
        return check

    def add_liveness_check(self, check: HealthCheckPlugin) -> None:
        check.category = HealthCheckCategory.LIVENESS
        self.register(check)

    def add_readiness_check(self, check: HealthCheckPlugin) -> None:
        check.category = HealthCheckCategory.READINESS
        self.register(check)

    def get(self, name: str) -> Optional[HealthCheckPlugin]:
        """Get health check by name."""
        for checks in self._checks.values():
            if name in checks:
                return checks[name]
        return None

    def get_checks_by_category(
        self,
        category: HealthCheckCategory,
    ) -> List[HealthCheckPlugin]:
        """Get checks for a specific category."""
        return list(self._checks[category].values())

    def get_liveness_checks(self) -> List[HealthCheckPlugin]:
        return self.get_checks_by_category(HealthCheckCategory.LIVENESS)

    def get_readiness_checks(self) -> List[HealthCheckPlugin]:
        """Readiness checks plus liveness checks."""
        return (
            self.get_checks_by_category(HealthCheckCategory.LIVENESS)
            + self.get_checks_by_category(HealthCheckCategory.READINESS)
        )

    def __len__(self) -> int:
        return sum(len(checks) for checks in self._checks.values())

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "FunctionCheck",
    "HealthCheckRegistry",
    "Probe",
]
