# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Base classes for health checks
# PURPOSE: Health check plugin interface and result types
# CREATED: 17 OCT 2026
# ============================================================================
"""
Health Check Core Types

Defines the plugin interface and result types for health checks.

Status (worst wins):
- healthy: Probe succeeded
- unhealthy: Probe failed (transport error, bad status, timeout)

Categories:
- liveness: Is the process itself healthy? Failure means "restart me".
- readiness: Can the process serve traffic? Failure means "stop routing to me".
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"

    @classmethod
    def aggregate(cls, statuses: List["HealthStatus"]) -> "HealthStatus":
        """Aggregate multiple statuses (worst wins)."""
        if cls.UNHEALTHY in statuses:
            return cls.UNHEALTHY
        return cls.HEALTHY


class HealthCheckCategory(str, Enum):
    """Probe categories as understood by the orchestrator."""
    LIVENESS = "liveness"
    READINESS = "readiness"


@dataclass
class HealthCheckResult:
    """Result from a single health check."""
    status: HealthStatus
    message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0
    checked_at: datetime = field(default_factory=_utcnow)

    @property
    def passed(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    @classmethod
    def healthy(cls, message: str = None, **details) -> "HealthCheckResult":
        """Create healthy result."""
        return cls(status=HealthStatus.HEALTHY, message=message, details=details)

    @classmethod
    def unhealthy(cls, message: str, **details) -> "HealthCheckResult":
        """Create unhealthy result."""
        return cls(status=HealthStatus.UNHEALTHY, message=message, details=details)

    @classmethod
    def from_exception(cls, e: Exception) -> "HealthCheckResult":
        """Create unhealthy result from exception."""
        return cls(
            status=HealthStatus.UNHEALTHY,
            message=str(e) or type(e).__name__,
            details={"exception_type": type(e).__name__},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "status": self.status.value,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class AggregatedHealthResult:
    """Aggregated result of evaluating one category."""
    status: HealthStatus
    checks: Dict[str, HealthCheckResult]
    total_duration_ms: float
    checked_at: datetime = field(default_factory=_utcnow)

    @property
    def passed(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    @property
    def failures(self) -> Dict[str, HealthCheckResult]:
        """Failing checks only, keyed by name."""
        return {
            name: result
            for name, result in self.checks.items()
            if not result.passed
        }

    def to_dict(self, full: bool = False) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON response.

        Failing checks are always listed. Passing checks are listed only
        when full is set.
        """
        shown = self.checks if full else self.failures
        return {
            "status": self.status.value,
            "checks": {
                name: shown[name].to_dict()
                for name in sorted(shown)
            },
            "checks_passed": len(self.checks) - len(self.failures),
            "checks_failed": len(self.failures),
            "total_duration_ms": round(self.total_duration_ms, 2),
            "checked_at": self.checked_at.isoformat(),
        }


class HealthCheckPlugin(ABC):
    """
    Base class for health check plugins.

    A plugin's check() is the zero-argument probe. It returns a
    HealthCheckResult; any exception it raises is converted to an
    unhealthy result by the executor.

    Attributes:
        name: Unique identifier for the check
        category: Liveness or readiness
        timeout_seconds: Max execution time before timeout

    Example:
        class PingCheck(HealthCheckPlugin):
            name = "ping"
            category = HealthCheckCategory.READINESS
            timeout_seconds = 1.0

            async def check(self) -> HealthCheckResult:
                await client.ping()
                return HealthCheckResult.healthy()
    """

    name: str = "unnamed"
    category: HealthCheckCategory = HealthCheckCategory.READINESS
    timeout_seconds: float = 5.0

    @abstractmethod
    async def check(self) -> HealthCheckResult:
        """
        Execute health check.

        Returns:
            HealthCheckResult with status and optional details
        """
        pass


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthStatus",
    "HealthCheckCategory",
    "HealthCheckResult",
    "AggregatedHealthResult",
    "HealthCheckPlugin",
]
