# ============================================================================
# REGISTRY + EXECUTOR TESTS
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Tests - Registration and aggregation
# PURPOSE: Verify category sets, timeouts and worst-wins aggregation
# CREATED: 17 OCT 2026
# ============================================================================
"""
Registry + Executor Tests

Uses FunctionCheck-wrapped coroutines as probes; no network traffic.

Run with:
    pytest tests/test_executor.py -v
"""

import asyncio
import time

import pytest

from health.core import (
    HealthCheckCategory,
    HealthCheckResult,
    HealthStatus,
)
from health.executor import HealthCheckExecutor
from health.registry import FunctionCheck, HealthCheckRegistry


# ============================================================================
# HELPERS
# ============================================================================

async def _ok():
    return None


async def _refused():
    raise ConnectionRefusedError("connection refused")


async def _returns_unhealthy():
    return HealthCheckResult.unhealthy("returned status 503", status_code=503)


def _make_registry(**readiness):
    """Registry with one passing liveness check and the given readiness probes."""
    registry = HealthCheckRegistry()
    registry.register_function("threshold", _ok, category="liveness")
    for name, probe in readiness.items():
        registry.register_function(name, probe, category="readiness")
    return registry


# ============================================================================
# REGISTRY
# ============================================================================

class TestHealthCheckRegistry:
    """Tests for category bookkeeping."""

    def test_categories_are_separate(self):
        registry = _make_registry(storage=_ok, broker=_ok)

        assert [c.name for c in registry.get_liveness_checks()] == ["threshold"]
        assert [c.name for c in registry.get_checks_by_category(
            HealthCheckCategory.READINESS
        )] == ["storage", "broker"]
        assert len(registry) == 3

    def test_readiness_includes_liveness(self):
        registry = _make_registry(storage=_ok)

        names = [c.name for c in registry.get_readiness_checks()]
        assert names == ["threshold", "storage"]

    def test_duplicate_name_rejected(self):
        registry = _make_registry(storage=_ok)

        with pytest.raises(ValueError, match="storage"):
            registry.register_function("storage", _ok)

    def test_duplicate_name_across_categories_rejected(self):
        registry = _make_registry()

        with pytest.raises(ValueError):
            registry.register_function("threshold", _ok, category="readiness")

    def test_add_helpers_set_category(self):
        registry = HealthCheckRegistry()
        registry.add_liveness_check(FunctionCheck("live", _ok))
        registry.add_readiness_check(FunctionCheck("ready", _ok))

        assert registry.get("live").category == HealthCheckCategory.LIVENESS
        assert registry.get("ready").category == HealthCheckCategory.READINESS
        assert "ready" in registry
        assert "missing" not in registry

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            HealthCheckRegistry().register_function("x", _ok, category="startup")


# ============================================================================
# EXECUTOR
# ============================================================================

class TestHealthCheckExecutor:
    """Tests for evaluation and aggregation."""

    def test_all_pass(self):
        executor = HealthCheckExecutor(_make_registry(storage=_ok, broker=_ok, database=_ok))
        result = asyncio.run(executor.execute_readiness())

        assert result.status == HealthStatus.HEALTHY
        assert result.passed
        assert set(result.checks) == {"threshold", "storage", "broker", "database"}
        assert result.failures == {}

    def test_one_failure_fails_category(self):
        executor = HealthCheckExecutor(_make_registry(storage=_ok, broker=_refused))
        result = asyncio.run(executor.execute_readiness())

        assert result.status == HealthStatus.UNHEALTHY
        assert set(result.failures) == {"broker"}
        assert result.checks["broker"].message == "connection refused"
        assert result.checks["broker"].details["exception_type"] == "ConnectionRefusedError"

    def test_every_failure_is_reported(self):
        executor = HealthCheckExecutor(
            _make_registry(storage=_returns_unhealthy, broker=_refused, database=_ok)
        )
        result = asyncio.run(executor.execute_readiness())

        assert set(result.failures) == {"storage", "broker"}
        assert result.checks["storage"].details["status_code"] == 503

    def test_liveness_ignores_readiness_checks(self):
        executor = HealthCheckExecutor(_make_registry(broker=_refused))
        result = asyncio.run(executor.execute_liveness())

        assert result.passed
        assert set(result.checks) == {"threshold"}

    def test_failing_liveness_fails_readiness(self):
        registry = HealthCheckRegistry()
        registry.register_function("threshold", _refused, category="liveness")
        registry.register_function("storage", _ok)

        result = asyncio.run(HealthCheckExecutor(registry).execute_readiness())

        assert not result.passed
        assert set(result.failures) == {"threshold"}

    def test_timeout_becomes_failure(self):
        async def hang():
            await asyncio.sleep(10)

        registry = HealthCheckRegistry()
        registry.register_function("slow", hang, timeout_seconds=0.1)

        result = asyncio.run(HealthCheckExecutor(registry).execute_readiness())

        assert not result.passed
        assert result.checks["slow"].message == "Timeout after 0.1s"

    def test_checks_run_concurrently(self):
        async def slow_ok():
            await asyncio.sleep(0.3)

        registry = HealthCheckRegistry()
        for name in ("a", "b", "c"):
            registry.register_function(name, slow_ok)

        start = time.monotonic()
        result = asyncio.run(HealthCheckExecutor(registry).execute_readiness())
        elapsed = time.monotonic() - start

        assert result.passed
        assert elapsed < 0.8

    def test_empty_registry_is_healthy(self):
        result = asyncio.run(HealthCheckExecutor(HealthCheckRegistry()).execute_readiness())

        assert result.passed
        assert result.checks == {}

    def test_repeated_evaluations_are_consistent(self):
        executor = HealthCheckExecutor(_make_registry(storage=_ok, broker=_refused))

        first = asyncio.run(executor.execute_readiness())
        second = asyncio.run(executor.execute_readiness())

        assert first.status == second.status
        assert set(first.failures) == set(second.failures)
        assert first.checks["broker"].message == second.checks["broker"].message

    def test_to_dict_lists_failures_only_unless_full(self):
        executor = HealthCheckExecutor(_make_registry(storage=_ok, broker=_refused))
        result = asyncio.run(executor.execute_readiness())

        body = result.to_dict()
        assert body["status"] == "unhealthy"
        assert list(body["checks"]) == ["broker"]
        assert body["checks"]["broker"]["message"] == "connection refused"
        assert body["checks_failed"] == 1
        assert body["checks_passed"] == 2

        full = result.to_dict(full=True)
        assert list(full["checks"]) == ["broker", "storage", "threshold"]
