# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - FastAPI health check endpoints
# PURPOSE: Kubernetes probe endpoints
# CREATED: 17 OCT 2026
# ============================================================================
"""
Health Check Router

Endpoints:
    * /health  - Readiness probe. Runs readiness and liveness checks.
                 Any method is accepted.

    HEAD /     - Same as GET /health. Load balancers that probe the root
                 with HEAD get the readiness status. Any other method on
                 / returns 404 so a misrouted request never looks like a
                 health probe.

    * /live    - Liveness probe. Runs liveness checks only.

Query parameters:
    full=1     - Include passing checks in the body, not only failing ones.

Response Codes:
    200 - All checks passed
    503 - At least one check failed; body names every failing check

The executor is read from app.state.health_executor (see health.server).
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from core.logging import log_context
from health.core import AggregatedHealthResult
from health.executor import HealthCheckExecutor

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["Health"])


class AnyMethodEndpoint:
    """
    ASGI endpoint answering every HTTP method.

    Routed without a method list, so TRACE, CONNECT and extension methods
    reach the handler instead of a 405.
    """

    def __init__(self, handler):
        self.handler = handler

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive, send)
        response = await self.handler(request)
        await response(scope, receive, send)


def probe_route(path: str):
    """Register the decorated handler on `path` for every method."""
    def decorator(handler):
        health_router.add_route(path, AnyMethodEndpoint(handler), name=handler.__name__)
        return handler
    return decorator


def _get_executor(request: Request) -> HealthCheckExecutor:
    return request.app.state.health_executor


def _wants_full(request: Request) -> bool:
    return request.query_params.get("full") == "1"


def _to_response(result: AggregatedHealthResult, full: bool) -> JSONResponse:
    """200 on pass, 503 with failing checks otherwise."""
    return JSONResponse(
        status_code=200 if result.passed else 503,
        content=result.to_dict(full=full),
    )


# ============================================================================
# READINESS PROBE
# ============================================================================

@probe_route("/health")
async def readiness_probe(request: Request):
    """
    Kubernetes readiness probe.

    Checks the S3 backend, the broker and the database, plus the liveness
    checks. If this fails, Kubernetes removes the pod from the service
    load balancer.
    """
    with log_context(request_path=request.url.path):
        result = await _get_executor(request).execute_readiness()
    return _to_response(result, _wants_full(request))


# ============================================================================
# ROOT
# ============================================================================

@probe_route("/")
async def root_probe(request: Request):
    """HEAD is served as a readiness probe; everything else is 404."""
    if request.method != "HEAD":
        return JSONResponse(status_code=404, content={"detail": "Not Found"})

    return await readiness_probe(request)


# ============================================================================
# LIVENESS PROBE
# ============================================================================

@probe_route("/live")
async def liveness_probe(request: Request):
    """
    Kubernetes liveness probe.

    No external dependencies are contacted. If this fails, Kubernetes
    restarts the container.
    """
    with log_context(request_path=request.url.path):
        result = await _get_executor(request).execute_liveness()
    return _to_response(result, _wants_full(request))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "health_router",
]
