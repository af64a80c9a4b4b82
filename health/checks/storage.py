# ============================================================================
# STORAGE HEALTH CHECK
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - S3 backend reachability
# PURPOSE: HTTPS GET against the S3 backend's ready path
# CREATED: 17 OCT 2026
# ============================================================================
"""
Storage Health Check

Probes the S3 backend with a single HTTPS GET:
- TLS 1.2 minimum, trust roots from the configured CA bundle
- Redirects are never followed; the first response decides
- Only HTTP 200 passes; the body is never read
"""

import logging
import ssl
from typing import Optional

import httpx

from health.core import (
    HealthCheckPlugin,
    HealthCheckResult,
    HealthCheckCategory,
)

logger = logging.getLogger(__name__)


class StorageHTTPCheck(HealthCheckPlugin):
    """
    S3 backend reachability check.

    Args:
        url: Full readiness URL (scheme://host[:port][readypath])
        ssl_context: Client context carrying the trusted roots
        timeout_seconds: Request timeout
        transport: Optional httpx transport (used by tests)
    """

    category = HealthCheckCategory.READINESS

    def __init__(
        self,
        url: str,
        ssl_context: ssl.SSLContext,
        timeout_seconds: float = 5.0,
        name: str = "S3-backend-http",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.name = name
        self.url = url
        self.ssl_context = ssl_context
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            verify=self.ssl_context,
            timeout=self.timeout_seconds,
            follow_redirects=False,
            transport=self.transport,
        )

    async def check(self) -> HealthCheckResult:
        try:
            async with self._client() as client:
                # Streaming keeps the body unread; it is dropped on exit
                async with client.stream("GET", self.url) as response:
                    status_code = response.status_code

        except httpx.TimeoutException as e:
            return HealthCheckResult.unhealthy(
                message=f"Storage request timed out: {str(e) or type(e).__name__}",
                url=self.url,
                exception_type=type(e).__name__,
            )

        except httpx.HTTPError as e:
            return HealthCheckResult.unhealthy(
                message=f"Cannot reach storage: {e}",
                url=self.url,
                exception_type=type(e).__name__,
            )

        if status_code != 200:
            return HealthCheckResult.unhealthy(
                message=f"returned status {status_code}",
                url=self.url,
                status_code=status_code,
            )

        return HealthCheckResult.healthy(
            message="Storage reachable",
            url=self.url,
            status_code=status_code,
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "StorageHTTPCheck",
]
