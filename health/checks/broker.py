# ============================================================================
# BROKER HEALTH CHECK
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - Message broker reachability
# PURPOSE: Raw TCP dial to the broker
# CREATED: 17 OCT 2026
# ============================================================================
"""
Broker Health Check

Opens a TCP connection to the broker and closes it again. No AMQP
handshake is attempted; this only proves the port is reachable.
"""

import asyncio
import logging
from typing import Tuple

from health.core import (
    HealthCheckPlugin,
    HealthCheckResult,
    HealthCheckCategory,
)

logger = logging.getLogger(__name__)


def split_address(address: str) -> Tuple[str, int]:
    """
    Split "host:port" into its parts.

    Bracketed IPv6 literals ("[::1]:5672") are unwrapped.

    Raises:
        ValueError: If the port is missing or not a number
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"address {address}: missing port")
    if not port.isdigit():
        raise ValueError(f"address {address}: invalid port {port!r}")
    return host.strip("[]"), int(port)


class BrokerTCPCheck(HealthCheckPlugin):
    """
    Message broker reachability check.

    Args:
        address: Broker "host:port"
        timeout_seconds: Dial timeout
    """

    category = HealthCheckCategory.READINESS

    def __init__(
        self,
        address: str,
        timeout_seconds: float = 5.0,
        name: str = "broker-tcp",
    ):
        self.name = name
        self.address = address
        self.timeout_seconds = timeout_seconds

    async def check(self) -> HealthCheckResult:
        try:
            host, port = split_address(self.address)
        except ValueError as e:
            return HealthCheckResult.unhealthy(
                message=f"dial tcp {e}",
                address=self.address,
            )

        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return HealthCheckResult.unhealthy(
                message=f"dial tcp {self.address}: i/o timeout",
                address=self.address,
            )
        except OSError as e:
            return HealthCheckResult.unhealthy(
                message=f"dial tcp {self.address}: {e}",
                address=self.address,
                exception_type=type(e).__name__,
            )

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # Peer reset during close; the dial itself succeeded
            logger.debug(f"Error closing broker probe connection: {e}")

        return HealthCheckResult.healthy(
            message="Broker reachable",
            address=self.address,
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BrokerTCPCheck",
    "split_address",
]
