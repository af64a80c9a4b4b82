# ============================================================================
# HEALTH CHECK SERVER
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Infrastructure - ASGI app and uvicorn listener
# PURPOSE: Serve the probe endpoints with connection hygiene timeouts
# CREATED: 17 OCT 2026
# ============================================================================
"""
Health Check Server

Builds the FastAPI app around a HealthCheckExecutor and runs it under
uvicorn, over TLS when a certificate/key pair is configured.

Connection timeouts (ServerTimeouts):
- idle: uvicorn keep-alive timeout
- read: bound on each request body receive
- write: bound on each response send
- read_header: uvicorn parses headers itself and exposes no deadline for
  them; the value is carried for configuration parity only

A listener that cannot bind or stops serving is fatal: serve_app() raises
ListenerError.
"""

import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from __version__ import __version__
from core.config.defaults import ServerTimeouts
from health.executor import HealthCheckExecutor
from health.router import health_router

logger = logging.getLogger(__name__)


class ListenerError(RuntimeError):
    """The health listener could not bind or stopped serving."""


class ConnectionTimeoutMiddleware:
    """
    Pure ASGI middleware bounding request body reads and response writes.

    Once the request body is fully received, receive() is passed through
    untouched so disconnect listeners are not cut short.
    """

    def __init__(self, app, read_timeout: float, write_timeout: float):
        self.app = app
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        body_done = False

        async def timed_receive():
            nonlocal body_done
            if body_done:
                return await receive()
            try:
                message = await asyncio.wait_for(receive(), timeout=self.read_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Request body read exceeded {self.read_timeout}s")
                raise
            if message["type"] != "http.request" or not message.get("more_body", False):
                body_done = True
            return message

        async def timed_send(message):
            try:
                await asyncio.wait_for(send(message), timeout=self.write_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Response write exceeded {self.write_timeout}s")
                raise

        await self.app(scope, timed_receive, timed_send)


def create_app(
    executor: HealthCheckExecutor,
    timeouts: Optional[ServerTimeouts] = None,
) -> FastAPI:
    """Create the probe app. Docs routes are disabled; / belongs to the probe."""
    timeouts = timeouts or ServerTimeouts()

    app = FastAPI(
        title="Inbox Healthcheck",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.health_executor = executor
    app.include_router(health_router)
    app.add_middleware(
        ConnectionTimeoutMiddleware,
        read_timeout=timeouts.read,
        write_timeout=timeouts.write,
    )
    return app


def build_server_config(
    app: FastAPI,
    port: int,
    server_cert: str = "",
    server_key: str = "",
    timeouts: Optional[ServerTimeouts] = None,
    host: str = "0.0.0.0",
) -> uvicorn.Config:
    """uvicorn config; TLS only when both cert and key are set."""
    timeouts = timeouts or ServerTimeouts()
    use_tls = bool(server_cert and server_key)

    return uvicorn.Config(
        app,
        host=host,
        port=port,
        ssl_certfile=server_cert if use_tls else None,
        ssl_keyfile=server_key if use_tls else None,
        timeout_keep_alive=int(timeouts.idle),
        # Logging is configured by core.logging
        log_config=None,
        access_log=False,
    )


async def serve_app(config: uvicorn.Config) -> None:
    """
    Run uvicorn until shutdown.

    Raises:
        ListenerError: If the listener failed to start or bind
    """
    server = uvicorn.Server(config)
    scheme = "https" if config.ssl_certfile else "http"
    logger.info(f"Starting health listener on {scheme}://{config.host}:{config.port}")

    try:
        await server.serve()
    except OSError as e:
        raise ListenerError(f"Health listener on port {config.port} failed: {e}") from e
    except SystemExit as e:
        # uvicorn exits on bind errors after logging them
        raise ListenerError(
            f"Health listener on port {config.port} failed to start (exit {e.code})"
        ) from e

    if not server.started:
        raise ListenerError(f"Health listener on port {config.port} failed to start")

    logger.info("Health listener stopped")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ListenerError",
    "ConnectionTimeoutMiddleware",
    "create_app",
    "build_server_config",
    "serve_app",
]
