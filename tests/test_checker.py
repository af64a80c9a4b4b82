# ============================================================================
# HEALTHCHECK WIRING TESTS
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Tests - HealthCheck construction and listener
# PURPOSE: Verify address assembly, check set, TLS selection, listener failure
# CREATED: 17 OCT 2026
# ============================================================================
"""
HealthCheck Wiring Tests

Covers construction from InboxConfig, the registered check set, uvicorn
config selection, an end-to-end probe against unreachable dependencies,
and fatal listener failure.

Run with:
    pytest tests/test_checker.py -v
"""

import asyncio
import socket
import time

import pytest
from fastapi.testclient import TestClient

from core.config import (
    BrokerConfig,
    InboxConfig,
    ProbeDefaults,
    ServerConfig,
    StorageConfig,
    TLSSettings,
)
from health.checker import HealthCheck, build_broker_address, build_storage_url
from health.checks import (
    BrokerTCPCheck,
    DatabasePingCheck,
    ExecutionUnitThresholdCheck,
    StorageHTTPCheck,
)
from health.core import HealthCheckCategory
from health.server import (
    ConnectionTimeoutMiddleware,
    ListenerError,
    build_server_config,
    create_app,
    serve_app,
)
from health.executor import HealthCheckExecutor
from health.registry import HealthCheckRegistry


# ============================================================================
# HELPERS
# ============================================================================

def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _make_conf(
    url="https://s3.example.org",
    port=9000,
    readypath="/minio/health/ready",
    cert="",
    key="",
):
    return InboxConfig(
        storage=StorageConfig(url=url, port=port, readypath=readypath),
        broker=BrokerConfig(host="mq.example.org", port=5671),
        server=ServerConfig(cert=cert, key=key),
    )


# ============================================================================
# ADDRESS ASSEMBLY
# ============================================================================

class TestAddressAssembly:
    """Tests for storage URL and broker address assembly."""

    def test_full_storage_url(self):
        assert build_storage_url(
            "https://s3.example.org", 9000, "/minio/health/ready"
        ) == "https://s3.example.org:9000/minio/health/ready"

    def test_zero_port_omitted(self):
        assert build_storage_url("https://s3.example.org", 0, "/ready") == "https://s3.example.org/ready"

    def test_empty_path_omitted(self):
        assert build_storage_url("https://s3.example.org", 443, "") == "https://s3.example.org:443"

    def test_broker_address(self):
        assert build_broker_address("mq.example.org", 5671) == "mq.example.org:5671"

    def test_constructor_assembles_addresses(self):
        health = HealthCheck(8001, None, _make_conf(), TLSSettings())

        assert health.s3_url == "https://s3.example.org:9000/minio/health/ready"
        assert health.broker_url == "mq.example.org:5671"

    def test_malformed_values_accepted_at_construction(self):
        conf = _make_conf(url="not a url", port=0, readypath="")
        conf.broker = BrokerConfig(host="", port=0)

        health = HealthCheck(8001, None, conf, TLSSettings())

        assert health.s3_url == "not a url"
        assert health.broker_url == ":0"


# ============================================================================
# CHECK SET
# ============================================================================

class TestCheckSet:
    """Tests for the registered liveness and readiness checks."""

    def test_registered_checks(self):
        registry = HealthCheck(8001, None, _make_conf(), TLSSettings()).build_registry()

        liveness = registry.get_liveness_checks()
        readiness = registry.get_checks_by_category(HealthCheckCategory.READINESS)

        assert [type(c) for c in liveness] == [ExecutionUnitThresholdCheck]
        assert {type(c) for c in readiness} == {StorageHTTPCheck, BrokerTCPCheck, DatabasePingCheck}
        assert {c.name for c in readiness} == {"S3-backend-http", "broker-tcp", "database"}

    def test_timeouts_and_threshold(self):
        registry = HealthCheck(8001, None, _make_conf(), TLSSettings()).build_registry()

        assert registry.get("S3-backend-http").timeout_seconds == 5.0
        assert registry.get("broker-tcp").timeout_seconds == 5.0
        assert registry.get("database").timeout_seconds == 1.0
        assert registry.get("goroutine-threshold").threshold == 100

    def test_probe_defaults_override(self):
        probes = ProbeDefaults(broker_timeout=2.0, execution_unit_threshold=50)
        registry = HealthCheck(
            8001, None, _make_conf(), TLSSettings(), probes=probes
        ).build_registry()

        assert registry.get("broker-tcp").timeout_seconds == 2.0
        assert registry.get("goroutine-threshold").threshold == 50

    def test_unreachable_dependencies_fail_readiness(self):
        conf = _make_conf(url="https://127.0.0.1", port=_free_port(), readypath="/ready")
        conf.broker = BrokerConfig(host="127.0.0.1", port=_free_port())
        health = HealthCheck(8001, None, conf, TLSSettings())

        client = TestClient(health.create_app())
        response = client.get("/health")

        assert response.status_code == 503
        assert set(response.json()["checks"]) == {"S3-backend-http", "broker-tcp", "database"}
        assert client.head("/").status_code == 503
        assert client.get("/live").status_code == 200

    def test_service_loop_tasks_fail_liveness(self):
        service_loop = asyncio.new_event_loop()
        tasks = [service_loop.create_task(asyncio.sleep(3600)) for _ in range(150)]

        async def drain():
            await asyncio.gather(*tasks, return_exceptions=True)

        try:
            health = HealthCheck(
                8001, None, _make_conf(), TLSSettings(), service_loop=service_loop
            )
            response = TestClient(health.create_app()).get("/live")
        finally:
            for task in tasks:
                task.cancel()
            service_loop.run_until_complete(drain())
            service_loop.close()

        assert response.status_code == 503
        assert "goroutine-threshold" in response.json()["checks"]

    def test_start_background_captures_running_loop(self, monkeypatch):
        health = HealthCheck(8001, None, _make_conf(), TLSSettings())
        monkeypatch.setattr(health, "run", lambda: None)

        async def scenario():
            health.start_background().join(timeout=5)
            return asyncio.get_running_loop()

        loop = asyncio.run(scenario())

        assert health.service_loop is loop
        assert health.build_registry().get("goroutine-threshold").loops == (loop,)


# ============================================================================
# LISTENER
# ============================================================================

class TestListener:
    """Tests for TLS selection and fatal listener failure."""

    def _app(self):
        return create_app(HealthCheckExecutor(HealthCheckRegistry()))

    def test_plain_http_without_cert(self):
        config = build_server_config(self._app(), port=8001)

        assert config.ssl_certfile is None
        assert config.ssl_keyfile is None
        assert config.timeout_keep_alive == 30

    def test_tls_requires_cert_and_key(self):
        only_cert = build_server_config(self._app(), port=8001, server_cert="/certs/tls.crt")
        both = build_server_config(
            self._app(), port=8001,
            server_cert="/certs/tls.crt", server_key="/certs/tls.key",
        )

        assert only_cert.ssl_certfile is None
        assert both.ssl_certfile == "/certs/tls.crt"
        assert both.ssl_keyfile == "/certs/tls.key"

    def test_tls_enabled_property(self):
        conf = _make_conf(cert="/certs/tls.crt", key="/certs/tls.key")
        assert HealthCheck(8001, None, conf, TLSSettings()).tls_enabled
        assert not HealthCheck(8001, None, _make_conf(cert="/certs/tls.crt"), TLSSettings()).tls_enabled

    def test_port_in_use_raises_listener_error(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("127.0.0.1", 0))
            sock.listen()
            port = sock.getsockname()[1]

            config = build_server_config(self._app(), port=port, host="127.0.0.1")

            with pytest.raises(ListenerError):
                asyncio.run(serve_app(config))

    def test_missing_certificate_raises_listener_error(self, tmp_path):
        config = build_server_config(
            self._app(),
            port=_free_port(),
            server_cert=str(tmp_path / "missing.crt"),
            server_key=str(tmp_path / "missing.key"),
            host="127.0.0.1",
        )

        with pytest.raises(ListenerError):
            asyncio.run(serve_app(config))


# ============================================================================
# CONNECTION TIMEOUTS
# ============================================================================

async def _echo_app(scope, receive, send):
    """Reads the body, then waits for disconnect after responding."""
    await receive()
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"ok"})
    await receive()


async def _full_body():
    return {"type": "http.request", "body": b"", "more_body": False}


async def _discard(message):
    return None


class TestConnectionTimeoutMiddleware:
    """Tests for the per-receive read and per-send write bounds."""

    SCOPE = {"type": "http", "method": "GET", "path": "/health"}

    def test_stalled_request_body_times_out(self):
        async def stalled_receive():
            await asyncio.sleep(10)

        middleware = ConnectionTimeoutMiddleware(_echo_app, read_timeout=0.1, write_timeout=5)

        start = time.monotonic()
        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(middleware(self.SCOPE, stalled_receive, _discard))

        assert time.monotonic() - start < 2

    def test_stalled_response_write_times_out(self):
        async def stalled_send(message):
            await asyncio.sleep(10)

        middleware = ConnectionTimeoutMiddleware(_echo_app, read_timeout=5, write_timeout=0.1)

        start = time.monotonic()
        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(middleware(self.SCOPE, _full_body, stalled_send))

        assert time.monotonic() - start < 2

    def test_receive_after_body_is_not_bounded(self):
        received = []

        async def receive():
            if not received:
                received.append("body")
                return await _full_body()
            await asyncio.sleep(0.3)
            received.append("disconnect")
            return {"type": "http.disconnect"}

        middleware = ConnectionTimeoutMiddleware(_echo_app, read_timeout=0.1, write_timeout=5)

        asyncio.run(middleware(self.SCOPE, receive, _discard))

        assert received == ["body", "disconnect"]
