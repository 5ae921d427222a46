"""
Unit tests for cors_filter/middleware/logging.py
"""

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from cors_filter.middleware import setup_logging
from tests.fixtures.routes import build_users_app


@pytest.fixture
def log_messages():
    """Collect loguru messages logged through the Request module."""
    messages: list[str] = []
    handler_id = logger.add(
        messages.append,
        format="{message}",
        level="INFO",
        filter=lambda record: record["extra"].get("module") == "Request",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def client() -> TestClient:
    """Users app with the CORS filter and request logging."""
    app = build_users_app()
    setup_logging(app)
    return TestClient(app)


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def test_preflight_tagged(self, client, log_messages):
        """Preflight answered by the CORS filter should be tagged."""
        client.options("/users", headers={"Access-Control-Request-Method": "POST"})

        assert len(log_messages) == 1
        assert log_messages[0].startswith("OPTIONS /users 200 (")
        assert log_messages[0].rstrip().endswith("[preflight]")

    def test_forwarded_request_not_tagged(self, client, log_messages):
        """Request handled by a route should not be tagged."""
        client.get("/users")

        assert len(log_messages) == 1
        assert log_messages[0].startswith("GET /users 200 (")
        assert "[preflight]" not in log_messages[0]

    def test_rejected_preflight_not_tagged(self, client, log_messages):
        """Preflight forwarded to the router should not be tagged."""
        client.options("/users", headers={"Access-Control-Request-Method": "TRACE"})

        assert len(log_messages) == 1
        assert log_messages[0].startswith("OPTIONS /users 405 (")
        assert "[preflight]" not in log_messages[0]
