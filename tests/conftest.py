"""
Shared pytest fixtures for all tests.
"""

import pytest
from starlette.datastructures import Headers


# ============================================================
# Request Header Fixtures
# ============================================================


@pytest.fixture
def make_headers():
    """Build case-insensitive request headers from a dict."""

    def _make(values: dict | None = None) -> Headers:
        return Headers(values or {})

    return _make


@pytest.fixture
def preflight_headers() -> dict:
    """Headers of a preflight asking for POST, without Origin."""
    return {"Access-Control-Request-Method": "POST"}


# ============================================================
# Method / Header Validation Fixtures
# ============================================================


@pytest.fixture
def request_method_cases() -> list[tuple[str, bool, bool]]:
    """Test cases for method validation: (method, strict_valid, legacy_valid)."""
    return [
        ("GET", True, True),
        ("PATCH", True, True),
        ("OPTIONS", True, True),
        ("ET", False, True),
        ("POST DELETE", False, True),
        ("get", False, False),
        ("TRACE", False, False),
    ]


@pytest.fixture
def request_header_cases() -> list[tuple[str, bool, bool]]:
    """Test cases for header validation: (header, strict_valid, legacy_valid)."""
    return [
        ("Accept", True, True),
        ("Content-Type", True, True),
        ("accept content-type", False, True),
        ("Content-Type, Accept", True, False),
        ("cept", False, True),
        ("X-Custom", False, False),
        ("Accept, X-Custom", False, False),
    ]
