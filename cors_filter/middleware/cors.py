"""
CORS Filter Middleware.

Handles Cross-Origin Resource Sharing for requests routed by the app.
Preflight requests are answered from the registered route table; all
other requests are forwarded, optionally with CORS headers appended.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from config.settings import CORSSettings, get_settings
from cors_filter.routing import RouteTable, final_match

cors_log = logger.bind(module="CORS")

# Methods and headers a preflight may ask for
ALLOWED_METHODS = "GET PUT POST DELETE HEAD OPTIONS PATCH"
ALLOWED_HEADERS = "accept content-type"

# Value of Expose-Headers and Allow-Headers
CORS_HEADERS_VALUE = "Content-Type, Accept"


@dataclass
class CORSDecision:
    """
    Outcome of running the filter on a request.

    Attributes:
        forward: Whether the request continues down the chain
        headers: Headers to append to the response, in order
    """
    forward: bool = True
    headers: list[tuple[str, str]] = field(default_factory=list)

    @classmethod
    def pass_through(cls, headers: Optional[list[tuple[str, str]]] = None) -> "CORSDecision":
        """Forward the request, appending the given headers to its response."""
        return cls(forward=True, headers=headers or [])

    @classmethod
    def respond(cls, headers: list[tuple[str, str]]) -> "CORSDecision":
        """Answer the request directly (200, empty body)."""
        return cls(forward=False, headers=headers)


def is_valid_request_method(method: str, legacy: bool = False) -> bool:
    """
    Check a preflight's requested method against the allow-list.

    Args:
        method: Value of Access-Control-Request-Method
        legacy: Use substring containment ("ET" is accepted)

    Returns:
        True if the method is allowed
    """
    if legacy:
        return method in ALLOWED_METHODS
    return method in ALLOWED_METHODS.split()


def is_valid_request_header(header: str, legacy: bool = False) -> bool:
    """
    Check a preflight's requested header(s) against the allow-list.

    Args:
        header: Comma separated header names
        legacy: Use case-insensitive substring containment on the raw value

    Returns:
        True if every requested header is allowed
    """
    if legacy:
        return header.lower() in ALLOWED_HEADERS

    allowed = ALLOWED_HEADERS.split()
    tokens = [token.strip().lower() for token in header.split(",")]
    tokens = [token for token in tokens if token]
    return bool(tokens) and all(token in allowed for token in tokens)


def compute_allowed_methods(route_table: RouteTable, path: str) -> str:
    """
    Collect the methods registered for a path.

    A route counts when its service root matches the path and the route
    itself matches what is left, leaving nothing (or only "/") over.

    Args:
        route_table: Registered services and routes
        path: Request path

    Returns:
        "OPTIONS" followed by each collected method, comma separated,
        in registration order (not deduplicated)
    """
    methods = []
    for service in route_table.services:
        service_rest = final_match(service.matcher, path)
        if service_rest is None:
            continue

        for route in service.routes:
            route_rest = final_match(route.matcher, service_rest)
            if route_rest in ("", "/"):
                methods.append(route.method)

    return ",".join(["OPTIONS", *methods])


class CORSFilter:
    """
    CORS decision logic, independent of the ASGI plumbing.

    Branches are evaluated top to bottom:
    - Origin present: forward unchanged
    - not OPTIONS: actual request, append Expose-Headers / Allow-Origin
    - OPTIONS with Access-Control-Request-Method: preflight
    - otherwise: forward unchanged
    """

    def __init__(
        self,
        expose_headers: bool = True,
        cookies_allowed: bool = False,
        legacy_matching: bool = False,
    ):
        self.expose_headers = expose_headers
        self.cookies_allowed = cookies_allowed
        self.legacy_matching = legacy_matching

    @classmethod
    def from_settings(cls, settings: CORSSettings) -> "CORSFilter":
        """Create a filter from CORS settings."""
        return cls(
            expose_headers=settings.expose_headers,
            cookies_allowed=settings.cookies_allowed,
            legacy_matching=settings.legacy_matching,
        )

    def decide(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        route_table: RouteTable,
    ) -> CORSDecision:
        """
        Run the filter on a request.

        Args:
            method: HTTP method
            path: Request path
            headers: Request headers (case-insensitive lookup)
            route_table: Registered routes, read only

        Returns:
            CORSDecision telling whether to forward and what to append
        """
        origin = headers.get("origin", "")
        if origin:
            cors_log.debug(f"{method} {path}: origin {origin} set, forwarding")
            return CORSDecision.pass_through()

        if method != "OPTIONS":
            return self._actual_request(headers)

        if headers.get("access-control-request-method", ""):
            return self._preflight_request(path, headers, route_table)

        cors_log.debug(f"OPTIONS {path}: not a preflight, forwarding")
        return CORSDecision.pass_through()

    def _actual_request(self, headers: Mapping[str, str]) -> CORSDecision:
        """Headers for a non-preflight request."""
        result = []
        if self.expose_headers:
            result.append(("Access-Control-Expose-Headers", CORS_HEADERS_VALUE))
        result.extend(self._allow_origin(headers))
        return CORSDecision.pass_through(result)

    def _preflight_request(
        self,
        path: str,
        headers: Mapping[str, str],
        route_table: RouteTable,
    ) -> CORSDecision:
        """Answer a preflight request, or forward it if it asks for too much."""
        if self.legacy_matching:
            # Legacy mode validates the preflight's own method and the singular header only
            requested_method = "OPTIONS"
            requested_header = headers.get("access-control-request-header", "")
        else:
            requested_method = headers.get("access-control-request-method", "")
            requested_header = headers.get("access-control-request-header", "") or headers.get(
                "access-control-request-headers", ""
            )

        if not is_valid_request_method(requested_method, self.legacy_matching):
            cors_log.debug(f"OPTIONS {path}: method {requested_method!r} not allowed")
            return CORSDecision.pass_through()

        if requested_header and not is_valid_request_header(requested_header, self.legacy_matching):
            cors_log.debug(f"OPTIONS {path}: header {requested_header!r} not allowed")
            return CORSDecision.pass_through()

        allowed_methods = compute_allowed_methods(route_table, path)
        cors_log.debug(f"OPTIONS {path}: preflight allows {allowed_methods}")

        result = [
            ("Access-Control-Allow-Methods", allowed_methods),
            ("Access-Control-Allow-Headers", CORS_HEADERS_VALUE),
        ]
        result.extend(self._allow_origin(headers))
        return CORSDecision.respond(result)

    def _allow_origin(self, headers: Mapping[str, str]) -> list[tuple[str, str]]:
        """Allow-Origin echoing the request origin, plus credentials if enabled."""
        result = [("Access-Control-Allow-Origin", headers.get("origin", ""))]
        if self.cookies_allowed:
            result.append(("Access-Control-Allow-Credentials", "true"))
        return result


class CORSFilterMiddleware(BaseHTTPMiddleware):
    """Middleware applying CORSFilter to every request."""

    def __init__(
        self,
        app,
        route_table: Optional[RouteTable] = None,
        cors_filter: Optional[CORSFilter] = None,
    ):
        """
        Args:
            app: Downstream ASGI app
            route_table: Routes to answer preflights from. When None, they
                are read from the app that received the request.
            cors_filter: Filter to apply, defaults to one built from settings
        """
        super().__init__(app)
        self.route_table = route_table
        self.cors_filter = cors_filter or CORSFilter.from_settings(get_settings().cors)

    async def dispatch(self, request: Request, call_next):
        """Answer preflights directly, forward everything else."""
        route_table = self.route_table
        if route_table is None:
            if request.method == "OPTIONS":
                route_table = RouteTable.from_routes(request.app.routes)
            else:
                route_table = RouteTable()

        decision = self.cors_filter.decide(
            request.method, request.url.path, request.headers, route_table
        )

        if decision.forward:
            response = await call_next(request)
        else:
            response = Response(status_code=200)
            request.state.cors_preflight = True

        for name, value in decision.headers:
            response.headers.append(name, value)

        return response


def setup_cors(app: FastAPI, settings: Optional[CORSSettings] = None) -> None:
    """
    Configure CORS filter middleware for the application.

    Args:
        app: FastAPI application instance
        settings: CORS settings, defaults to the application settings
    """
    settings = settings or get_settings().cors

    app.add_middleware(
        CORSFilterMiddleware,
        cors_filter=CORSFilter.from_settings(settings),
    )
