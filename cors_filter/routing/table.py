"""
Route Table Models.

Read-only snapshot of the services and routes registered in the host router.
"""

import re
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field
from starlette.routing import BaseRoute, Mount

from cors_filter.routing.path_expr import compile_template


class RegisteredRoute(BaseModel):
    """A route under a service: path relative to the service root and HTTP method."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path template relative to the service root")
    method: str = Field(..., description="HTTP method, upper case")

    @property
    def matcher(self) -> re.Pattern:
        """Compiled path expression for this route."""
        return compile_template(self.path)


class RegisteredService(BaseModel):
    """A group of routes sharing a root path."""

    model_config = ConfigDict(frozen=True)

    root_path: str = "/"
    routes: tuple[RegisteredRoute, ...] = ()

    @property
    def matcher(self) -> re.Pattern:
        """Compiled path expression for the service root."""
        return compile_template(self.root_path)


class RouteTable(BaseModel):
    """Ordered collection of registered services."""

    model_config = ConfigDict(frozen=True)

    services: tuple[RegisteredService, ...] = ()

    @classmethod
    def from_routes(cls, routes: Iterable[BaseRoute]) -> "RouteTable":
        """
        Build a route table from Starlette/FastAPI routes.

        Plain routes and routers added with include_router() are grouped
        into a root service "/" in registration order. Each Mount becomes
        its own service rooted at the mount path, with nested mounts
        flattened into it.

        Args:
            routes: Routes as found on `app.routes`

        Returns:
            RouteTable snapshot
        """
        root_routes: list[RegisteredRoute] = []
        mounted: list[RegisteredService] = []

        for route in routes:
            if isinstance(route, Mount):
                mounted.append(
                    RegisteredService(
                        root_path=route.path or "/",
                        routes=tuple(_collect_routes(route.routes)),
                    )
                )
            else:
                root_routes.extend(_collect_routes([route]))

        root = RegisteredService(root_path="/", routes=tuple(root_routes))
        return cls(services=(root, *mounted))


def _route_methods(methods: Iterable[str]) -> list[str]:
    """
    Expand a route's method set into the methods it is registered for.

    Starlette adds HEAD to every GET route; it is only kept when it is
    the route's sole method.
    """
    result = sorted(m.upper() for m in methods)
    if len(result) > 1 and "HEAD" in result:
        result.remove("HEAD")
    return result


def _collect_routes(routes: Iterable[BaseRoute], prefix: str = "") -> list[RegisteredRoute]:
    """Flatten routes, included routers and nested mounts into RegisteredRoute entries."""
    collected: list[RegisteredRoute] = []

    for route in routes:
        if isinstance(route, Mount):
            collected.extend(_collect_routes(route.routes, prefix + route.path))
            continue

        # Newer FastAPI keeps include_router() as one entry wrapping the router
        included_router = getattr(route, "original_router", None)
        if included_router is not None:
            include_prefix = getattr(getattr(route, "include_context", None), "prefix", "")
            collected.extend(_collect_routes(included_router.routes, prefix + include_prefix))
            continue

        methods = getattr(route, "methods", None)
        path = getattr(route, "path", None)
        if not methods or path is None:
            # Websocket routes and custom route classes carry no methods
            continue

        for method in _route_methods(methods):
            collected.append(RegisteredRoute(path=prefix + path, method=method))

    return collected
