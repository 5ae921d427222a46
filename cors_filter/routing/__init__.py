"""
Routing module.

Read-only view of the host router's registered services and routes.
"""

from cors_filter.routing.path_expr import compile_template, final_match
from cors_filter.routing.table import RegisteredRoute, RegisteredService, RouteTable

__all__ = [
    # Path expressions
    "compile_template",
    "final_match",
    # Route table
    "RegisteredRoute",
    "RegisteredService",
    "RouteTable",
]
