"""
Route table routes.

Expose the route table as the CORS filter sees it.
"""

from fastapi import APIRouter, Request
from loguru import logger
from pydantic import BaseModel, Field

from cors_filter.middleware.cors import compute_allowed_methods
from cors_filter.routing import RouteTable

routes_log = logger.bind(module="Routes")

router = APIRouter(prefix="/routes", tags=["Routes"])


class AllowedMethodsQuery(BaseModel):
    """Request body for resolving the allowed methods of a path."""

    path: str = Field(..., min_length=1, description="Request path to resolve, e.g. /users/1")


@router.get("")
async def list_routes(request: Request) -> dict:
    """List registered services and their routes."""
    table = RouteTable.from_routes(request.app.routes)
    return {
        "status": True,
        "services": [
            {
                "root_path": service.root_path,
                "routes": [{"path": r.path, "method": r.method} for r in service.routes],
            }
            for service in table.services
        ],
    }


@router.post("")
async def resolve_allowed_methods(query: AllowedMethodsQuery, request: Request) -> dict:
    """Resolve the Access-Control-Allow-Methods value a preflight for a path would get."""
    table = RouteTable.from_routes(request.app.routes)
    allowed_methods = compute_allowed_methods(table, query.path)
    routes_log.debug(f"{query.path}: {allowed_methods}")
    return {"status": True, "path": query.path, "allowed_methods": allowed_methods}
