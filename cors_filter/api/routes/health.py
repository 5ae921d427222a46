"""Health check routes."""

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(request: Request) -> dict:
    """Health check endpoint, with the active CORS flags."""
    cors = request.app.state.settings.cors
    return {
        "status": True,
        "cors": {
            "expose_headers": cors.expose_headers,
            "cookies_allowed": cors.cookies_allowed,
            "legacy_matching": cors.legacy_matching,
        },
    }
