"""
Middleware Module.

Exports middleware setup functions for FastAPI application.
"""

from typing import Optional

from fastapi import FastAPI

from config.settings import Settings, get_settings
from cors_filter.middleware.cors import (
    CORSDecision,
    CORSFilter,
    CORSFilterMiddleware,
    compute_allowed_methods,
    setup_cors,
)
from cors_filter.middleware.logging import LoggingMiddleware, setup_logging


def setup_middleware(app: FastAPI, settings: Optional[Settings] = None) -> None:
    """
    Configure all middleware for the application.

    Args:
        app: FastAPI application instance
        settings: Application settings, defaults to the cached instance
    """
    settings = settings or get_settings()
    setup_cors(app, settings.cors)
    setup_logging(app)


__all__ = [
    "CORSDecision",
    "CORSFilter",
    "CORSFilterMiddleware",
    "LoggingMiddleware",
    "compute_allowed_methods",
    "setup_cors",
    "setup_logging",
    "setup_middleware",
]
