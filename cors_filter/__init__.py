"""CORS filter middleware for FastAPI/Starlette route tables."""
