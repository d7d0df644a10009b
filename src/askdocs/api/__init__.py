"""
FastAPI web surface for askdocs.

Endpoints:
    GET /       - Query form and answer page
    POST /query - Answer a question (JSON)
    GET /health - Health check
"""

from askdocs.api.main import app, create_app

__all__ = ["app", "create_app"]
