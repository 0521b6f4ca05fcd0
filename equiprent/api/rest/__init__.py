"""REST API - FastAPI application, routes and schemas."""

from .app import create_app, get_app, run_server

__all__ = ["create_app", "get_app", "run_server"]
