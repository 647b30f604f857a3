"""FastAPI application and routes."""

from flowstate.api.app import create_app
from flowstate.api.routes import router

__all__ = ["create_app", "router"]
