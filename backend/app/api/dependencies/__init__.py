"""Request-scoped dependencies for API routes."""

from .container import get_container

__all__ = ["get_container"]
