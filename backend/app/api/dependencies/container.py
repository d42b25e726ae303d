"""Resolve the service container attached to the running application."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not initialised")
    return container


__all__ = ["get_container"]
