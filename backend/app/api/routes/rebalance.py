"""Allocation drift check."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_container
from app.container import ServiceContainer
from app.schemas import RebalanceCheckSchema
from asset_manager.errors import RateNotFoundError

router = APIRouter()


@router.get("/check", response_model=RebalanceCheckSchema)
def check_rebalance(container: ServiceContainer = Depends(get_container)) -> RebalanceCheckSchema:
    try:
        check = container.rebalance.check_rebalance()
    except RateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return RebalanceCheckSchema.model_validate(check)
