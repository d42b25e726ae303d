"""Pydantic schemas for the rebalance check."""

from __future__ import annotations

from pydantic import BaseModel

from asset_manager.models import AssetType

from .holdings import HoldingWarningSchema


class AssetTypeDeviationSchema(BaseModel):
    asset_type: AssetType
    target_percent: float
    current_percent: float
    deviation: float
    deviation_abs: float
    exceeds_threshold: bool
    current_value: float
    target_value: float

    class Config:
        from_attributes = True


class RebalanceSuggestionSchema(BaseModel):
    asset_type: AssetType
    action: str
    amount: float
    reason: str

    class Config:
        from_attributes = True


class RebalanceCheckSchema(BaseModel):
    needs_rebalance: bool
    threshold: float
    current_total: float
    deviations: list[AssetTypeDeviationSchema] = []
    suggestions: list[RebalanceSuggestionSchema] = []
    warnings: list[HoldingWarningSchema] = []

    class Config:
        from_attributes = True
