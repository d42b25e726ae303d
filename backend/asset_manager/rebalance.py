"""Allocation drift checks and rebalance suggestions."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from .models import (
    REBALANCE_ASSET_TYPES,
    AllocationSettings,
    AssetType,
    AssetTypeDeviation,
    Holding,
    HoldingFilters,
    HoldingWarning,
    RebalanceCheck,
    RebalanceSuggestion,
)

logger = logging.getLogger(__name__)


class AllocationSource(Protocol):
    def get_allocation(self) -> AllocationSettings:
        ...


class HoldingSource(Protocol):
    def get_all_holdings(
        self, filters: Optional[HoldingFilters] = None
    ) -> Tuple[List[Holding], List[HoldingWarning]]:
        ...


class StaticAllocationSource:
    """Allocation source returning a fixed configuration."""

    def __init__(self, allocation: AllocationSettings) -> None:
        self.allocation = allocation

    def get_allocation(self) -> AllocationSettings:
        return self.allocation


def _market_value_by_type(holdings: Sequence[Holding]) -> Tuple[Dict[AssetType, float], float]:
    by_type: Dict[AssetType, float] = {}
    total = 0.0
    for holding in holdings:
        by_type[holding.asset_type] = by_type.get(holding.asset_type, 0.0) + holding.market_value
        total += holding.market_value
    return by_type, total


def calculate_deviations(
    allocation: AllocationSettings,
    by_type: Dict[AssetType, float],
    total: float,
) -> List[AssetTypeDeviation]:
    """Compare current against target allocation for every rebalanced asset class."""

    deviations: List[AssetTypeDeviation] = []
    for asset_type in sorted(REBALANCE_ASSET_TYPES, key=lambda a: a.value):
        target_percent = allocation.target_for(asset_type)
        current_value = by_type.get(asset_type, 0.0)
        current_percent = current_value / total * 100 if total > 0 else 0.0
        deviation = current_percent - target_percent
        deviation_abs = abs(deviation)
        deviations.append(
            AssetTypeDeviation(
                asset_type=asset_type,
                target_percent=target_percent,
                current_percent=current_percent,
                deviation=deviation,
                deviation_abs=deviation_abs,
                exceeds_threshold=deviation_abs > allocation.rebalance_threshold,
                current_value=current_value,
                target_value=target_percent / 100 * total,
            )
        )
    return deviations


def generate_suggestions(deviations: Sequence[AssetTypeDeviation]) -> List[RebalanceSuggestion]:
    """Build buy/sell actions for classes outside the threshold, largest first."""

    suggestions: List[RebalanceSuggestion] = []
    for deviation in deviations:
        if not deviation.exceeds_threshold:
            continue
        amount = abs(deviation.current_value - deviation.target_value)
        if deviation.deviation > 0:
            action = "sell"
            reason = (
                f"Current allocation {deviation.current_percent:.2f}% is above target "
                f"{deviation.target_percent:.2f}%, consider selling"
            )
        else:
            action = "buy"
            reason = (
                f"Current allocation {deviation.current_percent:.2f}% is below target "
                f"{deviation.target_percent:.2f}%, consider buying"
            )
        suggestions.append(
            RebalanceSuggestion(asset_type=deviation.asset_type, action=action, amount=amount, reason=reason)
        )
    suggestions.sort(key=lambda s: s.amount, reverse=True)
    return suggestions


class RebalanceService:
    """Check the portfolio allocation against configured targets."""

    def __init__(self, allocation_source: AllocationSource, holdings: HoldingSource) -> None:
        self.allocation_source = allocation_source
        self.holdings = holdings

    def check_rebalance(self) -> RebalanceCheck:
        allocation = self.allocation_source.get_allocation()
        holdings, warnings = self.holdings.get_all_holdings(HoldingFilters())

        if not holdings:
            return RebalanceCheck(
                needs_rebalance=False,
                threshold=allocation.rebalance_threshold,
                current_total=0.0,
                warnings=warnings,
            )

        by_type, total = _market_value_by_type(holdings)
        if total <= 0:
            logger.warning("Holdings have no market value; current allocation is zero for every asset class")
        deviations = calculate_deviations(allocation, by_type, total)
        needs_rebalance = any(d.exceeds_threshold for d in deviations)
        suggestions = generate_suggestions(deviations) if needs_rebalance else []
        if needs_rebalance:
            logger.info(
                "Allocation drift above %.2f%% in %s",
                allocation.rebalance_threshold,
                ", ".join(d.asset_type.value for d in deviations if d.exceeds_threshold),
            )
        return RebalanceCheck(
            needs_rebalance=needs_rebalance,
            threshold=allocation.rebalance_threshold,
            deviations=deviations,
            suggestions=suggestions,
            current_total=total,
            warnings=warnings,
        )


__all__ = [
    "AllocationSource",
    "HoldingSource",
    "StaticAllocationSource",
    "RebalanceService",
    "calculate_deviations",
    "generate_suggestions",
]
