# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tier Allocators

One allocator per waterfall tier kind. Each allocator takes the cash still
undistributed in the current period, assigns some or all of it to partners,
and updates the capital account ledger. Allocators run in tier order until
the period's cash is exhausted.

Allocation rules:
- **Return of Capital**: pro-rata to unreturned capital, capped per partner
- **Preferred Return (compound)**: pays down compounding preference accounts
- **Preferred Return (IRR hurdle)**: all-or-nothing gate on the tracking
  partner's trailing IRR
- **Promote**: optional capped catch-up toward a target cumulative split,
  then the promote split
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..core.calculations import FinancialCalculations
from ..core.primitives import WaterfallSettings
from .allocation import allocate_with_remainder, resolve_splits
from .capital_accounts import CapitalAccountLedger
from .errors import WaterfallConfigurationError
from .partnership import (
    BaseWaterfallTier,
    PreferredReturnTier,
    PromoteTier,
    ReturnOfCapitalTier,
)

logger = logging.getLogger(__name__)


@dataclass
class PeriodAllocation:
    """
    Distributable cash of one period as it moves through the tiers.

    Attributes:
        period: Period index
        remaining: Cash not yet allocated by any tier
        allocations: Amounts allocated to each partner so far this period
        history: Partner cash flows of periods ``[0, period)`` (periods x partners)
    """

    period: int
    remaining: float
    allocations: np.ndarray
    history: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))

    @classmethod
    def start(
        cls, period: int, amount: float, n_partners: int, history: Optional[np.ndarray] = None
    ) -> "PeriodAllocation":
        if history is None:
            history = np.zeros((0, n_partners))
        return cls(
            period=period,
            remaining=amount,
            allocations=np.zeros(n_partners),
            history=history,
        )

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def assign(self, amounts: np.ndarray) -> float:
        """Add per-partner amounts to this period and reduce the remaining cash."""
        total = float(amounts.sum())
        self.allocations = self.allocations + amounts
        self.remaining -= total
        return total

    def assign_all(self, weights) -> float:
        """Allocate everything that remains by ``weights`` (remainder rule)."""
        amounts = allocate_with_remainder(self.remaining, weights)
        self.allocations = self.allocations + amounts
        total = self.remaining
        self.remaining = 0.0
        return total


def require_tier_parameters(tier: BaseWaterfallTier) -> None:
    """
    Check that a preferred return tier carries the rate its mode needs.

    Models validated through pydantic already guarantee this; the check
    covers tiers built with ``model_construct``.

    Raises:
        WaterfallConfigurationError: If ``pref_rate`` or ``hurdle_irr`` is missing
    """
    if not isinstance(tier, PreferredReturnTier):
        return
    if tier.compound_pref and tier.pref_rate is None:
        raise WaterfallConfigurationError(
            f"prefRate must be defined for compound preference (tier {tier.id!r})"
        )
    if not tier.compound_pref and tier.hurdle_irr is None:
        raise WaterfallConfigurationError(
            f"Preferred return tier {tier.id!r} must have hurdle_irr defined"
        )


# =============================================================================
# RETURN OF CAPITAL
# =============================================================================


def allocate_return_of_capital(
    tier: ReturnOfCapitalTier,
    allocation: PeriodAllocation,
    ledger: CapitalAccountLedger,
    settings: WaterfallSettings,
) -> float:
    """
    Repay unreturned capital pro-rata to each partner's balance.

    No partner receives more than its unreturned capital at the start of the
    tier. Cash beyond total unreturned capital passes to the next tier.

    Returns:
        Amount allocated by this tier
    """
    unreturned = ledger.unreturned_capital.copy()
    total_unreturned = float(unreturned.sum())
    if total_unreturned <= 0:
        return 0.0

    pay = min(allocation.remaining, total_unreturned)
    weights = unreturned / total_unreturned
    payments = np.minimum(allocate_with_remainder(pay, weights), unreturned)
    payments = np.maximum(payments, 0.0)

    ledger.return_capital(payments)
    paid = allocation.assign(payments)
    logger.debug(
        f"Period {allocation.period} tier {tier.id!r}: returned {paid:,.2f} of "
        f"{total_unreturned:,.2f} unreturned capital"
    )
    return paid


# =============================================================================
# PREFERRED RETURN
# =============================================================================


def allocate_compound_preference(
    tier: PreferredReturnTier,
    allocation: PeriodAllocation,
    ledger: CapitalAccountLedger,
    settings: WaterfallSettings,
) -> float:
    """
    Pay down compounding preference accounts.

    Only partners with a positive weight in ``distribution_splits`` are
    eligible. Eligible partners are paid in class order, each up to its
    account balance; the last eligible partner takes whatever is left of the
    running total, still capped at its balance. The tier is satisfied once
    every eligible balance is zero.

    Accrual happens at the start of each period in the orchestrator, not
    here, so idle and capital-call periods compound too.
    """
    require_tier_parameters(tier)

    partner_ids = ledger.partner_ids
    weights = resolve_splits(
        partner_ids, tier.distribution_splits, settings.zero_sum_tolerance
    )
    balances = ledger.preference_balance(tier.id)
    eligible = [i for i, w in enumerate(weights) if w > 0 and balances[i] > 0]
    if not eligible:
        return 0.0

    payments = np.zeros(len(partner_ids))
    budget = allocation.remaining
    running = 0.0
    for i in eligible[:-1]:
        payments[i] = min(balances[i], budget - running)
        running += payments[i]
    last = eligible[-1]
    payments[last] = max(0.0, min(budget - running, balances[last]))

    ledger.pay_preference(tier.id, payments)
    paid = allocation.assign(payments)
    logger.debug(
        f"Period {allocation.period} tier {tier.id!r}: paid {paid:,.2f} of compound preference"
    )
    return paid


def allocate_irr_hurdle_preference(
    tier: PreferredReturnTier,
    allocation: PeriodAllocation,
    ledger: CapitalAccountLedger,
    settings: WaterfallSettings,
) -> float:
    """
    Gate the period's cash on the tracking partner's trailing IRR.

    The tracking partner is the first equity class. Its IRR is measured over
    periods ``[0, t)``; while that IRR is undefined or below ``hurdle_irr``
    the tier takes all remaining cash and splits it by
    ``distribution_splits``. Once the hurdle is met the tier passes through.

    Note:
        The gate is all-or-nothing per period. A period that crosses the
        hurdle part-way is allocated entirely to this tier.
    """
    require_tier_parameters(tier)

    tracking_history = allocation.history[: allocation.period, 0]
    trailing_irr = FinancialCalculations.calculate_irr(
        tracking_history, settings=settings.irr
    )
    if trailing_irr is not None and trailing_irr >= tier.hurdle_irr:
        return 0.0

    weights = resolve_splits(
        ledger.partner_ids, tier.distribution_splits, settings.zero_sum_tolerance
    )
    paid = allocation.assign_all(weights)
    logger.debug(
        f"Period {allocation.period} tier {tier.id!r}: hurdle {tier.hurdle_irr:.2%} not met "
        f"(trailing IRR {trailing_irr}), allocated {paid:,.2f}"
    )
    return paid


# =============================================================================
# PROMOTE
# =============================================================================


def allocate_catch_up(
    tier: PromoteTier,
    allocation: PeriodAllocation,
    ledger: CapitalAccountLedger,
    settings: WaterfallSettings,
) -> float:
    """
    Move cumulative distributions toward ``catch_up_target_split``.

    Catch-up runs only when some partner's cumulative share (including this
    period's allocations so far) deviates from its target by more than the
    precision tolerance. Each partner is hard-capped at
    ``(total_before + remaining) * target - current`` so no partner overshoots
    its target share.

    Returns:
        Amount allocated by the catch-up; the rest stays in ``remaining``
    """
    partner_ids = ledger.partner_ids
    n = len(partner_ids)
    tolerance = settings.precision_tolerance

    current = ledger.cumulative_distributions + np.maximum(allocation.allocations, 0.0)
    total_before = float(current.sum())
    if total_before <= 0 or allocation.remaining <= tolerance:
        return 0.0

    targets = np.asarray(
        resolve_splits(partner_ids, tier.catch_up_target_split, settings.zero_sum_tolerance)
    )
    ratios = current / total_before
    deviates = (targets > 0) & (np.abs(ratios - targets) > tolerance)
    if not deviates.any():
        return 0.0

    budget = allocation.remaining
    caps = np.maximum(0.0, (total_before + budget) * targets - current)
    payments = np.zeros(n)
    running = 0.0
    for i in range(n - 1):
        if targets[i] > 0:
            payments[i] = max(0.0, min(budget * targets[i], caps[i]))
            running += payments[i]
    if targets[n - 1] > 0:
        payments[n - 1] = max(0.0, min(budget - running, caps[n - 1]))

    paid = allocation.assign(payments)
    logger.debug(
        f"Period {allocation.period} tier {tier.id!r}: catch-up allocated {paid:,.2f}"
    )
    return paid


def allocate_promote(
    tier: PromoteTier,
    allocation: PeriodAllocation,
    ledger: CapitalAccountLedger,
    settings: WaterfallSettings,
) -> float:
    """Split remaining cash by the promote split, after catch-up when enabled."""
    paid = 0.0
    if tier.has_catch_up:
        paid += allocate_catch_up(tier, allocation, ledger, settings)
    if allocation.remaining > 0:
        weights = resolve_splits(
            ledger.partner_ids, tier.distribution_splits, settings.zero_sum_tolerance
        )
        paid += allocation.assign_all(weights)
    return paid


# =============================================================================
# DISPATCH
# =============================================================================


def allocate_tier(
    tier: BaseWaterfallTier,
    allocation: PeriodAllocation,
    ledger: CapitalAccountLedger,
    settings: WaterfallSettings,
) -> float:
    """
    Run one tier against the period's remaining cash.

    Raises:
        WaterfallConfigurationError: If the tier kind is not recognized
    """
    if isinstance(tier, ReturnOfCapitalTier):
        return allocate_return_of_capital(tier, allocation, ledger, settings)
    elif isinstance(tier, PreferredReturnTier):
        if tier.is_compound:
            return allocate_compound_preference(tier, allocation, ledger, settings)
        return allocate_irr_hurdle_preference(tier, allocation, ledger, settings)
    elif isinstance(tier, PromoteTier):
        return allocate_promote(tier, allocation, ledger, settings)
    else:
        raise WaterfallConfigurationError(
            f"Unknown waterfall tier type: {type(tier).__name__}"
        )


__all__ = [
    "PeriodAllocation",
    "allocate_catch_up",
    "allocate_compound_preference",
    "allocate_irr_hurdle_preference",
    "allocate_promote",
    "allocate_return_of_capital",
    "allocate_tier",
    "require_tier_parameters",
]
