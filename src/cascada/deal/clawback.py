# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Clawback Reconciliation

Reconciles the GP's cumulative distributions against a hypothetical
liquidation of the partnership at one or more evaluation periods, and moves
any excess back to the other partners.

Hypothetical liquidation at period ``e``:
    The owner cash flows are truncated to periods ``[0, e]`` and the tier
    chain is re-run on them without clawback. The closing capital accounts
    of that run show what the other partners are still owed if the vehicle
    were wound up at ``e``:

    - **Compound preference**: the remaining preference account balances
      of the partners eligible for the tier
    - **IRR hurdle**: the amount the tracking partner would need at ``e``
      to reach ``hurdle_irr`` (zero once the hurdle is met)
    - **Return of Capital only**: unreturned capital

    The GP must give back its gains up to that shortfall. A partner set
    that has met its preferred return is owed nothing, so no clawback
    happens.

The GP is the equity class with the smallest normalized contribution
percentage (the last such class when several tie). Excess GP distributions
are transferred within period ``e`` to the other classes pro-rata by their
contribution percentages, so every period still conserves cash.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Sequence, Tuple

import numpy as np

from ..core.calculations import FinancialCalculations
from ..core.primitives import ClawbackMethodEnum, ClawbackTriggerEnum
from .allocation import allocate_with_remainder, normalize_percentages, resolve_splits
from .capital_accounts import CapitalAccountLedger
from .partnership import PreferredReturnTier, PromoteTier, ReturnOfCapitalTier

if TYPE_CHECKING:
    from .distribution_calculator import DistributionCalculator

logger = logging.getLogger(__name__)


def truncated_cash_flows(
    owner_cash_flows: Sequence[float], evaluation_period: int
) -> List[float]:
    """
    Owner cash flows of periods ``[0, evaluation_period]``.

    Example:
        ```python
        truncated_cash_flows([-100.0, 150.0, -40.0, 0.0], 2)
        # [-100.0, 150.0, -40.0]
        ```
    """
    return [float(cf) for cf in owner_cash_flows[: evaluation_period + 1]]


class ClawbackCorrector:
    """
    Applies hypothetical-liquidation clawback for a distribution calculator.

    The corrector re-runs the calculator's tier chain with clawback disabled,
    so hypothetical runs never recurse.
    """

    def __init__(self, calculator: "DistributionCalculator"):
        self.calculator = calculator
        self.settings = calculator.settings

    @property
    def gp_index(self) -> int:
        """Index of the class with the smallest normalized contribution (last on ties)."""
        weights = self.calculator.contribution_weights
        smallest = min(weights)
        return max(i for i, w in enumerate(weights) if w == smallest)

    @staticmethod
    def evaluation_periods(tier: PromoteTier, n_periods: int) -> List[int]:
        if n_periods < 2:
            return []
        if tier.clawback_trigger == ClawbackTriggerEnum.ANNUAL:
            return list(range(1, n_periods))
        return [n_periods - 1]

    # -------------------------------------------------------------------------
    # Liquidation shortfall
    # -------------------------------------------------------------------------

    def _compound_shortfall(
        self, tier: PreferredReturnTier, ledger: CapitalAccountLedger
    ) -> float:
        weights = resolve_splits(
            ledger.partner_ids, tier.distribution_splits, self.settings.zero_sum_tolerance
        )
        balances = ledger.preference_balance(tier.id)
        gp = self.gp_index
        return float(
            sum(max(0.0, balances[i]) for i, w in enumerate(weights) if w > 0 and i != gp)
        )

    def _hurdle_shortfall(
        self, tier: PreferredReturnTier, hypothetical: np.ndarray
    ) -> float:
        # Hurdle is tracked on the first class; nothing is owed when that is the GP
        if self.gp_index == 0:
            return 0.0
        tracking = hypothetical[:, 0]
        tracking_irr = FinancialCalculations.calculate_irr(
            tracking, settings=self.settings.irr
        )
        if tracking_irr is not None and tracking_irr >= tier.hurdle_irr:
            return 0.0
        last = len(tracking) - 1
        future_value = sum(
            cf * (1.0 + tier.hurdle_irr) ** (last - t) for t, cf in enumerate(tracking)
        )
        return max(0.0, -float(future_value))

    def liquidation_shortfall(
        self, hypothetical: np.ndarray, ledger: CapitalAccountLedger
    ) -> float:
        """
        Amount the non-GP partners are still owed at the end of a hypothetical run.

        Args:
            hypothetical: Partner cash-flow matrix of the truncated run
            ledger: Capital accounts after the last period of that run

        Returns:
            The largest shortfall over the preferred return tiers. Without
            preferred return tiers, the non-GP unreturned capital when a
            Return of Capital tier is configured, otherwise zero.
        """
        tiers = self.calculator.config.tiers or []
        shortfalls = []
        for tier in tiers:
            if not isinstance(tier, PreferredReturnTier):
                continue
            if tier.is_compound:
                shortfalls.append(self._compound_shortfall(tier, ledger))
            else:
                shortfalls.append(self._hurdle_shortfall(tier, hypothetical))

        if not shortfalls and any(isinstance(t, ReturnOfCapitalTier) for t in tiers):
            gp = self.gp_index
            shortfalls.append(
                float(sum(v for i, v in enumerate(ledger.unreturned_capital) if i != gp))
            )
        return max(shortfalls, default=0.0)

    # -------------------------------------------------------------------------
    # Transfers
    # -------------------------------------------------------------------------

    def _transfer_vector(self, amount: float, n_partners: int) -> np.ndarray:
        """Move ``amount`` from the GP to the others pro-rata by contribution."""
        gp = self.gp_index
        others = [i for i in range(n_partners) if i != gp]
        contribution = self.calculator.contribution_weights
        weights = normalize_percentages(
            [contribution[i] for i in others], tolerance=self.settings.zero_sum_tolerance
        )
        transfer = np.zeros(n_partners)
        transfer[others] = allocate_with_remainder(amount, weights)
        transfer[gp] = -amount
        return transfer

    def required_distributions(
        self, owner_cash_flows: Sequence[float], evaluation_period: int
    ) -> np.ndarray:
        """
        Cumulative per-partner cash flows through ``evaluation_period`` under liquidation.

        The truncated run's cumulative flows, with the GP's gains up to the
        liquidation shortfall moved to the other partners.
        """
        series = truncated_cash_flows(owner_cash_flows, evaluation_period)
        hypothetical, ledger = self.calculator.run_tier_chain(series)
        required = hypothetical.sum(axis=0)
        n_partners = len(required)
        if n_partners < 2:
            return required

        gp = self.gp_index
        owed = min(
            self.liquidation_shortfall(hypothetical, ledger), max(0.0, float(required[gp]))
        )
        if owed > 0:
            required = required + self._transfer_vector(owed, n_partners)
        return required

    def transfer_for_period(
        self,
        owner_cash_flows: Sequence[float],
        partner_flows: np.ndarray,
        evaluation_period: int,
    ) -> np.ndarray:
        """
        Adjustment row moving excess GP distributions to the other partners.

        ``partner_flows`` already includes transfers made at earlier
        evaluation periods, so only the part not yet returned is moved.

        Returns:
            Per-partner adjustment for ``evaluation_period`` (zeros when the GP
            is not over-distributed)
        """
        n_partners = partner_flows.shape[1]
        if n_partners < 2:
            return np.zeros(n_partners)

        gp = self.gp_index
        required = self.required_distributions(owner_cash_flows, evaluation_period)
        actual = partner_flows[: evaluation_period + 1].sum(axis=0)
        excess = float(actual[gp] - required[gp])
        if excess <= self.settings.precision_tolerance:
            return np.zeros(n_partners)

        logger.debug(
            f"Clawback at period {evaluation_period}: GP "
            f"{self.calculator.partner_ids[gp]!r} returns {excess:,.2f} "
            f"(actual {actual[gp]:,.2f}, required {required[gp]:,.2f})"
        )
        return self._transfer_vector(excess, n_partners)

    def apply(
        self, owner_cash_flows: Sequence[float], partner_flows: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Reconcile every clawback-enabled promote tier.

        Args:
            owner_cash_flows: Signed owner cash flows of the actual run
            partner_flows: Partner cash-flow matrix of the actual run

        Returns:
            Tuple of (adjusted partner cash-flow matrix, adjustment matrix)
        """
        adjusted = partner_flows.copy()
        adjustments = np.zeros_like(partner_flows)
        n_periods = len(owner_cash_flows)

        for tier in self.calculator.config.clawback_tiers:
            if tier.clawback_method != ClawbackMethodEnum.HYPOTHETICAL_LIQUIDATION:
                logger.warning(
                    f"Clawback method {tier.clawback_method.value!r} on tier {tier.id!r} "
                    "is not supported; no clawback applied"
                )
                continue

            for e in self.evaluation_periods(tier, n_periods):
                transfer = self.transfer_for_period(owner_cash_flows, adjusted, e)
                adjusted[e, :] += transfer
                adjustments[e, :] += transfer

        net = adjustments.sum(axis=1)
        for t in np.flatnonzero(np.abs(net) > self.settings.conservation_tolerance):
            logger.warning(
                f"Clawback adjustments for period {t} do not net to zero "
                f"(net {net[t]:,.4f})"
            )

        return adjusted, adjustments


__all__ = [
    "ClawbackCorrector",
    "truncated_cash_flows",
]
