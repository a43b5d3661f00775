# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partnership Distribution Calculator

This module implements the equity waterfall orchestration. It splits each
period's owner cash flow among the equity classes, either pro-rata
(single-tier) or through the configured tier chain (multi-tier), and hands
the partner cash-flow matrix to the result builder.

Per-period flow in multi-tier mode:
1. Compound preference accounts accrue one period (every period after 0)
2. Capital calls are split by contribution percentage
3. Distributions run through the tiers in order until cash is exhausted
4. Cumulative distributions are updated in the capital account ledger

After the full run, clawback-enabled promote tiers are reconciled against
hypothetical liquidations (see ``clawback``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core.primitives import (
    CashFlowDirectionEnum,
    WaterfallSettings,
    validate_cash_flow_sequence,
)
from .allocation import allocate_with_remainder, normalize_percentages
from .capital_accounts import CapitalAccountLedger
from .clawback import ClawbackCorrector
from .entities import EquityClass
from .errors import WaterfallConfigurationError
from .partnership import WaterfallConfig
from .results import WaterfallResult, build_waterfall_result
from .tiers import PeriodAllocation, allocate_tier, require_tier_parameters

logger = logging.getLogger(__name__)


@dataclass
class DistributionCalculator:
    """
    Calculates partner distributions for one waterfall configuration.

    The calculator holds no running state between calls: every evaluation
    opens a fresh ``CapitalAccountLedger`` and partner cash-flow matrix
    (periods x partners).

    Attributes:
        config: Equity classes and tiers
        settings: Numeric tolerances and IRR contract

    Example:
        ```python
        calculator = DistributionCalculator(config)
        result = calculator.calculate_distributions([-1000.0, 500.0, 600.0, 700.0])
        result.get_partner("lp").irr
        ```
    """

    config: WaterfallConfig
    settings: WaterfallSettings = field(default_factory=WaterfallSettings)

    @property
    def equity_classes(self) -> List[EquityClass]:
        return self.config.resolved_equity_classes

    @property
    def partner_ids(self) -> List[str]:
        return self.config.partner_ids

    @property
    def contribution_weights(self) -> List[float]:
        """Normalized contribution percentages in class order."""
        return normalize_percentages(
            [c.contribution_pct for c in self.equity_classes],
            tolerance=self.settings.zero_sum_tolerance,
        )

    @property
    def distribution_weights(self) -> List[float]:
        """Normalized base distribution percentages in class order."""
        return normalize_percentages(
            [c.effective_distribution_pct for c in self.equity_classes],
            tolerance=self.settings.zero_sum_tolerance,
        )

    def calculate_distributions(
        self, owner_cash_flows: Sequence[float]
    ) -> WaterfallResult:
        """
        Run the waterfall and build the result.

        Multi-tier mode is used when the configuration has tiers, single-tier
        mode otherwise.

        Args:
            owner_cash_flows: Signed owner cash flows for periods 0..N-1

        Returns:
            WaterfallResult with per-partner series and per-period rows

        Raises:
            WaterfallConfigurationError: If the configuration cannot be evaluated
        """
        flows = validate_cash_flow_sequence(owner_cash_flows)
        clawback_adjustments = None

        if self.config.is_multi_tier:
            partner_flows, clawback_adjustments = self.calculate_multi_tier(flows)
        else:
            partner_flows = self.calculate_single_tier(flows)

        return build_waterfall_result(
            flows,
            self.equity_classes,
            partner_flows,
            clawback_adjustments=clawback_adjustments,
            settings=self.settings,
        )

    # -------------------------------------------------------------------------
    # Single-tier
    # -------------------------------------------------------------------------

    def _validate_single_tier_weights(self) -> None:
        for label, weights in (
            ("contribution_pct", self.contribution_weights),
            ("distribution_pct", self.distribution_weights),
        ):
            for equity_class, pct in zip(self.equity_classes, weights):
                if not 0.0 < pct <= 1.0:
                    raise WaterfallConfigurationError(
                        f"Invalid {label} for {equity_class.id}: must be in (0, 1] "
                        f"after normalization, got {pct}"
                    )

    def calculate_single_tier(self, owner_cash_flows: Sequence[float]) -> np.ndarray:
        """
        Split every period pro-rata by the classes' percentages.

        Capital calls use the contribution percentages and distributions the
        distribution percentages. The last class receives the exact
        remainder of each period.

        Returns:
            Partner cash-flow matrix (periods x partners)

        Raises:
            WaterfallConfigurationError: If a normalized percentage is outside ``(0, 1]``
        """
        self._validate_single_tier_weights()
        contribution = self.contribution_weights
        distribution = self.distribution_weights

        partner_flows = np.zeros((len(owner_cash_flows), len(self.equity_classes)))
        for t, cf in enumerate(owner_cash_flows):
            weights = contribution if cf < 0 else distribution
            partner_flows[t, :] = allocate_with_remainder(cf, weights)

        logger.debug(
            f"Single-tier waterfall: {len(owner_cash_flows)} periods, "
            f"{len(self.equity_classes)} classes"
        )
        return partner_flows

    # -------------------------------------------------------------------------
    # Multi-tier
    # -------------------------------------------------------------------------

    def compute_partner_cash_flows(self, owner_cash_flows: Sequence[float]) -> np.ndarray:
        """
        Run the tier chain over every period without clawback.

        Returns:
            Partner cash-flow matrix (periods x partners)
        """
        partner_flows, _ = self.run_tier_chain(owner_cash_flows)
        return partner_flows

    def run_tier_chain(
        self, owner_cash_flows: Sequence[float]
    ) -> Tuple[np.ndarray, CapitalAccountLedger]:
        """
        Run the tier chain and keep the capital accounts of the run.

        This is the pass shared by ``calculate_multi_tier`` and the clawback
        re-runs, which read the closing ledger to see what is still owed.

        Returns:
            Tuple of (partner cash-flow matrix, ledger after the last period)

        Raises:
            WaterfallConfigurationError: If the configuration has no tiers or
                a preferred return tier lacks its rate
        """
        tiers = self.config.tiers or []
        if not tiers:
            raise WaterfallConfigurationError(
                "Multi-tier waterfall requires at least one tier"
            )
        for tier in tiers:
            require_tier_parameters(tier)

        compound_tiers = self.config.compound_tiers
        n_periods = len(owner_cash_flows)
        n_partners = len(self.equity_classes)
        contribution = self.contribution_weights
        distribution = self.distribution_weights

        ledger = CapitalAccountLedger.open(
            self.partner_ids, [t.id for t in compound_tiers]
        )
        partner_flows = np.zeros((n_periods, n_partners))

        for t, cf in enumerate(owner_cash_flows):
            if t > 0:
                for tier in compound_tiers:
                    ledger.accrue_preference(tier.id, tier.pref_rate)

            direction = CashFlowDirectionEnum.from_amount(cf)

            if direction == CashFlowDirectionEnum.CAPITAL_CALL:
                shares = allocate_with_remainder(cf, contribution)
                ledger.record_contribution(-shares)
                partner_flows[t, :] = shares
                continue

            if direction == CashFlowDirectionEnum.IDLE:
                continue

            allocation = PeriodAllocation.start(
                t, cf, n_partners, history=partner_flows[:t]
            )
            for tier in tiers:
                if allocation.exhausted:
                    break
                allocate_tier(tier, allocation, ledger, self.settings)

            if allocation.remaining != 0.0:
                if abs(allocation.remaining) > self.settings.precision_tolerance:
                    logger.debug(
                        f"Period {t}: {allocation.remaining:,.2f} left after the last tier, "
                        "allocated by distribution percentages"
                    )
                allocation.assign_all(distribution)

            partner_flows[t, :] = allocation.allocations
            ledger.record_period_distributions(allocation.allocations)

        return partner_flows, ledger

    def calculate_multi_tier(
        self, owner_cash_flows: Sequence[float], apply_clawback: bool = True
    ) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """
        Run the tier chain and, unless disabled, clawback reconciliation.

        Args:
            owner_cash_flows: Signed owner cash flows
            apply_clawback: False for hypothetical runs; bounds recursion at depth 1

        Returns:
            Tuple of (partner cash-flow matrix, clawback adjustment matrix or None)

        Raises:
            WaterfallConfigurationError: If the configuration has no tiers or
                a preferred return tier lacks its rate
        """
        partner_flows = self.compute_partner_cash_flows(owner_cash_flows)
        logger.debug(
            f"Multi-tier waterfall: {len(owner_cash_flows)} periods, "
            f"{len(self.config.tiers or [])} tiers"
        )

        if not apply_clawback or not self.config.clawback_tiers:
            return partner_flows, None

        corrector = ClawbackCorrector(self)
        return corrector.apply(owner_cash_flows, partner_flows)


__all__ = ["DistributionCalculator"]
