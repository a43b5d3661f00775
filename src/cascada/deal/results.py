# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Waterfall result models and builder.

The result is an immutable snapshot of one evaluation: the owner cash flows
it was given, one series per partner, and one row per period. Metrics are
delegated to `FinancialCalculations`; pandas views are provided for
reporting.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from pydantic import Field

from ..core.calculations import FinancialCalculations
from ..core.primitives import Model, WaterfallSettings
from .entities import EquityClass

logger = logging.getLogger(__name__)


class PartnerDistributionSeries(Model):
    """Cash flows and return metrics of one partner."""

    partner_id: str
    name: str = ""
    cash_flows: List[float]
    cumulative_cash_flows: List[float]
    irr: Optional[float] = Field(None, description="Periodic IRR, None when undefined")
    moic: float = Field(..., description="Multiple on invested capital")

    @property
    def total_contributed(self) -> float:
        return float(-sum(cf for cf in self.cash_flows if cf < 0))

    @property
    def total_distributed(self) -> float:
        return float(sum(cf for cf in self.cash_flows if cf > 0))

    @property
    def net_cash_flow(self) -> float:
        return float(sum(self.cash_flows))


class AnnualWaterfallRow(Model):
    """
    Allocation of one period's owner cash flow.

    ``clawback_adjustments`` is set only for periods where clawback moved
    cash between partners; the adjustments are already included in
    ``partner_distributions``.
    """

    year_index: int
    owner_cash_flow: float
    partner_distributions: Dict[str, float]
    clawback_adjustments: Optional[Dict[str, float]] = None

    @property
    def total_distributed(self) -> float:
        return float(sum(self.partner_distributions.values()))


class WaterfallResult(Model):
    """
    Output of one waterfall evaluation.

    A degenerate result (fewer than two periods of input) has no partners
    and no rows.
    """

    owner_cash_flows: List[float]
    partners: List[PartnerDistributionSeries] = Field(default_factory=list)
    annual_rows: List[AnnualWaterfallRow] = Field(default_factory=list)

    @property
    def is_degenerate(self) -> bool:
        return not self.partners

    @property
    def partner_ids(self) -> List[str]:
        return [p.partner_id for p in self.partners]

    def get_partner(self, partner_id: str) -> PartnerDistributionSeries:
        """
        Get a partner's series by equity class id.

        Raises:
            KeyError: If no partner has this id
        """
        for partner in self.partners:
            if partner.partner_id == partner_id:
                return partner
        raise KeyError(f"No partner with id {partner_id!r} in waterfall result")

    def conservation_residuals(self) -> np.ndarray:
        """Owner cash flow minus the sum of partner cash flows, per period."""
        if not self.partners:
            return np.zeros(0)
        matrix = np.array([p.cash_flows for p in self.partners]).T
        return np.asarray(self.owner_cash_flows) - matrix.sum(axis=1)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Per-period allocation table.

        Returns:
            DataFrame indexed by period with an ``owner_cash_flow`` column and
            one column per partner id
        """
        frame = pd.DataFrame(
            {p.partner_id: p.cash_flows for p in self.partners},
            index=pd.RangeIndex(len(self.owner_cash_flows), name="period"),
        )
        frame.insert(0, "owner_cash_flow", self.owner_cash_flows)
        return frame

    def partner_summary_dataframe(self) -> pd.DataFrame:
        """
        One row per partner with contributions, distributions and returns.

        A ``TOTAL`` row aggregates the owner cash flows.
        """
        rows = []
        for partner in self.partners:
            rows.append({
                "partner": partner.partner_id,
                "name": partner.name,
                "contributed": partner.total_contributed,
                "distributed": partner.total_distributed,
                "net_cash_flow": partner.net_cash_flow,
                "irr": partner.irr,
                "moic": partner.moic,
            })

        owner = self.owner_cash_flows
        rows.append({
            "partner": "TOTAL",
            "name": "All partners",
            "contributed": float(-sum(cf for cf in owner if cf < 0)),
            "distributed": float(sum(cf for cf in owner if cf > 0)),
            "net_cash_flow": float(sum(owner)),
            "irr": FinancialCalculations.calculate_irr(owner),
            "moic": FinancialCalculations.calculate_equity_multiple(owner),
        })
        return pd.DataFrame(rows).set_index("partner")


def build_waterfall_result(
    owner_cash_flows: Sequence[float],
    equity_classes: Sequence[EquityClass],
    partner_cash_flows: np.ndarray,
    clawback_adjustments: Optional[np.ndarray] = None,
    settings: Optional[WaterfallSettings] = None,
) -> WaterfallResult:
    """
    Assemble a WaterfallResult from a partner cash-flow matrix.

    Computes cumulative series, IRR and MOIC per partner, and one row per
    period. Periods whose partner flows do not sum to the owner cash flow
    within ``settings.conservation_tolerance`` are logged as warnings; the
    result is still returned.

    Args:
        owner_cash_flows: Signed owner cash flows
        equity_classes: Classes in matrix column order
        partner_cash_flows: Matrix (periods x partners)
        clawback_adjustments: Optional matrix of clawback transfers already
            included in ``partner_cash_flows``
        settings: Tolerances and IRR contract

    Returns:
        WaterfallResult
    """
    settings = settings or WaterfallSettings()
    owner = [float(cf) for cf in owner_cash_flows]
    matrix = np.asarray(partner_cash_flows, dtype=float)
    cumulative = np.cumsum(matrix, axis=0)

    partners = []
    for j, equity_class in enumerate(equity_classes):
        flows = matrix[:, j]
        partners.append(
            PartnerDistributionSeries(
                partner_id=equity_class.id,
                name=equity_class.name,
                cash_flows=flows.tolist(),
                cumulative_cash_flows=cumulative[:, j].tolist(),
                irr=FinancialCalculations.calculate_irr(flows, settings=settings.irr),
                moic=FinancialCalculations.calculate_equity_multiple(flows),
            )
        )

    rows = []
    for t, cf in enumerate(owner):
        distributions = {c.id: float(matrix[t, j]) for j, c in enumerate(equity_classes)}
        adjustments = None
        if clawback_adjustments is not None and np.any(clawback_adjustments[t] != 0):
            adjustments = {
                c.id: float(clawback_adjustments[t, j])
                for j, c in enumerate(equity_classes)
            }

        residual = cf - sum(distributions.values())
        if abs(residual) > settings.conservation_tolerance:
            logger.warning(
                f"Conservation mismatch in period {t}: owner cash flow {cf:,.2f}, "
                f"partner total {cf - residual:,.2f}"
            )

        rows.append(
            AnnualWaterfallRow(
                year_index=t,
                owner_cash_flow=cf,
                partner_distributions=distributions,
                clawback_adjustments=adjustments,
            )
        )

    return WaterfallResult(owner_cash_flows=owner, partners=partners, annual_rows=rows)


__all__ = [
    "AnnualWaterfallRow",
    "PartnerDistributionSeries",
    "WaterfallResult",
    "build_waterfall_result",
]
