# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial calculation functions.

Contains static methods for the financial metrics the waterfall engine
consumes: periodic NPV, IRR and equity multiple. These functions are pure
(math-only); the engine delegates to them to keep a single source of truth
for financial calculations.

Periods are positional: flow ``i`` is discounted by ``(1 + rate) ** i``.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from pyxirr import npv as pyxirr_npv
from scipy.optimize import brentq

from .primitives.settings import IRRSettings

CashFlowsLike = Union[Sequence[float], np.ndarray, pd.Series]

_DEFAULT_IRR_SETTINGS = IRRSettings()


def _as_array(cash_flows: CashFlowsLike) -> np.ndarray:
    if isinstance(cash_flows, pd.Series):
        return cash_flows.to_numpy(dtype=float)
    return np.asarray(cash_flows, dtype=float)


class FinancialCalculations:
    """
    Pure mathematical functions for financial calculations.

    Static methods for core financial metrics, independent of the waterfall
    configuration or partner bookkeeping.
    """

    @staticmethod
    def calculate_npv(discount_rate: float, cash_flows: CashFlowsLike) -> float:
        """
        Calculate periodic Net Present Value using PyXIRR.

        Args:
            discount_rate: Periodic discount rate as decimal (e.g., 0.10 for 10%)
            cash_flows: Cash flows for periods 0..N (period 0 undiscounted)

        Returns:
            NPV as float; 0.0 for an empty series

        Example:
            ```python
            npv = FinancialCalculations.calculate_npv(0.10, [-1000, 500, 600])
            print(f"NPV: {npv:,.2f}")  # NPV: -49.59
            ```
        """
        values = _as_array(cash_flows)
        if values.size == 0:
            return 0.0
        return float(pyxirr_npv(discount_rate, values.tolist(), start_from_zero=True))

    @staticmethod
    def calculate_irr(
        cash_flows: CashFlowsLike,
        tolerance: Optional[float] = None,
        max_iterations: Optional[int] = None,
        settings: Optional[IRRSettings] = None,
    ) -> Optional[float]:
        """
        Calculate the periodic Internal Rate of Return.

        The root is bracketed in ``[settings.lower_bound, settings.upper_bound]``
        (default ``[-0.99, 10.0]``) and refined with Brent's method, which
        falls back to bisection steps and therefore never leaves the bracket.

        Args:
            cash_flows: Cash flows for periods 0..N
            tolerance: Absolute NPV tolerance (default from settings, 1e-6)
            max_iterations: Iteration cap (default from settings, 100)
            settings: IRR bracket and defaults

        Returns:
            IRR as decimal (e.g., 0.15 for 15%) or None if it cannot be found

        Edge Cases Handled:
            - Empty series → None
            - All flows (near) zero → None
            - All flows non-negative or all non-positive → None
            - No NPV sign change across the bracket → None
        """
        settings = settings or _DEFAULT_IRR_SETTINGS
        tolerance = settings.tolerance if tolerance is None else tolerance
        max_iterations = (
            settings.max_iterations if max_iterations is None else max_iterations
        )

        values = _as_array(cash_flows)
        if values.size == 0:
            return None

        if np.all(np.abs(values) < tolerance):
            return None

        # Need both investments and returns
        if np.all(values >= 0) or np.all(values <= 0):
            return None

        def npv_at(rate: float) -> float:
            return FinancialCalculations.calculate_npv(rate, values)

        low, high = settings.lower_bound, settings.upper_bound
        npv_low = npv_at(low)
        npv_high = npv_at(high)

        if abs(npv_low) < tolerance:
            return low
        if abs(npv_high) < tolerance:
            return high
        if math.copysign(1.0, npv_low) == math.copysign(1.0, npv_high):
            return None

        root, status = brentq(
            npv_at,
            low,
            high,
            xtol=1e-12,
            maxiter=max(int(max_iterations), 1),
            full_output=True,
            disp=False,
        )
        if not status.converged and abs(npv_at(root)) > tolerance:
            return None
        return float(root)

    @staticmethod
    def calculate_equity_multiple(cash_flows: CashFlowsLike) -> float:
        """
        Calculate equity multiple (MOIC): total returned / total invested.

        Returns:
            Positive sum divided by absolute negative sum; ``inf`` when there
            are no negative flows but positive flows exist; ``0.0`` when both
            sums are zero (including an empty series).

        Example:
            ```python
            FinancialCalculations.calculate_equity_multiple([-1000, 100, 100, 1400])
            # 1.6
            ```
        """
        values = _as_array(cash_flows)
        if values.size == 0:
            return 0.0

        positive_sum = float(values[values > 0].sum())
        negative_sum = float(np.abs(values[values <= 0]).sum())

        if negative_sum == 0:
            return math.inf if positive_sum > 0 else 0.0

        return positive_sum / negative_sum


def npv(rate: float, cash_flows: CashFlowsLike) -> float:
    """Periodic NPV (collaborator contract)."""
    return FinancialCalculations.calculate_npv(rate, cash_flows)


def irr(
    cash_flows: CashFlowsLike,
    tolerance: Optional[float] = None,
    max_iterations: Optional[int] = None,
) -> Optional[float]:
    """Periodic IRR or None (collaborator contract)."""
    return FinancialCalculations.calculate_irr(
        cash_flows, tolerance=tolerance, max_iterations=max_iterations
    )


def equity_multiple(cash_flows: CashFlowsLike) -> float:
    """Equity multiple (collaborator contract)."""
    return FinancialCalculations.calculate_equity_multiple(cash_flows)


__all__ = [
    "FinancialCalculations",
    "equity_multiple",
    "irr",
    "npv",
]
