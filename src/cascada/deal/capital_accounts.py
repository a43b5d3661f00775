# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capital Account Ledger

Running per-partner state of a single waterfall evaluation. The ledger is
created fresh for every evaluation and passed explicitly to the tier
allocators; nothing here outlives one call.

Tracked balances (arrays in equity class order):
- **Unreturned capital**: contributions less return-of-capital payments
- **Cumulative distributions**: positive allocations received so far
- **Preference accounts**: one per compound preferred-return tier, holding
  contributed capital plus accrued preference less payments received
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np


@dataclass
class CapitalAccountLedger:
    """
    Mutable capital accounts for the partners of one evaluation.

    Attributes:
        partner_ids: Equity class ids in class order
        unreturned_capital: Capital contributed and not yet returned
        cumulative_distributions: Positive distributions received to date
        pref_balances: Compound preference account per tier id

    Example:
        ```python
        ledger = CapitalAccountLedger.open(["lp", "gp"], compound_tier_ids=["pref"])
        ledger.record_contribution(np.array([900_000.0, 100_000.0]))
        ledger.accrue_preference("pref", 0.08)
        ledger.preference_balance("pref")  # array([972000., 108000.])
        ```
    """

    partner_ids: List[str]
    unreturned_capital: np.ndarray = field(default=None)  # type: ignore[assignment]
    cumulative_distributions: np.ndarray = field(default=None)  # type: ignore[assignment]
    pref_balances: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        n = len(self.partner_ids)
        if self.unreturned_capital is None:
            self.unreturned_capital = np.zeros(n)
        if self.cumulative_distributions is None:
            self.cumulative_distributions = np.zeros(n)

    @classmethod
    def open(
        cls, partner_ids: Sequence[str], compound_tier_ids: Sequence[str] = ()
    ) -> "CapitalAccountLedger":
        """Open empty accounts for the partners and compound preference tiers."""
        n = len(partner_ids)
        return cls(
            partner_ids=list(partner_ids),
            pref_balances={tier_id: np.zeros(n) for tier_id in compound_tier_ids},
        )

    # -------------------------------------------------------------------------
    # Capital
    # -------------------------------------------------------------------------

    def record_contribution(self, contributions: np.ndarray) -> None:
        """
        Record capital contributed by each partner (positive amounts).

        Contributions raise unreturned capital and seed every compound
        preference account by the same amount.
        """
        self.unreturned_capital = self.unreturned_capital + contributions
        for tier_id in self.pref_balances:
            self.pref_balances[tier_id] = self.pref_balances[tier_id] + contributions

    def return_capital(self, payments: np.ndarray) -> None:
        """
        Record return-of-capital payments (positive amounts).

        Returned capital leaves both the unreturned balance and the compound
        preference accounts, which hold capital plus accrued preference.
        Balances never go below zero.
        """
        self.unreturned_capital = np.maximum(self.unreturned_capital - payments, 0.0)
        for tier_id, balance in self.pref_balances.items():
            self.pref_balances[tier_id] = np.maximum(balance - payments, 0.0)

    @property
    def total_unreturned(self) -> float:
        return float(self.unreturned_capital.sum())

    # -------------------------------------------------------------------------
    # Preference accounts
    # -------------------------------------------------------------------------

    def accrue_preference(self, tier_id: str, rate: float) -> None:
        """Compound every positive balance of a preference account by one period."""
        balance = self.pref_balances[tier_id]
        self.pref_balances[tier_id] = np.where(balance > 0, balance * (1.0 + rate), balance)

    def pay_preference(self, tier_id: str, payments: np.ndarray) -> None:
        self.pref_balances[tier_id] = self.pref_balances[tier_id] - payments

    def preference_balance(self, tier_id: str) -> np.ndarray:
        """Current balance of a compound preference account (copy)."""
        return self.pref_balances[tier_id].copy()

    # -------------------------------------------------------------------------
    # Distributions
    # -------------------------------------------------------------------------

    def record_period_distributions(self, allocations: np.ndarray) -> None:
        """Add a period's allocations to cumulative distributions (positive parts only)."""
        self.cumulative_distributions = self.cumulative_distributions + np.maximum(
            allocations, 0.0
        )

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """
        Plain-dict view of every account keyed by partner id.

        Used for debug logging and test assertions.
        """
        view: Dict[str, Dict[str, float]] = {}
        for i, partner_id in enumerate(self.partner_ids):
            accounts = {
                "unreturned_capital": float(self.unreturned_capital[i]),
                "cumulative_distributions": float(self.cumulative_distributions[i]),
            }
            for tier_id, balance in self.pref_balances.items():
                accounts[f"pref_balance[{tier_id}]"] = float(balance[i])
            view[partner_id] = accounts
        return view


__all__ = ["CapitalAccountLedger"]
