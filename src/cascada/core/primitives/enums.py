# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class TierTypeEnum(str, Enum):
    """
    Kind of waterfall tier.

    Options:
        RETURN_OF_CAPITAL: Repays contributed capital pro-rata
        PREFERRED_RETURN: Pays the investor preference (IRR hurdle or compound accrual)
        PROMOTE: Splits residual profit, optionally after a GP catch-up
    """

    RETURN_OF_CAPITAL = "return_of_capital"
    PREFERRED_RETURN = "preferred_return"
    PROMOTE = "promote"


class ClawbackMethodEnum(str, Enum):
    """
    Methodology used to measure GP over-distribution.

    Options:
        HYPOTHETICAL_LIQUIDATION: Re-run the waterfall as if everything received
            through the evaluation period had been distributed at that period
        LOOKBACK: Compare cumulative distributions against a lookback target
            (accepted for configuration compatibility, not evaluated)
    """

    HYPOTHETICAL_LIQUIDATION = "hypothetical_liquidation"
    LOOKBACK = "lookback"


class ClawbackTriggerEnum(str, Enum):
    """
    When clawback is evaluated.

    Options:
        FINAL_PERIOD: Once, at the last period of the horizon
        ANNUAL: At the end of every period from 1 to N-1
    """

    FINAL_PERIOD = "final_period"
    ANNUAL = "annual"


class CashFlowDirectionEnum(str, Enum):
    """Orchestrator state for a single period of owner cash flow."""

    CAPITAL_CALL = "capital_call"
    DISTRIBUTION = "distribution"
    IDLE = "idle"

    @classmethod
    def from_amount(cls, amount: float) -> "CashFlowDirectionEnum":
        """Classify a signed owner cash flow."""
        if amount < 0:
            return cls.CAPITAL_CALL
        if amount > 0:
            return cls.DISTRIBUTION
        return cls.IDLE


class BatchItemStatusEnum(str, Enum):
    """
    Outcome of one evaluation in a waterfall batch.

    Options:
        COMPLETED: The waterfall ran and produced a result
        FAILED: The configuration or input was rejected
        CANCELLED: The batch was cancelled before this item started
    """

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
