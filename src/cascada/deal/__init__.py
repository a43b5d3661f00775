# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cascada Deal Models
Public API for the cascada.deal subpackage.

This module contains the equity waterfall: equity classes, tier and
configuration models, the distribution calculator with its tier allocators
and clawback reconciliation, result models, and construct helpers.
"""

from .api import (
    WaterfallOutcome,
    apply_equity_waterfall,
    coerce_config,
    evaluate_equity_waterfall,
)
from .capital_accounts import CapitalAccountLedger
from .clawback import ClawbackCorrector, truncated_cash_flows
from .constructs import create_pari_passu_config, create_standard_waterfall
from .distribution_calculator import DistributionCalculator
from .entities import OWNER_CLASS, EquityClass
from .errors import WaterfallConfigurationError
from .partnership import (
    BaseWaterfallTier,
    PreferredReturnTier,
    PromoteTier,
    ReturnOfCapitalTier,
    WaterfallConfig,
    WaterfallTier,
)
from .results import (
    AnnualWaterfallRow,
    PartnerDistributionSeries,
    WaterfallResult,
    build_waterfall_result,
)

__all__ = [
    # API
    "apply_equity_waterfall",
    "evaluate_equity_waterfall",
    "coerce_config",
    "WaterfallOutcome",
    "WaterfallConfigurationError",
    # Configuration
    "EquityClass",
    "OWNER_CLASS",
    "BaseWaterfallTier",
    "ReturnOfCapitalTier",
    "PreferredReturnTier",
    "PromoteTier",
    "WaterfallTier",
    "WaterfallConfig",
    # Engine
    "DistributionCalculator",
    "CapitalAccountLedger",
    "ClawbackCorrector",
    "truncated_cash_flows",
    # Results
    "AnnualWaterfallRow",
    "PartnerDistributionSeries",
    "WaterfallResult",
    "build_waterfall_result",
    # Constructs
    "create_pari_passu_config",
    "create_standard_waterfall",
]
