# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for Cascada testing.

Builders for the equity classes and waterfall configurations used across
the suite, plus a conservation assertion shared by the engine tests.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

import pytest

from cascada.deal import (
    EquityClass,
    PreferredReturnTier,
    PromoteTier,
    ReturnOfCapitalTier,
    WaterfallConfig,
    WaterfallResult,
)


# Equity class utilities
def lp_gp_classes(lp_pct: float = 0.9, gp_pct: float = 0.1) -> list:
    """Create an LP/GP pair of equity classes (LP first)."""
    return [
        EquityClass(id="lp", name="Limited Partner", contribution_pct=lp_pct),
        EquityClass(id="gp", name="General Partner", contribution_pct=gp_pct),
    ]


def compound_pref_config(
    pref_rate: float = 0.08,
    lp_pct: float = 0.9,
    gp_pct: float = 0.1,
    promote_split: Optional[Dict[str, float]] = None,
    catch_up_split: Optional[Dict[str, float]] = None,
    enable_clawback: bool = False,
    clawback_trigger: str = "final_period",
) -> WaterfallConfig:
    """ROC → compound pref (LP only) → promote, the shape used by most engine tests."""
    promote_split = promote_split or {"lp": 0.8, "gp": 0.2}
    return WaterfallConfig(
        equity_classes=lp_gp_classes(lp_pct, gp_pct),
        tiers=[
            ReturnOfCapitalTier(id="roc"),
            PreferredReturnTier(
                id="pref",
                compound_pref=True,
                pref_rate=pref_rate,
                distribution_splits={"lp": 1.0, "gp": 0.0},
            ),
            PromoteTier(
                id="promote",
                distribution_splits=promote_split,
                enable_catch_up=catch_up_split is not None,
                catch_up_target_split=catch_up_split,
                enable_clawback=enable_clawback,
                clawback_trigger=clawback_trigger,
            ),
        ],
    )


def assert_conserves_cash(
    result: WaterfallResult, owner_cash_flows: Sequence[float], tolerance: float = 1e-9
) -> None:
    """Every period's partner flows must sum to the owner cash flow."""
    for t, cf in enumerate(owner_cash_flows):
        total = sum(p.cash_flows[t] for p in result.partners)
        assert total == pytest.approx(cf, rel=1e-12, abs=tolerance), f"period {t}"


@pytest.fixture
def lp_gp_90_10() -> list:
    return lp_gp_classes(0.9, 0.1)


@pytest.fixture
def make_classes():
    """Factory fixture for LP/GP equity classes."""
    return lp_gp_classes


@pytest.fixture
def make_compound_config():
    """Factory fixture for ROC → compound pref → promote configurations."""
    return compound_pref_config


@pytest.fixture
def assert_conserved():
    """Assertion helper: partner flows sum to owner flows in every period."""
    return assert_conserves_cash


@pytest.fixture
def roc_promote_70_30() -> WaterfallConfig:
    """ROC followed by a 70/30 promote over 70/30 contributors."""
    return WaterfallConfig(
        equity_classes=lp_gp_classes(0.7, 0.3),
        tiers=[
            ReturnOfCapitalTier(id="roc"),
            PromoteTier(id="promote", distribution_splits={"lp": 0.7, "gp": 0.3}),
        ],
    )


@pytest.fixture
def irr_hurdle_config() -> WaterfallConfig:
    """ROC → 10% IRR hurdle (LP only) → 70/30 promote."""
    return WaterfallConfig(
        equity_classes=lp_gp_classes(0.9, 0.1),
        tiers=[
            ReturnOfCapitalTier(id="roc"),
            PreferredReturnTier(
                id="pref", hurdle_irr=0.10, distribution_splits={"lp": 1.0, "gp": 0.0}
            ),
            PromoteTier(id="promote", distribution_splits={"lp": 0.7, "gp": 0.3}),
        ],
    )


@pytest.fixture
def no_engine_warnings(caplog):
    """Fail the test if a conservation or clawback-netting warning is logged."""
    caplog.set_level(logging.WARNING, logger="cascada")
    yield
    flagged = [
        record.getMessage()
        for record in caplog.records
        if record.levelno >= logging.WARNING
        and record.name in ("cascada.deal.results", "cascada.deal.clawback")
    ]
    assert not flagged, flagged
