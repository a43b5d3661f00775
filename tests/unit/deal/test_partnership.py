# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for equity class, tier and waterfall configuration models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cascada.core.primitives import ClawbackMethodEnum, ClawbackTriggerEnum, TierTypeEnum
from cascada.deal import (
    OWNER_CLASS,
    EquityClass,
    PreferredReturnTier,
    PromoteTier,
    ReturnOfCapitalTier,
    WaterfallConfig,
)


class TestEquityClass:
    """Equity classes carry raw contribution and distribution weights."""

    def test_distribution_defaults_to_contribution(self):
        lp = EquityClass(id="lp", name="LP", contribution_pct=0.7)
        assert lp.effective_distribution_pct == 0.7

    def test_explicit_distribution_pct(self):
        lp = EquityClass(id="lp", name="LP", contribution_pct=0.7, distribution_pct=0.6)
        assert lp.effective_distribution_pct == 0.6

    def test_negative_pct_rejected(self):
        with pytest.raises(ValidationError):
            EquityClass(id="lp", name="LP", contribution_pct=-0.1)

    def test_blank_id_rejected(self):
        with pytest.raises(ValidationError, match="blank"):
            EquityClass(id="  ", name="LP", contribution_pct=1.0)

    def test_str(self):
        assert str(OWNER_CLASS) == "Owner (owner)"


class TestPreferredReturnTier:
    """Exactly one accrual mode is active and each needs its rate."""

    def test_compound_requires_pref_rate(self):
        with pytest.raises(ValidationError, match="prefRate must be defined"):
            PreferredReturnTier(id="pref", compound_pref=True)

    def test_irr_hurdle_requires_hurdle(self):
        with pytest.raises(ValidationError, match="hurdle_irr"):
            PreferredReturnTier(id="pref")

    def test_compound_mode(self):
        tier = PreferredReturnTier(id="pref", compound_pref=True, pref_rate=0.08)
        assert tier.is_compound
        assert tier.tier_type == TierTypeEnum.PREFERRED_RETURN

    def test_hurdle_mode(self):
        tier = PreferredReturnTier(id="pref", hurdle_irr=0.08)
        assert not tier.is_compound


class TestPromoteTier:
    """Promote defaults and catch-up activation."""

    def test_clawback_defaults(self):
        tier = PromoteTier(id="promote", enable_clawback=True)
        assert tier.clawback_method == ClawbackMethodEnum.HYPOTHETICAL_LIQUIDATION
        assert tier.clawback_trigger == ClawbackTriggerEnum.FINAL_PERIOD

    def test_catch_up_needs_target(self):
        assert not PromoteTier(id="p", enable_catch_up=True).has_catch_up
        assert not PromoteTier(id="p", enable_catch_up=True, catch_up_target_split={}).has_catch_up
        assert PromoteTier(
            id="p", enable_catch_up=True, catch_up_target_split={"gp": 0.2, "lp": 0.8}
        ).has_catch_up

    def test_negative_split_rejected(self):
        with pytest.raises(ValidationError):
            PromoteTier(id="p", distribution_splits={"lp": -1.0})


class TestWaterfallConfig:
    """Configuration-level validation and helpers."""

    def test_tiers_parsed_from_mapping_by_type(self):
        config = WaterfallConfig.model_validate({
            "equity_classes": [
                {"id": "lp", "name": "LP", "contribution_pct": 0.9},
                {"id": "gp", "name": "GP", "contribution_pct": 0.1},
            ],
            "tiers": [
                {"id": "roc", "type": "return_of_capital"},
                {"id": "pref", "type": "preferred_return", "hurdle_irr": 0.08},
                {"id": "promote", "type": "promote", "distribution_splits": {"lp": 0.7, "gp": 0.3}},
            ],
        })
        assert [type(t) for t in config.tiers] == [
            ReturnOfCapitalTier,
            PreferredReturnTier,
            PromoteTier,
        ]
        assert config.is_multi_tier

    def test_unknown_tier_type_rejected(self):
        with pytest.raises(ValidationError):
            WaterfallConfig.model_validate({"tiers": [{"id": "x", "type": "bonus"}]})

    def test_duplicate_class_ids_rejected(self, make_classes):
        classes = make_classes()
        with pytest.raises(ValidationError, match="unique"):
            WaterfallConfig(equity_classes=classes + [classes[0]])

    def test_duplicate_tier_ids_rejected(self):
        with pytest.raises(ValidationError, match="unique"):
            WaterfallConfig(tiers=[ReturnOfCapitalTier(id="a"), ReturnOfCapitalTier(id="a")])

    def test_split_referencing_unknown_class_rejected(self, make_classes):
        with pytest.raises(ValidationError, match="unknown equity classes"):
            WaterfallConfig(
                equity_classes=make_classes(),
                tiers=[PromoteTier(id="p", distribution_splits={"sponsor": 1.0})],
            )

    def test_empty_classes_resolve_to_owner(self):
        config = WaterfallConfig()
        assert config.resolved_equity_classes == [OWNER_CLASS]
        assert config.partner_ids == ["owner"]
        assert not config.is_multi_tier

    def test_empty_tier_list_is_single_tier(self, make_classes):
        assert not WaterfallConfig(equity_classes=make_classes(), tiers=[]).is_multi_tier

    def test_tier_helpers(self, make_compound_config):
        config = make_compound_config(enable_clawback=True)
        assert [t.id for t in config.compound_tiers] == ["pref"]
        assert [t.id for t in config.clawback_tiers] == ["promote"]
        assert config.get_class("gp").name == "General Partner"
        assert config.get_class("missing") is None
