# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for waterfall configuration builders.
"""

from __future__ import annotations

import pytest

from cascada.core.primitives import ClawbackTriggerEnum
from cascada.deal import (
    PreferredReturnTier,
    PromoteTier,
    ReturnOfCapitalTier,
    apply_equity_waterfall,
    create_pari_passu_config,
    create_standard_waterfall,
)


class TestCreatePariPassuConfig:
    def test_builds_single_tier_config(self):
        config = create_pari_passu_config({"a": 60.0, "b": 40.0}, names={"a": "Alpha"})

        assert not config.is_multi_tier
        assert [c.name for c in config.equity_classes] == ["Alpha", "b"]
        result = apply_equity_waterfall([-100.0, 200.0], config)
        assert result.get_partner("b").cash_flows == pytest.approx([-40.0, 80.0])

    def test_requires_shares(self):
        with pytest.raises(ValueError, match="at least one partner"):
            create_pari_passu_config({})


class TestCreateStandardWaterfall:
    def test_default_structure(self):
        config = create_standard_waterfall()

        assert [type(t) for t in config.tiers] == [
            ReturnOfCapitalTier,
            PreferredReturnTier,
            PromoteTier,
        ]
        pref = config.tiers[1]
        assert pref.hurdle_irr == 0.08
        assert not pref.is_compound
        assert config.tiers[2].distribution_splits == {"lp": 0.8, "gp": 0.2}
        assert config.clawback_tiers == []

    def test_compound_catch_up_and_clawback(self):
        config = create_standard_waterfall(
            compound_pref=True,
            promote_gp_share=0.3,
            catch_up=True,
            clawback=True,
            clawback_trigger=ClawbackTriggerEnum.ANNUAL,
        )

        assert [t.id for t in config.compound_tiers] == ["pref"]
        promote = config.tiers[2]
        assert promote.has_catch_up
        assert promote.catch_up_target_split == {"lp": 0.7, "gp": 0.3}
        assert promote.clawback_trigger == ClawbackTriggerEnum.ANNUAL

    def test_custom_partner_ids(self, assert_conserved):
        config = create_standard_waterfall(lp_id="investor", gp_id="sponsor")
        flows = [-1000.0, 300.0, 1200.0]
        result = apply_equity_waterfall(flows, config)

        assert result.partner_ids == ["investor", "sponsor"]
        assert_conserved(result, flows)

    def test_rejects_out_of_range_promote(self):
        with pytest.raises(ValueError, match="promote_gp_share"):
            create_standard_waterfall(promote_gp_share=1.5)
