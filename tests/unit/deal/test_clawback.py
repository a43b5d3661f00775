# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for hypothetical-liquidation clawback.

The shortfall scenario: the GP earns promote in period 1, then a capital
call in period 2 leaves the LP's 20% compound preference account open.
Liquidating at period 3 would leave the LP owed 43,200, so the GP's 12,000
of net gains is clawed back.

The hurdle-met scenarios pay the LP well above its preferred return; the
GP keeps every dollar of promote.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from cascada.core.primitives import ClawbackTriggerEnum
from cascada.deal import (
    ClawbackCorrector,
    DistributionCalculator,
    PreferredReturnTier,
    PromoteTier,
    ReturnOfCapitalTier,
    WaterfallConfig,
    create_standard_waterfall,
    truncated_cash_flows,
)

FLOWS = [-100_000.0, 150_000.0, -40_000.0, 0.0]
HURDLE_MET_FLOWS = [-1000.0, 1500.0, 500.0]
TRIGGERS = [ClawbackTriggerEnum.FINAL_PERIOD, ClawbackTriggerEnum.ANNUAL]


@pytest.fixture
def clawback_config(make_compound_config):
    def _build(trigger=ClawbackTriggerEnum.FINAL_PERIOD):
        return make_compound_config(
            pref_rate=0.20,
            promote_split={"lp": 0.5, "gp": 0.5},
            enable_clawback=True,
            clawback_trigger=trigger,
        )

    return _build


def _irr_hurdle_config(classes, enable_clawback, trigger=ClawbackTriggerEnum.FINAL_PERIOD):
    return WaterfallConfig(
        equity_classes=classes,
        tiers=[
            ReturnOfCapitalTier(id="roc"),
            PreferredReturnTier(
                id="pref", hurdle_irr=0.10, distribution_splits={"lp": 1.0, "gp": 0.0}
            ),
            PromoteTier(
                id="promote",
                distribution_splits={"lp": 0.7, "gp": 0.3},
                enable_clawback=enable_clawback,
                clawback_trigger=trigger,
            ),
        ],
    )


class TestTruncatedCashFlows:
    def test_keeps_periods_through_evaluation(self):
        assert truncated_cash_flows(FLOWS, 2) == [-100_000.0, 150_000.0, -40_000.0]

    def test_final_period_keeps_everything(self):
        assert truncated_cash_flows(FLOWS, 3) == FLOWS

    def test_first_period(self):
        assert truncated_cash_flows(FLOWS, 0) == [-100_000.0]


@pytest.mark.usefixtures("no_engine_warnings")
class TestFinalPeriodClawback:
    def test_gp_excess_is_returned_to_lp(self, clawback_config, assert_conserved):
        result = DistributionCalculator(clawback_config()).calculate_distributions(FLOWS)

        gp = result.get_partner("gp")
        lp = result.get_partner("lp")
        assert gp.net_cash_flow == pytest.approx(0.0, abs=1e-6)
        assert lp.net_cash_flow == pytest.approx(10_000.0)
        assert gp.cash_flows[3] == pytest.approx(-12_000.0)
        assert_conserved(result, FLOWS)

    def test_adjustments_are_recorded_on_the_row(self, clawback_config):
        result = DistributionCalculator(clawback_config()).calculate_distributions(FLOWS)

        row = result.annual_rows[3]
        assert row.clawback_adjustments == pytest.approx({"lp": 12_000.0, "gp": -12_000.0})
        assert all(r.clawback_adjustments is None for r in result.annual_rows[:3])

    def test_without_clawback_gp_keeps_promote(self, make_compound_config):
        config = make_compound_config(pref_rate=0.20, promote_split={"lp": 0.5, "gp": 0.5})
        result = DistributionCalculator(config).calculate_distributions(FLOWS)

        assert result.get_partner("gp").net_cash_flow == pytest.approx(12_000.0)
        assert all(r.clawback_adjustments is None for r in result.annual_rows)


@pytest.mark.usefixtures("no_engine_warnings")
class TestAnnualClawback:
    def test_clawback_happens_at_first_shortfall(self, clawback_config, assert_conserved):
        result = DistributionCalculator(
            clawback_config(ClawbackTriggerEnum.ANNUAL)
        ).calculate_distributions(FLOWS)

        adjusted = [r.year_index for r in result.annual_rows if r.clawback_adjustments]
        assert adjusted == [2]
        assert result.get_partner("gp").net_cash_flow == pytest.approx(0.0, abs=1e-6)
        assert_conserved(result, FLOWS)

    def test_evaluation_periods(self):
        annual = PromoteTier(id="p", clawback_trigger=ClawbackTriggerEnum.ANNUAL)
        final = PromoteTier(id="p")
        assert ClawbackCorrector.evaluation_periods(annual, 4) == [1, 2, 3]
        assert ClawbackCorrector.evaluation_periods(final, 4) == [3]
        assert ClawbackCorrector.evaluation_periods(final, 1) == []


@pytest.mark.usefixtures("no_engine_warnings")
class TestHurdleMetKeepsPromote:
    """Clawback never takes promote from a deal whose LP beat its preferred return."""

    @pytest.mark.parametrize("trigger", TRIGGERS)
    def test_irr_hurdle(self, lp_gp_90_10, trigger):
        with_clawback = DistributionCalculator(
            _irr_hurdle_config(lp_gp_90_10, True, trigger)
        ).calculate_distributions(HURDLE_MET_FLOWS)
        without = DistributionCalculator(
            _irr_hurdle_config(lp_gp_90_10, False)
        ).calculate_distributions(HURDLE_MET_FLOWS)

        assert with_clawback.get_partner("gp").cash_flows == pytest.approx([-100.0, 100.0, 150.0])
        assert with_clawback.get_partner("gp").cash_flows == pytest.approx(
            without.get_partner("gp").cash_flows
        )
        assert all(r.clawback_adjustments is None for r in with_clawback.annual_rows)

    @pytest.mark.parametrize("trigger", TRIGGERS)
    def test_compound_preference(self, make_compound_config, trigger):
        with_clawback = DistributionCalculator(
            make_compound_config(pref_rate=0.08, enable_clawback=True, clawback_trigger=trigger)
        ).calculate_distributions(HURDLE_MET_FLOWS)
        without = DistributionCalculator(
            make_compound_config(pref_rate=0.08)
        ).calculate_distributions(HURDLE_MET_FLOWS)

        assert with_clawback.get_partner("gp").cash_flows == pytest.approx([-100.0, 185.6, 100.0])
        assert with_clawback.get_partner("gp").cash_flows == pytest.approx(
            without.get_partner("gp").cash_flows
        )
        assert all(r.clawback_adjustments is None for r in with_clawback.annual_rows)

    def test_standard_construct(self, assert_conserved):
        config = create_standard_waterfall(pref_rate=0.10, promote_gp_share=0.3, clawback=True)
        result = DistributionCalculator(config).calculate_distributions(HURDLE_MET_FLOWS)

        assert result.get_partner("gp").cash_flows[2] == pytest.approx(150.0)
        assert_conserved(result, HURDLE_MET_FLOWS)


class TestCorrector:
    def test_gp_is_smallest_contributor(self, clawback_config):
        corrector = ClawbackCorrector(DistributionCalculator(clawback_config()))
        assert corrector.gp_index == 1

    def test_gp_ties_resolve_to_last_class(self, make_classes):
        config = WaterfallConfig(
            equity_classes=make_classes(0.5, 0.5),
            tiers=[
                ReturnOfCapitalTier(id="roc"),
                PromoteTier(id="promote", distribution_splits={"lp": 0.5, "gp": 0.5}),
            ],
        )
        assert ClawbackCorrector(DistributionCalculator(config)).gp_index == 1

    def test_liquidation_shortfall_is_open_preference_balance(self, clawback_config):
        calculator = DistributionCalculator(clawback_config())
        hypothetical, ledger = calculator.run_tier_chain(FLOWS)

        shortfall = ClawbackCorrector(calculator).liquidation_shortfall(hypothetical, ledger)

        assert shortfall == pytest.approx(36_000.0 * 1.20)

    def test_hurdle_shortfall_is_gap_to_hurdle(self, lp_gp_90_10):
        calculator = DistributionCalculator(_irr_hurdle_config(lp_gp_90_10, True))
        hypothetical, ledger = calculator.run_tier_chain([-1000.0, 500.0])

        shortfall = ClawbackCorrector(calculator).liquidation_shortfall(hypothetical, ledger)

        # LP put in 900 and got 450 back; it needs 990 at 10% a period
        assert shortfall == pytest.approx(540.0)

    def test_required_distributions(self, clawback_config):
        corrector = ClawbackCorrector(DistributionCalculator(clawback_config()))
        required = corrector.required_distributions(FLOWS, 3)
        np.testing.assert_allclose(required, [10_000.0, 0.0], atol=1e-6)

    def test_nothing_required_back_before_the_shortfall(self, clawback_config):
        corrector = ClawbackCorrector(DistributionCalculator(clawback_config()))
        required = corrector.required_distributions(FLOWS, 1)
        np.testing.assert_allclose(required, [34_000.0, 16_000.0], atol=1e-6)

    def test_lookback_is_not_applied(self, make_classes, caplog):
        config = WaterfallConfig(
            equity_classes=make_classes(),
            tiers=[
                ReturnOfCapitalTier(id="roc"),
                PromoteTier(
                    id="promote",
                    distribution_splits={"lp": 0.5, "gp": 0.5},
                    enable_clawback=True,
                    clawback_method="lookback",
                ),
            ],
        )
        with caplog.at_level(logging.WARNING, logger="cascada.deal.clawback"):
            result = DistributionCalculator(config).calculate_distributions(FLOWS)

        assert "not supported" in caplog.text
        assert all(r.clawback_adjustments is None for r in result.annual_rows)
