#!/usr/bin/env python3
# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
LP/GP Promote With Clawback Example

This script runs the same owner cash-flow series through three partnership
structures and prints each partner's cash flows and returns.

## Deal Overview

A $10M equity raise (90% LP / 10% GP) with an early partial sale in year 2,
a follow-on capital call in year 3 and a final sale in year 6.

### Structures Compared

1. **Pari passu**: every dollar split 90/10
2. **Standard waterfall**: Return of Capital → 8% compound preference (LP)
   → 80/20 promote with GP catch-up
3. **Standard waterfall with clawback**: as above, with the GP's promote
   tested annually against a hypothetical liquidation

The early sale pays promote before the follow-on capital call. With
clawback enabled, promote the GP would not have earned on a liquidation
basis is returned to the LP in the period it is detected.
"""

from __future__ import annotations

import logging

from cascada.core.primitives import ClawbackTriggerEnum
from cascada.deal import (
    WaterfallResult,
    apply_equity_waterfall,
    create_pari_passu_config,
    create_standard_waterfall,
)

OWNER_CASH_FLOWS = [
    -10_000_000.0,
    450_000.0,
    13_500_000.0,
    -3_000_000.0,
    500_000.0,
    550_000.0,
    2_800_000.0,
]


def print_result(title: str, result: WaterfallResult) -> None:
    print(f"\n{title}")
    print("=" * len(title))
    print(result.to_dataframe().round(0).to_string())
    print()
    print(result.partner_summary_dataframe().round(4).to_string())

    adjusted = [row for row in result.annual_rows if row.clawback_adjustments]
    for row in adjusted:
        moves = ", ".join(f"{pid}: {amount:,.0f}" for pid, amount in row.clawback_adjustments.items())
        print(f"Clawback in year {row.year_index}: {moves}")


def main() -> dict:
    structures = {
        "Pari passu 90/10": create_pari_passu_config(
            {"lp": 0.9, "gp": 0.1},
            names={"lp": "Limited Partner", "gp": "General Partner"},
        ),
        "Standard waterfall": create_standard_waterfall(
            compound_pref=True, pref_rate=0.08, promote_gp_share=0.2, catch_up=True
        ),
        "Standard waterfall with annual clawback": create_standard_waterfall(
            compound_pref=True,
            pref_rate=0.08,
            promote_gp_share=0.2,
            catch_up=True,
            clawback=True,
            clawback_trigger=ClawbackTriggerEnum.ANNUAL,
        ),
    }

    results = {}
    for title, config in structures.items():
        results[title] = apply_equity_waterfall(OWNER_CASH_FLOWS, config)
        print_result(title, results[title])

    return results


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
