# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Waterfall Constructs

Builders for the configurations most deals use, composed from the tier and
equity class primitives. Outputs are ordinary `WaterfallConfig` objects and
can be inspected or copied with changes.

#### `create_pari_passu_config()`
Single-tier structure: every class shares capital calls and distributions
by its own percentage.

#### `create_standard_waterfall()`
Two-class LP/GP structure with Return of Capital, a preferred return (IRR
hurdle or compound accrual) and a promote, optionally with GP catch-up and
clawback.

```python
from cascada.deal.constructs import create_standard_waterfall

config = create_standard_waterfall(
    lp_share=0.9,
    gp_share=0.1,
    pref_rate=0.08,
    compound_pref=True,
    promote_gp_share=0.3,
    catch_up=True,
)
```
"""

from __future__ import annotations

from typing import Dict, Optional

from ..core.primitives import ClawbackTriggerEnum
from .entities import EquityClass
from .partnership import (
    PreferredReturnTier,
    PromoteTier,
    ReturnOfCapitalTier,
    WaterfallConfig,
)


def create_pari_passu_config(
    shares: Dict[str, float],
    names: Optional[Dict[str, str]] = None,
) -> WaterfallConfig:
    """
    Create a single-tier configuration from partner shares.

    Args:
        shares: Partner id -> ownership share (raw weights are fine)
        names: Optional display names by partner id (default: the id)

    Returns:
        WaterfallConfig without tiers

    Raises:
        ValueError: If no shares are given
    """
    if not shares:
        raise ValueError("Must provide at least one partner share")
    names = names or {}
    classes = [
        EquityClass(
            id=partner_id,
            name=names.get(partner_id, partner_id),
            contribution_pct=float(share),
        )
        for partner_id, share in shares.items()
    ]
    return WaterfallConfig(equity_classes=classes)


def create_standard_waterfall(
    lp_share: float = 0.9,
    gp_share: float = 0.1,
    pref_rate: float = 0.08,
    compound_pref: bool = False,
    promote_gp_share: float = 0.2,
    catch_up: bool = False,
    clawback: bool = False,
    clawback_trigger: ClawbackTriggerEnum = ClawbackTriggerEnum.FINAL_PERIOD,
    lp_id: str = "lp",
    gp_id: str = "gp",
) -> WaterfallConfig:
    """
    Create an LP/GP waterfall: Return of Capital → Preferred Return → Promote.

    The preferred return is paid entirely to the LP. With ``catch_up`` the
    promote tier first catches the GP up to ``promote_gp_share`` of
    cumulative distributions.

    Args:
        lp_share: LP share of capital calls
        gp_share: GP share of capital calls
        pref_rate: Hurdle IRR, or compounding rate when ``compound_pref``
        compound_pref: Use a compound preference account instead of an IRR hurdle
        promote_gp_share: GP share of the promote split (e.g. 0.2 for 80/20)
        catch_up: Enable GP catch-up to the promote split
        clawback: Enable hypothetical-liquidation clawback on the promote
        clawback_trigger: When clawback is evaluated
        lp_id: Equity class id of the LP
        gp_id: Equity class id of the GP

    Returns:
        WaterfallConfig with three tiers

    Raises:
        ValueError: If ``promote_gp_share`` is outside [0, 1]
    """
    if not 0.0 <= promote_gp_share <= 1.0:
        raise ValueError(
            f"promote_gp_share must be between 0 and 1, got {promote_gp_share}"
        )

    promote_split = {lp_id: 1.0 - promote_gp_share, gp_id: promote_gp_share}

    if compound_pref:
        pref = PreferredReturnTier(
            id="pref",
            compound_pref=True,
            pref_rate=pref_rate,
            distribution_splits={lp_id: 1.0, gp_id: 0.0},
        )
    else:
        pref = PreferredReturnTier(
            id="pref",
            hurdle_irr=pref_rate,
            distribution_splits={lp_id: 1.0, gp_id: 0.0},
        )

    promote = PromoteTier(
        id="promote",
        distribution_splits=promote_split,
        enable_catch_up=catch_up,
        catch_up_target_split=dict(promote_split) if catch_up else None,
        enable_clawback=clawback,
        clawback_trigger=clawback_trigger,
    )

    return WaterfallConfig(
        equity_classes=[
            EquityClass(id=lp_id, name="Limited Partner", contribution_pct=lp_share),
            EquityClass(id=gp_id, name="General Partner", contribution_pct=gp_share),
        ],
        tiers=[ReturnOfCapitalTier(id="roc"), pref, promote],
    )


__all__ = [
    "create_pari_passu_config",
    "create_standard_waterfall",
]
