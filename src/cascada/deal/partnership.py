# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Waterfall Tier and Configuration Models

This module defines the distribution policy of an equity partnership: the
ordered list of waterfall tiers and the equity classes they pay.

Tier kinds (a closed union discriminated on ``type``):
- Return of Capital: repays unreturned capital pro-rata to balances
- Preferred Return: IRR hurdle gate or compound-interest preference account
- Promote: residual split, optionally preceded by a GP catch-up and followed
  by a hypothetical-liquidation clawback

Example:
    ```python
    config = WaterfallConfig(
        equity_classes=[
            EquityClass(id="lp", name="Limited Partner", contribution_pct=0.9),
            EquityClass(id="gp", name="General Partner", contribution_pct=0.1),
        ],
        tiers=[
            ReturnOfCapitalTier(id="roc"),
            PreferredReturnTier(
                id="pref", compound_pref=True, pref_rate=0.08,
                distribution_splits={"lp": 1.0, "gp": 0.0},
            ),
            PromoteTier(id="promote", distribution_splits={"lp": 0.7, "gp": 0.3}),
        ],
    )
    ```
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import Field, field_validator, model_validator
from typing_extensions import Annotated

from ..core.primitives import (
    ClawbackMethodEnum,
    ClawbackTriggerEnum,
    Model,
    PositiveFloat,
    TierTypeEnum,
    ValidationMixin,
    validate_split_keys,
)
from .entities import OWNER_CLASS, EquityClass

# =============================================================================
# WATERFALL TIERS
# =============================================================================


class BaseWaterfallTier(Model):
    """
    Abstract base class for waterfall tiers.

    All tier kinds carry an identifier and a partner-keyed split. Splits are
    raw weights, normalized across the configured equity classes at
    allocation time; partners missing from the mapping weigh zero.
    """

    id: str = Field(..., min_length=1, description="Tier identifier, e.g. 'pref'")
    distribution_splits: Dict[str, PositiveFloat] = Field(
        default_factory=dict, description="Partner id -> weight within this tier"
    )

    @field_validator("distribution_splits")
    @classmethod
    def validate_splits(cls, v: Dict[str, float]) -> Dict[str, float]:
        return ValidationMixin.validate_split_mapping(v, "distribution_splits")

    @property
    def tier_type(self) -> TierTypeEnum:
        return TierTypeEnum(self.type)  # type: ignore[attr-defined]


class ReturnOfCapitalTier(BaseWaterfallTier):
    """
    Return of Capital tier.

    Pays remaining cash pro-rata to each partner's unreturned capital, never
    more than a partner is owed. ``distribution_splits`` is not used.
    """

    type: Literal["return_of_capital"] = "return_of_capital"


class PreferredReturnTier(BaseWaterfallTier, ValidationMixin):
    """
    Preferred Return tier.

    Exactly one mode is active:

    - **Compound accrual** (``compound_pref=True``): each partner's preference
      account compounds at ``pref_rate`` per period and is paid down from
      distributions. Requires ``pref_rate``.
    - **IRR hurdle** (default): while the first equity class's trailing IRR is
      unknown or below ``hurdle_irr``, the tier takes all remaining cash of
      the period and splits it by ``distribution_splits``. Requires
      ``hurdle_irr``.

    Note:
        The IRR hurdle is evaluated once per period and is all-or-nothing; it
        does not solve for the exact amount that would just reach the hurdle
        within a period.
    """

    type: Literal["preferred_return"] = "preferred_return"
    hurdle_irr: Optional[float] = Field(
        None, gt=-1.0, description="IRR hurdle for the tracking partner (e.g., 0.08)"
    )
    compound_pref: bool = Field(
        default=False, description="Use a compounding preference account instead of an IRR test"
    )
    pref_rate: Optional[PositiveFloat] = Field(
        None, description="Periodic compounding rate of the preference account (e.g., 0.08)"
    )

    @model_validator(mode="after")
    def validate_mode_requirements(self) -> "PreferredReturnTier":
        """Each accrual mode requires its own rate."""
        self.validate_conditional_requirement(
            self,
            "compound_pref",
            True,
            "pref_rate",
            "prefRate must be defined for compound preference "
            f"(tier {self.id!r} has compound_pref=True and no pref_rate)",
        )
        self.validate_conditional_requirement(
            self,
            "compound_pref",
            False,
            "hurdle_irr",
            f"Preferred return tier {self.id!r} must have hurdle_irr defined",
        )
        return self

    @property
    def is_compound(self) -> bool:
        return self.compound_pref


class PromoteTier(BaseWaterfallTier):
    """
    Promote tier with optional catch-up and clawback.

    Without catch-up, remaining cash is split by ``distribution_splits``.
    With catch-up, cash is first allocated toward ``catch_up_target_split``
    (hard-capped so no partner overshoots its target share of cumulative
    distributions) and whatever is left falls through to
    ``distribution_splits``.

    With clawback enabled, the GP's cumulative distributions are tested
    against a hypothetical liquidation at the trigger period(s) and any
    excess is transferred back to the other partners.
    """

    type: Literal["promote"] = "promote"
    enable_catch_up: bool = Field(default=False)
    catch_up_target_split: Optional[Dict[str, PositiveFloat]] = Field(
        None, description="Target cumulative distribution split, e.g. {'lp': 0.7, 'gp': 0.3}"
    )
    enable_clawback: bool = Field(default=False)
    clawback_method: ClawbackMethodEnum = Field(
        default=ClawbackMethodEnum.HYPOTHETICAL_LIQUIDATION
    )
    clawback_trigger: ClawbackTriggerEnum = Field(
        default=ClawbackTriggerEnum.FINAL_PERIOD
    )

    @field_validator("catch_up_target_split")
    @classmethod
    def validate_catch_up_split(
        cls, v: Optional[Dict[str, float]]
    ) -> Optional[Dict[str, float]]:
        if v is None:
            return v
        return ValidationMixin.validate_split_mapping(v, "catch_up_target_split")

    @property
    def has_catch_up(self) -> bool:
        """Catch-up runs only when enabled and a non-empty target split is given."""
        return self.enable_catch_up and bool(self.catch_up_target_split)


# Closed union of tier kinds, dispatched on the ``type`` tag
WaterfallTier = Annotated[
    Union[ReturnOfCapitalTier, PreferredReturnTier, PromoteTier],
    Field(discriminator="type"),
]


# =============================================================================
# WATERFALL CONFIGURATION
# =============================================================================


class WaterfallConfig(Model):
    """
    Complete distribution policy for one owner cash-flow series.

    An absent or empty ``tiers`` list selects single-tier (pari passu style)
    distribution by the classes' contribution/distribution percentages.
    """

    equity_classes: List[EquityClass] = Field(
        default_factory=list, description="Partners in class order"
    )
    tiers: Optional[List[WaterfallTier]] = Field(
        default=None, description="Tiers in execution order"
    )

    @field_validator("equity_classes")
    @classmethod
    def validate_unique_classes(cls, v: List[EquityClass]) -> List[EquityClass]:
        ids = [c.id for c in v]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Equity class ids must be unique, got {ids}")
        return v

    @field_validator("tiers")
    @classmethod
    def validate_unique_tiers(
        cls, v: Optional[List[BaseWaterfallTier]]
    ) -> Optional[List[BaseWaterfallTier]]:
        if v is None:
            return v
        ids = [t.id for t in v]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Waterfall tier ids must be unique, got {ids}")
        return v

    @model_validator(mode="after")
    def validate_split_references(self) -> "WaterfallConfig":
        """Tier splits may only reference configured equity classes."""
        if not self.equity_classes or not self.tiers:
            return self
        partner_ids = self.partner_ids
        for tier in self.tiers:
            validate_split_keys(
                tier.distribution_splits, partner_ids, f"Tier {tier.id!r} distribution_splits"
            )
            if isinstance(tier, PromoteTier) and tier.catch_up_target_split:
                validate_split_keys(
                    tier.catch_up_target_split,
                    partner_ids,
                    f"Tier {tier.id!r} catch_up_target_split",
                )
        return self

    @property
    def is_multi_tier(self) -> bool:
        return bool(self.tiers)

    @property
    def resolved_equity_classes(self) -> List[EquityClass]:
        """Configured classes, or the synthetic 100% Owner class when none are given."""
        return list(self.equity_classes) if self.equity_classes else [OWNER_CLASS]

    @property
    def partner_ids(self) -> List[str]:
        return [c.id for c in self.resolved_equity_classes]

    @property
    def compound_tiers(self) -> List[PreferredReturnTier]:
        return [
            t for t in (self.tiers or [])
            if isinstance(t, PreferredReturnTier) and t.is_compound
        ]

    @property
    def clawback_tiers(self) -> List[PromoteTier]:
        return [
            t for t in (self.tiers or [])
            if isinstance(t, PromoteTier) and t.enable_clawback
        ]

    def get_class(self, partner_id: str) -> Optional[EquityClass]:
        """Get equity class by id."""
        for equity_class in self.resolved_equity_classes:
            if equity_class.id == partner_id:
                return equity_class
        return None

    def __str__(self) -> str:
        mode = f"{len(self.tiers)} tier(s)" if self.tiers else "single-tier"
        return f"Waterfall: {len(self.resolved_equity_classes)} class(es), {mode}"


__all__ = [
    "BaseWaterfallTier",
    "PreferredReturnTier",
    "PromoteTier",
    "ReturnOfCapitalTier",
    "WaterfallConfig",
    "WaterfallTier",
]
