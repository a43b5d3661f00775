# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Equity class model.

An equity class is one partner (or one class of partners sharing the same
economics) in the cap table of the investment vehicle.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from ..core.primitives.model import Model
from ..core.primitives.types import PositiveFloat


class EquityClass(Model):
    """
    Equity partner with a capital-call share and a base distribution share.

    Percentages are raw weights: they are normalized across all classes
    before use, so ``70``/``30`` and ``0.7``/``0.3`` are equivalent.
    """

    id: str = Field(..., min_length=1, description="Partner identifier, e.g. 'lp'")
    name: str = Field(..., description="Display name, e.g. 'Limited Partner'")
    contribution_pct: PositiveFloat = Field(
        ..., description="Share of capital calls (negative owner cash flows)"
    )
    distribution_pct: Optional[PositiveFloat] = Field(
        None,
        description="Base share of distributions in single-tier mode. "
        "Defaults to contribution_pct when omitted.",
    )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Reject ids that are blank once whitespace is stripped."""
        if not v.strip():
            raise ValueError("Equity class id must not be blank")
        return v

    @property
    def effective_distribution_pct(self) -> float:
        """Distribution weight, falling back to the contribution weight."""
        if self.distribution_pct is None:
            return self.contribution_pct
        return self.distribution_pct

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


OWNER_CLASS = EquityClass(
    id="owner", name="Owner", contribution_pct=1.0, distribution_pct=1.0
)
"""Synthetic class substituted when a configuration defines no equity classes."""


__all__ = [
    "EquityClass",
    "OWNER_CLASS",
]
