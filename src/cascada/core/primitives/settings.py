# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import Field, model_validator

from .model import Model
from .types import PositiveFloat, PositiveInt


class IRRSettings(Model):
    """
    Contract of the IRR collaborator used by the preferred-return hurdle and
    the result builder.

    The root is searched inside ``[lower_bound, upper_bound]`` and only when
    the NPV changes sign across the bracket.
    """

    lower_bound: float = Field(
        default=-0.99, gt=-1.0, description="Lowest periodic rate searched."
    )
    upper_bound: float = Field(
        default=10.0, description="Highest periodic rate searched (1000%)."
    )
    tolerance: PositiveFloat = Field(
        default=1e-6, description="Absolute NPV tolerance for convergence."
    )
    max_iterations: PositiveInt = Field(
        default=100, description="Iteration cap for the root search."
    )

    @model_validator(mode="after")
    def validate_bracket(self) -> "IRRSettings":
        """Ensure the search bracket is not empty."""
        if self.upper_bound <= self.lower_bound:
            raise ValueError(
                f"IRR upper_bound ({self.upper_bound}) must exceed "
                f"lower_bound ({self.lower_bound})"
            )
        return self


class WaterfallSettings(Model):
    """
    Numeric behaviour of the waterfall engine.

    Defaults reproduce the documented engine behaviour; callers only override
    them for diagnostics (e.g. a stricter conservation tolerance in tests).

    Usage Examples:
        # Default engine behaviour
        settings = WaterfallSettings()

        # Looser diagnostics for very large currency amounts
        settings = WaterfallSettings(conservation_tolerance=1.0)
    """

    conservation_tolerance: PositiveFloat = Field(
        default=0.01,
        description=(
            "Currency-unit tolerance for the per-period conservation check and "
            "for clawback adjustments netting to zero. Breaches are logged, "
            "never raised."
        ),
    )
    precision_tolerance: PositiveFloat = Field(
        default=1e-9,
        description="Floating tolerance for catch-up ratio comparisons.",
    )
    zero_sum_tolerance: PositiveFloat = Field(
        default=1e-10,
        description="Weight vectors whose absolute sum is below this are split equally.",
    )
    irr: IRRSettings = Field(default_factory=IRRSettings)


__all__ = [
    "IRRSettings",
    "WaterfallSettings",
]
