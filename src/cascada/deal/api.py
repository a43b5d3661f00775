# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Waterfall API

Public entry points for distributing an owner cash-flow series among equity
partners. `apply_equity_waterfall` raises on configuration errors;
`evaluate_equity_waterfall` returns them in a `WaterfallOutcome` so batch
callers can skip a bad configuration and carry on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from ..core.primitives import WaterfallSettings, validate_cash_flow_sequence
from .distribution_calculator import DistributionCalculator
from .errors import WaterfallConfigurationError
from .partnership import WaterfallConfig
from .results import WaterfallResult

logger = logging.getLogger(__name__)

ConfigLike = Union[WaterfallConfig, Mapping[str, Any]]


def coerce_config(config: ConfigLike) -> WaterfallConfig:
    """
    Accept a WaterfallConfig or a plain mapping of its fields.

    Raises:
        WaterfallConfigurationError: If the mapping does not validate
        TypeError: If ``config`` is neither a model nor a mapping
    """
    if isinstance(config, WaterfallConfig):
        return config
    if isinstance(config, Mapping):
        try:
            return WaterfallConfig.model_validate(dict(config))
        except ValidationError as exc:
            raise WaterfallConfigurationError(
                f"Invalid waterfall configuration: {exc}"
            ) from exc
    raise TypeError(
        f"config must be a WaterfallConfig or a mapping, got {type(config).__name__}"
    )


def apply_equity_waterfall(
    owner_cash_flows: Sequence[float],
    config: ConfigLike,
    settings: Optional[WaterfallSettings] = None,
) -> WaterfallResult:
    """
    Distribute owner cash flows among the configured equity classes.

    Args:
        owner_cash_flows: Signed per-period owner cash flows, period 0 first
            (negative = capital call, positive = distribution)
        config: Equity classes and optional tiers. Without classes a single
            100% ``Owner`` class is used; without tiers the split is pro-rata.
        settings: Optional numeric tolerances

    Returns:
        WaterfallResult. With fewer than two periods the result is degenerate
        (no partners, no rows) and a warning is logged; the configuration is
        not evaluated in that case.

    Raises:
        WaterfallConfigurationError: If the configuration cannot be evaluated

    Example:
        ```python
        result = apply_equity_waterfall(
            [-1000.0, 500.0, 600.0, 700.0],
            {
                "equity_classes": [
                    {"id": "lp", "name": "LP", "contribution_pct": 0.9},
                    {"id": "gp", "name": "GP", "contribution_pct": 0.1},
                ]
            },
        )
        result.get_partner("gp").cash_flows  # [-100.0, 50.0, 60.0, 70.0]
        ```
    """
    flows = validate_cash_flow_sequence(owner_cash_flows)

    if len(flows) < 2:
        logger.warning(
            f"Equity waterfall needs at least 2 periods of owner cash flow, got {len(flows)}; "
            "returning an empty result"
        )
        return WaterfallResult(owner_cash_flows=flows)

    waterfall_config = coerce_config(config)

    calculator = DistributionCalculator(
        config=waterfall_config, settings=settings or WaterfallSettings()
    )
    return calculator.calculate_distributions(flows)


@dataclass(frozen=True)
class WaterfallOutcome:
    """Either a result or the configuration error that prevented it."""

    result: Optional[WaterfallResult] = None
    error: Optional[WaterfallConfigurationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> WaterfallResult:
        """Return the result or raise the captured configuration error."""
        if self.error is not None:
            raise self.error
        return self.result


def evaluate_equity_waterfall(
    owner_cash_flows: Sequence[float],
    config: ConfigLike,
    settings: Optional[WaterfallSettings] = None,
) -> WaterfallOutcome:
    """
    Same as `apply_equity_waterfall`, returning configuration errors instead of raising.
    """
    try:
        return WaterfallOutcome(
            result=apply_equity_waterfall(owner_cash_flows, config, settings)
        )
    except WaterfallConfigurationError as exc:
        logger.debug(f"Waterfall configuration rejected: {exc}")
        return WaterfallOutcome(error=exc)


__all__ = [
    "WaterfallOutcome",
    "apply_equity_waterfall",
    "coerce_config",
    "evaluate_equity_waterfall",
]
