# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Waterfall error types.

Configuration problems are the only fatal errors the engine raises.
Degenerate inputs and numerical invariant breaches are logged instead.
"""

from __future__ import annotations


class WaterfallConfigurationError(ValueError):
    """
    Raised when a waterfall configuration cannot be evaluated.

    Examples: a normalized contribution or distribution percentage outside
    ``(0, 1]`` in single-tier mode, a multi-tier run without tiers, a compound
    preferred return without ``pref_rate``, or an IRR-hurdle preferred return
    without ``hurdle_irr``.
    """


__all__ = ["WaterfallConfigurationError"]
