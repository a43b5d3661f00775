# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cascada Core Framework

Foundational building blocks for the equity waterfall engine: primitives
(models, types, enums, settings, validation) and the financial calculation
collaborators (NPV, IRR, equity multiple).
"""

from . import primitives
from .calculations import FinancialCalculations, equity_multiple, irr, npv

__all__ = [
    "primitives",
    "FinancialCalculations",
    "equity_multiple",
    "irr",
    "npv",
]
