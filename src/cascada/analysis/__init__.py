# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cascada Analysis

Batch evaluation of many independent waterfall scenarios, for sensitivity
grids and Monte Carlo runs.
"""

from .batch import BatchItemResult, BatchScenario, run_waterfall_batch

__all__ = [
    "BatchItemResult",
    "BatchScenario",
    "run_waterfall_batch",
]
