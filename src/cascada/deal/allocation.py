# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Percentage normalization and remainder-exact allocation.

Every split in the waterfall goes through these helpers so that partner
shares always sum back to the amount being split.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

import numpy as np


def normalize_percentages(
    weights: Sequence[float], tolerance: float = 1e-10
) -> List[float]:
    """
    Scale raw weights so they sum to 1.0.

    Args:
        weights: Raw non-negative weights (e.g. ``[70, 30]`` or ``[0.7, 0.3]``)
        tolerance: Sums with absolute value below this are treated as zero

    Returns:
        Normalized weights in input order. When the weights sum to (near)
        zero every entry receives ``1/n``. An empty input returns an empty
        list.

    Example:
        ```python
        normalize_percentages([70, 30])  # [0.7, 0.3]
        normalize_percentages([0, 0])    # [0.5, 0.5]
        ```
    """
    values = np.asarray(weights, dtype=float)
    if values.size == 0:
        return []
    total = values.sum()
    if abs(total) < tolerance:
        return [1.0 / values.size] * values.size
    return (values / total).tolist()


def resolve_splits(
    partner_ids: Sequence[str],
    splits: Optional[Mapping[str, float]],
    tolerance: float = 1e-10,
) -> List[float]:
    """
    Turn a partner-keyed split mapping into normalized weights in class order.

    Partners missing from the mapping weigh zero; an empty or all-zero
    mapping therefore splits equally.
    """
    splits = splits or {}
    return normalize_percentages(
        [float(splits.get(pid, 0.0)) for pid in partner_ids], tolerance=tolerance
    )


def allocate_with_remainder(amount: float, weights: Sequence[float]) -> np.ndarray:
    """
    Split ``amount`` by ``weights`` with the last partner taking the remainder.

    Every partner except the last receives ``amount * weight``; the last
    receives ``amount`` minus the running sum, so the parts add back to
    ``amount`` exactly.

    Args:
        amount: Signed amount to split
        weights: Normalized weights in class order

    Returns:
        Array of per-partner amounts
    """
    n = len(weights)
    shares = np.zeros(n)
    if n == 0:
        return shares
    running = 0.0
    for i in range(n - 1):
        shares[i] = amount * weights[i]
        running += shares[i]
    shares[n - 1] = amount - running
    return shares


__all__ = [
    "allocate_with_remainder",
    "normalize_percentages",
    "resolve_splits",
]
