# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reusable validation utilities for waterfall configuration and inputs.

This module provides standardized validators for:
- Conditional requirements (if X then Y) on model instances
- Partner-keyed split mappings (unknown partner ids, negative weights)
- Owner cash-flow sequences (lists, numpy arrays, pandas Series)
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd


class ValidationMixin:
    """
    Mixin class providing reusable validation methods for Pydantic models.

    Inherited alongside ``Model`` to add common validation patterns without
    code duplication. Methods operate on validated model instances
    (``mode="after"`` validators).
    """

    @classmethod
    def validate_conditional_requirement(
        cls,
        data: Any,
        condition_field: str,
        condition_values: Union[Any, List[Any]],
        required_field: str,
        error_message: Optional[str] = None,
    ) -> Any:
        """
        Validate that a field is required when a condition is met.

        Args:
            data: Model instance
            condition_field: Field name to check condition on
            condition_values: Value(s) that trigger the requirement
            required_field: Field that becomes required
            error_message: Custom error message

        Returns:
            The validated model instance

        Raises:
            ValueError: If required field is missing when condition is met
        """
        condition_value = getattr(data, condition_field, None)
        required_value = getattr(data, required_field, None)

        if not isinstance(condition_values, list):
            condition_values = [condition_values]

        if condition_value in condition_values and required_value is None:
            msg = (
                error_message
                or f"{required_field} is required when {condition_field} is {condition_value}"
            )
            raise ValueError(msg)

        return data

    @classmethod
    def validate_split_mapping(
        cls, splits: Mapping[str, float], field_name: str
    ) -> Mapping[str, float]:
        """
        Validate a partner-id keyed weight mapping.

        Weights are raw (they are normalized at allocation time) but must be
        finite and non-negative.

        Raises:
            ValueError: If any weight is negative or not finite
        """
        for partner_id, weight in splits.items():
            if not math.isfinite(weight):
                raise ValueError(
                    f"{field_name}[{partner_id!r}] must be finite, got {weight}"
                )
            if weight < 0:
                raise ValueError(
                    f"{field_name}[{partner_id!r}] must be non-negative, got {weight}"
                )
        return splits


def validate_split_keys(
    splits: Mapping[str, float],
    partner_ids: Iterable[str],
    owner: str,
) -> None:
    """
    Ensure a split mapping only references known partner ids.

    Args:
        splits: Partner id to weight mapping
        partner_ids: Ids of the configured equity classes
        owner: Human-readable owner of the mapping for error messages

    Raises:
        ValueError: If the mapping references an unknown partner id
    """
    known = set(partner_ids)
    unknown = sorted(set(splits) - known)
    if unknown:
        raise ValueError(
            f"{owner} references unknown equity classes {unknown}; "
            f"known classes are {sorted(known)}"
        )


def validate_cash_flow_sequence(
    cash_flows: Union[Sequence[float], np.ndarray, pd.Series],
    field_name: str = "owner_cash_flows",
) -> List[float]:
    """
    Coerce an owner cash-flow sequence to a list of finite floats.

    Accepts plain sequences, numpy arrays and pandas Series (the index of a
    Series is ignored; position defines the period).

    Args:
        cash_flows: Signed per-period cash flows
        field_name: Name used in error messages

    Returns:
        List of floats in period order

    Raises:
        TypeError: If the input is not a one-dimensional numeric sequence
        ValueError: If any value is NaN or infinite

    Example:
        ```python
        validate_cash_flow_sequence(pd.Series([-100.0, 60.0, 60.0]))
        # [-100.0, 60.0, 60.0]
        ```
    """
    if isinstance(cash_flows, pd.Series):
        values = cash_flows.to_numpy()
    elif isinstance(cash_flows, (str, bytes)) or isinstance(cash_flows, Mapping):
        raise TypeError(
            f"{field_name} must be a sequence of numbers, got {type(cash_flows).__name__}"
        )
    else:
        values = np.asarray(cash_flows)

    if values.ndim != 1:
        raise TypeError(f"{field_name} must be one-dimensional, got {values.ndim} dimensions")
    if values.dtype.kind in "USb":
        raise TypeError(f"{field_name} must contain only numbers, got dtype {values.dtype}")

    try:
        floats = values.astype(float)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"{field_name} must contain only numbers") from exc

    if not np.isfinite(floats).all():
        bad = [i for i, v in enumerate(floats) if not math.isfinite(v)]
        raise ValueError(f"{field_name} contains non-finite values at periods {bad}")

    return floats.tolist()
