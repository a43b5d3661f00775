# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cascada Core Primitives

Essential building blocks shared by the waterfall engine: the immutable
model base, constrained scalar types, enumerations, engine settings and
validation helpers.
"""

from .enums import (
    BatchItemStatusEnum,
    CashFlowDirectionEnum,
    ClawbackMethodEnum,
    ClawbackTriggerEnum,
    TierTypeEnum,
)
from .model import Model
from .settings import IRRSettings, WaterfallSettings
from .types import FloatBetween0And1, PositiveFloat, PositiveInt
from .validation import (
    ValidationMixin,
    validate_cash_flow_sequence,
    validate_split_keys,
)

__all__ = [
    # Core models
    "Model",
    # Settings
    "IRRSettings",
    "WaterfallSettings",
    # Enums
    "BatchItemStatusEnum",
    "CashFlowDirectionEnum",
    "ClawbackMethodEnum",
    "ClawbackTriggerEnum",
    "TierTypeEnum",
    # Types
    "PositiveFloat",
    "PositiveInt",
    "FloatBetween0And1",
    # Validation
    "ValidationMixin",
    "validate_cash_flow_sequence",
    "validate_split_keys",
]
