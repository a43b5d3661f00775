# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable, slot-based models for efficient attribute access and reduced
    memory footprint. Mutable runtime state (capital accounts, partner cash
    flow matrices) is held outside of models for the duration of a single
    waterfall evaluation.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,  # Immutable models; runtime mutable state lives in external objects
        slots=True,
        extra="forbid",  # Catches typos in tier and class definitions immediately
    )
