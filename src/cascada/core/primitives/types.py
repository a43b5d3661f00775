# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Constrained scalar types shared by configuration models.

All aliases are strict: strings are never coerced into numbers, so a
configuration loaded from loosely-typed sources fails loudly instead of
silently producing a wrong split.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

PositiveInt = Annotated[int, Field(ge=0, strict=True)]
PositiveFloat = Annotated[float, Field(ge=0.0, strict=True)]
FloatBetween0And1 = Annotated[float, Field(ge=0.0, le=1.0, strict=True)]

__all__ = [
    "FloatBetween0And1",
    "PositiveFloat",
    "PositiveInt",
]
