# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cascada.core.primitives import IRRSettings, WaterfallSettings


class TestWaterfallSettings:
    """Defaults reproduce the documented engine tolerances."""

    def test_defaults(self):
        settings = WaterfallSettings()
        assert settings.conservation_tolerance == 0.01
        assert settings.precision_tolerance == 1e-9
        assert settings.zero_sum_tolerance == 1e-10
        assert settings.irr.lower_bound == -0.99
        assert settings.irr.upper_bound == 10.0
        assert settings.irr.tolerance == 1e-6
        assert settings.irr.max_iterations == 100

    def test_settings_are_frozen(self):
        settings = WaterfallSettings()
        with pytest.raises(ValidationError):
            settings.conservation_tolerance = 1.0

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            WaterfallSettings(conservation_tolerence=1.0)

    def test_nested_irr_override(self):
        settings = WaterfallSettings(irr=IRRSettings(upper_bound=5.0))
        assert settings.irr.upper_bound == 5.0
        assert settings.irr.lower_bound == -0.99


class TestIRRSettings:
    """The IRR search bracket must be a real interval above -100%."""

    def test_empty_bracket_rejected(self):
        with pytest.raises(ValidationError, match="must exceed"):
            IRRSettings(lower_bound=0.5, upper_bound=0.5)

    def test_lower_bound_above_minus_one(self):
        with pytest.raises(ValidationError):
            IRRSettings(lower_bound=-1.0)
