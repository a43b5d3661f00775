# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for Cascada components.

Each module exercises one component in isolation; end-to-end waterfall runs
use small hand-checkable cash-flow series.
"""
