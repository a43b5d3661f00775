# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cascada test suite.

Unit tests for the waterfall primitives, tier allocators, orchestration,
clawback reconciliation, results and batch evaluation.
"""
