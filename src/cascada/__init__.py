# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

import importlib
import logging

"""
Cascada - Equity Distribution Waterfall Engine

Distributes per-period owner cash flows of an investment vehicle among equity
partners under a multi-tier waterfall: return of capital, preferred return
(IRR hurdle or compound accrual), promote with catch-up, and clawback by
hypothetical liquidation.

Key Entry Points:
- cascada.deal.apply_equity_waterfall() - Single evaluation, raises on bad config
- cascada.deal.evaluate_equity_waterfall() - Single evaluation returning an outcome
- cascada.analysis.run_waterfall_batch() - Many independent evaluations in parallel

Example Usage:
    ```python
    from cascada.deal import apply_equity_waterfall, create_standard_waterfall

    config = create_standard_waterfall(pref_rate=0.08, compound_pref=True)
    result = apply_equity_waterfall([-1_000_000, 100_000, 150_000, 1_400_000], config)
    print(result.partner_summary_dataframe())
    ```
"""

# Libraries attach a NullHandler; applications configure their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "analysis",
    "core",
    "deal",
]


_LAZY_MODULES = {
    "analysis": "cascada.analysis",
    "core": "cascada.core",
    "deal": "cascada.deal",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'cascada' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
