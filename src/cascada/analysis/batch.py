# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Batch Waterfall Evaluation

Runs many independent waterfall evaluations (sensitivity grids, Monte Carlo
iterations) over a thread pool. Evaluations share no state, so the only
ordering guarantee is that every result is matched back to the index of the
scenario that produced it.

Cancellation is cooperative: a ``threading.Event`` is checked before each
evaluation starts. An evaluation that has started always runs to completion.

Example:
    ```python
    import threading

    cancel = threading.Event()
    items = run_waterfall_batch(
        [[-1000.0, 400.0, 900.0], [-1000.0, 300.0, 800.0]],
        config=create_standard_waterfall(),
        cancel_event=cancel,
    )
    [item.result.get_partner("gp").irr for item in items if item.ok]
    ```
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from pydantic import Field, field_validator

from ..core.primitives import (
    BatchItemStatusEnum,
    Model,
    WaterfallSettings,
    validate_cash_flow_sequence,
)
from ..deal.api import ConfigLike, evaluate_equity_waterfall
from ..deal.errors import WaterfallConfigurationError
from ..deal.results import WaterfallResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class BatchScenario(Model):
    """One evaluation of a batch: owner cash flows and an optional own config."""

    owner_cash_flows: List[float]
    config: Optional[ConfigLike] = Field(
        default=None, description="Overrides the batch-wide config when given"
    )
    label: Optional[str] = None

    @field_validator("owner_cash_flows", mode="before")
    @classmethod
    def coerce_cash_flows(cls, v):
        return validate_cash_flow_sequence(v)


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of the scenario at ``index`` in the submitted batch."""

    index: int
    status: BatchItemStatusEnum
    result: Optional[WaterfallResult] = None
    error: Optional[Exception] = None
    label: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == BatchItemStatusEnum.COMPLETED


def _as_scenario(scenario: Union[BatchScenario, Sequence[float]]) -> BatchScenario:
    if isinstance(scenario, BatchScenario):
        return scenario
    return BatchScenario(owner_cash_flows=scenario)


def _evaluate(
    index: int,
    scenario: BatchScenario,
    default_config: Optional[ConfigLike],
    settings: Optional[WaterfallSettings],
    cancel_event: Optional[threading.Event],
) -> BatchItemResult:
    if cancel_event is not None and cancel_event.is_set():
        return BatchItemResult(
            index=index, status=BatchItemStatusEnum.CANCELLED, label=scenario.label
        )

    config = scenario.config if scenario.config is not None else default_config
    if config is None:
        return BatchItemResult(
            index=index,
            status=BatchItemStatusEnum.FAILED,
            error=WaterfallConfigurationError(
                f"Scenario {index} has no waterfall configuration"
            ),
            label=scenario.label,
        )

    try:
        outcome = evaluate_equity_waterfall(scenario.owner_cash_flows, config, settings)
    except (TypeError, ValueError) as exc:
        outcome_error: Exception = exc
    else:
        if outcome.ok:
            return BatchItemResult(
                index=index,
                status=BatchItemStatusEnum.COMPLETED,
                result=outcome.result,
                label=scenario.label,
            )
        outcome_error = outcome.error

    logger.debug(f"Batch scenario {index} failed: {outcome_error}")
    return BatchItemResult(
        index=index,
        status=BatchItemStatusEnum.FAILED,
        error=outcome_error,
        label=scenario.label,
    )


def run_waterfall_batch(
    scenarios: Sequence[Union[BatchScenario, Sequence[float]]],
    config: Optional[ConfigLike] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    settings: Optional[WaterfallSettings] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> List[BatchItemResult]:
    """
    Evaluate every scenario and return results in scenario order.

    Args:
        scenarios: Owner cash-flow sequences or `BatchScenario` objects
        config: Configuration for scenarios that carry none of their own
        max_workers: Thread pool size (``ThreadPoolExecutor`` default when None)
        cancel_event: Set to stop starting new evaluations
        settings: Numeric tolerances shared by every evaluation
        progress_callback: Called as ``(finished, total)`` after each item

    Returns:
        One `BatchItemResult` per scenario, ``results[i].index == i``.
        Configuration and input errors are reported per item; they never
        abort the batch.
    """
    total = len(scenarios)
    results: List[Optional[BatchItemResult]] = [None] * total
    if total == 0:
        return []

    items: List[Optional[BatchScenario]] = []
    for i, scenario in enumerate(scenarios):
        try:
            items.append(_as_scenario(scenario))
        except (TypeError, ValueError) as exc:
            items.append(None)
            results[i] = BatchItemResult(
                index=i, status=BatchItemStatusEnum.FAILED, error=exc
            )

    finished = total - sum(item is not None for item in items)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_evaluate, i, item, config, settings, cancel_event): i
            for i, item in enumerate(items)
            if item is not None
        }
        for future in as_completed(futures):
            index = futures[future]
            if future.cancelled():
                results[index] = BatchItemResult(
                    index=index,
                    status=BatchItemStatusEnum.CANCELLED,
                    label=items[index].label,
                )
            else:
                results[index] = future.result()

            finished += 1
            if progress_callback is not None:
                progress_callback(finished, total)

            if cancel_event is not None and cancel_event.is_set():
                for pending in futures:
                    pending.cancel()

    counts = {status: 0 for status in BatchItemStatusEnum}
    for item in results:
        counts[item.status] += 1
    logger.info(
        f"Waterfall batch finished: {counts[BatchItemStatusEnum.COMPLETED]} completed, "
        f"{counts[BatchItemStatusEnum.FAILED]} failed, "
        f"{counts[BatchItemStatusEnum.CANCELLED]} cancelled of {total}"
    )
    return results


__all__ = [
    "BatchItemResult",
    "BatchScenario",
    "run_waterfall_batch",
]
