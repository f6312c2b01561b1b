"""
applier.py - Fold one comparison answer into the placement state
"""

import logging
import time
from dataclasses import replace
from typing import Optional

from .types import (
    Bounds,
    ComparisonRecord,
    ComparisonResult,
    ItemId,
    PlacementMetrics,
    PlacementState,
)
from .zones import adjust_zone

log = logging.getLogger(__name__)


def _narrow(bounds: Bounds, position: int, result: ComparisonResult) -> Bounds:
    """
    Tighten *bounds* with one answer against the item at *position*.

    An answer that contradicts earlier ones would invert the range; it is
    kept in the history but leaves the bounds as they were.
    """
    if result is ComparisonResult.BETTER:
        narrowed = Bounds(bounds.lower, min(bounds.upper, position))
    else:
        narrowed = Bounds(max(bounds.lower, position + 1), bounds.upper)

    if narrowed.lower > narrowed.upper:
        log.info(
            f"[Bounds] {result.value} vs position {position} contradicts bounds "
            f"{bounds.lower}-{bounds.upper}; bounds unchanged"
        )
        return bounds
    return narrowed


def apply_result(
    state: PlacementState,
    comparison_id: ItemId,
    result: ComparisonResult | str,
    now: Optional[float] = None,
) -> PlacementState:
    """
    Return the state that follows answering one comparison.

    Args:
        state: Current state (left untouched)
        comparison_id: Existing item the new item was compared against
        result: ``better`` if the new item won, ``worse`` if it lost, or ``skipped``
        now: Timestamp for metrics (defaults to time.time())

    Raises:
        UnknownItemError: If *comparison_id* has no rank in the tier.
    """
    result = ComparisonResult(result)
    position = state.item_rank_map.position_of(comparison_id)

    bounds = state.bounds
    zone = state.current_zone
    if result is ComparisonResult.BETTER:
        bounds = _narrow(bounds, position, result)
        zone = adjust_zone(zone, "up", state.strategy)
    elif result is ComparisonResult.WORSE:
        bounds = _narrow(bounds, position, result)
        zone = adjust_zone(zone, "down", state.strategy)

    completed = state.completed_comparisons + 1
    compared = state.compared_item_ids | {comparison_id}
    remaining = any(
        item_id not in compared and item_id != state.item_id
        for item_id in state.item_rank_map
    )

    metrics = state.metrics
    if metrics is not None:
        now = time.time() if now is None else now
        elapsed = now - (metrics.started_at + sum(metrics.comparison_times))
        metrics = PlacementMetrics(
            started_at=metrics.started_at,
            comparison_times=metrics.comparison_times + (elapsed,),
            zones_visited=metrics.zones_visited + (zone,),
        )

    log.debug(
        f"[Placement] {state.item_id} {result.value} vs {comparison_id} (position {position}): "
        f"bounds {bounds.lower}-{bounds.upper}, {completed}/{state.max_comparisons}"
    )

    return replace(
        state,
        bounds=bounds,
        current_zone=zone,
        compared_item_ids=compared,
        completed_comparisons=completed,
        history=state.history + (ComparisonRecord(comparison_id, result),),
        last_result=state.last_result if result is ComparisonResult.SKIPPED else result,
        is_complete=completed >= state.max_comparisons or not remaining,
        metrics=metrics,
    )
