"""
resolver.py - Turn a finished (or exhausted) placement run into a rank position

Rules apply in priority order and every branch is deterministic:

1. bounds collapsed to one position
2. tiny tiers (<= 3 items): win ratio decides top / middle / last
3. contradictory answers: place by win ratio inside the bounds
4. top confirmation: an unbeaten streak that includes rank 1 (or leaves
   nothing above position 2)
5. bottom confirmation: a losing streak with no wins while the bounds still
   touch the end of the list
6. near misses: a strong start spoiled by a later loss, or the reverse
7. the middle of the remaining bounds
"""

import logging
from typing import Sequence, Tuple

from .contradictions import detect_contradictions
from .types import ComparisonResult, PlacementState

log = logging.getLogger(__name__)

BETTER = ComparisonResult.BETTER
WORSE = ComparisonResult.WORSE

TOP_RATIO = 0.67
MIDDLE_RATIO = 0.33


def _leading_run(results: Sequence[ComparisonResult], result: ComparisonResult) -> int:
    run = 0
    for r in results:
        if r is not result:
            break
        run += 1
    return run


def _small_tier(size: int, results: Sequence[ComparisonResult]) -> Tuple[int, str]:
    if size <= 1:
        if BETTER in results:
            return 1, "small tier: beat the only item"
        if WORSE in results:
            return size + 1, "small tier: lost to the only item"
        return size + 1, "small tier: all comparisons skipped"

    wins, losses = results.count(BETTER), results.count(WORSE)
    if wins + losses == 0:
        return size + 1, "small tier: all comparisons skipped"

    ratio = wins / (wins + losses)
    if ratio >= TOP_RATIO:
        return 1, f"small tier: won {wins}/{wins + losses}"
    if ratio >= MIDDLE_RATIO:
        return (size + 2) // 2, f"small tier: mixed {wins}/{wins + losses}"
    return size + 1, f"small tier: lost {losses}/{wins + losses}"


def _resolve(state: PlacementState) -> Tuple[int, str]:
    bounds = state.bounds
    if bounds.resolved:
        return bounds.lower, "bounds resolved"

    results = state.results
    rank_map = state.item_rank_map
    size = len(rank_map)
    if size <= 3:
        return _small_tier(size, results)

    wins, losses = results.count(BETTER), results.count(WORSE)

    if detect_contradictions(state.history):
        if wins + losses == 0:
            return bounds.midpoint, "contradiction: all skipped"
        # lower + floor(width * (1 - win ratio)), kept in integers
        position = bounds.lower + (bounds.upper - bounds.lower) * losses // (wins + losses)
        return position, f"contradiction: won {wins}/{wins + losses}"

    if bounds.lower == 1 and _leading_run(results, BETTER) >= 2 and not losses:
        beat_top = any(
            record.result is BETTER and rank_map.position_of(record.comparison_id) == 1
            for record in state.history
        )
        if beat_top:
            return 1, "top boundary: beat the top item"
        if bounds.upper <= 2:
            return 1, "top boundary: unbeaten with nothing above position 2"

    if bounds.upper >= size and _leading_run(results, WORSE) >= 2 and not wins:
        return bounds.upper, "bottom boundary: never won"

    if results[:2] == (BETTER, BETTER) and losses:
        return min(bounds.lower + 1, bounds.upper - 1), "strong but not top"

    if results[:2] == (WORSE, WORSE) and wins:
        return max(bounds.upper - 1, bounds.lower + 1), "weak but not last"

    return bounds.midpoint, f"middle of {bounds.lower}-{bounds.upper}"


def resolve_final_position(state: PlacementState) -> int:
    """
    Final 1-based rank for the new item, always within
    ``[1, existing_count + 1]``.

    Contradictions and all-skipped runs are handled by fallbacks, never raised.
    """
    position, reason = _resolve(state)
    log.info(f"[Placement] {state.item_id} in {state.tier} -> position {position} ({reason})")
    return position
