"""
selector.py - Choose the next existing item to compare the new item against

The sequence front-loads boundary tests so "new best" and "new worst" are
settled cheaply, then narrows with percentile bands, then falls back to the
item nearest the middle of the current bounds:

1. the median-ranked item
2. the best item after a win, the worst item after a loss
3. a band chosen by the first two answers (or an explicit boundary test)
4. prefix patterns over the whole history, each tied to a band, preceded by
   standing boundary checks
5. the best-ranked untested item

Bands are taken over the untested items sorted best-first. A band's pick is
its element at ``len(band) // 2``. Selection is pure: the same state and pool
always give the same answer.
"""

import logging
import math
from typing import Iterable, List, Optional, Sequence

from .types import (
    ComparisonResult,
    ItemId,
    PlacementContractError,
    PlacementState,
    RankMap,
)

log = logging.getLogger(__name__)

BETTER = ComparisonResult.BETTER
WORSE = ComparisonResult.WORSE


class _CandidatePool:
    """Untested items of one step, best-first, with rank lookups."""

    def __init__(self, ranked: List[ItemId], rank_map: RankMap):
        self.ranked = ranked
        self.rank_map = rank_map
        self._members = set(ranked)

    def at_position(self, position: int) -> Optional[ItemId]:
        """The untested item holding exactly *position*, if any."""
        item_id = self.rank_map.item_at(position)
        return item_id if item_id in self._members else None

    def band(self, start: float, end: float) -> List[ItemId]:
        size = len(self.ranked)
        lo = math.floor(size * start)
        hi = min(size - 1, math.floor(size * end))
        return self.ranked[lo:hi + 1]

    def band_pick(self, start: float, end: float) -> Optional[ItemId]:
        items = self.band(start, end)
        return items[len(items) // 2] if items else None

    def closest_to(self, target: int) -> Optional[ItemId]:
        # min() keeps the first of equals, so ties go to the better-ranked item
        return min(self.ranked, key=lambda i: abs(self.rank_map.position_of(i) - target), default=None)


def _starts(results: Sequence[ComparisonResult], *prefix: ComparisonResult) -> bool:
    return tuple(results[:len(prefix)]) == prefix


def _has_run(results: Sequence[ComparisonResult], *run: ComparisonResult) -> bool:
    width = len(run)
    return any(tuple(results[i:i + width]) == run for i in range(len(results) - width + 1))


def _eligible(state: PlacementState, available_ids: Iterable[ItemId]) -> List[ItemId]:
    seen = set()
    pool = []
    for item_id in available_ids:
        if item_id == state.item_id:
            raise PlacementContractError(
                f"Candidate pool contains the item being placed ({item_id!r})"
            )
        state.item_rank_map.position_of(item_id)
        if item_id in state.compared_item_ids or item_id in seen:
            continue
        seen.add(item_id)
        pool.append(item_id)
    return state.item_rank_map.sorted_ids(pool)


def _second_comparison(state: PlacementState, pool: _CandidatePool) -> ItemId:
    if state.history[0].result is BETTER:
        choice = pool.at_position(1) or pool.ranked[0]
        log.debug(f"[Strategic] 2nd comparison: won vs median, testing top at position {pool.rank_map.position_of(choice)}")
    else:
        choice = pool.at_position(len(pool.rank_map)) or pool.ranked[-1]
        log.debug(f"[Strategic] 2nd comparison: lost vs median, testing bottom at position {pool.rank_map.position_of(choice)}")
    return choice


def _third_comparison(state: PlacementState, pool: _CandidatePool) -> Optional[ItemId]:
    results = state.results
    rank_map = pool.rank_map
    tested = rank_map.position_of(state.history[1].comparison_id)

    if _starts(results, BETTER, BETTER):
        if tested != 1:
            top = pool.at_position(1)
            if top:
                log.debug("[Strategic] 3rd comparison: BOUNDARY TEST against position 1")
                return top
        return pool.band_pick(0.0, 0.05) or pool.band_pick(0.0, 0.10)

    if _starts(results, BETTER, WORSE):
        return pool.band_pick(0.10, 0.25)

    if _starts(results, WORSE, BETTER):
        return pool.band_pick(0.60, 0.75)

    if _starts(results, WORSE, WORSE):
        last = len(rank_map)
        if tested != last:
            bottom = pool.at_position(last)
            if bottom:
                log.debug(f"[Strategic] 3rd comparison: BOUNDARY TEST against position {last}")
                return bottom
        return pool.band_pick(0.95, 1.0) or pool.band_pick(0.90, 1.0)

    return None


def _later_comparison(state: PlacementState, pool: _CandidatePool) -> Optional[ItemId]:
    results = state.results
    bounds = state.bounds
    last = len(pool.rank_map)

    if bounds.lower <= 2 and BETTER in results:
        top = pool.at_position(1)
        if top:
            log.debug(f"[Strategic] Comparison #{len(results) + 1}: BOUNDARY TEST against position 1")
            return top

    if bounds.upper >= last and WORSE in results:
        bottom = pool.at_position(last)
        if bottom:
            log.debug(f"[Strategic] Comparison #{len(results) + 1}: BOUNDARY TEST against position {last}")
            return bottom

    choice = None
    if _starts(results, BETTER, BETTER, BETTER):
        choice = pool.at_position(1) or pool.band_pick(0.0, 0.05)
    elif _starts(results, BETTER, BETTER) or (_starts(results, BETTER) and _has_run(results, BETTER, BETTER)):
        choice = pool.band_pick(0.0, 0.15)
    elif _starts(results, BETTER, WORSE):
        choice = pool.band_pick(0.15, 0.35)
    elif _starts(results, WORSE, BETTER):
        choice = pool.band_pick(0.60, 0.80)
    elif _starts(results, WORSE, WORSE, WORSE):
        choice = pool.at_position(last) or pool.band_pick(0.95, 1.0)
    elif _starts(results, WORSE, WORSE):
        choice = pool.band_pick(0.80, 0.95)
    if choice:
        return choice

    target = bounds.midpoint
    choice = pool.at_position(target) or pool.closest_to(target)
    log.debug(f"[Strategic] Comparison #{len(results) + 1}: nearest to target position {target}")
    return choice


def select_next(state: PlacementState, available_ids: Iterable[ItemId]) -> Optional[ItemId]:
    """
    Pick the next item to compare against, or None when the run is over.

    Args:
        state: Current placement state
        available_ids: Existing items of the tier that may be shown. Items
            already compared are ignored.

    Raises:
        PlacementContractError: If the pool holds the item being placed.
        UnknownItemError: If the pool holds an id with no rank in the tier.
    """
    if state.is_complete:
        return None

    ranked = _eligible(state, available_ids)
    if not ranked:
        return None
    if len(ranked) == 1:
        return ranked[0]

    pool = _CandidatePool(ranked, state.item_rank_map)
    step = state.completed_comparisons

    if step == 0:
        choice = ranked[len(ranked) // 2]
        log.debug(f"[Strategic] 1st comparison: median at position {pool.rank_map.position_of(choice)}")
        return choice
    if step == 1:
        return _second_comparison(state, pool)

    choice = _third_comparison(state, pool) if step == 2 else _later_comparison(state, pool)
    if choice:
        return choice

    log.debug(f"[Strategic] Fallback: best-ranked untested item at position {pool.rank_map.position_of(ranked[0])}")
    return ranked[0]
