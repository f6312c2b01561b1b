"""
state.py - Build the starting PlacementState for one insertion attempt
"""

import logging
import random
import time
from typing import Mapping, Optional

from tier_placement.utils.config import DEFAULT_CONFIG, PlacementConfig
from .strategy import comparison_budget, initial_position, select_strategy
from .types import Bounds, ItemId, PlacementMetrics, PlacementState, RankMap
from .zones import define_zones, initial_zone

log = logging.getLogger(__name__)


def init_placement_state(
    item_id: ItemId,
    tier: str,
    existing_count: int,
    existing_rank_map: Optional[Mapping[ItemId, int]] = None,
    *,
    config: PlacementConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
    now: Optional[float] = None,
) -> PlacementState:
    """
    Create the initial state for placing *item_id* into *tier*.

    Args:
        item_id: The new entrant
        tier: Sentiment/category key of the ranked collection
        existing_count: Number of items already ranked in the tier
        existing_rank_map: Current rank of every existing item (1 = best)
        config: Strategy thresholds and budget table
        rng: Optional source of jitter for the suggested starting position
        now: Start timestamp for metrics (defaults to time.time())

    Returns:
        A PlacementState with full bounds ``[1, existing_count + 1]`` and no
        history. It is already complete when the budget is zero.
    """
    if existing_count < 0:
        raise ValueError(f"existing_count must be >= 0, got {existing_count}")

    rank_map = existing_rank_map if isinstance(existing_rank_map, RankMap) else RankMap(existing_rank_map)
    if not rank_map.contiguous:
        log.debug(f"[Placement] {tier} ranks have gaps; comparing by position in rank order")

    strategy = select_strategy(existing_count, config)
    zones = define_zones(existing_count, strategy)
    start_zone = initial_zone(strategy, initial_position(existing_count, strategy, rng, config), existing_count)
    max_comparisons = comparison_budget(existing_count, config)

    log.debug(
        f"[Placement] {item_id} into {tier}: {existing_count} existing, "
        f"strategy={strategy.value}, budget={max_comparisons}, zone={start_zone.value}"
    )

    return PlacementState(
        item_id=item_id,
        tier=tier,
        strategy=strategy,
        current_zone=start_zone,
        zones=zones,
        item_rank_map=rank_map,
        existing_count=existing_count,
        bounds=Bounds(1, existing_count + 1),
        max_comparisons=max_comparisons,
        is_complete=max_comparisons == 0,
        metrics=PlacementMetrics(
            started_at=time.time() if now is None else now,
            zones_visited=(start_zone,),
        ),
    )
