"""
strategy.py - Collection size -> placement strategy and comparison budget

The budget stays small and flat past a point: every comparison interrupts the
user, so it is a UX cost rather than a sorting bound.
"""

import random
from typing import Optional

from tier_placement.utils.config import DEFAULT_CONFIG, PlacementConfig
from .types import Strategy


def select_strategy(existing_count: int, config: PlacementConfig = DEFAULT_CONFIG) -> Strategy:
    """Pick the placement strategy for a tier holding *existing_count* items."""
    if existing_count <= config.direct_max:
        return Strategy.DIRECT
    if existing_count <= config.simple_max:
        return Strategy.SIMPLE
    if existing_count <= config.two_zone_max:
        return Strategy.TWO_ZONE
    return Strategy.FULL_ZONE


def comparison_budget(existing_count: int, config: PlacementConfig = DEFAULT_CONFIG) -> int:
    """Maximum number of comparisons to ask when placing into *existing_count* items."""
    for limit, budget in config.budget_steps:
        if existing_count <= limit:
            return budget
    return config.max_budget


def initial_position(
    existing_count: int,
    strategy: Strategy,
    rng: Optional[random.Random] = None,
    config: PlacementConfig = DEFAULT_CONFIG,
) -> int:
    """
    Suggested starting position, used to seed the initial zone.

    Large collections get a cosmetic ±1 jitter when *rng* is given so repeat
    placements don't all start on the same row; without an RNG the result is
    deterministic.
    """
    if strategy is Strategy.DIRECT:
        return existing_count + 1

    middle = (existing_count + 1) // 2
    if strategy is Strategy.SIMPLE or rng is None or existing_count <= config.jitter_above:
        return middle

    return middle + rng.choice((-1, 0, 0, 1))
