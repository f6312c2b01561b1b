"""
zones.py - Percentile zones over a tier's rank positions

Zones are bookkeeping: they seed the starting zone and are tracked as the run
moves up or down, but candidate selection never consults them.
"""

import math
from types import MappingProxyType
from typing import Literal, Mapping

from .types import ZONE_ORDER, Strategy, Zone, ZoneBounds


def define_zones(existing_count: int, strategy: Strategy) -> Mapping[Zone, ZoneBounds]:
    """
    Zone boundaries for a tier of *existing_count* items.

    Args:
        existing_count: Items already ranked in the tier
        strategy: Strategy chosen for this collection size

    Returns:
        Read-only mapping of all five zones. ``end`` for the bottom zone is one
        past the last existing item.
    """
    n = existing_count
    if strategy in (Strategy.DIRECT, Strategy.SIMPLE):
        whole = ZoneBounds(1, n + 1)
        zones = {zone: whole for zone in ZONE_ORDER}

    elif strategy is Strategy.TWO_ZONE:
        midpoint = math.ceil(n / 2)
        upper_half = ZoneBounds(1, midpoint)
        lower_half = ZoneBounds(midpoint + 1, n + 1)
        zones = {
            Zone.TOP: upper_half,
            Zone.UPPER_MIDDLE: upper_half,
            Zone.MIDDLE: ZoneBounds(midpoint, midpoint + 1),
            Zone.LOWER_MIDDLE: lower_half,
            Zone.BOTTOM: lower_half,
        }

    else:
        # top keeps at least two positions so boundary tests have room
        top_end = max(2, math.ceil(n * 0.2))
        p40, p60, p80 = (math.ceil(n * p) for p in (0.4, 0.6, 0.8))
        zones = {
            Zone.TOP: ZoneBounds(1, top_end),
            Zone.UPPER_MIDDLE: ZoneBounds(top_end + 1, p40),
            Zone.MIDDLE: ZoneBounds(p40 + 1, p60),
            Zone.LOWER_MIDDLE: ZoneBounds(p60 + 1, p80),
            Zone.BOTTOM: ZoneBounds(p80 + 1, n + 1),
        }

    return MappingProxyType(zones)


def initial_zone(strategy: Strategy, initial_position: int, existing_count: int) -> Zone:
    if strategy is Strategy.TWO_ZONE:
        return Zone.TOP if initial_position <= math.ceil(existing_count / 2) else Zone.BOTTOM
    # full_zone always starts from the centre; direct/simple have a single zone
    return Zone.MIDDLE


def adjust_zone(zone: Zone, direction: Literal["up", "down"], strategy: Strategy) -> Zone:
    """Move *zone* one step toward the top or bottom, saturating at the ends."""
    if strategy is Strategy.TWO_ZONE:
        if direction == "up" and zone is Zone.BOTTOM:
            return Zone.TOP
        if direction == "down" and zone is Zone.TOP:
            return Zone.BOTTOM
        return zone

    if strategy is not Strategy.FULL_ZONE:
        return zone

    index = ZONE_ORDER.index(zone)
    if direction == "up":
        return ZONE_ORDER[max(0, index - 1)]
    return ZONE_ORDER[min(len(ZONE_ORDER) - 1, index + 1)]
