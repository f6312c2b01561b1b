import random

import pytest

from tier_placement.core.placement import (
    Strategy,
    Zone,
    ZoneBounds,
    adjust_zone,
    comparison_budget,
    define_zones,
    initial_position,
    initial_zone,
    select_strategy,
)
from tier_placement.utils.config import PlacementConfig


@pytest.mark.parametrize("count, expected", [
    (0, Strategy.DIRECT),
    (1, Strategy.DIRECT),
    (2, Strategy.SIMPLE),
    (4, Strategy.SIMPLE),
    (5, Strategy.TWO_ZONE),
    (8, Strategy.TWO_ZONE),
    (9, Strategy.FULL_ZONE),
    (500, Strategy.FULL_ZONE),
])
def test_select_strategy(count, expected):
    assert select_strategy(count) is expected


@pytest.mark.parametrize("count, expected", [
    (0, 0), (1, 1), (2, 2), (3, 3), (5, 3), (6, 4), (10, 4),
    (11, 5), (20, 5), (21, 6), (1000, 6),
])
def test_comparison_budget(count, expected):
    assert comparison_budget(count) == expected


def test_budget_never_decreases():
    budgets = [comparison_budget(n) for n in range(200)]
    assert budgets == sorted(budgets)
    assert max(budgets) == 6


def test_custom_thresholds():
    config = PlacementConfig(direct_max=0, simple_max=2, two_zone_max=3, max_budget=2)
    assert select_strategy(1, config) is Strategy.SIMPLE
    assert select_strategy(3, config) is Strategy.TWO_ZONE
    assert select_strategy(4, config) is Strategy.FULL_ZONE
    assert comparison_budget(50, config) == 2


def test_initial_position():
    assert initial_position(0, Strategy.DIRECT) == 1
    assert initial_position(1, Strategy.DIRECT) == 2
    assert initial_position(4, Strategy.SIMPLE) == 2
    assert initial_position(7, Strategy.TWO_ZONE) == 4
    assert initial_position(20, Strategy.FULL_ZONE) == 10


def test_initial_position_jitter_only_for_large_tiers():
    rng = random.Random(7)
    positions = {initial_position(20, Strategy.FULL_ZONE, rng) for _ in range(50)}
    assert positions <= {9, 10, 11}
    assert len(positions) > 1

    # at or below the jitter threshold the rng is ignored
    assert {initial_position(10, Strategy.FULL_ZONE, rng) for _ in range(20)} == {5}


def test_full_zone_boundaries():
    zones = define_zones(12, Strategy.FULL_ZONE)
    assert zones[Zone.TOP] == ZoneBounds(1, 3)
    assert zones[Zone.UPPER_MIDDLE] == ZoneBounds(4, 5)
    assert zones[Zone.MIDDLE] == ZoneBounds(6, 8)
    assert zones[Zone.LOWER_MIDDLE] == ZoneBounds(9, 10)
    assert zones[Zone.BOTTOM] == ZoneBounds(11, 13)


def test_full_zone_top_keeps_two_positions():
    assert define_zones(9, Strategy.FULL_ZONE)[Zone.TOP] == ZoneBounds(1, 2)


def test_two_zone_boundaries():
    zones = define_zones(6, Strategy.TWO_ZONE)
    assert zones[Zone.TOP] == ZoneBounds(1, 3)
    assert zones[Zone.MIDDLE] == ZoneBounds(3, 4)
    assert zones[Zone.BOTTOM] == ZoneBounds(4, 7)
    assert zones[Zone.UPPER_MIDDLE] == zones[Zone.TOP]
    assert zones[Zone.LOWER_MIDDLE] == zones[Zone.BOTTOM]


def test_small_strategies_use_one_zone():
    zones = define_zones(3, Strategy.SIMPLE)
    assert set(zones.values()) == {ZoneBounds(1, 4)}
    assert len(zones) == 5


def test_zones_are_read_only():
    zones = define_zones(12, Strategy.FULL_ZONE)
    with pytest.raises(TypeError):
        zones[Zone.TOP] = ZoneBounds(1, 1)


def test_initial_zone():
    assert initial_zone(Strategy.TWO_ZONE, 3, 6) is Zone.TOP
    assert initial_zone(Strategy.TWO_ZONE, 4, 6) is Zone.BOTTOM
    assert initial_zone(Strategy.FULL_ZONE, 10, 20) is Zone.MIDDLE
    assert initial_zone(Strategy.SIMPLE, 2, 3) is Zone.MIDDLE


def test_adjust_zone_full():
    assert adjust_zone(Zone.MIDDLE, "up", Strategy.FULL_ZONE) is Zone.UPPER_MIDDLE
    assert adjust_zone(Zone.MIDDLE, "down", Strategy.FULL_ZONE) is Zone.LOWER_MIDDLE
    assert adjust_zone(Zone.TOP, "up", Strategy.FULL_ZONE) is Zone.TOP
    assert adjust_zone(Zone.BOTTOM, "down", Strategy.FULL_ZONE) is Zone.BOTTOM


def test_adjust_zone_two_zone_and_small():
    assert adjust_zone(Zone.TOP, "down", Strategy.TWO_ZONE) is Zone.BOTTOM
    assert adjust_zone(Zone.BOTTOM, "up", Strategy.TWO_ZONE) is Zone.TOP
    assert adjust_zone(Zone.TOP, "up", Strategy.TWO_ZONE) is Zone.TOP
    assert adjust_zone(Zone.MIDDLE, "up", Strategy.SIMPLE) is Zone.MIDDLE
    assert adjust_zone(Zone.MIDDLE, "down", Strategy.DIRECT) is Zone.MIDDLE
