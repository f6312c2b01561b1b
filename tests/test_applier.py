import random

import pytest

from tier_placement.core.placement import (
    Bounds,
    ComparisonRecord,
    ComparisonResult,
    UnknownItemError,
    Zone,
    apply_result,
    init_placement_state,
    select_next,
)
from tier_placement.utils.config import PlacementConfig
from placement_helpers import answer, letters, new_state, ranks


def test_better_moves_upper_bound():
    state = apply_result(new_state(letters(5)), "C", "better")
    assert state.bounds == Bounds(1, 3)
    assert state.last_result is ComparisonResult.BETTER


def test_worse_moves_lower_bound():
    state = apply_result(new_state(letters(5)), "C", ComparisonResult.WORSE)
    assert state.bounds == Bounds(4, 6)
    assert state.last_result is ComparisonResult.WORSE


def test_skip_records_without_narrowing():
    start = apply_result(new_state(letters(5)), "C", "better")
    state = apply_result(start, "A", "skipped")
    assert state.bounds == start.bounds
    assert state.current_zone is start.current_zone
    assert state.completed_comparisons == 2
    assert state.compared_item_ids == {"C", "A"}
    assert state.history[-1] == ComparisonRecord("A", ComparisonResult.SKIPPED)
    assert state.last_result is ComparisonResult.BETTER


def test_original_state_untouched():
    start = new_state(letters(5))
    apply_result(start, "C", "better")
    assert start.bounds == Bounds(1, 6)
    assert start.history == ()
    assert start.completed_comparisons == 0
    assert start.compared_item_ids == frozenset()


def test_unknown_comparison_id_raises_for_every_result():
    state = new_state(letters(5))
    for result in ("better", "worse", "skipped"):
        with pytest.raises(UnknownItemError):
            apply_result(state, "ghost", result)


def test_bad_result_value_raises():
    with pytest.raises(ValueError):
        apply_result(new_state(letters(5)), "C", "meh")


def test_completes_at_budget():
    state = answer(new_state(letters(5)), ("C", "better"), ("A", "worse"))
    assert not state.is_complete
    state = apply_result(state, "B", "skipped")
    assert state.is_complete
    assert state.completed_comparisons == state.max_comparisons == 3


def test_completes_when_candidates_run_out():
    config = PlacementConfig(budget_steps=((0, 0), (5, 9)))
    state = init_placement_state("NEW", "liked", 3, letters(3), config=config)
    assert state.max_comparisons == 9
    state = answer(state, ("A", "skipped"), ("B", "skipped"))
    assert not state.is_complete
    state = apply_result(state, "C", "skipped")
    assert state.is_complete


def test_contradicting_answer_keeps_bounds():
    state = answer(new_state(letters(6)), ("D", "better"), ("B", "worse"))
    assert state.bounds == Bounds(3, 4)
    state = apply_result(state, "D", "worse")
    assert state.bounds == Bounds(3, 4)
    assert len(state.history) == 3


def test_zone_tracks_answers():
    state = new_state(ranks(12))
    assert state.current_zone is Zone.MIDDLE
    state = apply_result(state, "I6", "better")
    assert state.current_zone is Zone.UPPER_MIDDLE
    state = apply_result(state, "I1", "better")
    assert state.current_zone is Zone.TOP
    state = apply_result(state, "I2", "better")
    assert state.current_zone is Zone.TOP
    state = apply_result(state, "I3", "skipped")
    assert state.current_zone is Zone.TOP


def test_metrics_record_elapsed_time_and_zones():
    state = new_state(ranks(12), now=100.0)
    state = apply_result(state, "I6", "worse", now=103.5)
    state = apply_result(state, "I12", "better", now=110.0)
    assert state.metrics.comparison_times == (3.5, 6.5)
    assert state.metrics.zones_visited == (Zone.MIDDLE, Zone.LOWER_MIDDLE, Zone.MIDDLE)


@pytest.mark.parametrize("seed", range(25))
def test_bounds_stay_valid_and_only_narrow(seed):
    rng = random.Random(seed)
    size = rng.randint(1, 30)
    rank_map = ranks(size)
    state = new_state(rank_map)
    while True:
        candidate = select_next(state, rank_map)
        if candidate is None:
            break
        before = state.bounds
        state = apply_result(state, candidate, rng.choice(list(ComparisonResult)))
        assert 1 <= state.bounds.lower <= state.bounds.upper <= size + 1
        assert state.bounds.lower >= before.lower
        assert state.bounds.upper <= before.upper
    assert state.completed_comparisons <= state.max_comparisons


def test_gapped_ranks_narrow_by_position():
    gapped = {"A": 2, "B": 4, "C": 6, "D": 8, "E": 10}
    state = apply_result(new_state(gapped), "C", "better")
    assert state.bounds == Bounds(1, 3)
    state = apply_result(state, "A", "worse")
    assert state.bounds == Bounds(2, 3)
