"""
Placement module - Pairwise-comparison ranked insertion

This module provides:
- Strategy and comparison budget selection by collection size
- Percentile zones for tracking where a run is heading
- Candidate selection for the next comparison
- State transitions for each answer (better / worse / skipped)
- Contradiction detection and final position resolution

Typical flow:

    state = init_placement_state(item_id, tier, len(ranks), ranks)
    candidate = select_next(state, ranks)
    while candidate is not None:
        state = apply_result(state, candidate, ask_user(candidate))
        candidate = select_next(state, ranks)
    position = resolve_final_position(state)
"""

from .types import (
    Bounds,
    ComparisonRecord,
    ComparisonResult,
    ItemId,
    PlacementContractError,
    PlacementMetrics,
    PlacementState,
    RankMap,
    Strategy,
    UnknownItemError,
    Zone,
    ZoneBounds,
)
from .strategy import comparison_budget, initial_position, select_strategy
from .zones import adjust_zone, define_zones, initial_zone
from .state import init_placement_state
from .selector import select_next
from .applier import apply_result
from .contradictions import detect_contradictions, find_preference_cycles
from .resolver import resolve_final_position

__all__ = [
    'Bounds',
    'ComparisonRecord',
    'ComparisonResult',
    'ItemId',
    'PlacementContractError',
    'PlacementMetrics',
    'PlacementState',
    'RankMap',
    'Strategy',
    'UnknownItemError',
    'Zone',
    'ZoneBounds',
    'adjust_zone',
    'apply_result',
    'comparison_budget',
    'define_zones',
    'detect_contradictions',
    'find_preference_cycles',
    'init_placement_state',
    'initial_position',
    'initial_zone',
    'resolve_final_position',
    'select_next',
    'select_strategy',
]
