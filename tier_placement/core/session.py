"""
session.py - Drive one placement run against a ranking store

A session owns the in-flight PlacementState between user answers. Nothing is
written until finish(), so abandoning a session leaves the store untouched.
snapshot()/from_snapshot() let a run be parked (e.g. while the app is in the
background) and resumed by replaying the recorded answers.
"""

import random
from typing import Any, Callable, Dict, Optional

from tier_placement.utils.config import DEFAULT_CONFIG, PlacementConfig
from tier_placement.utils.logging_helper import get_logger
from .placement import (
    ComparisonResult,
    PlacementState,
    apply_result,
    init_placement_state,
    resolve_final_position,
    select_next,
)
from .ranking_store import RankingStore, normalize_ranks

log = get_logger()

AskFn = Callable[[str, PlacementState], ComparisonResult | str]


class PlacementSession:
    """Encapsulates one insertion attempt: questions, answers, final commit."""

    def __init__(self, store: RankingStore, user_id: str, state: PlacementState):
        self.store = store
        self.user_id = user_id
        self.state = state
        self.position: Optional[int] = None

    @classmethod
    def start(
        cls,
        store: RankingStore,
        user_id: str,
        tier: str,
        item_id: str,
        *,
        config: PlacementConfig = DEFAULT_CONFIG,
        rng: Optional[random.Random] = None,
    ) -> "PlacementSession":
        """Snapshot the user's tier and set up a fresh placement run.

        Raises:
            ValueError: If *item_id* is already ranked in the tier.
        """
        stored = store.get_ranked(user_id, tier)
        if item_id in stored:
            raise ValueError(f"Item {item_id!r} is already ranked in {tier} at {stored[item_id]}")

        ranks = normalize_ranks(stored)
        if ranks != stored:
            log.warning(f"[Session] {user_id}/{tier} had rank gaps or offsets; placing against renumbered ranks")

        state = init_placement_state(item_id, tier, len(ranks), ranks, config=config, rng=rng)
        return cls(store, user_id, state)

    @property
    def committed(self) -> bool:
        return self.position is not None

    def next_candidate(self) -> Optional[str]:
        """Next item to show, or None once the run can be resolved."""
        if self.committed:
            return None
        return select_next(self.state, self.state.item_rank_map)

    def record(self, candidate: str, result: ComparisonResult | str) -> PlacementState:
        if self.committed:
            raise RuntimeError(f"Placement of {self.state.item_id!r} was already committed at {self.position}")
        self.state = apply_result(self.state, candidate, result)
        return self.state

    def finish(self) -> int:
        """Resolve the final position and write it to the store (once)."""
        if self.committed:
            return self.position
        position = resolve_final_position(self.state)
        self.store.insert(self.user_id, self.state.tier, self.state.item_id, position)
        self.position = position
        return position

    def run(self, ask: AskFn) -> int:
        """Ask until the run is complete, then commit.

        Args:
            ask: Called with the candidate id and current state; returns the
                user's answer for the new item against that candidate.
        """
        while True:
            candidate = self.next_candidate()
            if candidate is None:
                break
            self.record(candidate, ask(candidate, self.state))
        return self.finish()

    # ── persistence of an in-flight run ──────────────────────────────────
    def snapshot(self) -> Dict[str, Any]:
        """JSON-safe description of the run so far."""
        state = self.state
        return {
            "user_id": self.user_id,
            "tier": state.tier,
            "item_id": state.item_id,
            "ranks": dict(state.item_rank_map),
            "history": [[r.comparison_id, r.result.value] for r in state.history],
            "position": self.position,
        }

    @classmethod
    def from_snapshot(
        cls,
        store: RankingStore,
        data: Dict[str, Any],
        *,
        config: PlacementConfig = DEFAULT_CONFIG,
    ) -> "PlacementSession":
        """Rebuild a session by replaying the recorded answers on the saved ranks."""
        ranks = {item: int(rank) for item, rank in data["ranks"].items()}
        state = init_placement_state(data["item_id"], data["tier"], len(ranks), ranks, config=config)
        for comparison_id, result in data.get("history", []):
            state = apply_result(state, comparison_id, result)

        session = cls(store, data["user_id"], state)
        session.position = data.get("position")
        return session
