"""
ranking_store.py - Ranked tiers and the insert-and-renumber step

The placement engine only returns a position; storing it is the caller's job.
Whatever store is used, an insert must place the new item and shift every
existing item at or below that position down by one in a single update.
Stores close rank gaps before inserting so positions and ranks agree.

Each tier also carries a relative score derived from rank order: the top item
gets the tier's highest score and the rest step down evenly, at least
MIN_SCORE_STEP apart while the range has room, never leaving it.
"""

from pathlib import Path
from typing import Dict, Mapping, Protocol, Tuple

from tier_placement.utils.config import DEFAULT_CONFIG, PlacementConfig
from tier_placement.utils.io_helpers import read_json, write_json
from tier_placement.utils.logging_helper import get_logger

log = get_logger()

MIN_SCORE_STEP = 0.1


class RankingStore(Protocol):
    def get_ranked(self, user_id: str, tier: str) -> Dict[str, int]:
        """Current ``item id -> rank`` mapping of one user's tier."""

    def insert(self, user_id: str, tier: str, item_id: str, position: int) -> Dict[str, int]:
        """Insert *item_id* at *position* and return the renumbered tier."""

    def get_scores(self, user_id: str, tier: str) -> Dict[str, float]:
        """Relative score of every item in the tier, best first."""


def insert_at_position(ranks: Mapping[str, int], item_id: str, position: int) -> Dict[str, int]:
    """
    Return a new mapping with *item_id* at *position*.

    Existing items ranked at or below *position* move down one place; items
    above it keep their rank.

    Raises:
        ValueError: If the item is already ranked or *position* is outside
            ``[1, len(ranks) + 1]``.
    """
    if item_id in ranks:
        raise ValueError(f"Item {item_id!r} is already ranked at {ranks[item_id]}")
    if not 1 <= position <= len(ranks) + 1:
        raise ValueError(f"Position {position} outside 1-{len(ranks) + 1}")

    updated = {other: rank + 1 if rank >= position else rank for other, rank in ranks.items()}
    updated[item_id] = position
    return updated


def normalize_ranks(ranks: Mapping[str, int]) -> Dict[str, int]:
    """Close gaps so ranks run 1..n in their current order."""
    ordered = sorted(ranks, key=ranks.__getitem__)
    return {item_id: i for i, item_id in enumerate(ordered, 1)}


def redistribute_scores(ranks: Mapping[str, int], score_range: Tuple[float, float]) -> Dict[str, float]:
    """
    Spread *score_range* over the items of a tier in rank order.

    The top item gets the highest score. Later items step down by
    ``max(MIN_SCORE_STEP, width / (n - 1))``, keep at least MIN_SCORE_STEP
    below their predecessor while room remains, and are rounded to one
    decimal and clamped to the range.

    Returns:
        ``item id -> score``, ordered best-first.
    """
    low, high = score_range
    ordered = sorted(ranks, key=ranks.__getitem__)
    if not ordered:
        return {}

    step = max(MIN_SCORE_STEP, (high - low) / max(1, len(ordered) - 1))
    scores = {ordered[0]: high}
    previous = high
    for i, item_id in enumerate(ordered[1:], 1):
        score = min(high - i * step, previous - MIN_SCORE_STEP)
        if score < low:
            # out of room: share what is left among the remaining items
            remaining = len(ordered) - i
            available = previous - low
            if available > remaining * MIN_SCORE_STEP:
                score = previous - available / remaining * 0.9
            else:
                score = max(low, previous - MIN_SCORE_STEP)
        score = min(max(round(score, 1), low), high)
        scores[item_id] = score
        previous = score
    return scores


def _log_shifts(user_id: str, tier: str, before: Mapping[str, int], after: Mapping[str, int]) -> None:
    moved = [i for i in after if i in before and before[i] != after[i]]
    new = [i for i in after if i not in before]
    log.info(f"[RankingStore] {user_id}/{tier}: inserted {new} at {[after[i] for i in new]}, shifted {len(moved)} item(s)")


class _ScoredTiers:
    """Score lookups shared by the stores; scores are derived from ranks, never stored."""

    config: PlacementConfig = DEFAULT_CONFIG

    def _scores_for(self, tier: str, ranks: Mapping[str, int]) -> Dict[str, float]:
        score_range = self.config.score_range(tier)
        if score_range is None:
            return {}
        return redistribute_scores(ranks, score_range)

    def get_scores(self, user_id: str, tier: str) -> Dict[str, float]:
        """Relative scores for the tier, or an empty dict when it has no score range."""
        return self._scores_for(tier, self.get_ranked(user_id, tier))


class InMemoryRankingStore(_ScoredTiers):
    """Dict-backed store, mainly for tests and dry runs."""

    def __init__(
        self,
        rankings: Mapping[Tuple[str, str], Mapping[str, int]] | None = None,
        config: PlacementConfig = DEFAULT_CONFIG,
    ):
        self.config = config
        self._tiers: Dict[Tuple[str, str], Dict[str, int]] = {
            key: dict(ranks) for key, ranks in (rankings or {}).items()
        }

    def get_ranked(self, user_id: str, tier: str) -> Dict[str, int]:
        return dict(self._tiers.get((user_id, tier), {}))

    def insert(self, user_id: str, tier: str, item_id: str, position: int) -> Dict[str, int]:
        before = normalize_ranks(self._tiers.get((user_id, tier), {}))
        after = insert_at_position(before, item_id, position)
        self._tiers[(user_id, tier)] = after
        _log_shifts(user_id, tier, before, after)
        log.debug(f"[RankingStore] {user_id}/{tier} scores: {self._scores_for(tier, after)}")
        return dict(after)


class JsonRankingStore(_ScoredTiers):
    """
    File-backed store. Layout::

        {"<user>": {"<tier>": {"<item id>": <rank>, ...}, ...}, ...}

    Each insert rewrites the file through a single rename. Scores are not
    written; they follow from the ranks and the configured ranges.
    """

    def __init__(self, path: Path, config: PlacementConfig = DEFAULT_CONFIG):
        self.path = Path(path)
        self.config = config

    def _load(self) -> Dict[str, Dict[str, Dict[str, int]]]:
        if not self.path.exists():
            return {}
        data = read_json(self.path)
        if not isinstance(data, dict):
            raise ValueError(f"Rankings file must hold a JSON object: {self.path}")
        return data

    def get_ranked(self, user_id: str, tier: str) -> Dict[str, int]:
        return {item: int(rank) for item, rank in self._load().get(user_id, {}).get(tier, {}).items()}

    def insert(self, user_id: str, tier: str, item_id: str, position: int) -> Dict[str, int]:
        data = self._load()
        before = normalize_ranks({item: int(rank) for item, rank in data.get(user_id, {}).get(tier, {}).items()})
        after = insert_at_position(before, item_id, position)
        data.setdefault(user_id, {})[tier] = after
        write_json(self.path, data)
        _log_shifts(user_id, tier, before, after)
        log.debug(f"[RankingStore] {user_id}/{tier} scores: {self._scores_for(tier, after)}")
        return dict(after)
