"""
types.py - Value objects threaded through a placement run

Everything here is immutable: a transition builds a new PlacementState rather
than editing the old one, so an in-flight run can be snapshotted, replayed or
dropped at any step.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

ItemId = str


class PlacementContractError(ValueError):
    """A caller broke the engine's input contract (programmer error)."""


class UnknownItemError(PlacementContractError, KeyError):
    """An item id has no rank in the tier being placed into."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class Strategy(str, Enum):
    DIRECT = "direct"
    SIMPLE = "simple"
    TWO_ZONE = "two_zone"
    FULL_ZONE = "full_zone"


class Zone(str, Enum):
    TOP = "top"
    UPPER_MIDDLE = "upper_middle"
    MIDDLE = "middle"
    LOWER_MIDDLE = "lower_middle"
    BOTTOM = "bottom"


ZONE_ORDER: Tuple[Zone, ...] = (
    Zone.TOP, Zone.UPPER_MIDDLE, Zone.MIDDLE, Zone.LOWER_MIDDLE, Zone.BOTTOM,
)


class ComparisonResult(str, Enum):
    BETTER = "better"    # new item preferred over the comparison item
    WORSE = "worse"      # comparison item preferred over the new item
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ZoneBounds:
    start: int
    end: int


@dataclass(frozen=True)
class Bounds:
    """Range of final positions still consistent with the answers so far."""

    lower: int
    upper: int

    @property
    def midpoint(self) -> int:
        """ceil((lower + upper) / 2)"""
        return (self.lower + self.upper + 1) // 2

    @property
    def resolved(self) -> bool:
        return self.lower == self.upper


@dataclass(frozen=True)
class ComparisonRecord:
    comparison_id: ItemId
    result: ComparisonResult

    def __post_init__(self) -> None:
        # accept plain strings ("better") as well as the enum
        object.__setattr__(self, "result", ComparisonResult(self.result))

    @classmethod
    def coerce(cls, value) -> "ComparisonRecord":
        """Accept a record, a ``(id, result)`` pair or a ``{"comparison_id", "result"}`` dict."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(value.get("comparison_id", value.get("comparisonId")), value["result"])
        comparison_id, result = value
        return cls(comparison_id, result)


class RankMap(Mapping):
    """Read-only ``item id -> rank`` snapshot of one tier (1 = best).

    Ranks must be positive and unique within the tier but need not be
    contiguous; gaps left by deletions are tolerated. The engine works in
    positions, the 1-based place of each item in rank order, so ranks
    ``{a: 2, b: 5, c: 9}`` put ``b`` at position 2.
    """

    __slots__ = ("_ranks", "_positions", "_ordered")

    def __init__(self, ranks: Optional[Mapping[ItemId, int] | Iterable[Tuple[ItemId, int]]] = None):
        items = dict(ranks or {})
        seen: Dict[int, ItemId] = {}
        for item_id, rank in items.items():
            if isinstance(rank, bool) or not isinstance(rank, int) or rank < 1:
                raise PlacementContractError(f"Rank for {item_id!r} must be a positive int, got {rank!r}")
            if rank in seen:
                raise PlacementContractError(
                    f"Duplicate rank {rank} for {seen[rank]!r} and {item_id!r}"
                )
            seen[rank] = item_id
        ordered = tuple(seen[rank] for rank in sorted(seen))
        self._ranks = MappingProxyType(items)
        self._positions = MappingProxyType({item_id: i for i, item_id in enumerate(ordered, 1)})
        self._ordered = ordered

    def __getitem__(self, item_id: ItemId) -> int:
        return self._ranks[item_id]

    def __iter__(self) -> Iterator[ItemId]:
        return iter(self._ranks)

    def __len__(self) -> int:
        return len(self._ranks)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._ranks) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._ranks.items()))

    def __repr__(self) -> str:
        return f"RankMap({dict(self._ranks)!r})"

    @property
    def contiguous(self) -> bool:
        """True when ranks run 1..n, i.e. every rank equals its position."""
        return all(self._ranks[item_id] == i for i, item_id in enumerate(self._ordered, 1))

    def position_of(self, item_id: ItemId) -> int:
        """Position of *item_id* in rank order, raising UnknownItemError when it is not in the tier."""
        try:
            return self._positions[item_id]
        except KeyError:
            raise UnknownItemError(f"Item {item_id!r} has no rank in this tier") from None

    def item_at(self, position: int) -> Optional[ItemId]:
        """Item holding *position* (1 = best), or None outside ``1..len``."""
        if 1 <= position <= len(self._ordered):
            return self._ordered[position - 1]
        return None

    def sorted_ids(self, ids: Iterable[ItemId]) -> List[ItemId]:
        """*ids* ordered best-first."""
        return sorted(ids, key=self.position_of)


@dataclass(frozen=True)
class PlacementMetrics:
    """Diagnostics only; nothing in the engine reads these back."""

    started_at: float
    comparison_times: Tuple[float, ...] = ()
    zones_visited: Tuple[Zone, ...] = ()


@dataclass(frozen=True)
class PlacementState:
    item_id: ItemId
    tier: str
    strategy: Strategy
    current_zone: Zone
    zones: Mapping[Zone, ZoneBounds]
    item_rank_map: RankMap
    existing_count: int
    bounds: Bounds
    max_comparisons: int
    completed_comparisons: int = 0
    compared_item_ids: frozenset = frozenset()
    history: Tuple[ComparisonRecord, ...] = ()
    is_complete: bool = False
    last_result: Optional[ComparisonResult] = None
    metrics: Optional[PlacementMetrics] = field(default=None, compare=False, repr=False)

    @property
    def last_position(self) -> int:
        """One past the last existing item: the lowest position the new item can take."""
        return self.existing_count + 1

    @property
    def results(self) -> Tuple[ComparisonResult, ...]:
        return tuple(record.result for record in self.history)

    def remaining_candidates(self) -> List[ItemId]:
        """Ranked items not yet compared, best-first."""
        return self.item_rank_map.sorted_ids(
            item_id for item_id in self.item_rank_map
            if item_id not in self.compared_item_ids and item_id != self.item_id
        )
