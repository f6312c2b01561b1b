"""
config.py - Placement thresholds, comparison budget and YAML overrides

Defaults mirror the product's tuning. A YAML file may override any field:

    zone_thresholds:
      simple: 4
      two_zone: 8
    comparison_budget:
      - [0, 0]
      - [1, 1]
      - [2, 2]
      - [5, 3]
      - [10, 4]
      - [20, 5]
    max_budget: 6
    jitter_above: 10
    tiers: [liked, fine, didnt_like]
    score_ranges:
      liked: [7.0, 10.0]
      fine: [3.0, 6.9]
      didnt_like: [0.0, 2.9]

The file is taken from the explicit path, else $TIER_PLACEMENT_CONFIG, else
``config/placement.yaml`` under the project root when it exists.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .io_helpers import read_utf8
from .paths import DEFAULT_CONFIG_FILE

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementConfig:
    """Tunable numbers behind strategy selection and comparison budgets."""

    # Largest collection handled by the `direct` / `simple` / `two_zone` strategies
    direct_max: int = 1
    simple_max: int = 4
    two_zone_max: int = 8
    # (max existing count, comparisons) steps, ascending; anything larger gets max_budget
    budget_steps: Tuple[Tuple[int, int], ...] = (
        (0, 0), (1, 1), (2, 2), (5, 3), (10, 4), (20, 5),
    )
    max_budget: int = 6
    # Collections above this size get ±1 jitter on the suggested initial position
    jitter_above: int = 10
    tiers: Tuple[str, ...] = ("liked", "fine", "didnt_like")
    # (tier, lowest score, highest score); the best item in a tier gets the highest
    score_ranges: Tuple[Tuple[str, float, float], ...] = (
        ("liked", 7.0, 10.0), ("fine", 3.0, 6.9), ("didnt_like", 0.0, 2.9),
    )
    source: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not (0 <= self.direct_max <= self.simple_max <= self.two_zone_max):
            raise ValueError(
                f"Strategy thresholds must ascend: direct={self.direct_max}, "
                f"simple={self.simple_max}, two_zone={self.two_zone_max}"
            )
        limits = [limit for limit, _ in self.budget_steps]
        if limits != sorted(limits) or len(set(limits)) != len(limits):
            raise ValueError(f"Budget steps must be strictly ascending: {limits}")
        if any(budget < 0 for _, budget in self.budget_steps) or self.max_budget < 0:
            raise ValueError("Comparison budgets must be non-negative")
        for tier, low, high in self.score_ranges:
            if low > high:
                raise ValueError(f"Score range for {tier} is inverted: {low} > {high}")

    def score_range(self, tier: str) -> Optional[Tuple[float, float]]:
        """``(low, high)`` scores for *tier*, or None when the tier has no range."""
        for name, low, high in self.score_ranges:
            if name == tier:
                return low, high
        return None


DEFAULT_CONFIG = PlacementConfig()


def _from_mapping(data: Dict[str, Any], source: str) -> PlacementConfig:
    overrides: Dict[str, Any] = {"source": source}

    thresholds = data.get("zone_thresholds") or {}
    for key, attr in (("direct", "direct_max"), ("simple", "simple_max"), ("two_zone", "two_zone_max")):
        if key in thresholds:
            overrides[attr] = int(thresholds[key])

    if "comparison_budget" in data:
        overrides["budget_steps"] = tuple(
            (int(limit), int(budget)) for limit, budget in data["comparison_budget"]
        )
    if "max_budget" in data:
        overrides["max_budget"] = int(data["max_budget"])
    if "jitter_above" in data:
        overrides["jitter_above"] = int(data["jitter_above"])
    if "tiers" in data:
        overrides["tiers"] = tuple(str(t) for t in data["tiers"])
    if "score_ranges" in data:
        overrides["score_ranges"] = tuple(
            (str(tier), float(low), float(high)) for tier, (low, high) in data["score_ranges"].items()
        )

    unknown = set(data) - {"zone_thresholds", "comparison_budget", "max_budget", "jitter_above", "tiers", "score_ranges"}
    if unknown:
        log.warning(f"Ignoring unknown config keys in {source}: {sorted(unknown)}")

    return replace(DEFAULT_CONFIG, **overrides)


def load_config(path: str | Path | None = None) -> PlacementConfig:
    """Load a PlacementConfig from YAML, falling back to the defaults.

    Args:
        path: Explicit YAML file. When omitted, $TIER_PLACEMENT_CONFIG and then
            the project's ``config/placement.yaml`` are tried.

    Raises:
        FileNotFoundError: If an explicitly named file does not exist.
        ValueError: If the file is not a mapping or the values are inconsistent.
    """
    load_dotenv()
    explicit = path or os.getenv("TIER_PLACEMENT_CONFIG")
    if explicit:
        config_path = Path(explicit)
        if not config_path.exists():
            raise FileNotFoundError(f"Placement config not found: {config_path}")
    elif DEFAULT_CONFIG_FILE.exists():
        config_path = DEFAULT_CONFIG_FILE
    else:
        return DEFAULT_CONFIG

    data = yaml.safe_load(read_utf8(config_path)) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Placement config must be a mapping: {config_path}")

    log.debug(f"Loaded placement config from {config_path}")
    return _from_mapping(data, str(config_path))
