#!/usr/bin/env python
"""
place_item.py – Place a newly reviewed item into a ranked tier by asking
"which do you prefer?" questions in the terminal.

Usage:
    tier-place --user alice --tier liked --item pebble_beach
    tier-place --rankings data/rankings.json --user alice --tier fine --item torrey_pines --dry-run
    python -m tier_placement.bin.place_item --user alice --tier liked --item bethpage --config config/placement.yaml
"""

import argparse
import random
import sys
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich import box

from tier_placement.core.placement import ComparisonResult, PlacementState
from tier_placement.core.ranking_store import InMemoryRankingStore, JsonRankingStore
from tier_placement.core.session import PlacementSession
from tier_placement.utils.config import load_config
from tier_placement.utils.logging_helper import get_logger
from tier_placement.utils.paths import DEFAULT_RANKINGS_FILE

console = Console()
log = get_logger()
# engine modules log through the standard hierarchy; give them the same handlers
get_logger(name="tier_placement.core.placement")

ANSWERS = {
    "1": ComparisonResult.BETTER,
    "2": ComparisonResult.WORSE,
    "s": ComparisonResult.SKIPPED,
}


def make_prompter(item_id: str, out: Console = console):
    """Build the ask() callback used by PlacementSession.run()."""

    def ask(candidate: str, state: PlacementState) -> ComparisonResult:
        out.print(
            f"\n[dim]Comparison {state.completed_comparisons + 1} of {state.max_comparisons}[/]"
        )
        out.print(f"  [bold cyan]1[/] {item_id}  [dim](new)[/]")
        out.print(f"  [bold cyan]2[/] {candidate}  [dim](currently #{state.item_rank_map[candidate]})[/]")
        choice = Prompt.ask("Which do you prefer?", choices=list(ANSWERS), default="s", console=out)
        return ANSWERS[choice]

    return ask


def render_ranking(
    tier: str,
    ranks: Dict[str, int],
    highlight: Optional[str] = None,
    scores: Optional[Dict[str, float]] = None,
) -> Table:
    table = Table(title=f"{tier} ranking", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right")
    table.add_column("Item")
    if scores:
        table.add_column("Score", justify="right")
    for item_id in sorted(ranks, key=ranks.__getitem__):
        style = "bold green" if item_id == highlight else None
        cells = [str(ranks[item_id]), item_id]
        if scores:
            cells.append(f"{scores[item_id]:.1f}")
        table.add_row(*cells, style=style)
    return table


def place_item(
    rankings_path: Path,
    user_id: str,
    tier: str,
    item_id: str,
    dry_run: bool = False,
    config_path: Optional[Path] = None,
    seed: Optional[int] = None,
) -> int:
    """
    Run one interactive placement and (unless *dry_run*) save it.

    Returns:
        The position the item was placed at.
    """
    config = load_config(config_path)
    if tier not in config.tiers:
        raise ValueError(f"Unknown tier {tier!r}; expected one of {', '.join(config.tiers)}")

    json_store = JsonRankingStore(rankings_path, config=config)
    store = json_store
    if dry_run:
        store = InMemoryRankingStore({(user_id, tier): json_store.get_ranked(user_id, tier)}, config=config)

    rng = random.Random(seed) if seed is not None else None
    session = PlacementSession.start(store, user_id, tier, item_id, config=config, rng=rng)
    state = session.state

    console.print(Panel.fit(
        f"Placing [bold]{item_id}[/] into [bold]{tier}[/] for {user_id}\n"
        f"{state.existing_count} ranked item(s), strategy [cyan]{state.strategy.value}[/], "
        f"up to {state.max_comparisons} comparison(s)",
        title="tier-place",
    ))

    position = session.run(make_prompter(item_id))
    log.info(f"{user_id}/{tier}: {item_id} placed at {position} after {session.state.completed_comparisons} comparison(s)")

    console.print(render_ranking(
        tier, store.get_ranked(user_id, tier), highlight=item_id, scores=store.get_scores(user_id, tier),
    ))
    if dry_run:
        console.print("[yellow]Dry run: rankings file not modified[/]")
    else:
        console.print(f"[green]✓ Saved to {rankings_path}[/]")
    return position


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Place a new item into a ranked tier with pairwise comparisons")
    p.add_argument("--rankings", type=Path, default=DEFAULT_RANKINGS_FILE,
                   help=f"Rankings JSON file (default: {DEFAULT_RANKINGS_FILE})")
    p.add_argument("--user", required=True, help="User whose tier is being ranked")
    p.add_argument("--tier", required=True, help="Sentiment tier, e.g. liked / fine / didnt_like")
    p.add_argument("--item", required=True, help="Id of the newly reviewed item")
    p.add_argument("--config", type=Path, default=None, help="Placement config YAML")
    p.add_argument("--seed", type=int, default=None, help="Seed for starting-position jitter")
    p.add_argument("--dry-run", action="store_true", help="Show the result without saving it")
    args = p.parse_args(argv)

    try:
        place_item(args.rankings, args.user, args.tier, args.item,
                   dry_run=args.dry_run, config_path=args.config, seed=args.seed)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/]")
        log.error(f"Placement failed: {e}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled; nothing was saved[/]")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
