"""
contradictions.py - Spot cyclic preferences in a comparison history

Every answer goes through the new item, so a loss to X after a win over Y
implies X is preferred over Y. Those implied edges form a preference graph;
a cycle in it means no total order satisfies all the answers. This only sees
edges that pass through the new item, so it is a warning signal rather than a
full consistency proof.
"""

from typing import Dict, List, Sequence

from .types import ComparisonRecord, ComparisonResult, ItemId


def _preference_graph(history: Sequence[ComparisonRecord]) -> Dict[ItemId, List[ItemId]]:
    history = [ComparisonRecord.coerce(record) for record in history]
    graph: Dict[ItemId, List[ItemId]] = {record.comparison_id: [] for record in history}
    for i, record in enumerate(history):
        if record.result is not ComparisonResult.WORSE:
            continue
        for earlier in history[:i]:
            if earlier.result is ComparisonResult.BETTER:
                graph[record.comparison_id].append(earlier.comparison_id)
    return graph


def find_preference_cycles(history: Sequence[ComparisonRecord]) -> List[List[ItemId]]:
    """
    All distinct cycles reachable by depth-first search over the implied
    preference graph. Each cycle is rotated to start at its smallest id.
    """
    graph = _preference_graph(history)
    cycles: List[List[ItemId]] = []
    visited = set()

    def visit(node: ItemId, path: List[ItemId], rec_stack: set) -> None:
        visited.add(node)
        rec_stack.add(node)
        path.append(node)

        for neighbor in graph.get(node, []):
            if neighbor not in visited:
                visit(neighbor, path, rec_stack)
            elif neighbor in rec_stack:
                cycle = path[path.index(neighbor):]
                start = cycle.index(min(cycle))
                normalized = cycle[start:] + cycle[:start]
                if normalized not in cycles:
                    cycles.append(normalized)

        path.pop()
        rec_stack.remove(node)

    for node in graph:
        if node not in visited:
            visit(node, [], set())

    return cycles


def detect_contradictions(history: Sequence[ComparisonRecord]) -> bool:
    """True when the answers in *history* cannot all hold in one ranking."""
    return bool(find_preference_cycles(history))
