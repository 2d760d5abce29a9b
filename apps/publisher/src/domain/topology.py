"""
Topological ordering of the dependency graph.
"""

from __future__ import annotations

import heapq
from typing import Dict, List, Mapping, Sequence

from libs.errors import CycleError, GraphError


def topological_sort(dependencies: Mapping[str, Sequence[str]]) -> List[str]:
    """
    Order nodes so that every node comes after all the nodes it depends on.

    Kahn's algorithm: nodes with no pending dependency are ready; emitting a
    node releases its dependents. Among ready nodes the lexicographically
    smallest is emitted first, so equal inputs always give the same order.

    Example:
        {"A": ["B", "C"], "B": ["D"], "C": ["D"], "D": []} -> ["D", "B", "C", "A"]

    Raises:
        GraphError: a node depends on something that is not a node of the graph.
        CycleError: the graph has a cycle; no partial order is returned.
    """
    in_degree: Dict[str, int] = {node: 0 for node in dependencies}
    dependents: Dict[str, List[str]] = {node: [] for node in dependencies}

    for node, deps in dependencies.items():
        for dep in set(deps):
            if dep not in dependents:
                raise GraphError(f"{node} depends on {dep}, which is not part of the graph")
            dependents[dep].append(node)
            in_degree[node] += 1

    ready = [node for node, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)
    order: List[str] = []

    while ready:
        node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, dependent)

    if len(order) != len(in_degree):
        raise CycleError(node for node, degree in in_degree.items() if degree > 0)
    return order
