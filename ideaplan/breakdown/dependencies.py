"""
Dependency graph stage.

Builds the task graph (dependency -> dependent), breaks any cycles by
dropping the edge that closes them, and finds the critical path: the
source-to-sink path with the most estimated hours.
"""

import logging
from collections import deque

from .models import DependencyGraph, Edge, Task

logger = logging.getLogger(__name__)

# DFS colours
_UNSEEN, _ON_STACK, _DONE = 0, 1, 2


class DependencyGraphBuilder:
    def build(self, tasks: list[Task]) -> DependencyGraph:
        nodes = [t.id for t in tasks]
        edges = self._collect_edges(tasks, set(nodes))
        removed = self._break_cycles(nodes, edges)

        removed_set = set(removed)
        kept = [e for e in edges if e not in removed_set]
        hours = {t.id: max(0.0, t.estimated_hours) for t in tasks}
        critical_path = self._critical_path(nodes, kept, hours)

        logger.info(
            f"Dependency graph: {len(nodes)} nodes, {len(kept)} edges, "
            f"critical path {len(critical_path)} tasks"
        )
        return DependencyGraph(nodes=nodes, edges=kept, critical_path=critical_path, removed_edges=removed)

    @staticmethod
    def _collect_edges(tasks: list[Task], known: set[str]) -> list[Edge]:
        edges: list[Edge] = []
        seen: set[Edge] = set()
        for task in tasks:
            for dep in task.dependencies:
                if dep not in known:
                    logger.debug(f"Skipping edge from unknown task {dep} to {task.id}")
                    continue
                edge = Edge(from_id=dep, to_id=task.id)
                if edge not in seen:
                    seen.add(edge)
                    edges.append(edge)
        return edges

    @staticmethod
    def _break_cycles(nodes: list[str], edges: list[Edge]) -> list[Edge]:
        """Iterative DFS in node order; an edge into the current stack is removed."""
        out: dict[str, list[Edge]] = {n: [] for n in nodes}
        for e in edges:
            out[e.from_id].append(e)

        colour = {n: _UNSEEN for n in nodes}
        removed: list[Edge] = []

        for root in nodes:
            if colour[root] != _UNSEEN:
                continue
            colour[root] = _ON_STACK
            stack = [(root, 0)]
            while stack:
                node, i = stack[-1]
                if i == len(out[node]):
                    colour[node] = _DONE
                    stack.pop()
                    continue
                stack[-1] = (node, i + 1)
                edge = out[node][i]
                target = colour[edge.to_id]
                if target == _ON_STACK:
                    logger.warning(f"Removed edge {edge.from_id} -> {edge.to_id} to break a cycle")
                    removed.append(edge)
                elif target == _UNSEEN:
                    colour[edge.to_id] = _ON_STACK
                    stack.append((edge.to_id, 0))
        return removed

    @staticmethod
    def _critical_path(nodes: list[str], edges: list[Edge], hours: dict[str, float]) -> list[str]:
        """Heaviest source-to-sink path; ties go to the smaller id sequence."""
        if not nodes:
            return []

        succ: dict[str, list[str]] = {n: [] for n in nodes}
        indegree = {n: 0 for n in nodes}
        for e in edges:
            succ[e.from_id].append(e.to_id)
            indegree[e.to_id] += 1

        # Kahn's algorithm, node order for determinism
        remaining = dict(indegree)
        queue = deque(n for n in nodes if remaining[n] == 0)
        order = []
        while queue:
            node = queue.popleft()
            order.append(node)
            for nxt in succ[node]:
                remaining[nxt] -= 1
                if remaining[nxt] == 0:
                    queue.append(nxt)

        # best[n] = (weight, path) of the heaviest path starting at n
        best: dict[str, tuple[float, list[str]]] = {}
        for node in reversed(order):
            tail: tuple[float, list[str]] = (0.0, [])
            for nxt in succ[node]:
                if _better(best[nxt], tail):
                    tail = best[nxt]
            best[node] = (hours[node] + tail[0], [node] + tail[1])

        winner = None
        for node in nodes:
            if indegree[node] == 0 and (winner is None or _better(best[node], winner)):
                winner = best[node]
        return winner[1] if winner else []


def _better(candidate: tuple[float, list[str]], current: tuple[float, list[str]]) -> bool:
    cw, cp = round(candidate[0], 6), candidate[1]
    w, p = round(current[0], 6), current[1]
    if cw != w:
        return cw > w
    return not p or cp < p
