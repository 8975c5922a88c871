"""Tests for ideaplan.breakdown.dependencies module."""

import itertools
import random

from ideaplan.breakdown.dependencies import DependencyGraphBuilder
from ideaplan.breakdown.models import Edge, Task


def task(tid, hours, deps=()):
    return Task(id=tid, title=tid, estimated_hours=hours, dependencies=list(deps))


def is_acyclic(nodes, edges):
    succ = {n: [] for n in nodes}
    for e in edges:
        succ[e.from_id].append(e.to_id)
    state = {}

    def visit(n):
        if state.get(n) == 1:
            return False
        if state.get(n) == 2:
            return True
        state[n] = 1
        ok = all(visit(m) for m in succ[n])
        state[n] = 2
        return ok

    return all(visit(n) for n in nodes)


def all_source_sink_paths(nodes, edges):
    succ = {n: [] for n in nodes}
    indeg = {n: 0 for n in nodes}
    for e in edges:
        succ[e.from_id].append(e.to_id)
        indeg[e.to_id] += 1

    def walk(path):
        tail = succ[path[-1]]
        if not tail:
            yield path
        for nxt in tail:
            yield from walk(path + [nxt])

    for n in nodes:
        if indeg[n] == 0:
            yield from walk([n])


class TestBuild:
    """Tests for build()."""

    def test_empty_graph(self):
        graph = DependencyGraphBuilder().build([])
        assert graph.nodes == []
        assert graph.edges == []
        assert graph.critical_path == []

    def test_edges_point_from_dependency_to_dependent(self):
        graph = DependencyGraphBuilder().build([task("a", 1), task("b", 1, ["a"])])
        assert graph.edges == [Edge("a", "b")]

    def test_unknown_and_duplicate_edges_skipped(self):
        graph = DependencyGraphBuilder().build([task("a", 1), task("b", 1, ["a", "a", "zzz"])])
        assert graph.edges == [Edge("a", "b")]

    def test_cycle_broken(self):
        tasks = [task("a", 1, ["c"]), task("b", 1, ["a"]), task("c", 1, ["b"])]
        graph = DependencyGraphBuilder().build(tasks)
        assert is_acyclic(graph.nodes, graph.edges)
        assert len(graph.removed_edges) == 1
        assert len(graph.edges) == 2

    def test_self_loop_removed(self):
        graph = DependencyGraphBuilder().build([task("a", 1, ["a"])])
        assert graph.edges == []
        assert graph.removed_edges == [Edge("a", "a")]

    def test_critical_path_is_heaviest_chain(self):
        tasks = [
            task("a", 5),
            task("b", 10, ["a"]),
            task("c", 2, ["a"]),
            task("d", 1, ["b", "c"]),
        ]
        assert DependencyGraphBuilder().build(tasks).critical_path == ["a", "b", "d"]

    def test_independent_tasks_pick_heaviest(self):
        tasks = [task("a", 1), task("b", 8), task("c", 3)]
        assert DependencyGraphBuilder().build(tasks).critical_path == ["b"]

    def test_ties_prefer_smaller_ids(self):
        tasks = [task("t_2", 4), task("t_1", 4)]
        assert DependencyGraphBuilder().build(tasks).critical_path == ["t_1"]

    def test_deterministic(self):
        tasks = [task("a", 2), task("b", 2, ["a"]), task("c", 2, ["a"])]
        runs = {tuple(DependencyGraphBuilder().build(tasks).critical_path) for _ in range(5)}
        assert runs == {("a", "b")}

    def test_random_graphs_acyclic_with_maximal_path(self):
        rng = random.Random(11)
        for _ in range(40):
            ids = [f"t_{i}" for i in range(1, rng.randint(2, 7))]
            tasks = [
                task(i, rng.randint(0, 9), rng.sample(ids, rng.randint(0, min(3, len(ids)))))
                for i in ids
            ]
            graph = DependencyGraphBuilder().build(tasks)
            assert is_acyclic(graph.nodes, graph.edges)

            hours = {t.id: t.estimated_hours for t in tasks}
            best = max(sum(hours[n] for n in p) for p in all_source_sink_paths(graph.nodes, graph.edges))
            assert sum(hours[n] for n in graph.critical_path) == best

            kept = {(e.from_id, e.to_id) for e in graph.edges}
            for a, b in itertools.pairwise(graph.critical_path):
                assert (a, b) in kept
