import itertools
import random

import pytest

from libs.errors import CycleError, GraphError

from apps.publisher.src.domain.topology import topological_sort


def assert_valid_order(dependencies, order):
    assert len(order) == len(dependencies)
    assert set(order) == set(dependencies)
    position = {node: index for index, node in enumerate(order)}
    for node, deps in dependencies.items():
        for dep in deps:
            assert position[dep] < position[node], f"{dep} must precede {node}"


def test_diamond():
    deps = {"A": ["B", "C"], "B": ["D"], "C": ["D"], "D": []}

    assert topological_sort(deps) == ["D", "B", "C", "A"]


def test_empty_graph():
    assert topological_sort({}) == []


def test_independent_nodes_are_sorted_lexicographically():
    assert topological_sort({"b": [], "c": [], "a": []}) == ["a", "b", "c"]


def test_order_does_not_depend_on_insertion_order():
    deps = {"A": ["B", "C"], "B": ["D"], "C": ["D"], "D": [], "E": []}
    expected = topological_sort(deps)

    for permutation in itertools.permutations(deps):
        assert topological_sort({node: deps[node] for node in permutation}) == expected


def test_random_acyclic_graphs_respect_every_edge():
    rng = random.Random(7)
    for _ in range(50):
        nodes = [f"n{i}" for i in range(rng.randint(1, 12))]
        # edges only point to earlier nodes, so the graph is acyclic
        deps = {
            node: rng.sample(nodes[:index], rng.randint(0, index))
            for index, node in enumerate(nodes)
        }

        assert_valid_order(deps, topological_sort(deps))


def test_duplicate_edges_are_counted_once():
    deps = {"A": ["B", "B"], "B": []}

    assert topological_sort(deps) == ["B", "A"]


@pytest.mark.parametrize(
    "deps",
    [
        {"A": ["B"], "B": ["A"]},
        {"A": ["A"]},
        {"A": ["B"], "B": ["C"], "C": ["A"], "D": []},
    ],
)
def test_cycle_is_fatal(deps):
    with pytest.raises(CycleError) as excinfo:
        topological_sort(deps)

    assert "cycle" in str(excinfo.value)
    assert "D" not in excinfo.value.nodes


def test_unknown_dependency_is_a_graph_error():
    with pytest.raises(GraphError, match="not part of the graph"):
        topological_sort({"A": ["missing"]})
