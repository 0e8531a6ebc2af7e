"""
Tests for vertex assignments and edge-operation induction.
"""

import os
import sys

import networkx as nx
import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from matching import (
    EdgeOperations,
    best_match_first,
    cost_matrix,
    induce_edge_operations,
    optimal_assignment,
)
from utils.dissimilarity import absolute_difference, delta


def labeled_graph(labels, edges=(), directed=False):
    graph = nx.DiGraph() if directed else nx.Graph()
    for node, label in labels.items():
        graph.add_node(node, label=label)
    for edge in edges:
        u, v = edge[0], edge[1]
        label = edge[2] if len(edge) > 2 else None
        graph.add_edge(u, v, label=label)
    return graph


# ---------------------------------------------------------------------------
# best_match_first
# ---------------------------------------------------------------------------

class TestBestMatchFirst:

    def test_exact_labels_matched(self):
        g1 = labeled_graph({"A": "a", "B": "b", "C": "c"})
        g2 = labeled_graph({"X": "c", "Y": "a", "Z": "b"})
        assignment, total = best_match_first(g1, g2, delta)
        assert assignment == {"A": "Y", "B": "Z", "C": "X"}
        assert total == 0

    def test_first_minimum_wins_ties(self):
        g1 = labeled_graph({"n": 1})
        g2 = labeled_graph({"p": 0, "q": 2})
        assignment, total = best_match_first(g1, g2, absolute_difference)
        assert assignment == {"n": "p"}
        assert total == 1

    def test_greedy_is_not_optimal(self):
        g1 = labeled_graph({1: 0, 2: 5})
        g2 = labeled_graph({"a": 4, "b": 10})
        _, greedy_total = best_match_first(g2, g1, absolute_difference)
        _, optimal_total = optimal_assignment(g2, g1, absolute_difference)
        assert greedy_total == 11
        assert optimal_total == 9

    def test_stops_when_second_graph_exhausted(self):
        g1 = labeled_graph({1: 0, 2: 0, 3: 0})
        g2 = labeled_graph({"x": 0})
        assignment, _ = best_match_first(g1, g2, delta)
        assert assignment == {1: "x"}

    def test_visiting_order(self):
        g1 = labeled_graph({1: 0, 2: 0})
        g2 = labeled_graph({"x": 0, "y": 0})
        assignment, _ = best_match_first(g1, g2, delta, order=[2, 1])
        assert list(assignment.items()) == [(2, "x"), (1, "y")]

    def test_empty_graphs(self):
        assignment, total = best_match_first(nx.Graph(), labeled_graph({1: 0}), delta)
        assert assignment == {}
        assert total == 0


# ---------------------------------------------------------------------------
# optimal_assignment
# ---------------------------------------------------------------------------

class TestOptimalAssignment:

    def test_cost_matrix_layout(self):
        g1 = labeled_graph({"a": 0, "b": 1})
        g2 = labeled_graph({"x": 0, "y": 2, "z": 5})
        costs = cost_matrix(g1, g2, absolute_difference)
        assert costs.tolist() == [[0, 2, 5], [1, 1, 4]]

    def test_rectangular(self):
        g1 = labeled_graph({"a": 0, "b": 1})
        g2 = labeled_graph({"x": 0, "y": 2, "z": 5})
        assignment, total = optimal_assignment(g1, g2, absolute_difference)
        assert assignment == {"a": "x", "b": "y"}
        assert total == 1

    def test_more_vertices_in_first_graph(self):
        g1 = labeled_graph({"x": 0, "y": 2, "z": 5})
        g2 = labeled_graph({"a": 0, "b": 1})
        assignment, total = optimal_assignment(g1, g2, absolute_difference)
        assert assignment == {"x": "a", "y": "b"}
        assert total == 1

    def test_total_is_float(self):
        g = labeled_graph({1: 3})
        _, total = optimal_assignment(g, g, absolute_difference)
        assert isinstance(total, float)


# ---------------------------------------------------------------------------
# induce_edge_operations
# ---------------------------------------------------------------------------

class TestInduceEdgeOperations:

    def test_substitutions(self):
        g1 = labeled_graph({1: 0, 2: 0, 3: 0}, [(1, 2, 0.5), (2, 3, 1.0)])
        g2 = labeled_graph({"a": 0, "b": 0, "c": 0}, [("a", "b", 0.0), ("b", "c", 1.0)])
        ops = induce_edge_operations(g1, g2, {1: "a", 2: "b", 3: "c"}, absolute_difference)
        assert ops == EdgeOperations(substitution_cost=0.5, substitution_count=2)

    def test_insertions_and_deletions(self):
        g1 = labeled_graph({1: 0, 2: 0, 3: 0}, [(1, 2)])
        g2 = labeled_graph({"a": 0, "b": 0, "c": 0}, [("b", "c")])
        ops = induce_edge_operations(g1, g2, {1: "a", 2: "b", 3: "c"}, delta)
        assert ops.insertion_count == 1
        assert ops.deletion_count == 1
        assert ops.ins_del_count == 2
        assert ops.substitution_count == 0

    def test_substitutions_unmeasured(self):
        g1 = labeled_graph({1: 0, 2: 0}, [(1, 2, 0)])
        g2 = labeled_graph({"a": 0, "b": 0}, [("a", "b", 7)])
        ops = induce_edge_operations(g1, g2, {1: "a", 2: "b"}, absolute_difference,
                                     measure_substitutions=False)
        assert ops.substitution_count == 1
        assert ops.substitution_cost == 0

    def test_edges_with_unmatched_endpoint(self):
        g1 = labeled_graph({1: 0, 2: 0})
        g2 = labeled_graph({"a": 0, "b": 0, "c": 0}, [("a", "b"), ("b", "c")])
        ops = induce_edge_operations(g1, g2, {1: "a", 2: "b"}, delta)
        # a-b is a deletion between matched vertices, b-c touches unmatched c
        assert ops.deletion_count == 2
        assert ops.insertion_count == 0

    def test_empty_assignment_counts_every_edge(self):
        g1 = labeled_graph({1: 0, 2: 0}, [(1, 2)])
        ops = induce_edge_operations(g1, nx.Graph(), {}, delta)
        assert ops.insertion_count == 1

    def test_self_loops_ignored(self):
        g1 = labeled_graph({1: 0, 2: 0}, [(1, 1), (1, 2)])
        g2 = labeled_graph({"a": 0, "b": 0}, [("a", "b"), ("b", "b")])
        ops = induce_edge_operations(g1, g2, {1: "a", 2: "b"}, delta)
        assert ops == EdgeOperations(substitution_count=1)

    def test_directed_pairs_are_ordered(self):
        g1 = labeled_graph({1: 0, 2: 0}, [(1, 2)], directed=True)
        g2 = labeled_graph({"a": 0, "b": 0}, [("b", "a")], directed=True)
        ops = induce_edge_operations(g1, g2, {1: "a", 2: "b"}, delta)
        assert ops.insertion_count == 1
        assert ops.deletion_count == 1
        assert ops.substitution_count == 0

    def test_undirected_pair_counted_once(self):
        g = labeled_graph({1: 0, 2: 0}, [(1, 2)])
        ops = induce_edge_operations(g, g, {1: 1, 2: 2}, delta)
        assert ops.substitution_count == 1
