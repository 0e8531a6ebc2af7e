from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterable, Optional, Tuple

import networkx as nx
import numpy as np

import config
from munkres import linear_assignment

Assignment = Dict[Hashable, Hashable]
DissimilarityAgent = Callable[[object, object], float]


@dataclass
class EdgeOperations:
    """Edit operations induced on the edges by a vertex assignment.

    Attributes
    ----------
    substitution_cost : float
        Sum of the edge dissimilarities of the substituted edges.
    substitution_count : int
        Number of edges present in both graphs between matched vertices.
    insertion_count : int
        Number of edges found only in the first graph.
    deletion_count : int
        Number of edges found only in the second graph.
    """

    substitution_cost: float = 0.0
    substitution_count: int = 0
    insertion_count: int = 0
    deletion_count: int = 0

    @property
    def ins_del_count(self) -> int:
        return self.insertion_count + self.deletion_count


def vertex_label(graph: nx.Graph, node, attribute: str = config.DEFAULT_ATTRIBUTE):
    return graph.nodes[node].get(attribute)


def edge_label(graph: nx.Graph, u, v, attribute: str = config.DEFAULT_ATTRIBUTE):
    return graph.edges[u, v].get(attribute)


def best_match_first(
    g1: nx.Graph,
    g2: nx.Graph,
    vertex_diss: DissimilarityAgent,
    order: Optional[Iterable] = None,
    attribute: str = config.DEFAULT_ATTRIBUTE,
) -> Tuple[Assignment, float]:
    """
    Greedy best-match-first vertex assignment.

    The vertices of ``g1`` are visited in ``order`` (native order by default).
    Each one is matched to the still-free vertex of ``g2`` with the strictly
    smallest dissimilarity; the first minimum encountered wins ties. The scan
    stops once every vertex of ``g2`` is taken.

    Parameters
    ----------
    g1, g2 : nx.Graph
        Input graphs.
    vertex_diss : callable
        Dissimilarity between two vertex labels.
    order : iterable, optional
        Visiting order of the vertices of ``g1``.
    attribute : str
        Vertex attribute handed to ``vertex_diss``.

    Returns
    -------
    tuple[dict, float]
        The assignment (in visiting order) and the sum of the matched
        dissimilarities.
    """
    visiting_order = list(g1.nodes) if order is None else list(order)
    candidates = list(g2.nodes)
    labels_2 = [vertex_label(g2, node, attribute) for node in candidates]
    taken = set()

    assignment: Assignment = {}
    total = 0.0
    for node in visiting_order:
        if len(assignment) >= len(candidates):
            break
        label_1 = vertex_label(g1, node, attribute)
        best, best_diss = None, None
        for candidate, label_2 in zip(candidates, labels_2):
            if candidate in taken:
                continue
            diss = vertex_diss(label_1, label_2)
            if best is None or diss < best_diss:
                best, best_diss = candidate, diss
        assignment[node] = best
        taken.add(best)
        total += best_diss

    return assignment, total


def cost_matrix(
    g1: nx.Graph,
    g2: nx.Graph,
    vertex_diss: DissimilarityAgent,
    attribute: str = config.DEFAULT_ATTRIBUTE,
) -> np.ndarray:
    """Vertex dissimilarities, rows in ``g1`` order and columns in ``g2`` order."""
    labels_1 = [vertex_label(g1, node, attribute) for node in g1.nodes]
    labels_2 = [vertex_label(g2, node, attribute) for node in g2.nodes]
    costs = np.zeros((len(labels_1), len(labels_2)), dtype=float)
    for i, label_1 in enumerate(labels_1):
        for j, label_2 in enumerate(labels_2):
            costs[i, j] = vertex_diss(label_1, label_2)
    return costs


def optimal_assignment(
    g1: nx.Graph,
    g2: nx.Graph,
    vertex_diss: DissimilarityAgent,
    attribute: str = config.DEFAULT_ATTRIBUTE,
) -> Tuple[Assignment, float]:
    """
    Minimum-cost vertex assignment computed with the Hungarian algorithm.

    Returns the assignment (in ``g1`` order) and the sum of the matched
    vertex dissimilarities.
    """
    costs = cost_matrix(g1, g2, vertex_diss, attribute)
    nodes_1 = list(g1.nodes)
    nodes_2 = list(g2.nodes)

    assignment: Assignment = {}
    total = 0.0
    for row, col in linear_assignment(costs):
        assignment[nodes_1[row]] = nodes_2[col]
        total += costs[row, col]
    return assignment, float(total)


def induce_edge_operations(
    g1: nx.Graph,
    g2: nx.Graph,
    assignment: Assignment,
    edge_diss: DissimilarityAgent,
    attribute: str = config.DEFAULT_ATTRIBUTE,
    measure_substitutions: bool = True,
) -> EdgeOperations:
    """
    Classify the edges of both graphs according to a vertex assignment.

    Every pair of matched vertices is checked in both graphs (each unordered
    pair once for undirected graphs, each ordered pair for directed ones):
    an edge in both graphs is a substitution, an edge in ``g1`` only an
    insertion and an edge in ``g2`` only a deletion. Edges touching an
    unmatched vertex cannot be substituted: they count as insertions (``g1``)
    or deletions (``g2``). Self loops are ignored.

    Parameters
    ----------
    measure_substitutions : bool
        When False substituted edges are counted but cost nothing.
    """
    ops = EdgeOperations()
    pairs = list(assignment.items())
    directed = g1.is_directed()

    for i, (u1, u2) in enumerate(pairs):
        others = pairs if directed else pairs[:i]
        for v1, v2 in others:
            if v1 == u1:
                continue
            in_g1 = g1.has_edge(u1, v1)
            in_g2 = g2.has_edge(u2, v2)
            if in_g1 and in_g2:
                ops.substitution_count += 1
                if measure_substitutions:
                    ops.substitution_cost += edge_diss(
                        edge_label(g1, u1, v1, attribute), edge_label(g2, u2, v2, attribute)
                    )
            elif in_g1:
                ops.insertion_count += 1
            elif in_g2:
                ops.deletion_count += 1

    matched_2 = set(assignment.values())
    ops.insertion_count += sum(
        1 for u, v in g1.edges() if u != v and (u not in assignment or v not in assignment)
    )
    ops.deletion_count += sum(
        1 for u, v in g2.edges() if u != v and (u not in matched_2 or v not in matched_2)
    )
    return ops
