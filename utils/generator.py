import networkx as nx
import random
import numpy as np
from typing import List, Optional

import config


class Generator:
    """
    Abstract base class for labeled graph generators.

    Vertex labels are integers drawn uniformly from ``range(num_labels)``,
    edge labels are floats in [0, 1).
    """
    def __init__(self, num_nodes: int, average_degree: float, num_labels: int = 4,
                 attribute: str = config.DEFAULT_ATTRIBUTE, seed: Optional[int] = None):
        if num_nodes < 0:
            raise ValueError("Number of nodes must be non-negative.")
        if average_degree < 0:
            raise ValueError("Average degree must be non-negative.")
        if num_labels <= 0:
            raise ValueError("Number of labels must be positive.")
        self.num_nodes = num_nodes
        self.average_degree = average_degree
        self.num_labels = num_labels
        self.attribute = attribute
        self.rng = random.Random(seed)

    def generate_network(self) -> nx.Graph:
        """Generates a single graph. Must be implemented by subclasses."""
        raise NotImplementedError("Subclasses should implement this method!")

    def _vertex_label(self) -> int:
        return self.rng.randrange(self.num_labels)

    def _edge_label(self) -> float:
        return round(self.rng.random(), 3)

    def generate_similar_network(self, base_graph: nx.Graph, similarity: float) -> nx.Graph:
        """
        Creates a distorted copy of ``base_graph``.

        Each vertex keeps its label with probability ``similarity`` (otherwise
        it is relabeled), each edge survives with probability ``similarity``
        and a matching number of new edges is expected to appear. The vertex
        order is shuffled so that the copy is not trivially aligned.
        """
        p_keep = min(max(similarity, 0.0), 1.0)
        nodes = list(base_graph.nodes)
        shuffled = list(nodes)
        self.rng.shuffle(shuffled)

        new_graph = nx.Graph()
        for node in shuffled:
            label = base_graph.nodes[node].get(self.attribute)
            if self.rng.random() >= p_keep:
                label = self._vertex_label()
            new_graph.add_node(node, **{self.attribute: label})

        base_edges = list(base_graph.edges(data=True))
        n = len(nodes)
        total_possible_edges = n * (n - 1) // 2
        denominator = total_possible_edges - len(base_edges)
        p_add = len(base_edges) * (1 - p_keep) / denominator if denominator > 0 else 0.0
        p_add = min(max(p_add, 0.0), 1.0)

        for u, v, data in base_edges:
            if self.rng.random() < p_keep:
                new_graph.add_edge(u, v, **{self.attribute: data.get(self.attribute)})
        for i in range(n):
            for j in range(i + 1, n):
                u, v = nodes[i], nodes[j]
                if not base_graph.has_edge(u, v) and self.rng.random() < p_add:
                    new_graph.add_edge(u, v, **{self.attribute: self._edge_label()})
        return new_graph

    def generate_networks(self, n: int, similarities: Optional[List[float]] = None) -> List[nx.Graph]:
        """
        Generates a list of n graphs, with optional similarity to the first one.
        """
        if n <= 0:
            return []

        if similarities is None:
            return [self.generate_network() for _ in range(n)]

        if len(similarities) != n - 1:
            raise ValueError(f"Length of similarities list must be n-1 ({n-1}), but got {len(similarities)}.")

        base_network = self.generate_network()
        networks = [base_network]

        for s in similarities:
            if s < 0:
                new_network = self.generate_network()
            else:
                new_network = self.generate_similar_network(base_network, s)
            networks.append(new_network)

        return networks


class ERGenerator(Generator):
    """
    Generates labeled Erdős-Rényi (ER) graphs with the requested mean degree.
    """
    def generate_network(self) -> nx.Graph:
        graph = nx.Graph()
        for i in range(1, self.num_nodes + 1):
            graph.add_node(i, **{self.attribute: self._vertex_label()})
        if self.num_nodes <= 1:
            return graph
        p = min(1.0, self.average_degree / (self.num_nodes - 1))
        for i in range(1, self.num_nodes + 1):
            for j in range(i + 1, self.num_nodes + 1):
                if self.rng.random() < p:
                    graph.add_edge(i, j, **{self.attribute: self._edge_label()})
        return graph


class VectorERGenerator(ERGenerator):
    """
    ER graphs whose vertex labels are ``dim``-dimensional real vectors,
    suited to the ``Euclidean`` agent.
    """
    def __init__(self, num_nodes: int, average_degree: float, dim: int = 2, **kwargs):
        super().__init__(num_nodes, average_degree, **kwargs)
        if dim <= 0:
            raise ValueError("Vector dimension must be positive.")
        self.dim = dim
        self.np_rng = np.random.default_rng(self.rng.randrange(2 ** 32))

    def _vertex_label(self):
        return tuple(np.round(self.np_rng.random(self.dim), 3).tolist())


def relabel_in_order(graph: nx.Graph, order: List) -> nx.Graph:
    """A copy of ``graph`` whose vertex iteration order is ``order``."""
    if set(order) != set(graph.nodes) or len(order) != graph.number_of_nodes():
        raise ValueError("order must be a permutation of the graph vertices.")
    copy = graph.__class__()
    for node in order:
        copy.add_node(node, **graph.nodes[node])
    copy.add_edges_from(graph.edges(data=True))
    return copy
