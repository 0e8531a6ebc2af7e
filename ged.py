"""
Graph edit distance dissimilarities built on vertex assignments.

Every engine matches the vertices of two labeled graphs (greedily or
optimally), induces the edge edit operations from that matching and combines
the resulting costs into one non-negative value.

Engines are immutable: the configuration is a frozen dataclass and every call
builds its working data from scratch, so one instance can serve concurrent
callers. ``diss`` returns the scalar, ``decompose`` the full ``DissResult``.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import networkx as nx
import numpy as np

import config
from matching import (
    DissimilarityAgent,
    EdgeOperations,
    best_match_first,
    induce_edge_operations,
    optimal_assignment,
)
from utils.dissimilarity import delta
from utils.utils import setup_logger

logger = setup_logger(__name__)

_BOUND_TOLERANCE = 1e-9


class EmptyGraphError(ValueError):
    """Raised when a dissimilarity is undefined for a graph without vertices."""


@dataclass(frozen=True)
class DissResult:
    """Outcome of one dissimilarity computation.

    ``vertex_cost`` and ``edge_cost`` are the weighted components before the
    optional normalization, ``total`` is the returned dissimilarity.
    """

    total: float
    vertex_cost: float
    edge_cost: float


def _check_weights(**weights: float) -> None:
    for name, value in weights.items():
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}.")


def _check_normalization(normalize: bool, norm_value: float) -> None:
    if normalize and norm_value <= 0:
        raise ValueError(f"norm_value must be positive when normalizing, got {norm_value}.")


def _default_seed() -> int:
    return time.time_ns() & 0xFFFFFFFF


@dataclass(frozen=True)
class BMFConfig:
    """Weights and constant costs of the six-parameter BMF."""

    vertex_substitution_weight: float = 1.0
    vertex_insertion_weight: float = 1.0
    vertex_deletion_weight: float = 1.0
    vertex_insertion_cost: float = 1.0
    vertex_deletion_cost: float = 1.0

    edge_substitution_weight: float = 1.0
    edge_insertion_weight: float = 1.0
    edge_deletion_weight: float = 1.0
    edge_insertion_cost: float = 1.0
    edge_deletion_cost: float = 1.0

    normalize: bool = False
    norm_value: float = 1.0
    attribute: str = config.DEFAULT_ATTRIBUTE

    def __post_init__(self):
        _check_weights(
            vertex_substitution_weight=self.vertex_substitution_weight,
            vertex_insertion_weight=self.vertex_insertion_weight,
            vertex_deletion_weight=self.vertex_deletion_weight,
            vertex_insertion_cost=self.vertex_insertion_cost,
            vertex_deletion_cost=self.vertex_deletion_cost,
            edge_substitution_weight=self.edge_substitution_weight,
            edge_insertion_weight=self.edge_insertion_weight,
            edge_deletion_weight=self.edge_deletion_weight,
            edge_insertion_cost=self.edge_insertion_cost,
            edge_deletion_cost=self.edge_deletion_cost,
        )
        _check_normalization(self.normalize, self.norm_value)


@dataclass(frozen=True)
class SBMFConfig(BMFConfig):
    """BMF configuration plus the randomized restarts.

    ``seed=None`` draws a seed from the clock at every call.
    """

    n_shuffles: int = config.DEFAULT_N_SHUFFLES
    seed: Optional[int] = None

    def __post_init__(self):
        super().__post_init__()
        if self.n_shuffles < 1:
            raise ValueError(f"n_shuffles must be at least 1, got {self.n_shuffles}.")


@dataclass(frozen=True)
class FourWeightBMFConfig:
    """Weights of the 4-weight BMF (one weight per operation family).

    With ``params_bounded`` the edge substitution weight is derived from the
    other three, see ``bounded_edge_substitution_weight``.
    """

    vertex_substitution_weight: float = 1.0
    vertex_ins_del_weight: float = 1.0
    vertex_ins_del_cost: float = 1.0

    edge_substitution_weight: float = 1.0
    edge_ins_del_weight: float = 1.0
    edge_ins_del_cost: float = 1.0

    normalize: bool = False
    norm_value: float = 1.0

    shuffle: bool = False
    n_shuffles: int = 0
    seed: Optional[int] = None

    params_bounded: bool = False
    attribute: str = config.DEFAULT_ATTRIBUTE

    def __post_init__(self):
        if not self.params_bounded:
            _check_weights(
                vertex_substitution_weight=self.vertex_substitution_weight,
                vertex_ins_del_weight=self.vertex_ins_del_weight,
                edge_substitution_weight=self.edge_substitution_weight,
                edge_ins_del_weight=self.edge_ins_del_weight,
            )
        _check_weights(
            vertex_ins_del_cost=self.vertex_ins_del_cost,
            edge_ins_del_cost=self.edge_ins_del_cost,
        )
        _check_normalization(self.normalize, self.norm_value)
        if self.n_shuffles < 0:
            raise ValueError(f"n_shuffles must be non-negative, got {self.n_shuffles}.")


@dataclass(frozen=True)
class HGEDConfig:
    """Blend coefficients of HGED, each in [0, 1]."""

    alpha: float = config.DEFAULT_ALPHA
    beta: float = config.DEFAULT_BETA
    gamma: float = config.DEFAULT_GAMMA
    attribute: str = config.DEFAULT_ATTRIBUTE

    def __post_init__(self):
        for name in ("alpha", "beta", "gamma"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must lie in [0, 1], got {value}.")


def bounded_edge_substitution_weight(
    vertex_substitution_weight: float,
    vertex_ins_del_weight: float,
    edge_ins_del_weight: float,
    edge_substitution_weight: float = 0.0,
) -> float:
    """
    Derive the edge substitution weight from the other three 4W-BMF weights.

    The residual ``1 - (sum of the three weights)`` is mapped by the fixed
    affine rescaling ``(x - min_x) * b / (max_x - min_x)`` with ``b = 1/4``,
    ``min_x = 0`` and ``max_x = 1``. This is not a simplex projection: three
    weights summing to 1 give 0 and three zero weights give 1/4.

    ``edge_substitution_weight`` is the configured (ignored) value; it is
    bound-checked together with the others.

    Raises
    ------
    ValueError
        If any of the weights, including the derived one, lies outside [0, 1].
    """
    n_params = 4
    b = 1.0 / n_params
    min_x, max_x = 0.0, 1.0

    residual = 1.0 - (edge_ins_del_weight + vertex_ins_del_weight + vertex_substitution_weight)
    derived = (residual - min_x) * b / (max_x - min_x)
    if -_BOUND_TOLERANCE < derived < 0.0:
        derived = 0.0

    weights = {
        "edge_ins_del_weight": edge_ins_del_weight,
        "edge_substitution_weight": edge_substitution_weight,
        "derived_edge_substitution_weight": derived,
        "vertex_ins_del_weight": vertex_ins_del_weight,
        "vertex_substitution_weight": vertex_substitution_weight,
    }
    for name, value in weights.items():
        if not -_BOUND_TOLERANCE <= value <= 1.0 + _BOUND_TOLERANCE:
            raise ValueError(f"4-GED params out of bounds: {name}={value}")
    return derived


class GraphDissimilarity:
    """
    Base class of the graph dissimilarity engines.

    Parameters
    ----------
    vertex_diss : callable, optional
        Dissimilarity of two vertex labels. Defaults to ``delta``.
    edge_diss : callable, optional
        Dissimilarity of two edge labels. Defaults to ``delta``.
    """

    def __init__(self, vertex_diss: Optional[DissimilarityAgent] = None,
                 edge_diss: Optional[DissimilarityAgent] = None):
        self.vertex_diss = vertex_diss if vertex_diss is not None else delta
        self.edge_diss = edge_diss if edge_diss is not None else delta

    def decompose(self, g1: nx.Graph, g2: nx.Graph) -> DissResult:
        raise NotImplementedError("Subclasses should implement this method!")

    def diss(self, g1: nx.Graph, g2: nx.Graph) -> float:
        return self.decompose(g1, g2).total

    def __call__(self, g1: nx.Graph, g2: nx.Graph) -> float:
        return self.diss(g1, g2)


class BMF(GraphDissimilarity):
    """
    Best Match First graph edit distance with six weighting parameters.

    Vertices of the first graph are greedily matched, in their native order,
    to the most similar free vertex of the second one; the edge operations are
    induced from that matching. The surplus vertices are charged as
    insertions when the first graph is larger and as deletions otherwise.
    O(n^2) vertex dissimilarity evaluations.
    """

    def __init__(self, config: Optional[BMFConfig] = None,
                 vertex_diss: Optional[DissimilarityAgent] = None,
                 edge_diss: Optional[DissimilarityAgent] = None):
        super().__init__(vertex_diss, edge_diss)
        self.config = config if config is not None else BMFConfig()

    def decompose(self, g1: nx.Graph, g2: nx.Graph) -> DissResult:
        return self._decompose(g1, g2, order=None, measure_substitutions=True)

    def pcn_decompose(self, g1: nx.Graph, g2: nx.Graph) -> DissResult:
        """Same as ``decompose`` but edge substitutions cost nothing."""
        return self._decompose(g1, g2, order=None, measure_substitutions=False)

    def pcn_diss(self, g1: nx.Graph, g2: nx.Graph) -> float:
        return self.pcn_decompose(g1, g2).total

    def _decompose(self, g1: nx.Graph, g2: nx.Graph, order=None, measure_substitutions=True) -> DissResult:
        cfg = self.config
        order_1, order_2 = g1.number_of_nodes(), g2.number_of_nodes()
        abs_order_diff = abs(order_1 - order_2)

        assignment, vertex_subs_cost = best_match_first(
            g1, g2, self.vertex_diss, order=order, attribute=cfg.attribute
        )

        vertex_insertion_cost = vertex_deletion_cost = 0.0
        if order_1 > order_2:
            vertex_insertion_cost = cfg.vertex_insertion_cost * abs_order_diff
        else:
            vertex_deletion_cost = cfg.vertex_deletion_cost * abs_order_diff
        vertex_cost = (
            cfg.vertex_substitution_weight * vertex_subs_cost
            + cfg.vertex_insertion_weight * vertex_insertion_cost
            + cfg.vertex_deletion_weight * vertex_deletion_cost
        )

        ops = induce_edge_operations(
            g1, g2, assignment, self.edge_diss,
            attribute=cfg.attribute, measure_substitutions=measure_substitutions,
        )
        edge_cost = (
            cfg.edge_substitution_weight * ops.substitution_cost
            + cfg.edge_insertion_weight * cfg.edge_insertion_cost * ops.insertion_count
            + cfg.edge_deletion_weight * cfg.edge_deletion_cost * ops.deletion_count
        )

        total = vertex_cost + edge_cost
        if cfg.normalize:
            total /= cfg.norm_value
        logger.debug(
            f"BMF |V|=({order_1}, {order_2}) vertex={vertex_cost:.6g} edge={edge_cost:.6g} total={total:.6g}"
        )
        return DissResult(total=total, vertex_cost=vertex_cost, edge_cost=edge_cost)


class SBMF(BMF):
    """
    Shuffled BMF: the best of ``n_shuffles`` BMF runs, each visiting the
    vertices of the first graph in a uniformly random order.

    A fixed ``seed`` makes every call reproducible, and for a fixed seed the
    first ``k`` orders are shared by all runs with at least ``k`` shuffles.
    """

    def __init__(self, config: Optional[SBMFConfig] = None,
                 vertex_diss: Optional[DissimilarityAgent] = None,
                 edge_diss: Optional[DissimilarityAgent] = None):
        if config is not None and not isinstance(config, SBMFConfig):
            raise TypeError(f"SBMF requires an SBMFConfig, got {type(config).__name__}.")
        super().__init__(config if config is not None else SBMFConfig(), vertex_diss, edge_diss)

    def decompose(self, g1: nx.Graph, g2: nx.Graph) -> DissResult:
        return min(self.trace(g1, g2), key=lambda result: result.total)

    def trace(self, g1: nx.Graph, g2: nx.Graph) -> List[DissResult]:
        """Results of the individual shuffled runs, in execution order."""
        cfg = self.config
        if g1.number_of_nodes() < 2 and g2.number_of_nodes() < 2:
            return [self._decompose(g1, g2)]

        rng = random.Random(cfg.seed if cfg.seed is not None else _default_seed())
        vertices = list(g1.nodes)
        results = []
        for _ in range(cfg.n_shuffles):
            order = list(vertices)
            rng.shuffle(order)
            results.append(self._decompose(g1, g2, order=order))
        return results


class FourWeightBMF(GraphDissimilarity):
    """
    BMF with four weights: vertex substitution, vertex insertion/deletion,
    edge substitution and edge insertion/deletion.

    Optionally repeats the computation over shuffled vertex orders and keeps
    the minimum, and optionally derives the edge substitution weight from the
    other three (``params_bounded``).
    """

    def __init__(self, config: Optional[FourWeightBMFConfig] = None,
                 vertex_diss: Optional[DissimilarityAgent] = None,
                 edge_diss: Optional[DissimilarityAgent] = None):
        super().__init__(vertex_diss, edge_diss)
        self.config = config if config is not None else FourWeightBMFConfig()

    def edge_substitution_weight(self) -> float:
        cfg = self.config
        if cfg.params_bounded:
            return bounded_edge_substitution_weight(
                cfg.vertex_substitution_weight,
                cfg.vertex_ins_del_weight,
                cfg.edge_ins_del_weight,
                cfg.edge_substitution_weight,
            )
        return cfg.edge_substitution_weight

    def decompose(self, g1: nx.Graph, g2: nx.Graph) -> DissResult:
        cfg = self.config
        edge_substitution_weight = self.edge_substitution_weight()
        rng = None
        if cfg.shuffle:
            rng = random.Random(cfg.seed if cfg.seed is not None else _default_seed())

        best: Optional[DissResult] = None
        shuffle_count = 0
        while True:
            order = None
            if rng is not None:
                order = list(g1.nodes)
                rng.shuffle(order)
            result = self._decompose(g1, g2, order, edge_substitution_weight)
            if best is None or result.total < best.total:
                best = result
            # the result cannot depend on the order
            if g1.number_of_nodes() < 2 and g2.number_of_nodes() < 2:
                break
            shuffle_count += 1
            if not (cfg.shuffle and shuffle_count < cfg.n_shuffles):
                break
        return best

    def _decompose(self, g1: nx.Graph, g2: nx.Graph, order, edge_substitution_weight: float) -> DissResult:
        cfg = self.config
        order_1, order_2 = g1.number_of_nodes(), g2.number_of_nodes()

        assignment, vertex_subs_cost = best_match_first(
            g1, g2, self.vertex_diss, order=order, attribute=cfg.attribute
        )
        vertex_ins_del_cost = cfg.vertex_ins_del_cost * abs(order_1 - order_2)
        vertex_cost = (
            cfg.vertex_substitution_weight * vertex_subs_cost
            + cfg.vertex_ins_del_weight * vertex_ins_del_cost
        )

        ops = induce_edge_operations(g1, g2, assignment, self.edge_diss, attribute=cfg.attribute)
        edge_cost = (
            edge_substitution_weight * ops.substitution_cost
            + cfg.edge_ins_del_weight * cfg.edge_ins_del_cost * ops.ins_del_count
        )

        total = vertex_cost + edge_cost
        if cfg.normalize:
            total /= cfg.norm_value
        return DissResult(total=total, vertex_cost=vertex_cost, edge_cost=edge_cost)


class NBMF(GraphDissimilarity):
    """
    Normalized 4-weight BMF.

    The vertex component is divided by the larger order and the edge
    component by ``m(m-1)/2``, ``m`` being the smaller order; the result is
    the mean of the two ratios (only the vertex ratio when ``m < 2``).
    """

    def __init__(self, config: Optional[FourWeightBMFConfig] = None,
                 vertex_diss: Optional[DissimilarityAgent] = None,
                 edge_diss: Optional[DissimilarityAgent] = None):
        super().__init__(vertex_diss, edge_diss)
        self.bmf = FourWeightBMF(config, self.vertex_diss, self.edge_diss)

    @property
    def config(self) -> FourWeightBMFConfig:
        return self.bmf.config

    def decompose(self, g1: nx.Graph, g2: nx.Graph) -> DissResult:
        order_1, order_2 = g1.number_of_nodes(), g2.number_of_nodes()
        inner = self.bmf.decompose(g1, g2)
        if order_1 == 0 and order_2 == 0:
            return DissResult(total=0.0, vertex_cost=0.0, edge_cost=0.0)

        smaller = min(order_1, order_2)
        vertex_ratio = inner.vertex_cost / max(order_1, order_2)
        upper = smaller * (smaller - 1) / 2
        if upper != 0:
            edge_ratio = inner.edge_cost / upper
            return DissResult(total=(vertex_ratio + edge_ratio) / 2,
                              vertex_cost=vertex_ratio / 2, edge_cost=edge_ratio / 2)
        return DissResult(total=vertex_ratio, vertex_cost=vertex_ratio, edge_cost=0.0)


@dataclass(frozen=True)
class HGEDComponents:
    """Normalized cost terms of HGED.

    Attributes
    ----------
    cnd : float
        Share of vertex insertions/deletions, in [0, 1].
    cn : float
        Mean vertex dissimilarity of the optimal assignment.
    ce : float
        Mean dissimilarity of the substituted edges, 0 when none.
    ced : float
        Share of edge insertions/deletions, 0 when both graphs are edgeless.
    """

    cnd: float
    cn: float
    ce: float
    ced: float
    assignment: dict = field(default_factory=dict, compare=False)
    edge_operations: EdgeOperations = field(default_factory=EdgeOperations, compare=False)


class HGED(GraphDissimilarity):
    """
    Graph edit distance on the optimal (Hungarian) vertex assignment.

    ``Diss = alpha*CND + (1-alpha)*[(1-beta)*CN + beta*((1-gamma)*CE + gamma*CED)]``

    Both graphs must have at least one vertex.
    """

    def __init__(self, config: Optional[HGEDConfig] = None,
                 vertex_diss: Optional[DissimilarityAgent] = None,
                 edge_diss: Optional[DissimilarityAgent] = None):
        super().__init__(vertex_diss, edge_diss)
        self.config = config if config is not None else HGEDConfig()

    def components(self, g1: nx.Graph, g2: nx.Graph) -> HGEDComponents:
        """
        Compute the four normalized terms.

        Raises
        ------
        EmptyGraphError
            If either graph has no vertices.
        """
        order_1, order_2 = g1.number_of_nodes(), g2.number_of_nodes()
        if order_1 == 0 or order_2 == 0:
            raise EmptyGraphError(
                f"{type(self).__name__} requires two non-empty graphs, got orders ({order_1}, {order_2})."
            )
        size_1, size_2 = g1.number_of_edges(), g2.number_of_edges()
        smaller = min(order_1, order_2)

        assignment, vertex_subs_cost = self._assign(g1, g2)
        ops = induce_edge_operations(g1, g2, assignment, self.edge_diss, attribute=self.config.attribute)

        cnd = (order_1 + order_2 - 2 * smaller) / (order_1 + order_2)
        cn = vertex_subs_cost / smaller
        ce = 0.0 if ops.substitution_count == 0 else ops.substitution_cost / ops.substitution_count
        size_tot = size_1 + size_2
        ced = 0.0 if size_tot == 0 else ops.ins_del_count / size_tot
        return HGEDComponents(cnd=cnd, cn=cn, ce=ce, ced=ced, assignment=assignment, edge_operations=ops)

    def _assign(self, g1: nx.Graph, g2: nx.Graph):
        return optimal_assignment(g1, g2, self.vertex_diss, attribute=self.config.attribute)

    def decompose(self, g1: nx.Graph, g2: nx.Graph) -> DissResult:
        alpha, beta, gamma = self.config.alpha, self.config.beta, self.config.gamma
        c = self.components(g1, g2)

        vertex_cost = alpha * c.cnd + (1.0 - alpha) * (1.0 - beta) * c.cn
        edge_cost = (1.0 - alpha) * beta * ((1.0 - gamma) * c.ce + gamma * c.ced)
        total = vertex_cost + edge_cost
        logger.debug(
            f"{type(self).__name__} CND={c.cnd:.6g} CN={c.cn:.6g} CE={c.ce:.6g} CED={c.ced:.6g} total={total:.6g}"
        )
        return DissResult(total=total, vertex_cost=vertex_cost, edge_cost=edge_cost)


class TWEC(HGED):
    """
    The HGED blend computed on the greedy best-match-first assignment.

    Vertices of the first graph are visited in their native order, as in BMF,
    so the value is not symmetric. O(n^2) vertex dissimilarity evaluations
    instead of the O(n^3) Hungarian solve.
    """

    def _assign(self, g1: nx.Graph, g2: nx.Graph):
        return best_match_first(g1, g2, self.vertex_diss, attribute=self.config.attribute)


def dissimilarity_matrix(
    engine: GraphDissimilarity,
    graphs: Sequence[nx.Graph],
    others: Optional[Sequence[nx.Graph]] = None,
) -> np.ndarray:
    """
    Pairwise dissimilarities between two lists of graphs.

    Parameters
    ----------
    engine : GraphDissimilarity
        Any engine of this module.
    graphs : sequence of nx.Graph
        Row graphs.
    others : sequence of nx.Graph, optional
        Column graphs; ``graphs`` when omitted.

    Returns
    -------
    np.ndarray
        ``len(graphs) x len(others)`` matrix of ``engine.diss(row, col)``.
    """
    others = graphs if others is None else others
    matrix = np.zeros((len(graphs), len(others)), dtype=float)
    for i, g1 in enumerate(graphs):
        for j, g2 in enumerate(others):
            matrix[i, j] = engine.diss(g1, g2)
    return matrix
