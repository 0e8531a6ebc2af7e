"""
Tests for the Munkres (Hungarian) solver.
"""

import itertools
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from matrix import Matrix
from munkres import Munkres, Step, linear_assignment


def brute_force_minimum(costs):
    rows, cols = costs.shape
    if rows <= cols:
        return min(
            sum(costs[r, c] for r, c in zip(range(rows), perm))
            for perm in itertools.permutations(range(cols), rows)
        )
    return brute_force_minimum(costs.T)


def selected_cost(costs, pairs):
    return sum(costs[r, c] for r, c in pairs)


# ---------------------------------------------------------------------------
# Munkres.solve
# ---------------------------------------------------------------------------

class TestSolve:

    def test_unique_optimum_3x3(self):
        m = Matrix.from_array([[4, 1, 3], [2, 0, 5], [3, 2, 2]])
        Munkres().solve(m)
        assert m.to_numpy().tolist() == [[-1, 0, -1], [0, -1, -1], [-1, -1, 0]]

    def test_ndarray_in_place(self):
        costs = np.array([[4.0, 1.0, 3.0], [2.0, 0.0, 5.0], [3.0, 2.0, 2.0]])
        Munkres().solve(costs)
        assert (costs == 0).sum() == 3
        assert set(map(tuple, np.argwhere(costs == 0).tolist())) == {(0, 1), (1, 0), (2, 2)}

    def test_selection_is_a_permutation(self):
        rng = np.random.default_rng(3)
        costs = rng.integers(0, 20, size=(6, 6)).astype(float)
        selection = costs.copy()
        Munkres().solve(selection)
        assert ((selection == 0).sum(axis=0) == 1).all()
        assert ((selection == 0).sum(axis=1) == 1).all()
        assert set(np.unique(selection)) <= {0, -1}

    def test_forbidden_entries_avoided(self):
        m = Matrix.from_array([[np.inf, 1], [1, np.inf]])
        Munkres().solve(m)
        assert m.to_numpy().tolist() == [[-1, 0], [0, -1]]

    def test_all_zero_matrix(self):
        m = Matrix(3, 3)
        Munkres().solve(m)
        assert (m.to_numpy() == 0).sum() == 3

    def test_negative_entries_rejected(self):
        with pytest.raises(ValueError):
            Munkres().solve(Matrix.from_array([[1, -1], [0, 2]]))

    def test_nan_entries_rejected(self):
        with pytest.raises(ValueError):
            Munkres().solve(np.array([[np.nan, 1.0], [0.0, 2.0]]))

    def test_empty_matrix(self):
        m = Matrix(0, 0)
        Munkres().solve(m)
        assert m.shape == (0, 0)

    def test_instance_reusable(self):
        solver = Munkres()
        first = Matrix.from_array([[1, 2], [2, 1]])
        second = Matrix.from_array([[2, 1], [1, 2]])
        solver.solve(first)
        solver.solve(second)
        assert first.to_numpy().tolist() == [[0, -1], [-1, 0]]
        assert second.to_numpy().tolist() == [[-1, 0], [0, -1]]

    def test_states_are_named(self):
        assert Step.DONE.value == 0
        assert [s.name for s in Step][:6] == [
            "PREPROCESS", "STAR_ZEROS", "COVER_COLUMNS", "PRIME_ZEROS", "AUGMENT_PATH", "ADJUST",
        ]


# ---------------------------------------------------------------------------
# linear_assignment
# ---------------------------------------------------------------------------

class TestLinearAssignment:

    @pytest.mark.parametrize("seed", range(8))
    @pytest.mark.parametrize("size", [2, 4, 5])
    def test_matches_brute_force(self, seed, size):
        rng = np.random.default_rng(seed)
        costs = rng.integers(0, 10, size=(size, size)).astype(float)
        pairs = linear_assignment(costs)
        assert len(pairs) == size
        assert selected_cost(costs, pairs) == pytest.approx(brute_force_minimum(costs))

    @pytest.mark.parametrize("shape", [(2, 4), (4, 2), (3, 5)])
    def test_rectangular_matches_brute_force(self, shape):
        rng = np.random.default_rng(sum(shape))
        costs = rng.random(shape)
        pairs = linear_assignment(costs)
        assert len(pairs) == min(shape)
        assert len({r for r, _ in pairs}) == len({c for _, c in pairs}) == min(shape)
        assert selected_cost(costs, pairs) == pytest.approx(brute_force_minimum(costs))

    def test_wide_matrix(self):
        assert linear_assignment([[1, 2, 3], [3, 1, 2]]) == [(0, 0), (1, 1)]

    def test_tall_matrix(self):
        assert linear_assignment([[1, 3], [2, 1], [3, 2]]) == [(0, 0), (1, 1)]

    def test_sorted_by_row(self):
        pairs = linear_assignment([[9, 9, 1], [9, 1, 9], [1, 9, 9]])
        assert pairs == [(0, 2), (1, 1), (2, 0)]

    def test_empty(self):
        assert linear_assignment(np.zeros((0, 3))) == []

    def test_input_not_modified(self):
        costs = np.array([[1.0, 2.0], [2.0, 1.0]])
        linear_assignment(costs)
        assert costs.tolist() == [[1.0, 2.0], [2.0, 1.0]]

    def test_rejects_1d(self):
        with pytest.raises(ValueError):
            linear_assignment([1, 2, 3])
