import numpy as np
from typing import Optional, Sequence


def delta(a, b) -> float:
    """0 for equal labels, 1 otherwise."""
    return 0.0 if a == b else 1.0


def absolute_difference(a, b) -> float:
    return float(abs(a - b))


class Euclidean:
    """
    (Weighted) Euclidean distance between two equally long numeric vectors.

    Parameters
    ----------
    weights : sequence of float, optional
        Per-component non-negative weights.
    """

    def __init__(self, weights: Optional[Sequence[float]] = None):
        self.weights = None if weights is None else np.asarray(weights, dtype=float)
        if self.weights is not None and (self.weights < 0).any():
            raise ValueError("Euclidean weights must be non-negative.")

    def __call__(self, a, b) -> float:
        a = np.atleast_1d(np.asarray(a, dtype=float))
        b = np.atleast_1d(np.asarray(b, dtype=float))
        if a.shape != b.shape:
            raise ValueError(f"Different lengths between inputs: {a.shape} and {b.shape}.")
        squared = (a - b) ** 2
        if self.weights is not None:
            if self.weights.shape != a.shape:
                raise ValueError(f"Different lengths between inputs and weights: {a.shape} and {self.weights.shape}.")
            squared = squared * self.weights
        return float(np.sqrt(squared.sum()))


class Constant:
    """Returns the same value for every pair of labels."""

    def __init__(self, value: float = 0.0):
        self.value = float(value)

    def __call__(self, a, b) -> float:
        return self.value
