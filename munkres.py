from __future__ import annotations

from enum import Enum, IntEnum
from typing import List, Tuple

import numpy as np

from matrix import Matrix
from utils.utils import setup_logger

logger = setup_logger(__name__)


class Step(Enum):
    """States of the Munkres state machine."""

    PREPROCESS = 1
    STAR_ZEROS = 2
    COVER_COLUMNS = 3
    PRIME_ZEROS = 4
    AUGMENT_PATH = 5
    ADJUST = 6
    DONE = 0


class Mark(IntEnum):
    NORMAL = 0
    STAR = 1
    PRIME = 2


class Munkres:
    """
    Minimum-cost assignment on a cost matrix (Hungarian / Munkres algorithm).

    ``solve`` works in place: the selected cells become 0 and every other cell
    becomes -1. ``inf`` entries mark forbidden pairs; they are selected only
    when every alternative is forbidden too.

    The working buffers (cost copy, marks, row and column covers) live on the
    instance during one ``solve`` call, so an instance must not be shared by
    concurrent callers. Distinct instances are independent.
    """

    def __init__(self):
        self.matrix: np.ndarray | None = None
        self.marks: np.ndarray | None = None
        self.row_covered: np.ndarray | None = None
        self.col_covered: np.ndarray | None = None
        self.saved_row = -1
        self.saved_col = -1

    def solve(self, m) -> None:
        """
        Solve the linear assignment problem for ``m``.

        Parameters
        ----------
        m : Matrix | np.ndarray
            Non-negative cost matrix, row-major. Rectangular matrices select
            ``min(rows, cols)`` cells. Overwritten with the 0/-1 selection.

        Raises
        ------
        ValueError
            If the matrix holds negative or NaN entries.
        """
        if isinstance(m, Matrix):
            costs = m.to_numpy().astype(float)
        else:
            costs = np.array(m, dtype=float)
            if costs.ndim != 2:
                raise ValueError(f"cost matrix must be 2D, got shape {costs.shape}")

        if np.isnan(costs).any():
            raise ValueError("cost matrix contains NaN entries")
        if (costs < 0).any():
            raise ValueError("cost matrix contains negative entries")

        rows, cols = costs.shape
        if rows == 0 or cols == 0:
            return

        self.matrix = costs
        self.marks = np.full((rows, cols), Mark.NORMAL, dtype=np.int8)
        self.row_covered = np.zeros(rows, dtype=bool)
        self.col_covered = np.zeros(cols, dtype=bool)

        handlers = {
            Step.PREPROCESS: self._preprocess,
            Step.STAR_ZEROS: self._star_zeros,
            Step.COVER_COLUMNS: self._cover_columns,
            Step.PRIME_ZEROS: self._prime_zeros,
            Step.AUGMENT_PATH: self._augment_path,
            Step.ADJUST: self._adjust,
        }
        step = Step.PREPROCESS
        transitions = 0
        while step is not Step.DONE:
            step = handlers[step]()
            transitions += 1
        logger.debug(f"Munkres solved a {rows}x{cols} matrix in {transitions} transitions")

        # Store results
        selection = np.where(self.marks == Mark.STAR, 0, -1)
        if isinstance(m, Matrix):
            m.load(selection)
        else:
            m[...] = selection

        self.matrix = self.marks = self.row_covered = self.col_covered = None

    def _preprocess(self) -> Step:
        """Replace forbidden (infinite) entries with max(finite) + 1."""
        forbidden = np.isinf(self.matrix)
        if forbidden.any():
            finite = self.matrix[~forbidden]
            high_value = (finite.max() if finite.size else 0.0) + 1
            self.matrix[forbidden] = high_value
        return Step.STAR_ZEROS

    def _star_zeros(self) -> Step:
        rows, cols = self.matrix.shape
        starred_rows = np.zeros(rows, dtype=bool)
        starred_cols = np.zeros(cols, dtype=bool)
        for row in range(rows):
            for col in range(cols):
                if self.matrix[row, col] == 0 and not starred_rows[row] and not starred_cols[col]:
                    self.marks[row, col] = Mark.STAR
                    starred_rows[row] = True
                    starred_cols[col] = True
        return Step.COVER_COLUMNS

    def _cover_columns(self) -> Step:
        starred_cols = (self.marks == Mark.STAR).any(axis=0)
        self.col_covered |= starred_cols
        if int(self.col_covered.sum()) >= min(self.matrix.shape):
            return Step.DONE
        return Step.PRIME_ZEROS

    def _find_uncovered_zero(self) -> Tuple[int, int] | None:
        uncovered = (self.matrix == 0) & ~self.row_covered[:, None] & ~self.col_covered[None, :]
        hits = np.argwhere(uncovered)
        if hits.size == 0:
            return None
        return int(hits[0][0]), int(hits[0][1])

    def _prime_zeros(self) -> Step:
        while True:
            zero = self._find_uncovered_zero()
            if zero is None:
                return Step.ADJUST
            row, col = zero
            self.marks[row, col] = Mark.PRIME
            starred = np.flatnonzero(self.marks[row] == Mark.STAR)
            if starred.size == 0:
                self.saved_row, self.saved_col = row, col
                return Step.AUGMENT_PATH
            # cover this row and uncover the column of its starred zero
            self.row_covered[row] = True
            self.col_covered[starred[0]] = False

    def _augment_path(self) -> Step:
        path: List[Tuple[int, int]] = [(self.saved_row, self.saved_col)]
        while True:
            col = path[-1][1]
            starred = np.flatnonzero(self.marks[:, col] == Mark.STAR)
            if starred.size == 0:
                break
            row = int(starred[0])
            path.append((row, col))
            # a row holding a starred zero on the path always holds a prime
            primed = np.flatnonzero(self.marks[row] == Mark.PRIME)
            path.append((row, int(primed[0])))

        for row, col in path:
            if self.marks[row, col] == Mark.STAR:
                self.marks[row, col] = Mark.NORMAL
            else:
                self.marks[row, col] = Mark.STAR

        self.marks[self.marks == Mark.PRIME] = Mark.NORMAL
        self.row_covered[:] = False
        self.col_covered[:] = False
        return Step.COVER_COLUMNS

    def _adjust(self) -> Step:
        uncovered = ~self.row_covered[:, None] & ~self.col_covered[None, :]
        h = self.matrix[uncovered].min()
        # net effect of "+h on covered rows, -h on uncovered columns"
        both_covered = self.row_covered[:, None] & self.col_covered[None, :]
        self.matrix[both_covered] += h
        self.matrix[uncovered] -= h
        return Step.PRIME_ZEROS


def linear_assignment(costs) -> List[Tuple[int, int]]:
    """
    Optimal assignment of a (possibly rectangular) cost matrix.

    The matrix is padded to square with ``inf`` before solving.

    Parameters
    ----------
    costs : array-like
        Non-negative ``rows x cols`` cost matrix.

    Returns
    -------
    list[tuple[int, int]]
        ``min(rows, cols)`` pairs ``(row, col)`` inside the original shape,
        sorted by row.
    """
    costs = np.asarray(costs, dtype=float)
    if costs.ndim != 2:
        raise ValueError(f"cost matrix must be 2D, got shape {costs.shape}")
    rows, cols = costs.shape
    if rows == 0 or cols == 0:
        return []

    size = max(rows, cols)
    padded = np.full((size, size), np.inf)
    padded[:rows, :cols] = costs

    Munkres().solve(padded)

    return [(int(row), int(col)) for row, col in np.argwhere(padded[:rows, :cols] == 0)]
