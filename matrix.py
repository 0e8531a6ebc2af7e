from __future__ import annotations

import numpy as np


class Matrix:
    """
    A resizable two-dimensional numeric array with value semantics.

    The storage is a ``numpy.ndarray`` owned by the instance; copies never share
    it. All operations except ``product`` modify the matrix in place.

    Attributes
    ----------
    rows : int
        Number of rows.
    columns : int
        Number of columns.
    """

    def __init__(self, rows: int = 0, columns: int = 0, dtype=float):
        if rows < 0 or columns < 0:
            raise ValueError(f"Matrix dimensions must be non-negative, got ({rows}, {columns}).")
        self._data = np.zeros((rows, columns), dtype=dtype)

    @classmethod
    def from_array(cls, array, dtype=float) -> "Matrix":
        """Build a matrix holding a copy of a 2D array-like."""
        data = np.array(array, dtype=dtype, copy=True)
        if data.ndim != 2:
            raise ValueError(f"Matrix requires a 2D array, got shape {data.shape}.")
        matrix = cls(0, 0, dtype=dtype)
        matrix._data = data
        return matrix

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def columns(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape

    @property
    def dtype(self):
        return self._data.dtype

    def minsize(self) -> int:
        return min(self.rows, self.columns)

    def resize(self, rows: int, columns: int) -> None:
        """
        Change the shape, keeping the overlapping top-left block.

        Cells outside the previous shape are zero filled.
        """
        if rows < 0 or columns < 0:
            raise ValueError(f"Matrix dimensions must be non-negative, got ({rows}, {columns}).")
        resized = np.zeros((rows, columns), dtype=self._data.dtype)
        min_rows = min(rows, self.rows)
        min_cols = min(columns, self.columns)
        resized[:min_rows, :min_cols] = self._data[:min_rows, :min_cols]
        self._data = resized

    def identity(self) -> None:
        """Ones on the main diagonal, zeros elsewhere (rectangular allowed)."""
        self.clear()
        np.fill_diagonal(self._data, 1)

    def clear(self) -> None:
        self._data.fill(0)

    def trace(self):
        x = self.minsize()
        return self._data[np.arange(x), np.arange(x)].sum()

    def transpose(self) -> "Matrix":
        self._data = np.ascontiguousarray(self._data.T)
        return self

    def product(self, other: "Matrix") -> "Matrix":
        if self.columns != other.rows:
            raise ValueError(
                f"Cannot multiply a {self.rows}x{self.columns} matrix by a {other.rows}x{other.columns} matrix."
            )
        return Matrix.from_array(self._data @ other._data, dtype=np.result_type(self._data, other._data))

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def load(self, array) -> None:
        """Overwrite every cell with the values of a same-shaped array."""
        values = np.asarray(array)
        if values.shape != self.shape:
            raise ValueError(f"Cannot load a {values.shape} array into a {self.rows}x{self.columns} matrix.")
        np.copyto(self._data, values, casting="unsafe")

    def _check_index(self, key) -> tuple[int, int]:
        if not isinstance(key, tuple) or len(key) != 2:
            raise IndexError("Matrix elements are addressed as m[row, col].")
        row, col = key
        if not (0 <= row < self.rows and 0 <= col < self.columns):
            raise IndexError(f"Index ({row}, {col}) out of bounds for a {self.rows}x{self.columns} matrix.")
        return row, col

    def __getitem__(self, key):
        row, col = self._check_index(key)
        return self._data[row, col].item()

    def __setitem__(self, key, value) -> None:
        row, col = self._check_index(key)
        self._data[row, col] = value

    def copy(self) -> "Matrix":
        return Matrix.from_array(self._data, dtype=self._data.dtype)

    def __copy__(self) -> "Matrix":
        return self.copy()

    def __deepcopy__(self, memo) -> "Matrix":
        return self.copy()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        return f"Matrix({self.rows}x{self.columns}, {self._data.tolist()!r})"
