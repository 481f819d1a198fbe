"""
Dense 2D matrix used for the multiplier operand and the accumulator bank.

A Matrix has W columns and H rows. Element (i, j) is column i, row j; rows
are stored contiguously so that matrix x vector is a row-wise dot product.
"""

import numpy as np

from .arith import SIM_DTYPE, narrow, widen
from .vector import Vector


class Matrix:
    """
    Dense W x H matrix of a numeric element type.

    Example:
        >>> acc = Matrix(4, 3)  # 4 columns, 3 rows
        >>> acc[3, 2] = 7
        >>> int(acc[3, 2])
        7
    """

    def __init__(self, width: int, height: int, dtype=SIM_DTYPE):
        if width < 1 or height < 1:
            raise ValueError(f"Matrix dimensions must be positive, got [{width},{height}]")
        self._data = np.zeros((height, width), dtype=np.dtype(dtype))

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def length(self) -> int:
        return self._data.size

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def _check_index(self, i: int, j: int) -> None:
        if not (0 <= i < self.width and 0 <= j < self.height):
            raise IndexError(f"Matrix index ({i}, {j}) out of range for {self.geometry()}")

    def __getitem__(self, index: tuple[int, int]):
        i, j = index
        self._check_index(i, j)
        return self._data[j, i]

    def __setitem__(self, index: tuple[int, int], value) -> None:
        i, j = index
        self._check_index(i, j)
        self._data[j, i] = narrow(value, self.dtype)

    def to_array(self) -> np.ndarray:
        """Return a copy of the elements indexed [row, column]."""
        return self._data.copy()

    def fill(self, value) -> "Matrix":
        """Set every element to value."""
        self._data.fill(narrow(value, self.dtype))
        return self

    def row(self, j: int) -> Vector:
        """Return a copy of row j as a Vector."""
        self._check_index(0, j)
        return Vector.from_array(self._data[j], self.dtype)

    def set_row(self, j: int, vec: Vector) -> "Matrix":
        """Overwrite row j with a vector of width W."""
        self._check_index(0, j)
        if vec.width != self.width:
            raise ValueError(f"Row width mismatch: {vec.width} vs {self.width}")
        self._data[j] = narrow(vec.to_array(), self.dtype)
        return self

    def accumulate_column(self, i: int, vec: Vector) -> "Matrix":
        """
        Add a vector of height H into column i.

        The sum is taken in the element type, so an integer accumulator bank
        wraps exactly like a fixed-width hardware register.
        """
        self._check_index(i, 0)
        if vec.width != self.height:
            raise ValueError(f"Column height mismatch: {vec.width} vs {self.height}")
        total = widen(self._data[:, i], self.dtype) + widen(vec.to_array(), self.dtype)
        self._data[:, i] = narrow(total, self.dtype)
        return self

    def mm(self, vec: Vector) -> Vector:
        """
        Matrix x vector: result[j] = dot(row j, vec).

        Args:
            vec: Vector of width W

        Returns:
            Vector of width H in the element type
        """
        if vec.width != self.width:
            raise ValueError(f"Matrix {self.geometry()} cannot multiply vector {vec.geometry()}")
        products = widen(self._data, self.dtype) @ widen(vec.to_array(), self.dtype)
        return Vector.from_array(narrow(products, self.dtype), self.dtype)

    def geometry(self) -> str:
        return f"[{self.width},{self.height}]"

    def __repr__(self) -> str:
        return f"Matrix({self.geometry()}, {self.dtype})"
