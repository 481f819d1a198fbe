"""
Dense 1D vectors and vector arrays.

A Vector is the unit of data fed to the modeled multiplier: serialized filter
and activation blocks are Vectors, and the multiplier consumes fixed-width
slices of them. A VectorArray is an ordered set of equal-width Vectors used as
a staging buffer (serialized filter table, activation tile, hardware input
slots).

All storage is owned exclusively; copies are deep. Index and slice access is
bounds-checked and raises IndexError. Width mismatches raise ValueError.
"""

from collections.abc import Iterator

import numpy as np

from .arith import SIM_DTYPE, element_dot, narrow, widen


class Vector:
    """
    Dense vector of W elements of a numeric element type.

    Arithmetic follows the element type: integer vectors wrap to their width,
    floating vectors are exact to their precision.

    Example:
        >>> v = Vector(4).fill(2)
        >>> int(v.dot(v))
        16
    """

    def __init__(self, width: int, dtype=SIM_DTYPE):
        if width < 1:
            raise ValueError(f"Vector width must be positive, got {width}")
        self._data = np.zeros(width, dtype=np.dtype(dtype))

    @classmethod
    def from_array(cls, values, dtype=SIM_DTYPE) -> "Vector":
        """Create a vector holding a converted copy of a 1D sequence."""
        arr = np.asarray(values)
        if arr.ndim != 1:
            raise ValueError(f"Expected 1D values, got shape {arr.shape}")
        vec = cls(arr.shape[0], dtype)
        vec._data[:] = narrow(arr, dtype)
        return vec

    # -------------------------------------------------------------------------
    # Dimensions
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._data.shape[0]

    @property
    def length(self) -> int:
        return self._data.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def __len__(self) -> int:
        return self.width

    # -------------------------------------------------------------------------
    # Element access
    # -------------------------------------------------------------------------

    def _check_index(self, i: int) -> int:
        if not 0 <= i < self.width:
            raise IndexError(f"Vector index {i} out of range [0, {self.width})")
        return i

    def __getitem__(self, i: int):
        return self._data[self._check_index(i)]

    def __setitem__(self, i: int, value) -> None:
        self._data[self._check_index(i)] = narrow(value, self.dtype)

    def __iter__(self) -> Iterator:
        return iter(self._data.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.width == other.width and bool(np.array_equal(self._data, other._data))

    def to_array(self) -> np.ndarray:
        """Return a copy of the elements as a numpy array."""
        return self._data.copy()

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def _check_width(self, other: "Vector") -> None:
        if self.width != other.width:
            raise ValueError(f"Vector width mismatch: {self.width} vs {other.width}")

    def __mul__(self, scalar) -> "Vector":
        """Multiply by a scalar, returning a new vector."""
        result = Vector(self.width, self.dtype)
        result._data[:] = narrow(widen(self._data, self.dtype) * scalar, self.dtype)
        return result

    __rmul__ = __mul__

    def dot(self, other: "Vector"):
        """Inner product with an equal-width vector, in the element type."""
        self._check_width(other)
        return element_dot(self._data, other._data, self.dtype)

    def __matmul__(self, other: "Vector"):
        return self.dot(other)

    def __add__(self, other: "Vector") -> "Vector":
        """Elementwise sum with an equal-width vector."""
        self._check_width(other)
        result = Vector(self.width, self.dtype)
        total = widen(self._data, self.dtype) + widen(other._data, self.dtype)
        result._data[:] = narrow(total, self.dtype)
        return result

    def fill(self, value) -> "Vector":
        """Set every element to value."""
        self._data.fill(narrow(value, self.dtype))
        return self

    # -------------------------------------------------------------------------
    # Slices
    # -------------------------------------------------------------------------

    def extract_slice(self, src: "Vector", offset: int, length: int) -> "Vector":
        """
        Copy src[offset:offset+length] into self[0:length].

        Elements of self beyond length are left untouched, so callers that
        need zero padding fill the vector first.

        Args:
            src: Source vector (may be wider or narrower than self)
            offset: First source element to copy
            length: Number of elements to copy

        Returns:
            self
        """
        if length < 1 or offset < 0 or offset + length > src.width:
            raise IndexError(
                f"Slice [{offset}, {offset + length}) out of range for source width {src.width}"
            )
        if length > self.width:
            raise IndexError(f"Slice length {length} exceeds destination width {self.width}")
        self._data[:length] = narrow(src._data[offset : offset + length], self.dtype)
        return self

    def insert_slice(self, src: "Vector", offset: int, length: int | None = None) -> "Vector":
        """
        Copy src[0:length] into self[offset:offset+length].

        Args:
            src: Source vector
            offset: First destination element
            length: Number of elements (default: src.width)

        Returns:
            self
        """
        if length is None:
            length = src.width
        if length < 1 or length > src.width:
            raise IndexError(f"Slice length {length} out of range for source width {src.width}")
        if offset < 0 or offset + length > self.width:
            raise IndexError(
                f"Slice [{offset}, {offset + length}) out of range for width {self.width}"
            )
        self._data[offset : offset + length] = narrow(src._data[:length], self.dtype)
        return self

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def astype(self, dtype) -> "Vector":
        """Deep copy converted to another element type."""
        return Vector.from_array(self._data, dtype)

    def copy(self) -> "Vector":
        return self.astype(self.dtype)

    def geometry(self) -> str:
        return f"[{self.width}]"

    def __repr__(self) -> str:
        return f"Vector({self.geometry()}, {self.dtype})"


class VectorArray:
    """
    Ordered set of N vectors of equal width W.

    Used as the staging buffer for serialized filters, serialized activation
    blocks and the hardware input slots.
    """

    def __init__(self, count: int, width: int, dtype=SIM_DTYPE):
        if count < 1:
            raise ValueError(f"VectorArray count must be positive, got {count}")
        self._vectors = [Vector(width, dtype) for _ in range(count)]

    @property
    def count(self) -> int:
        return len(self._vectors)

    @property
    def width(self) -> int:
        return self._vectors[0].width

    @property
    def length(self) -> int:
        return self._vectors[0].length

    @property
    def dtype(self) -> np.dtype:
        return self._vectors[0].dtype

    def __len__(self) -> int:
        return self.count

    def __getitem__(self, n: int) -> Vector:
        if not 0 <= n < self.count:
            raise IndexError(f"VectorArray index {n} out of range [0, {self.count})")
        return self._vectors[n]

    def __iter__(self) -> Iterator[Vector]:
        return iter(self._vectors)

    def fill(self, value) -> "VectorArray":
        """Set every element of every vector to value."""
        for vec in self._vectors:
            vec.fill(value)
        return self

    def astype(self, dtype) -> "VectorArray":
        """Deep copy converted to another element type."""
        result = VectorArray(self.count, self.width, dtype)
        result._vectors = [vec.astype(dtype) for vec in self._vectors]
        return result

    def geometry(self) -> str:
        return f"{self.count} X [{self.width}]"

    def __repr__(self) -> str:
        return f"VectorArray({self.geometry()}, {self.dtype})"
