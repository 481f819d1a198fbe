"""
Dense 3D tensors, tensor arrays, and tensor/vector serialization.

Layout:
    A Tensor has width W, height H and depth D. Element (i, j, k) is stored
    at flat index (k*H + j)*W + i: row-major within a plane, planes packed
    along depth. Serialization flattens a tensor in exactly this storage
    order (i fastest, then j, then k).

Conversion:
    Tensors are generic over their numpy element type. astype() builds a
    deep converted copy, which is how the floating-point mirror of an int8
    tensor is created (and vice versa).
"""

from collections.abc import Iterator
from typing import TextIO

import numpy as np

from .arith import SIM_DTYPE, element_dot, is_narrow, narrow
from .vector import Vector


def format_element(value, dtype) -> str:
    """Render one element for diagnostic output."""
    if is_narrow(dtype):
        return str(int(value))
    return f"{float(value):.6f}"


class Tensor:
    """
    Dense W x H x D tensor of a numeric element type.

    Example:
        >>> act = Tensor(5, 5, 5)
        >>> act[2, 2, 2] = 1
        >>> act.geometry()
        '[5,5,5]'
    """

    def __init__(self, width: int, height: int, depth: int, dtype=SIM_DTYPE):
        if width < 1 or height < 1 or depth < 1:
            raise ValueError(f"Tensor dimensions must be positive, got [{width},{height},{depth}]")
        # Indexed [k, j, i] so that the flat order is (k*H + j)*W + i
        self._data = np.zeros((depth, height, width), dtype=np.dtype(dtype))

    @classmethod
    def from_array(cls, values, dtype=SIM_DTYPE) -> "Tensor":
        """
        Create a tensor from a 3D array indexed [i, j, k].

        Args:
            values: Array-like of shape (W, H, D)
            dtype: Element type of the new tensor
        """
        arr = np.asarray(values)
        if arr.ndim != 3:
            raise ValueError(f"Expected 3D values, got shape {arr.shape}")
        tensor = cls(*arr.shape, dtype=dtype)
        tensor._data[:] = narrow(arr.transpose(2, 1, 0), dtype)
        return tensor

    # -------------------------------------------------------------------------
    # Dimensions
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._data.shape[2]

    @property
    def height(self) -> int:
        return self._data.shape[1]

    @property
    def depth(self) -> int:
        return self._data.shape[0]

    @property
    def length(self) -> int:
        return self._data.size

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.width, self.height, self.depth)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    # -------------------------------------------------------------------------
    # Element access
    # -------------------------------------------------------------------------

    def _check_index(self, i: int, j: int, k: int) -> None:
        if not (0 <= i < self.width and 0 <= j < self.height and 0 <= k < self.depth):
            raise IndexError(f"Tensor index ({i}, {j}, {k}) out of range for {self.geometry()}")

    def __getitem__(self, index: tuple[int, int, int]):
        i, j, k = index
        self._check_index(i, j, k)
        return self._data[k, j, i]

    def __setitem__(self, index: tuple[int, int, int], value) -> None:
        i, j, k = index
        self._check_index(i, j, k)
        self._data[k, j, i] = narrow(value, self.dtype)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def to_array(self) -> np.ndarray:
        """Return a copy of the elements indexed [i, j, k]."""
        return self._data.transpose(2, 1, 0).copy()

    def flat(self) -> np.ndarray:
        """Return a copy of the elements in storage (serialization) order."""
        return self._data.ravel().copy()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def astype(self, dtype) -> "Tensor":
        """Deep copy converted to another element type."""
        result = Tensor(self.width, self.height, self.depth, dtype)
        result._data[:] = narrow(self._data, dtype)
        return result

    def copy(self) -> "Tensor":
        return self.astype(self.dtype)

    def extract_subtensor(self, i: int, j: int, k: int, w: int, h: int, d: int) -> "Tensor":
        """
        Copy the w x h x d block whose origin is (i, j, k).

        Raises:
            IndexError: If the block is not entirely inside this tensor
        """
        if w < 1 or h < 1 or d < 1:
            raise ValueError(f"Subtensor dimensions must be positive, got [{w},{h},{d}]")
        inside = (
            0 <= i
            and 0 <= j
            and 0 <= k
            and i + w <= self.width
            and j + h <= self.height
            and k + d <= self.depth
        )
        if not inside:
            raise IndexError(
                f"Subtensor [{w},{h},{d}] at ({i}, {j}, {k}) exceeds {self.geometry()}"
            )
        sub = Tensor(w, h, d, self.dtype)
        sub._data[:] = self._data[k : k + d, j : j + h, i : i + w]
        return sub

    def dot(self, other: "Tensor"):
        """Inner product over all elements with an equal-shape tensor."""
        if self.shape != other.shape:
            raise ValueError(f"Tensor shape mismatch: {self.geometry()} vs {other.geometry()}")
        return element_dot(self._data, other._data, self.dtype)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def geometry(self) -> str:
        return f"[{self.width},{self.height},{self.depth}]"

    def csv_dump(self, stream: TextIO, name: str) -> None:
        """
        Write this tensor as a CSV section.

        One row per spatial position (j outer, i inner) and one column per
        depth index, preceded by a title row and a header row. Sections end
        with a blank line.
        """
        stream.write(f"{name},{self.geometry()}\n")
        stream.write(",".join(["i", "j", *(str(k) for k in range(self.depth))]) + "\n")
        for j in range(self.height):
            for i in range(self.width):
                values = (format_element(v, self.dtype) for v in self._data[:, j, i])
                stream.write(",".join([str(i), str(j), *values]) + "\n")
        stream.write("\n")

    def __repr__(self) -> str:
        return f"Tensor({self.geometry()}, {self.dtype})"


class TensorArray:
    """
    Ordered set of C tensors of identical shape: a filter bank.

    Example:
        >>> filters = TensorArray(3, 3, 3, 1)
        >>> filters.geometry()
        '3 X [3,3,1]'
    """

    def __init__(self, count: int, width: int, height: int, depth: int, dtype=SIM_DTYPE):
        if count < 1:
            raise ValueError(f"TensorArray count must be positive, got {count}")
        self._tensors = [Tensor(width, height, depth, dtype) for _ in range(count)]

    @classmethod
    def from_tensors(cls, tensors: list[Tensor]) -> "TensorArray":
        """Build an array from deep copies of equal-shape tensors."""
        if not tensors:
            raise ValueError("TensorArray needs at least one tensor")
        first = tensors[0]
        for t in tensors[1:]:
            if t.shape != first.shape or t.dtype != first.dtype:
                raise ValueError(
                    f"TensorArray members must match: {t.geometry()} vs {first.geometry()}"
                )
        result = cls(len(tensors), first.width, first.height, first.depth, first.dtype)
        result._tensors = [t.copy() for t in tensors]
        return result

    @property
    def count(self) -> int:
        return len(self._tensors)

    @property
    def width(self) -> int:
        return self._tensors[0].width

    @property
    def height(self) -> int:
        return self._tensors[0].height

    @property
    def depth(self) -> int:
        return self._tensors[0].depth

    @property
    def length(self) -> int:
        """Element count of each member tensor (the serialized filter length)."""
        return self._tensors[0].length

    @property
    def shape(self) -> tuple[int, int, int]:
        return self._tensors[0].shape

    @property
    def dtype(self) -> np.dtype:
        return self._tensors[0].dtype

    def __len__(self) -> int:
        return self.count

    def __getitem__(self, c: int) -> Tensor:
        if not 0 <= c < self.count:
            raise IndexError(f"TensorArray index {c} out of range [0, {self.count})")
        return self._tensors[c]

    def __iter__(self) -> Iterator[Tensor]:
        return iter(self._tensors)

    def astype(self, dtype) -> "TensorArray":
        """Deep copy converted to another element type."""
        return TensorArray.from_tensors([t.astype(dtype) for t in self._tensors])

    def geometry(self) -> str:
        return f"{self.count} X [{self.width},{self.height},{self.depth}]"

    def csv_dump(self, stream: TextIO, name: str) -> None:
        """Write every member tensor as its own CSV section, named name[c]."""
        for c, tensor in enumerate(self._tensors):
            tensor.csv_dump(stream, f"{name}[{c}]")

    def __repr__(self) -> str:
        return f"TensorArray({self.geometry()}, {self.dtype})"


# =============================================================================
# Serialization
# =============================================================================


def serialize_tensor(vec: Vector, tensor: Tensor) -> Vector:
    """
    Flatten a tensor into a vector in storage order.

    Element (i, j, k) lands at vector index (k*H + j)*W + i.

    Args:
        vec: Destination vector, width must equal tensor.length
        tensor: Source tensor

    Returns:
        vec
    """
    if vec.width != tensor.length:
        raise ValueError(
            f"Cannot serialize {tensor.geometry()} ({tensor.length} elements) "
            f"into vector {vec.geometry()}"
        )
    return vec.insert_slice(Vector.from_array(tensor.flat(), tensor.dtype), 0)


def deserialize_vector(tensor: Tensor, vec: Vector) -> Tensor:
    """Inverse of serialize_tensor: unflatten vec into tensor, in place."""
    if vec.width != tensor.length:
        raise ValueError(
            f"Cannot deserialize vector {vec.geometry()} into {tensor.geometry()}"
        )
    tensor._data[:] = narrow(vec.to_array(), tensor.dtype).reshape(tensor._data.shape)
    return tensor
