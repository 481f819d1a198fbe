"""
Dense containers for the convolution simulator.

Components:
    Vector, VectorArray: 1D operands and staging buffers
    Matrix: multiplier operand and accumulator bank
    Tensor, TensorArray: activations, filter banks and results
    serialize_tensor, deserialize_vector: tensor <-> vector flattening

All containers are generic over a numpy element type. The simulated hardware
path uses SIM_DTYPE (int8, wrapping) and the reference path REF_DTYPE
(float64).
"""

from .arith import ELEMENT_BITS, REF_DTYPE, SIM_DTYPE, is_narrow, narrow, wrap_int
from .matrix import Matrix
from .tensor import Tensor, TensorArray, deserialize_vector, serialize_tensor
from .vector import Vector, VectorArray

__all__ = [
    # Element types
    "ELEMENT_BITS",
    "SIM_DTYPE",
    "REF_DTYPE",
    "is_narrow",
    "narrow",
    "wrap_int",
    # Containers
    "Vector",
    "VectorArray",
    "Matrix",
    "Tensor",
    "TensorArray",
    # Serialization
    "serialize_tensor",
    "deserialize_vector",
]
