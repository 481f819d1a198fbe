"""
Element types and fixed-width integer arithmetic.

The modeled multiplier operates on 8-bit signed integers with no overflow
protection. Every integer product and sum in the containers is evaluated in
int64 and then reduced modulo 2**bits into the signed range of the element
type. Modular reduction commutes with addition and multiplication, so wrapping
once at the end of a dot product is bit-identical to wrapping after every
individual multiply-add, as an 8-bit accumulator register would.

Element types:
    SIM_DTYPE: int8, the hardware operand and accumulator type
    REF_DTYPE: float64, the idealized reference type
"""

import numpy as np

SIM_DTYPE = np.dtype(np.int8)
"""Element type of the simulated hardware path."""

REF_DTYPE = np.dtype(np.float64)
"""Element type of the floating-point reference path."""

ELEMENT_BITS = SIM_DTYPE.itemsize * 8
"""Operand and accumulator width of the modeled multiplier, in bits."""

WIDE_DTYPE = np.dtype(np.int64)
"""Intermediate type used before wrapping back to the element width."""


def is_narrow(dtype) -> bool:
    """True if dtype is an integer (fixed-width, wrapping) element type."""
    return np.dtype(dtype).kind in "iu"


def wrap_int(values, bits: int = ELEMENT_BITS):
    """
    Reduce integers modulo 2**bits into the signed range.

    Args:
        values: Integer scalar or array
        bits: Target width in bits

    Returns:
        int64 array (or scalar) in [-2**(bits-1), 2**(bits-1) - 1]
    """
    half = 1 << (bits - 1)
    wide = np.asarray(values, dtype=WIDE_DTYPE)
    return (wide + half) % (1 << bits) - half


def narrow(values, dtype):
    """
    Convert values to dtype the way a C assignment would.

    Floating sources are truncated toward zero before an integer conversion,
    and integers wrap to the target width. Floating targets convert exactly.

    Args:
        values: Scalar or array
        dtype: Target element type

    Returns:
        numpy array (0-d for scalars) of the target dtype
    """
    dtype = np.dtype(dtype)
    arr = np.asarray(values)
    if not is_narrow(dtype):
        return arr.astype(dtype)
    if not is_narrow(arr.dtype):
        arr = np.trunc(arr)
    bits = dtype.itemsize * 8
    if dtype.kind == "u":
        return (arr.astype(WIDE_DTYPE) % (1 << bits)).astype(dtype)
    return wrap_int(arr.astype(WIDE_DTYPE), bits).astype(dtype)


def widen(values, dtype):
    """Return values in the type used to evaluate arithmetic for dtype."""
    if is_narrow(dtype):
        return np.asarray(values, dtype=WIDE_DTYPE)
    return np.asarray(values, dtype=np.dtype(dtype))


def element_dot(a, b, dtype):
    """
    Inner product of two equal-length arrays in the element type.

    Integer types accumulate exactly in int64 and wrap once to the element
    width; floating types accumulate in their own precision.
    """
    result = np.dot(widen(a, dtype).ravel(), widen(b, dtype).ravel())
    return narrow(result, dtype)[()]
