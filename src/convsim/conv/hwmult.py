"""
Model of the hardware matrix multiplier.

One pass multiplies a P x P operand matrix (one filter slice per row) by a
width-P activation slice and returns the P partial sums, all in the narrow
element type of the operands.
"""

from ..tensor import Matrix, Vector


def hw_matrix_multiply(matrix: Matrix, vec: Vector, p: int) -> Vector:
    """
    Run one P x P multiplier pass.

    Args:
        matrix: P x P operand matrix
        vec: Width-P input vector
        p: Multiplier dimension

    Returns:
        Width-P vector of partial sums
    """
    if matrix.width != p or matrix.height != p or vec.width != p:
        raise ValueError(
            f"Multiplier is {p} x {p}, got matrix {matrix.geometry()} and vector {vec.geometry()}"
        )
    return matrix.mm(vec)
