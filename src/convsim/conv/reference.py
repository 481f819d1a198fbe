"""
Reference 2D convolution.

Direct sliding-window convolution with no tiling and no serialization: every
output element is the dot product of one filter with the receptive field at
(i, j). Run on the floating-point mirror of the inputs this is the exact
ground truth the simulated engine is measured against.
"""

from ..tensor import Tensor, TensorArray
from .geometry import conv_output_shape


def reference_conv2d(act: Tensor, filters: TensorArray) -> Tensor:
    """
    Convolve act with every filter, no padding, stride 1.

    R(i, j, c) = filters[c] . act[i:i+KW, j:j+KH, 0:D]

    Args:
        act: Activation tensor (W, H, D)
        filters: C filters of shape (KW, KH, D), same element type as act

    Returns:
        Tensor of shape (W - KW + 1, H - KH + 1, C) in the element type of act
    """
    out_w, out_h, out_c = conv_output_shape(act, filters)
    result = Tensor(out_w, out_h, out_c, act.dtype)
    for c in range(out_c):
        for i in range(out_w):
            for j in range(out_h):
                window = act.extract_subtensor(
                    i, j, 0, filters.width, filters.height, filters.depth
                )
                result[i, j, c] = filters[c].dot(window)
    return result
