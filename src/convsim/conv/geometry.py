"""Output geometry of a no-padding, stride-1 convolution."""

from ..tensor import Tensor, TensorArray


def conv_output_shape(act: Tensor, filters: TensorArray) -> tuple[int, int, int]:
    """
    Compute (OW, OH, C) for convolving act with a filter bank.

    OW = W - KW + 1 and OH = H - KH + 1; the output depth is the filter count.

    Raises:
        ValueError: If a filter is wider or taller than the activation, or
            the filter depth differs from the activation depth
    """
    if filters.width > act.width or filters.height > act.height:
        raise ValueError(
            f"Filter {filters.geometry()} does not fit activation {act.geometry()}"
        )
    if filters.depth != act.depth:
        raise ValueError(
            f"Filter depth {filters.depth} does not match activation depth {act.depth}"
        )
    return (act.width - filters.width + 1, act.height - filters.height + 1, filters.count)


def surface_position(s: int, out_width: int) -> tuple[int, int]:
    """Map a flat surface index s = j*OW + i to its (i, j) output position."""
    return s % out_width, s // out_width
