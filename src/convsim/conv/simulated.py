"""
Simulated 2D convolution on an int8 hardware multiply-accumulate engine.

The convolution is mapped onto repeated N x (P x P) multiplier passes:

    - Every filter (KW x KH x D) is serialized once into a vector of
      length L = KW * KH * D, forming the filter table.
    - The OW * OH output positions form a flat surface s = j*OW + i.
    - Output channels are processed in chunks of up to P filters (the rows
      of the operand matrix).
    - Surface positions are processed in chunks of up to N receptive fields,
      each serialized into a length-L activation vector.
    - The length-L vectors are consumed in slices of up to P elements. Each
      slice of every filter becomes an operand row, each slice of every
      activation vector is fed through the multiplier, and the P partial sums
      per vector are accumulated into an N x P accumulator bank.
    - When all slices are done, the valid accumulators are written to the
      output tensor at (i, j, channel).

Every operand, product and accumulator is an 8-bit signed integer with no
overflow protection, so the result reproduces the wraparound error of the
modeled hardware. Staging buffers are always full N/P size; slots that a
partial chunk does not use are zero-filled and contribute nothing.
"""

import logging
from dataclasses import dataclass

from ..config import HWConfig
from ..tensor import SIM_DTYPE, Matrix, Tensor, TensorArray, Vector, VectorArray, serialize_tensor
from .geometry import conv_output_shape, surface_position
from .hwmult import hw_matrix_multiply

logger = logging.getLogger(__name__)


@dataclass
class EngineStats:
    """Work counters for the last engine run."""

    channel_tiles: int = 0
    """Channel chunks of up to P filters."""

    surface_tiles: int = 0
    """(channel chunk, surface chunk) pairs, i.e. accumulator bank flushes."""

    slice_passes: int = 0
    """Multiplier passes (one per L-slice per surface tile)."""

    vector_multiplies: int = 0
    """Individual P x P by P multiplies (N per pass)."""

    macs: int = 0
    """Multiply-accumulates issued, including zero-padded slots."""


class MultiplyAccumulateEngine:
    """
    Tiled int8 convolution engine for an N-vector, P x P multiplier.

    Buffers are allocated fresh by every run() and kept afterwards for
    inspection:
        filter_table: C x [L] serialized filters
        activation_tile: N x [L] serialized receptive fields of one surface chunk
        hw_vectors: N x [P] multiplier input slots
        operand: P x P operand matrix, one filter slice per row
        accumulators: N x P accumulator bank, entry (n, p)

    Usage:
        engine = MultiplyAccumulateEngine(HWConfig(n=4, p=3))
        result = engine.run(act, filters)
        print(engine.stats.slice_passes)
    """

    def __init__(self, hw: HWConfig):
        self.hw = hw
        self.stats = EngineStats()
        self.filter_table: VectorArray | None = None
        self.activation_tile: VectorArray | None = None
        self.hw_vectors: VectorArray | None = None
        self.operand: Matrix | None = None
        self.accumulators: Matrix | None = None

    def reset(self) -> None:
        """Drop all staging buffers and counters."""
        self.stats = EngineStats()
        self.filter_table = None
        self.activation_tile = None
        self.hw_vectors = None
        self.operand = None
        self.accumulators = None

    def run(self, act: Tensor, filters: TensorArray) -> Tensor:
        """
        Convolve an int8 activation tensor with an int8 filter bank.

        Args:
            act: Activation tensor (W, H, D)
            filters: C filters of shape (KW, KH, D)

        Returns:
            int8 tensor of shape (W - KW + 1, H - KH + 1, C)

        Raises:
            ValueError: On shape mismatches or non-int8 inputs
        """
        if act.dtype != SIM_DTYPE or filters.dtype != SIM_DTYPE:
            raise ValueError(
                f"Simulated engine needs {SIM_DTYPE} inputs, got {act.dtype} and {filters.dtype}"
            )
        out_w, out_h, out_c = conv_output_shape(act, filters)
        n, p = self.hw.n, self.hw.p
        surface = out_w * out_h
        length = filters.length

        logger.debug(
            "simulated conv2d: %s by %s on %s",
            act.geometry(),
            filters.geometry(),
            self.hw.describe(),
        )

        self.reset()
        self.hw_vectors = VectorArray(n, p)
        self.operand = Matrix(p, p)
        self.accumulators = Matrix(n, p)
        self.activation_tile = VectorArray(n, length)

        # Serialize the filters once
        self.filter_table = VectorArray(out_c, length)
        for c, filt in enumerate(filters):
            serialize_tensor(self.filter_table[c], filt)

        result = Tensor(out_w, out_h, out_c)
        for c in range(0, out_c, p):
            chan_count = min(p, out_c - c)
            self.stats.channel_tiles += 1

            for s in range(0, surface, n):
                surf_count = min(n, surface - s)
                self.stats.surface_tiles += 1
                self._load_activation_tile(act, filters, s, surf_count, out_w)

                self.accumulators.fill(0)
                for offset in range(0, length, p):
                    slice_len = min(p, length - offset)
                    self._load_operands(c, chan_count, surf_count, offset, slice_len)
                    self._multiply_accumulate()

                self._store_accumulators(result, c, chan_count, s, surf_count, out_w)

        return result

    # -------------------------------------------------------------------------
    # Tile steps
    # -------------------------------------------------------------------------

    def _load_activation_tile(
        self, act: Tensor, filters: TensorArray, s: int, surf_count: int, out_w: int
    ) -> None:
        """Serialize up to N receptive fields; unused slots stay zero."""
        self.activation_tile.fill(0)
        for ss in range(surf_count):
            i, j = surface_position(s + ss, out_w)
            window = act.extract_subtensor(i, j, 0, filters.width, filters.height, filters.depth)
            serialize_tensor(self.activation_tile[ss], window)

    def _load_operands(
        self, c: int, chan_count: int, surf_count: int, offset: int, slice_len: int
    ) -> None:
        """Load one P-wide slice of the active vectors and filters."""
        p = self.hw.p

        self.hw_vectors.fill(0)
        for ss in range(surf_count):
            self.hw_vectors[ss].extract_slice(self.activation_tile[ss], offset, slice_len)

        self.operand.fill(0)
        filter_slice = Vector(p)
        for cc in range(chan_count):
            filter_slice.fill(0).extract_slice(self.filter_table[c + cc], offset, slice_len)
            self.operand.set_row(cc, filter_slice)

    def _multiply_accumulate(self) -> None:
        """Feed all N slots through the multiplier and accumulate the results."""
        n, p = self.hw.n, self.hw.p
        for slot in range(n):
            partial = hw_matrix_multiply(self.operand, self.hw_vectors[slot], p)
            self.accumulators.accumulate_column(slot, partial)

        self.stats.slice_passes += 1
        self.stats.vector_multiplies += n
        self.stats.macs += self.hw.macs_per_pass

    def _store_accumulators(
        self, result: Tensor, c: int, chan_count: int, s: int, surf_count: int, out_w: int
    ) -> None:
        """Write the valid accumulator entries to the output tensor."""
        for ss in range(surf_count):
            i, j = surface_position(s + ss, out_w)
            for cc in range(chan_count):
                result[i, j, c + cc] = self.accumulators[ss, cc]


def simulated_conv2d(act: Tensor, filters: TensorArray, hw: HWConfig) -> Tensor:
    """Convolve on a freshly built engine and return the int8 result."""
    return MultiplyAccumulateEngine(hw).run(act, filters)
