"""
Convolution paths and the fidelity metric.

Components:
    hw_matrix_multiply: One pass of the modeled P x P multiplier
    MultiplyAccumulateEngine: Tiled int8 convolution on that multiplier
    simulated_conv2d: Convenience wrapper around the engine
    reference_conv2d: Direct exact convolution (the oracle)
    compare_tensors: RMS error between simulated and reference results

The two paths share the same contract: no padding, stride 1, output shape
(W - KW + 1, H - KH + 1, C).
"""

from .compare import compare_tensors, max_abs_error
from .geometry import conv_output_shape, surface_position
from .hwmult import hw_matrix_multiply
from .reference import reference_conv2d
from .simulated import EngineStats, MultiplyAccumulateEngine, simulated_conv2d

__all__ = [
    # Simulated path
    "hw_matrix_multiply",
    "MultiplyAccumulateEngine",
    "EngineStats",
    "simulated_conv2d",
    # Reference path
    "reference_conv2d",
    # Shared geometry
    "conv_output_shape",
    "surface_position",
    # Metrics
    "compare_tensors",
    "max_abs_error",
]
