"""
Convsim - numerical fidelity simulator for a fixed-point conv2D multiplier.

This package compares a tiled int8 multiply-accumulate engine (N vectors fed
through a P x P multiplier) against an exact floating-point convolution and
reports the RMS error introduced by tiling and 8-bit wraparound.
"""

from .config import HWConfig, TrialConfig
from .conv import compare_tensors, reference_conv2d, simulated_conv2d
from .tensor import ELEMENT_BITS, REF_DTYPE, SIM_DTYPE, Tensor, TensorArray
from .trial import TrialResult, run_trial

__version__ = "0.1.0"
__all__ = [
    "HWConfig",
    "TrialConfig",
    "Tensor",
    "TensorArray",
    "ELEMENT_BITS",
    "SIM_DTYPE",
    "REF_DTYPE",
    "simulated_conv2d",
    "reference_conv2d",
    "compare_tensors",
    "run_trial",
    "TrialResult",
    "__version__",
]
