"""Error metrics between a simulated and a reference tensor."""

import numpy as np

from ..tensor import Tensor


def _differences(sim: Tensor, ref: Tensor) -> np.ndarray:
    if sim.shape != ref.shape:
        raise ValueError(f"Cannot compare {sim.geometry()} with {ref.geometry()}")
    return sim.flat().astype(np.float64) - ref.flat().astype(np.float64)


def compare_tensors(sim: Tensor, ref: Tensor) -> float:
    """
    Root-mean-square of the elementwise differences.

    sqrt(mean((sim(i,j,k) - ref(i,j,k))**2)), evaluated in float64.

    Raises:
        ValueError: If the shapes differ
    """
    diff = _differences(sim, ref)
    return float(np.sqrt(np.mean(diff * diff)))


def max_abs_error(sim: Tensor, ref: Tensor) -> float:
    """Largest absolute elementwise difference."""
    return float(np.max(np.abs(_differences(sim, ref))))
