"""
Randomized convolution fidelity trials.

One trial:
    1. Draws an int8 activation tensor and filter bank within the configured
       ranges (values in [-max_int, max_int], no quantization scale).
    2. Builds exact floating-point mirrors of both.
    3. Convolves the int8 pair on the simulated multiply-accumulate engine
       and the float pair with the reference convolution.
    4. Reports the RMS error between the two results.
    5. Optionally dumps all six tensors to a CSV file for inspection.

The whole trial, dump included, is timed with a wall-clock stopwatch.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .config import DEFAULT_TRIAL_CONFIG, HWConfig, TrialConfig
from .conv import (
    EngineStats,
    MultiplyAccumulateEngine,
    compare_tensors,
    max_abs_error,
    reference_conv2d,
)
from .tensor import REF_DTYPE, SIM_DTYPE, Tensor, TensorArray
from .util import Timer, format_duration, write_csv_dump

logger = logging.getLogger(__name__)


# =============================================================================
# Input generation
# =============================================================================


def _uniform(rng: np.random.Generator, lo: int, hi: int) -> int:
    """Draw one integer uniformly from the closed interval [lo, hi]."""
    return int(rng.integers(lo, hi, endpoint=True))


def generate_activation(config: TrialConfig, rng: np.random.Generator) -> Tensor:
    """
    Generate a random int8 activation tensor.

    Width, height and depth are drawn from their configured ranges and every
    element from [-max_int, max_int].
    """
    w = _uniform(rng, config.min_w, config.max_w)
    h = _uniform(rng, config.min_h, config.max_h)
    d = _uniform(rng, config.min_d, config.max_d)
    values = rng.integers(-config.max_int, config.max_int, size=(w, h, d), endpoint=True)
    return Tensor.from_array(values, SIM_DTYPE)


def generate_filters(act: Tensor, config: TrialConfig, rng: np.random.Generator) -> TensorArray:
    """
    Generate a random int8 filter bank for an activation tensor.

    Filter width and height are drawn from their ranges and then clamped to
    the activation width and height; the depth always equals the activation
    depth.
    """
    kw = min(_uniform(rng, config.min_kw, config.max_kw), act.width)
    kh = min(_uniform(rng, config.min_kh, config.max_kh), act.height)
    c = _uniform(rng, config.min_c, config.max_c)
    values = rng.integers(
        -config.max_int, config.max_int, size=(c, kw, kh, act.depth), endpoint=True
    )
    return TensorArray.from_tensors([Tensor.from_array(v, SIM_DTYPE) for v in values])


# =============================================================================
# Evaluation
# =============================================================================


@dataclass
class TrialTensors:
    """The six tensors of one trial: int8 inputs, float mirrors, both results."""

    simulated_activation: Tensor
    reference_activation: Tensor
    simulated_filters: TensorArray
    reference_filters: TensorArray
    simulated_result: Tensor
    reference_result: Tensor

    def named(self) -> dict[str, Tensor | TensorArray]:
        """Tensors keyed by their diagnostic dump section names."""
        return {
            "simulatedActivationTensor": self.simulated_activation,
            "referenceActivationTensor": self.reference_activation,
            "simulatedFilterSet": self.simulated_filters,
            "referenceFilterSet": self.reference_filters,
            "simulatedResultTensor": self.simulated_result,
            "referenceResultTensor": self.reference_result,
        }


def evaluate_conv2d(
    act: Tensor, filters: TensorArray, hw: HWConfig
) -> tuple[TrialTensors, EngineStats]:
    """
    Run both convolution paths on one int8 input pair.

    Args:
        act: int8 activation tensor
        filters: int8 filter bank
        hw: Multiplier shape for the simulated path

    Returns:
        (all six tensors, engine work counters)
    """
    ref_act = act.astype(REF_DTYPE)
    ref_filters = filters.astype(REF_DTYPE)

    engine = MultiplyAccumulateEngine(hw)
    sim_result = engine.run(act, filters)
    ref_result = reference_conv2d(ref_act, ref_filters)

    tensors = TrialTensors(
        simulated_activation=act,
        reference_activation=ref_act,
        simulated_filters=filters,
        reference_filters=ref_filters,
        simulated_result=sim_result,
        reference_result=ref_result,
    )
    return tensors, engine.stats


@dataclass
class TrialResult:
    """Outcome of one trial."""

    activation: str
    """Activation geometry, e.g. "[20,18,3]"."""

    filters: str
    """Filter bank geometry, e.g. "7 X [3,3,3]"."""

    output: str
    """Result geometry."""

    rms_error: float
    """RMS difference between simulated and reference results."""

    elapsed: float
    """Wall-clock seconds for the whole trial."""

    stats: EngineStats
    """Simulated engine work counters."""

    activation_error: float | None = None
    """RMS error of the float activation mirror (verbose mode only)."""

    filter_error: float | None = None
    """Worst RMS error over the float filter mirrors (verbose mode only)."""

    dump_path: Path | None = None
    """CSV file written, if a dump was requested and succeeded."""

    dump_error: str | None = None
    """Reason the requested dump failed, if it did."""

    def summary(self) -> str:
        """One line report: geometry, RMS error percentage and elapsed time."""
        return (
            f"conv2D trial: {self.activation} by {self.filters}, "
            f"{self.rms_error * 100.0:.2f}% rms error, "
            f"{format_duration(self.elapsed)} sim time"
        )


def run_trial(
    config: TrialConfig = DEFAULT_TRIAL_CONFIG,
    rng: np.random.Generator | None = None,
    dump_path: str | Path | None = None,
    verbose: bool = False,
) -> TrialResult:
    """
    Run one randomized trial.

    Args:
        config: Trial ranges and multiplier shape (normalized before use)
        rng: Random source (default: freshly seeded generator)
        dump_path: Write all six tensors to this CSV file
        verbose: Also check the float mirrors of the inputs

    Returns:
        TrialResult. A failed dump is recorded in dump_error; it does not
        abort the trial.
    """
    config = config.normalized()
    if rng is None:
        rng = np.random.default_rng()

    activation_error = None
    filter_error = None
    dump_error = None
    written = None

    timer = Timer().start()

    act = generate_activation(config, rng)
    filters = generate_filters(act, config, rng)
    logger.debug("Trial inputs: %s by %s", act.geometry(), filters.geometry())

    tensors, stats = evaluate_conv2d(act, filters, config.hw)

    if verbose:
        activation_error = compare_tensors(act, tensors.reference_activation)
        filter_error = max(
            compare_tensors(sim, ref) for sim, ref in zip(filters, tensors.reference_filters)
        )
        logger.info(
            "Activation tensor diff = %.2f, max filter error = %.2f",
            activation_error,
            filter_error,
        )
        logger.info(
            "Max abs result error = %.2f over %d slice passes",
            max_abs_error(tensors.simulated_result, tensors.reference_result),
            stats.slice_passes,
        )

    rms_error = compare_tensors(tensors.simulated_result, tensors.reference_result)

    if dump_path is not None:
        try:
            written = write_csv_dump(dump_path, tensors.named())
        except OSError as e:
            dump_error = f"{dump_path}: {e.strerror or e}"
            logger.error("Cannot write diagnostic dump %s", dump_error)

    timer.stop()

    return TrialResult(
        activation=act.geometry(),
        filters=filters.geometry(),
        output=tensors.simulated_result.geometry(),
        rms_error=rms_error,
        elapsed=timer.elapsed,
        stats=stats,
        activation_error=activation_error,
        filter_error=filter_error,
        dump_path=written,
        dump_error=dump_error,
    )
