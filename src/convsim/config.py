"""
Convsim Configuration Module

This module defines the configuration dataclasses for the convolution
fidelity simulator. Hardware tile parameters and the random trial ranges are
specified here and passed explicitly to the engine and the trial driver;
there is no process-wide configuration state.

The modeled multiplier accepts N activation vectors per pass and multiplies
each of them by a P x P operand matrix (P filter rows of P elements):

                 | <-------  P ------>|
    | res 1 |    | f11  f12  ...  f1P | | v1 |   ^
    | res 2 |    | f21  f22  ...  f2P | | v2 |   |
      ...     =  | ...  ...  ...  ... | | .. |   P
    | res P |    | fP1  fP2  ...  fPP | | vP |   V
"""

from dataclasses import dataclass, field, replace

# Command line floors for the hardware tile shape
MIN_HW_N = 2
MIN_HW_P = 3

# Bounds on the magnitude of generated integers
MIN_MAX_INT = 2
MAX_MAX_INT = 127


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class HWConfig:
    """
    Shape of the simulated multiply-accumulate engine.

    The engine is a correct decomposition for any positive tile shape; the
    command line floor (N >= 2, P >= 3) is applied by clamped().

    Example:
        >>> hw = HWConfig(n=16, p=16)
        >>> hw.describe()
        '16 vectors by 16 x 16 MM'
    """

    n: int = 16
    """Number of activation vectors fed to the multiplier per pass (N)."""

    p: int = 16
    """Operand matrix dimension (P): filter rows per pass and slice length."""

    @property
    def macs_per_pass(self) -> int:
        """Multiply-accumulates performed by one N x (P x P) pass."""
        return self.n * self.p * self.p

    def clamped(self) -> "HWConfig":
        """Return a copy raised to the command line floor (N >= 2, P >= 3)."""
        return replace(self, n=max(self.n, MIN_HW_N), p=max(self.p, MIN_HW_P))

    def describe(self) -> str:
        return f"{self.n} vectors by {self.p} x {self.p} MM"

    def __post_init__(self):
        """Validate configuration parameters."""
        assert self.n > 0, "n must be positive"
        assert self.p > 0, "p must be positive"


@dataclass(frozen=True)
class TrialConfig:
    """
    Ranges for one randomized convolution trial.

    Every dimension is drawn uniformly from its closed [min, max] interval
    and every element uniformly from [-max_int, max_int].

    Example:
        >>> cfg = TrialConfig(max_int=300).normalized()
        >>> cfg.max_int
        127
    """

    # =========================================================================
    # Activation tensor ranges
    # =========================================================================
    min_w: int = 16
    """Minimum activation width."""

    max_w: int = 32
    """Maximum activation width."""

    min_h: int = 16
    """Minimum activation height."""

    max_h: int = 32
    """Maximum activation height."""

    min_d: int = 1
    """Minimum activation depth (also the filter depth)."""

    max_d: int = 16
    """Maximum activation depth."""

    # =========================================================================
    # Filter bank ranges
    # =========================================================================
    min_kw: int = 1
    """Minimum filter width (clamped to the activation width)."""

    max_kw: int = 11
    """Maximum filter width."""

    min_kh: int = 1
    """Minimum filter height (clamped to the activation height)."""

    max_kh: int = 11
    """Maximum filter height."""

    min_c: int = 1
    """Minimum filter count (output channels)."""

    max_c: int = 32
    """Maximum filter count."""

    # =========================================================================
    # Numerics
    # =========================================================================
    max_int: int = 16
    """Generated integers lie in [-max_int, max_int]."""

    hw: HWConfig = field(default_factory=HWConfig)
    """Simulated multiplier shape."""

    def normalized(self) -> "TrialConfig":
        """
        Return a copy with every out-of-range value clamped.

        max_int is clamped into [2, 127], minimums are raised to 1, each
        maximum is raised to its minimum, and the hardware shape is raised to
        the command line floor. Nothing is ever rejected.
        """
        values = {}
        for dim in ("w", "h", "d", "kw", "kh", "c"):
            lo = max(1, getattr(self, f"min_{dim}"))
            values[f"min_{dim}"] = lo
            values[f"max_{dim}"] = max(lo, getattr(self, f"max_{dim}"))
        return replace(
            self,
            max_int=_clamp(self.max_int, MIN_MAX_INT, MAX_MAX_INT),
            hw=self.hw.clamped(),
            **values,
        )

    def describe_ranges(self) -> str:
        """One line summary of the activation and filter ranges."""
        return (
            f"Ranges: [{self.min_w}..{self.max_w}]x[{self.min_h}..{self.max_h}]"
            f"x[{self.min_d}..{self.max_d}] by [{self.min_c}..{self.max_c}] of "
            f"[{self.min_kw}..{self.max_kw}]x[{self.min_kh}..{self.max_kh}]"
            f"x[{self.min_d}..{self.max_d}], maxInt = {self.max_int}"
        )


# Pre-defined configurations
DEFAULT_HW_CONFIG = HWConfig()
"""Default 16-vector, 16 x 16 multiplier."""

SMALL_HW_CONFIG = HWConfig(n=4, p=3)
"""Small multiplier that forces many partial tiles."""

DEFAULT_TRIAL_CONFIG = TrialConfig()
"""Default trial ranges."""

SMALL_TRIAL_CONFIG = TrialConfig(
    min_w=4,
    max_w=8,
    min_h=4,
    max_h=8,
    min_d=1,
    max_d=3,
    min_kw=1,
    max_kw=3,
    min_kh=1,
    max_kh=3,
    min_c=1,
    max_c=5,
    hw=SMALL_HW_CONFIG,
)
"""Tiny tensors for quick smoke runs."""
