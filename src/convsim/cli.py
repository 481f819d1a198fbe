"""
Command line front end for convsim.

Runs one or more randomized conv2D fidelity trials and prints one summary
line per trial:

    conv2D trial: [20,18,3] by 7 X [3,3,3], 48.31% rms error, 41.207 msec sim time

Usage:
    convsim [options]

Examples:
    # Default 16-vector, 16 x 16 multiplier
    convsim

    # Small multiplier, small values, print the configuration first
    convsim --hwN 4 --hwP 3 --maxInt 4 -c

    # Repeatable run with a CSV dump of every tensor
    convsim --seed 1 -o trial.csv

Out-of-range values are clamped rather than rejected: --maxInt into
[2, 127], --hwN to at least 2, --hwP to at least 3.
"""

import logging
import sys
from argparse import ArgumentParser, Namespace
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .config import DEFAULT_TRIAL_CONFIG, HWConfig, TrialConfig
from .trial import run_trial

logger = logging.getLogger(__name__)


@dataclass
class RunArgs:
    """
    Parsed run-control arguments.

    This provides a cleaner interface than accessing raw argparse Namespace.
    """

    output: str | None
    print_config: bool
    verbose: bool
    seed: int | None
    trials: int

    @classmethod
    def from_namespace(cls, args: Namespace) -> "RunArgs":
        """Create from argparse Namespace with defaults for missing attrs."""
        return cls(
            output=getattr(args, "output", None),
            print_config=getattr(args, "print_config", False),
            verbose=getattr(args, "verbose", False),
            seed=getattr(args, "seed", None),
            trials=max(1, getattr(args, "trials", 1)),
        )


def trial_config_from_namespace(args: Namespace) -> TrialConfig:
    """Map parsed range options onto a normalized TrialConfig."""
    config = TrialConfig(
        min_w=args.minW,
        max_w=args.maxW,
        min_h=args.minH,
        max_h=args.maxH,
        min_d=args.minD,
        max_d=args.maxD,
        min_kw=args.minKW,
        max_kw=args.maxKW,
        min_kh=args.minKH,
        max_kh=args.maxKH,
        min_c=args.minC,
        max_c=args.maxC,
        max_int=args.maxInt,
        hw=HWConfig(n=max(1, args.hwN), p=max(1, args.hwP)),
    )
    return config.normalized()


def add_hw_args(parser: ArgumentParser, *, defaults: HWConfig = DEFAULT_TRIAL_CONFIG.hw) -> None:
    """
    Add hardware multiplier arguments to a parser.

    Adds these arguments:
        --hwN N     Vectors fed to the multiplier per pass
        --hwP P     Multiplier operand matrix dimension
    """
    group = parser.add_argument_group("HW Multiplier")

    group.add_argument(
        "--hwN",
        type=int,
        default=defaults.n,
        metavar="N",
        help=f"HW multiplier vector width (default: {defaults.n})",
    )
    group.add_argument(
        "--hwP",
        type=int,
        default=defaults.p,
        metavar="P",
        help=f"HW multiplier MM dimensions (default: {defaults.p})",
    )


def add_range_args(
    parser: ArgumentParser, *, defaults: TrialConfig = DEFAULT_TRIAL_CONFIG
) -> None:
    """
    Add activation, filter and value range arguments to a parser.

    Adds --minW/--maxW, --minH/--maxH, --minD/--maxD for the activation
    tensor, --minKW/--maxKW, --minKH/--maxKH, --minC/--maxC for the filter
    bank, and --maxInt for element magnitudes.
    """
    act = parser.add_argument_group("Activation Tensor")
    for flag, attr, text in (
        ("W", "w", "activation tensor width"),
        ("H", "h", "activation tensor height"),
        ("D", "d", "activation tensor depth"),
    ):
        for bound in ("min", "max"):
            default = getattr(defaults, f"{bound}_{attr}")
            act.add_argument(
                f"--{bound}{flag}",
                type=int,
                default=default,
                metavar="n",
                help=f"{bound}imum {text} (default: {default})",
            )

    filt = parser.add_argument_group("Filter Bank")
    for flag, attr, text in (
        ("KW", "kw", "filter tensor width"),
        ("KH", "kh", "filter tensor height"),
        ("C", "c", "filter tensor channel count"),
    ):
        for bound in ("min", "max"):
            default = getattr(defaults, f"{bound}_{attr}")
            filt.add_argument(
                f"--{bound}{flag}",
                type=int,
                default=default,
                metavar="n",
                help=f"{bound}imum {text} (default: {default})",
            )

    parser.add_argument(
        "--maxInt",
        type=int,
        default=defaults.max_int,
        metavar="n",
        help=f"integers will be in the range [-n .. n] (default: {defaults.max_int})",
    )


def add_run_args(parser: ArgumentParser) -> None:
    """
    Add run-control arguments to a parser.

    Adds these arguments:
        -o FILE         Save all tensors to a CSV file
        -c              Print the tensor configuration and maxInt before the run
        -v, --verbose   Check the float input mirrors and log debug detail
        --seed N        Seed the random generator
        --trials N      Number of trials to run
    """
    group = parser.add_argument_group("Run Control")

    group.add_argument(
        "-o",
        dest="output",
        type=str,
        default=None,
        metavar="FILE",
        help="save matrices to csv file",
    )
    group.add_argument(
        "-c",
        dest="print_config",
        action="store_true",
        help="print tensor configurations and maxInt before run",
    )
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="compare input tensors with their float mirrors and log details",
    )
    group.add_argument(
        "--seed",
        type=int,
        default=None,
        help="random seed for repeatable trials (default: random)",
    )
    group.add_argument(
        "--trials",
        type=int,
        default=1,
        metavar="N",
        help="number of trials to run (default: 1)",
    )


def dump_path_for(output: str | None, trial: int, trials: int) -> Path | None:
    """Dump file for one trial: output itself, or output_<trial> when running several."""
    if output is None:
        return None
    path = Path(output)
    if trials == 1:
        return path
    return path.with_name(f"{path.stem}_{trial}{path.suffix}")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="convsim",
        description="Measure the RMS error of an int8 HW matrix multiplier running conv2D.",
    )
    add_hw_args(parser)
    add_range_args(parser)
    add_run_args(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    run = RunArgs.from_namespace(args)

    logging.basicConfig(
        level=logging.DEBUG if run.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = trial_config_from_namespace(args)
    if run.print_config:
        print(f"HW MM: {config.hw.describe()}")
        print(config.describe_ranges())

    rng = np.random.default_rng(run.seed)
    for trial in range(run.trials):
        dump_path = dump_path_for(run.output, trial, run.trials)
        result = run_trial(config, rng=rng, dump_path=dump_path, verbose=run.verbose)
        if run.verbose and result.activation_error is not None:
            print(
                f"Activation tensor diff = {result.activation_error:.2f}, "
                f"max filter error = {result.filter_error:.2f}"
            )
        print(result.summary())
        logger.debug("Trial %d stats: %s", trial, result.stats)

    return 0


if __name__ == "__main__":
    sys.exit(main())
