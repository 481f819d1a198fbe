"""
Unit tests for the command line front end.
"""

from pathlib import Path

import pytest

from convsim.cli import build_parser, dump_path_for, main, trial_config_from_namespace
from convsim.config import HWConfig

# Small ranges keep the pure-Python engine fast
SMALL_ARGS = [
    "--minW", "4", "--maxW", "6",
    "--minH", "4", "--maxH", "6",
    "--minD", "1", "--maxD", "2",
    "--minKW", "1", "--maxKW", "3",
    "--minKH", "1", "--maxKH", "3",
    "--minC", "1", "--maxC", "4",
    "--hwN", "4", "--hwP", "3",
]  # fmt: skip


class TestParser:
    """Test argument parsing and clamping."""

    def test_defaults(self):
        config = trial_config_from_namespace(build_parser().parse_args([]))
        assert config.hw == HWConfig(n=16, p=16)
        assert config.max_int == 16
        assert (config.min_w, config.max_w) == (16, 32)

    def test_ranges(self):
        config = trial_config_from_namespace(build_parser().parse_args(SMALL_ARGS))
        assert (config.min_w, config.max_w) == (4, 6)
        assert (config.min_c, config.max_c) == (1, 4)
        assert config.hw == HWConfig(n=4, p=3)

    @pytest.mark.parametrize(
        "argv,n,p",
        [(["--hwN", "0", "--hwP", "1"], 2, 3), (["--hwN", "-5", "--hwP", "-5"], 2, 3)],
    )
    def test_hw_clamped(self, argv, n, p):
        config = trial_config_from_namespace(build_parser().parse_args(argv))
        assert config.hw == HWConfig(n=n, p=p)

    @pytest.mark.parametrize("value,expected", [("1000", 127), ("1", 2), ("8", 8)])
    def test_max_int_clamped(self, value, expected):
        config = trial_config_from_namespace(build_parser().parse_args(["--maxInt", value]))
        assert config.max_int == expected


class TestDumpPath:
    """Test per-trial dump file naming."""

    def test_no_output(self):
        assert dump_path_for(None, 0, 1) is None

    def test_single_trial(self):
        assert dump_path_for("out.csv", 0, 1) == Path("out.csv")

    def test_multiple_trials(self):
        assert dump_path_for("dir/out.csv", 2, 3) == Path("dir/out_2.csv")


class TestMain:
    """Test end-to-end command line runs."""

    def test_single_trial(self, capsys):
        assert main([*SMALL_ARGS, "--seed", "1"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("conv2D trial: [")
        assert "rms error" in lines[0]

    def test_print_config(self, capsys):
        assert main([*SMALL_ARGS, "--seed", "1", "--maxInt", "4", "-c"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "HW MM: 4 vectors by 3 x 3 MM"
        assert lines[1].endswith("maxInt = 4")
        assert lines[2].startswith("conv2D trial:")

    def test_multiple_trials(self, capsys):
        assert main([*SMALL_ARGS, "--seed", "2", "--trials", "3"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 3
        assert all(line.startswith("conv2D trial:") for line in lines)

    def test_verbose(self, capsys):
        assert main([*SMALL_ARGS, "--seed", "3", "-v"]) == 0
        out = capsys.readouterr().out
        assert "Activation tensor diff = 0.00, max filter error = 0.00" in out

    def test_dump(self, capsys, tmp_path):
        path = tmp_path / "trial.csv"
        assert main([*SMALL_ARGS, "--seed", "4", "-o", str(path)]) == 0
        assert path.read_text().startswith("simulatedActivationTensor,[")

    def test_dump_failure_still_reports(self, capsys, tmp_path):
        path = tmp_path / "missing" / "trial.csv"
        assert main([*SMALL_ARGS, "--seed", "5", "-o", str(path)]) == 0
        assert "conv2D trial:" in capsys.readouterr().out
