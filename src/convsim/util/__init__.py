"""Utility modules for convsim."""

from .csv_dump import write_csv_dump
from .timer import Timer, format_duration

__all__ = [
    "Timer",
    "format_duration",
    "write_csv_dump",
]
