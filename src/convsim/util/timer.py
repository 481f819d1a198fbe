"""Wall-clock stopwatch with automatic unit selection."""

import time


class Timer:
    """
    Stopwatch for timing one trial.

    Example:
        >>> with Timer() as timer:
        ...     run_trial(config)
        >>> print(timer.format())  # e.g. "12.345 msec"
    """

    def __init__(self):
        self._start: float | None = None
        self.elapsed: float = 0.0

    def start(self) -> "Timer":
        self._start = time.perf_counter()
        self.elapsed = 0.0
        return self

    def stop(self) -> float:
        """Stop the watch and return the elapsed seconds."""
        if self._start is None:
            raise RuntimeError("Timer stopped before it was started")
        self.elapsed = time.perf_counter() - self._start
        self._start = None
        return self.elapsed

    def __enter__(self) -> "Timer":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def format(self, precision: int = 3) -> str:
        return format_duration(self.elapsed, precision)


def format_duration(seconds: float, precision: int = 3) -> str:
    """Render seconds in usec below 1 ms, msec below 1 s, else sec."""
    if seconds < 1.0e-3:
        return f"{seconds * 1.0e6:.{precision}f} usec"
    if seconds < 1.0:
        return f"{seconds * 1.0e3:.{precision}f} msec"
    return f"{seconds:.{precision}f} sec"
