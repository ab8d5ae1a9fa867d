"""
Wall-clock timing of backend sections.

Backends time their phases (real fits, standard permutations, modified
permutations, p-values) and store the resulting dict in
``Result.timing``. Sections may be entered several times; their times
add up.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Section timer for one backend call.

    Usage:
        timer = Timer()
        timer.start()
        with timer.section('real_fits'):
            ...
        with timer.section('modified_permutations'):
            ...
        timer.stop()
        timer.result()
        # {'total_seconds': 0.05, 'real_fits': 0.01, 'modified_permutations': 0.04}

    Also usable as a context manager, which starts and stops it:
        with Timer() as timer:
            ...
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._started: float | None = None
        self._elapsed: float | None = None

    def __enter__(self) -> 'Timer':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def start(self) -> None:
        self._started = time.perf_counter()
        self._elapsed = None

    def stop(self) -> None:
        if self._started is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._elapsed = time.perf_counter() - self._started

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Add the time spent in the ``with`` block to section ``name``."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._sections[name] = self._sections.get(name, 0.0) + time.perf_counter() - t0

    @property
    def sections(self) -> dict[str, float]:
        return dict(self._sections)

    def result(self) -> dict[str, float]:
        """
        Total and per-section seconds.

        Raises:
            RuntimeError: If the timer has not been stopped
        """
        if self._elapsed is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._elapsed, **self._sections}
