"""
Execution modes and call-scoped worker pools.

Permutation draws are embarrassingly parallel: each draw reads the same
immutable inputs and returns an independent value. ``WorkerPool`` runs a
list of such tasks either in the calling thread or on a joblib pool that
lives only for the duration of one ``randomize()`` / ``mopet()`` call.

Usage:
    mode = ExecutionMode.from_parallel(4)
    with WorkerPool(mode) as pool:
        stats = pool.map(one_draw, range(permutations))

Results are always returned in task order, independent of scheduling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from joblib import Parallel, delayed

from pycwm.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')

VALID_JOBLIB_BACKENDS = ('loky', 'multiprocessing', 'threading')


@dataclass(frozen=True)
class ExecutionMode:
    """
    How permutation draws are scheduled.

    Attributes:
        n_workers: Number of independent workers (1 = sequential)
        backend: joblib backend used when n_workers > 1. 'loky'
            (default) runs draws in separate processes, so no mutable
            state is shared between draws.
    """
    n_workers: int = 1
    backend: str = 'loky'

    @classmethod
    def sequential(cls) -> ExecutionMode:
        return cls(n_workers=1)

    @classmethod
    def distributed(cls, n_workers: int, *, backend: str = 'loky') -> ExecutionMode:
        if isinstance(n_workers, bool) or not isinstance(n_workers, int) or n_workers < 1:
            raise ValidationError(
                f"parallel: expected a positive number of workers, got {n_workers!r}"
            )
        if backend not in VALID_JOBLIB_BACKENDS:
            raise ValidationError(
                f"backend: {backend!r} is not one of {VALID_JOBLIB_BACKENDS}"
            )
        return cls(n_workers=n_workers, backend=backend)

    @classmethod
    def from_parallel(cls, parallel: int | ExecutionMode | None) -> ExecutionMode:
        """
        Resolve the user-facing ``parallel`` argument.

        ``None`` means sequential, an integer is the number of workers,
        and an ExecutionMode is passed through.
        """
        if parallel is None:
            return cls.sequential()
        if isinstance(parallel, ExecutionMode):
            return parallel
        return cls.distributed(parallel)

    @property
    def is_distributed(self) -> bool:
        return self.n_workers > 1

    def describe(self) -> str:
        if not self.is_distributed:
            return 'sequential'
        return f'distributed({self.n_workers}, {self.backend})'


class WorkerPool:
    """
    Worker pool whose lifetime is one ``with`` block.

    In sequential mode tasks run in the calling thread. In distributed
    mode a single ``joblib.Parallel`` instance is kept open for the whole
    block, so several ``map`` calls (e.g. standard then modified draws)
    reuse the same workers.
    """

    def __init__(self, mode: ExecutionMode):
        self._mode = mode
        self._parallel: Parallel | None = None

    @property
    def mode(self) -> ExecutionMode:
        return self._mode

    def __enter__(self) -> WorkerPool:
        if self._mode.is_distributed:
            logger.debug("starting worker pool: %s", self._mode.describe())
            self._parallel = Parallel(
                n_jobs=self._mode.n_workers,
                backend=self._mode.backend,
            )
            self._parallel.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._parallel is not None:
            self._parallel.__exit__(exc_type, exc, tb)
            self._parallel = None
            logger.debug("worker pool closed")

    def map(self, func: Callable[[T], R], items: Iterable[T]) -> list[R]:
        """Apply ``func`` to every item, returning results in item order."""
        if self._parallel is None:
            if self._mode.is_distributed:
                raise RuntimeError("WorkerPool.map() called outside of a 'with' block")
            return [func(item) for item in items]
        return list(self._parallel(delayed(func)(item) for item in items))

