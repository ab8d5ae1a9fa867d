"""
Tests for execution modes, worker pools and timing.

Validates:
    - ExecutionMode resolution of the user-facing ``parallel`` argument
    - WorkerPool returns results in task order, sequential and distributed
    - Timer sections end up in the timing dict
"""

import pytest

from pycwm.core.compute import ExecutionMode, Timer, WorkerPool
from pycwm.core.exceptions import ValidationError


def _square(x):
    return x * x


# ═══════════════════════════════════════════════════════════════════════
# ExecutionMode
# ═══════════════════════════════════════════════════════════════════════


class TestExecutionMode:

    def test_none_is_sequential(self):
        mode = ExecutionMode.from_parallel(None)
        assert not mode.is_distributed
        assert mode.describe() == 'sequential'

    def test_int_is_distributed(self):
        mode = ExecutionMode.from_parallel(3)
        assert mode.is_distributed
        assert mode.n_workers == 3
        assert mode.describe() == 'distributed(3, loky)'

    def test_one_worker_runs_in_caller(self):
        assert not ExecutionMode.from_parallel(1).is_distributed

    def test_passthrough(self):
        mode = ExecutionMode.distributed(2, backend='threading')
        assert ExecutionMode.from_parallel(mode) is mode

    @pytest.mark.parametrize("bad", [0, -1, 2.0, True, "4"])
    def test_rejects_bad_workers(self, bad):
        with pytest.raises(ValidationError, match="parallel"):
            ExecutionMode.from_parallel(bad)

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValidationError, match="backend"):
            ExecutionMode.distributed(2, backend='dask')


# ═══════════════════════════════════════════════════════════════════════
# WorkerPool
# ═══════════════════════════════════════════════════════════════════════


class TestWorkerPool:

    def test_sequential_map(self):
        with WorkerPool(ExecutionMode.sequential()) as pool:
            assert pool.map(_square, range(5)) == [0, 1, 4, 9, 16]

    def test_threading_map_keeps_order(self):
        mode = ExecutionMode.distributed(2, backend='threading')
        with WorkerPool(mode) as pool:
            assert pool.map(_square, range(20)) == [i * i for i in range(20)]

    def test_pool_reused_for_several_maps(self):
        mode = ExecutionMode.distributed(2, backend='threading')
        with WorkerPool(mode) as pool:
            first = pool.map(_square, range(3))
            second = pool.map(_square, range(3, 6))
        assert first + second == [0, 1, 4, 9, 16, 25]

    def test_distributed_map_outside_block_fails(self):
        pool = WorkerPool(ExecutionMode.distributed(2, backend='threading'))
        with pytest.raises(RuntimeError, match="outside"):
            pool.map(_square, range(3))

    def test_process_pool(self):
        with WorkerPool(ExecutionMode.from_parallel(2)) as pool:
            assert pool.map(_square, range(6)) == [0, 1, 4, 9, 16, 25]


# ═══════════════════════════════════════════════════════════════════════
# Timer
# ═══════════════════════════════════════════════════════════════════════


class TestTimer:

    def test_sections(self):
        timer = Timer()
        timer.start()
        with timer.section('real_fits'):
            pass
        with timer.section('real_fits'):
            pass
        timer.stop()
        result = timer.result()
        assert set(result) == {'total_seconds', 'real_fits'}
        assert result['total_seconds'] >= 0

    def test_result_before_stop(self):
        with pytest.raises(RuntimeError):
            Timer().result()

    def test_context_manager(self):
        with Timer() as timer:
            with timer.section('p_values'):
                sum(range(100))
        assert set(timer.result()) == {'total_seconds', 'p_values'}
        assert timer.sections['p_values'] <= timer.result()['total_seconds']
