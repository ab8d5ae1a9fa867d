"""
Tests for attribute randomization.

Validates:
    - Output shape, reducer application and the single-draw shortcut
    - Species with missing values stay excluded in every draw
    - Randomized means stay within the range of the valid attribute values
    - Fixed seeds reproduce draws, sequentially and on a worker pool
    - Only weighted-mean results are accepted
"""

import numpy as np
import pytest

from pycwm import wm, randomize
from pycwm.core.exceptions import InvalidInputKind, ValidationError


def _column_sums(matrix):
    return matrix.sum(axis=0)


# ═══════════════════════════════════════════════════════════════════════
# Shapes and reducers
# ═══════════════════════════════════════════════════════════════════════


class TestOutput:

    def test_single_draw_returns_matrix(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        out = randomize(M, seed=1)
        assert isinstance(out, np.ndarray)
        assert out.shape == M.shape

    def test_many_draws_return_list(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        out = randomize(M, permutations=5, seed=1)
        assert isinstance(out, list)
        assert len(out) == 5
        assert all(draw.shape == M.shape for draw in out)

    def test_reducer_applied(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        sums = randomize(M, permutations=3, reducer=_column_sums, seed=2)
        draws = randomize(M, permutations=3, seed=2)
        for s, d in zip(sums, draws):
            np.testing.assert_allclose(s, d.sum(axis=0))

    def test_draws_differ_from_real(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        draws = randomize(M, permutations=10, seed=3)
        assert any(not np.allclose(d[:, 0], M.values[:, 0]) for d in draws)

    def test_input_unchanged(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        before = M.attributes.copy()
        randomize(M, permutations=5, seed=4)
        np.testing.assert_array_equal(M.attributes, before)


# ═══════════════════════════════════════════════════════════════════════
# Missing values and bounds
# ═══════════════════════════════════════════════════════════════════════


class TestMissingValues:

    def test_uniform_cover_invariant(self):
        # with equal cover every permutation has the same mean
        M = wm(np.full((10, 3), 50.0), [1.0, np.nan, 3.0])
        for draw in randomize(M, permutations=20, seed=0):
            np.testing.assert_allclose(draw[:, 0], 2.0)

    def test_missing_species_stay_excluded(self):
        # sample 1 holds only the species without a value
        abundance = np.array([
            [0.0, 10.0, 0.0],
            [5.0, 1.0, 5.0],
            [1.0, 0.0, 9.0],
        ])
        M = wm(abundance, [1.0, np.nan, 3.0])
        for draw in randomize(M, permutations=20, seed=0):
            assert np.isnan(draw[0, 0])
            assert np.isfinite(draw[1:, 0]).all()
            # weight of the missing species never enters the mean
            assert draw[1, 0] == pytest.approx(2.0)

    def test_values_shuffled_only_among_valid(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        known = attributes[~np.isnan(attributes[:, 1]), 1]
        for draw in randomize(M, permutations=25, seed=5):
            assert np.all(draw[:, 1] >= known.min() - 1e-12)
            assert np.all(draw[:, 1] <= known.max() + 1e-12)

    def test_nan_pattern_matches_real(self):
        abundance = np.array([[0.0, 4.0], [2.0, 2.0], [0.0, 1.0]])
        M = wm(abundance, [[7.0, 1.0], [np.nan, 2.0]])
        real_nan = np.isnan(M.values)
        for draw in randomize(M, permutations=10, seed=6):
            np.testing.assert_array_equal(np.isnan(draw), real_nan)


# ═══════════════════════════════════════════════════════════════════════
# Reproducibility
# ═══════════════════════════════════════════════════════════════════════


class TestReproducibility:

    def test_same_seed_same_draws(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        a = randomize(M, permutations=8, seed=11)
        b = randomize(M, permutations=8, seed=11)
        for x, y in zip(a, b):
            np.testing.assert_array_equal(x, y)

    def test_different_seeds_differ(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        a = randomize(M, permutations=4, seed=1)
        b = randomize(M, permutations=4, seed=2)
        assert any(not np.array_equal(x, y) for x, y in zip(a, b))

    def test_parallel_matches_sequential(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        sequential = randomize(M, permutations=12, seed=7)
        distributed = randomize(M, permutations=12, seed=7, parallel=2)
        for x, y in zip(sequential, distributed):
            np.testing.assert_array_equal(x, y)

    def test_parallel_with_reducer(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        sequential = randomize(M, 6, _column_sums, seed=8)
        distributed = randomize(M, 6, _column_sums, seed=8, parallel=2)
        np.testing.assert_array_equal(np.array(sequential), np.array(distributed))


# ═══════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════


class TestValidation:

    def test_plain_array_rejected(self):
        with pytest.raises(InvalidInputKind, match="wm\\(\\)"):
            randomize(np.ones((3, 2)))

    @pytest.mark.parametrize("bad", [0, -5])
    def test_permutations_positive(self, bad):
        M = wm(np.ones((3, 2)), [1.0, 2.0])
        with pytest.raises(ValidationError, match="permutations"):
            randomize(M, permutations=bad)

    def test_bad_parallel(self):
        M = wm(np.ones((3, 2)), [1.0, 2.0])
        with pytest.raises(ValidationError, match="parallel"):
            randomize(M, permutations=2, parallel=0)
