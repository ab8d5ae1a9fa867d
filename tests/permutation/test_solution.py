"""
Tests for MopetSolution display and the p-value kernel.

Validates:
    - table() layout: coefficient columns, statistic, significance codes
    - summary() names every column and the permutation count
    - to_dataframe() columns
    - permutation_p_value tails, comparison direction and NaN exclusion
"""

import numpy as np
import pytest

from pycwm import mopet, wm
from pycwm.permutation.backends import permutation_p_value
from pycwm.permutation.solution import format_p, signif_stars


@pytest.fixture
def result(community):
    abundance, attributes, gradient = community
    M = wm(abundance, attributes)
    return mopet(M, gradient, permutations=49, test='both', seed=21)


# ═══════════════════════════════════════════════════════════════════════
# Display
# ═══════════════════════════════════════════════════════════════════════


class TestDisplay:

    def test_table(self, result):
        text = result.table()
        header = text.splitlines()[0]
        for label in ('(Intercept)', 'env', 'F value', 'orig.P', 'perm.P', 'modif.P'):
            assert label in header
        assert 'attr1' in text
        assert 'attr2' in text
        assert "Signif. codes" in text
        assert '***' in text.splitlines()[1]

    def test_table_omits_tests_not_run(self, community):
        abundance, attributes, gradient = community
        res = mopet(wm(abundance, attributes), gradient, permutations=9, seed=22)
        header = res.table().splitlines()[0]
        assert 'modif.P' in header
        assert 'perm.P' not in header

    def test_summary(self, result):
        text = result.summary()
        assert "Summary of mopet function" in text
        assert "Original result for variable attr1" in text
        assert "Original result for variable attr2" in text
        assert "Standard permutation test: P =" in text
        assert "Modified permutation test: P =" in text
        assert text.count("Permutation results based on 49 permutations") == 2

    def test_to_dataframe(self, result):
        pytest.importorskip("pandas")
        df = result.to_dataframe()
        assert list(df.index) == ['attr1', 'attr2']
        assert list(df.columns) == ['(Intercept)', 'env', 'F value', 'orig_p', 'perm_p', 'modif_p']
        assert df.loc['attr1', 'modif_p'] == pytest.approx(result.modif_p[0])

    def test_repr(self, result):
        assert repr(result) == (
            "MopetSolution(method='lm', test='both', permutations=49, columns=2)"
        )
        assert str(result) == result.table()

    def test_accessors(self, result):
        assert len(result) == 2
        assert result.names == ('attr1', 'attr2')
        assert result.statistic.shape == (2,)
        assert set(result.coefficients['attr1']) == {'(Intercept)', 'env'}
        assert result.real_summaries['attr1']['n'] == 30
        assert result.permutations == 49
        assert result.warnings == ()


class TestFormatting:

    @pytest.mark.parametrize("p, stars", [
        (0.0005, '***'), (0.001, '***'), (0.005, '**'), (0.03, '*'),
        (0.07, '.'), (0.5, ' '), (None, ''), (float('nan'), ''),
    ])
    def test_signif_stars(self, p, stars):
        assert signif_stars(p) == stars

    def test_format_p(self):
        assert format_p(0.0123456) == '0.0123'
        assert format_p(1e-20) == '<2e-16'
        assert format_p(None) == 'NA'
        assert format_p(float('nan')) == 'NA'


# ═══════════════════════════════════════════════════════════════════════
# P-value kernel
# ═══════════════════════════════════════════════════════════════════════


class TestPermutationPValue:

    def test_one_tailed(self):
        null = np.array([1.0, 2.0, 3.0, 4.0])
        assert permutation_p_value(3.0, null, 'one') == (3 / 5, 4)

    def test_two_tailed_uses_absolute_values(self):
        null = np.array([-5.0, 1.0, 2.0, -0.5])
        assert permutation_p_value(-2.0, null, 'two') == (3 / 5, 4)

    def test_inverted_comparison(self):
        null = np.array([10.0, 20.0, 30.0])
        assert permutation_p_value(15.0, null, 'two', '<=') == (2 / 4, 3)

    def test_nan_draws_excluded(self):
        null = np.array([1.0, np.nan, 5.0, np.nan])
        assert permutation_p_value(2.0, null, 'one') == (2 / 3, 2)

    def test_no_valid_draws(self):
        p, n_valid = permutation_p_value(2.0, np.full(3, np.nan), 'one')
        assert np.isnan(p)
        assert n_valid == 0

    def test_nan_observed(self):
        p, _ = permutation_p_value(float('nan'), np.ones(3), 'one')
        assert np.isnan(p)
