"""
Tests for community-weighted means.

Validates:
    - Reference values (uniform cover, missing attribute values)
    - Means stay within the range of the contributing attribute values
    - Samples without any valid species give NaN
    - Names carried from pandas inputs, alignment by species label
    - Validation errors for bad inputs
"""

import numpy as np
import pytest

from pycwm import wm, is_wm
from pycwm.core.exceptions import DimensionMismatch, InvalidInputKind, ValidationError
from pycwm.cwm import WeightedMeanSolution


# ═══════════════════════════════════════════════════════════════════════
# Reference values
# ═══════════════════════════════════════════════════════════════════════


class TestReferenceValues:

    def test_uniform_cover(self):
        M = wm(np.full((10, 3), 50.0), [1.0, 2.0, 3.0])
        assert M.shape == (10, 1)
        np.testing.assert_allclose(M.values[:, 0], 2.0)

    def test_missing_attribute_excluded(self):
        M = wm(np.full((10, 3), 50.0), [1.0, np.nan, 3.0])
        np.testing.assert_allclose(M.values[:, 0], 2.0)
        assert M.n_valid_species[0] == 2
        np.testing.assert_allclose(M.weight_totals[:, 0], 100.0)

    def test_missing_value_weight_not_in_denominator(self):
        # species 2 is abundant but has no value
        M = wm([[10.0, 80.0, 10.0]], [1.0, np.nan, 5.0])
        assert M.values[0, 0] == pytest.approx(3.0)

    def test_hand_computed(self):
        abundance = np.array([[1.0, 3.0, 0.0], [0.0, 2.0, 2.0]])
        attributes = np.array([[2.0, 10.0], [4.0, np.nan], [8.0, 20.0]])
        M = wm(abundance, attributes)
        expected = np.array([
            [(2 + 12) / 4, 10.0],
            [(8 + 16) / 4, 20.0],
        ])
        np.testing.assert_allclose(M.values, expected)

    def test_matches_abundance_weighted_average(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        expected = np.average(
            np.broadcast_to(attributes[:, 0], abundance.shape), axis=1, weights=abundance
        )
        np.testing.assert_allclose(M.values[:, 0], expected, rtol=1e-12)


# ═══════════════════════════════════════════════════════════════════════
# Properties
# ═══════════════════════════════════════════════════════════════════════


class TestProperties:

    def test_within_attribute_range(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        for j in range(attributes.shape[1]):
            known = attributes[~np.isnan(attributes[:, j]), j]
            col = M.values[:, j]
            assert np.all(col >= known.min() - 1e-12)
            assert np.all(col <= known.max() + 1e-12)

    def test_empty_sample_is_nan(self):
        abundance = np.array([[0.0, 5.0], [3.0, 0.0]])
        M = wm(abundance, [np.nan, 4.0])
        assert M.values[0, 0] == 4.0
        assert np.isnan(M.values[1, 0])
        assert M.warnings
        assert "1 sample(s)" in M.warnings[0]

    def test_all_missing_attribute(self):
        M = wm(np.ones((3, 2)), [[1.0, np.nan], [2.0, np.nan]])
        assert np.all(np.isnan(M.values[:, 1]))
        assert any("no species has a known value" in w for w in M.warnings)

    def test_values_read_only(self):
        M = wm(np.ones((3, 2)), [1.0, 2.0])
        with pytest.raises(ValueError):
            M.values[0, 0] = 5.0

    def test_provenance_kept(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        np.testing.assert_array_equal(M.abundance, abundance)
        np.testing.assert_array_equal(M.attributes, attributes)
        np.testing.assert_array_equal(M.design.valid_masks, ~np.isnan(attributes))

    def test_input_not_aliased(self):
        abundance = np.ones((3, 2))
        M = wm(abundance, [1.0, 3.0])
        abundance[:] = 0.0
        np.testing.assert_allclose(M.values[:, 0], 2.0)

    def test_array_protocol(self):
        M = wm(np.ones((4, 2)), [1.0, 3.0])
        arr = np.asarray(M)
        assert arr.shape == (4, 1)
        assert len(M) == 4

    def test_is_wm(self):
        M = wm(np.ones((4, 2)), [1.0, 3.0])
        assert is_wm(M)
        assert isinstance(M, WeightedMeanSolution)
        assert not is_wm(np.asarray(M))

    def test_default_names(self):
        M = wm(np.ones((2, 3)), np.ones((3, 2)))
        assert M.sample_names == ("sample1", "sample2")
        assert M.species_names == ("species1", "species2", "species3")
        assert M.attribute_names == ("attr1", "attr2")
        np.testing.assert_array_equal(M.column("attr2"), M.values[:, 1])

    def test_summary_and_repr(self, community):
        abundance, attributes, _ = community
        M = wm(abundance, attributes)
        text = M.summary()
        assert "COMMUNITY-WEIGHTED MEANS" in text
        assert "attr2" in text
        assert "n_attributes=2" in repr(M)


# ═══════════════════════════════════════════════════════════════════════
# pandas inputs
# ═══════════════════════════════════════════════════════════════════════


class TestPandas:

    def test_names_from_dataframes(self):
        pd = pytest.importorskip("pandas")
        spe = pd.DataFrame(
            [[10.0, 0.0, 5.0], [1.0, 4.0, 0.0]],
            index=["rel1", "rel2"],
            columns=["Acer", "Betula", "Carex"],
        )
        traits = pd.DataFrame(
            {"light": [4.0, 7.0, 6.0], "moist": [5.0, np.nan, 8.0]},
            index=["Acer", "Betula", "Carex"],
        )
        M = wm(spe, traits)
        assert M.sample_names == ("rel1", "rel2")
        assert M.attribute_names == ("light", "moist")
        df = M.to_dataframe()
        assert list(df.columns) == ["light", "moist"]
        assert df.loc["rel1", "moist"] == pytest.approx((50 + 40) / 15)

    def test_attributes_aligned_by_species(self):
        pd = pytest.importorskip("pandas")
        spe = pd.DataFrame([[1.0, 3.0]], columns=["a", "b"])
        traits = pd.Series([10.0, 2.0], index=["b", "a"], name="height")
        M = wm(spe, traits)
        assert M.values[0, 0] == pytest.approx((2.0 * 1 + 10.0 * 3) / 4)
        assert M.attribute_names == ("height",)

    def test_species_label_mismatch(self):
        pd = pytest.importorskip("pandas")
        spe = pd.DataFrame([[1.0, 3.0]], columns=["a", "b"])
        traits = pd.Series([10.0, 2.0], index=["a", "z"])
        with pytest.raises(DimensionMismatch, match="species labels"):
            wm(spe, traits)

    def test_integer_species_codes_aligned(self):
        pd = pytest.importorskip("pandas")
        spe = pd.DataFrame([[1.0, 3.0, 0.0]], columns=[2, 1, 3])
        traits = pd.Series([10.0, 2.0, 7.0], index=[1, 2, 3])
        M = wm(spe, traits)
        # species 2 -> 2.0, species 1 -> 10.0
        assert M.values[0, 0] == pytest.approx((2.0 * 1 + 10.0 * 3) / 4)

    def test_range_index_matched_by_position(self):
        pd = pytest.importorskip("pandas")
        spe = pd.DataFrame([[1.0, 1.0, 2.0]], columns=["a", "b", "c"])
        traits = pd.Series([1.0, 2.0, 3.0])
        M = wm(spe, traits)
        assert M.values[0, 0] == pytest.approx((1.0 + 2.0 + 6.0) / 4)


# ═══════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════


class TestValidation:

    def test_species_count_mismatch(self):
        with pytest.raises(DimensionMismatch, match="expected 3 rows"):
            wm(np.ones((4, 3)), [1.0, 2.0])

    def test_negative_abundance(self):
        with pytest.raises(ValidationError, match="negative"):
            wm([[1.0, -1.0]], [1.0, 2.0])

    def test_nan_abundance(self):
        with pytest.raises(ValidationError, match="non-finite"):
            wm([[1.0, np.nan]], [1.0, 2.0])

    def test_infinite_attribute(self):
        with pytest.raises(ValidationError, match="infinite"):
            wm([[1.0, 1.0]], [1.0, np.inf])

    def test_non_numeric_abundance(self):
        with pytest.raises(InvalidInputKind):
            wm([["a", "b"]], [1.0, 2.0])

    def test_abundance_must_be_2d(self):
        with pytest.raises(DimensionMismatch):
            wm([1.0, 2.0], [1.0, 2.0])
