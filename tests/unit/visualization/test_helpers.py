"""
Unit tests for gpviz.visualization.helpers.

Covers confidence bands, color scales, grid preparation and legend ordering.
"""

import pytest
import numpy as np
import pandas as pd
from matplotlib.colors import Normalize, TwoSlopeNorm

from gpviz.exceptions import NegativeVarianceError, SummaryShapeError
from gpviz.visualization.helpers import (
    band_coverage,
    band_label,
    can_triangulate,
    compute_color_scale,
    compute_confidence_band,
    compute_sequential_scale,
    prepare_grid,
    sort_legend_items,
)


class TestConfidenceBand:
    """Test mean ± k·sqrt(variance) bands."""

    def test_unit_variance_example(self):
        """Five points with unit variance give a ±2 band."""
        band = compute_confidence_band(np.arange(5.0), np.ones(5))

        np.testing.assert_array_equal(band.lower, [-2, -1, 0, 1, 2])
        np.testing.assert_array_equal(band.upper, [2, 3, 4, 5, 6])

    def test_band_is_symmetric(self):
        """Both halves of the band are 2·sqrt(variance) wide."""
        mean = np.array([0.3, -1.2, 4.0, 2.5])
        variance = np.array([0.0, 0.25, 4.0, 1.7])

        band = compute_confidence_band(mean, variance)

        np.testing.assert_allclose(band.upper - mean, 2 * np.sqrt(variance))
        np.testing.assert_allclose(mean - band.lower, 2 * np.sqrt(variance))

    def test_custom_multiplier(self):
        band = compute_confidence_band(np.zeros(3), np.full(3, 4.0), k=1.0)

        np.testing.assert_array_equal(band.lower, [-2, -2, -2])
        np.testing.assert_array_equal(band.upper, [2, 2, 2])

    def test_negative_variance_rejected(self):
        with pytest.raises(NegativeVarianceError, match="1 variance entries"):
            compute_confidence_band(np.zeros(3), np.array([1.0, -0.1, 1.0]))

    def test_length_mismatch_rejected(self):
        with pytest.raises(SummaryShapeError):
            compute_confidence_band(np.zeros(3), np.ones(2))

    def test_band_label(self):
        assert band_label(2.0) == "±2σ (95.4%)"
        assert band_label(1.0, prefix="Heteroscedastic") == "Heteroscedastic ±1σ (68.3%)"

    def test_band_coverage(self):
        assert np.isclose(band_coverage(1.96), 0.95, atol=1e-3)


class TestColorScale:
    """Test diverging and sequential scale parameters."""

    def test_midpoint_is_center_of_range(self):
        values = np.array([-3.5, 0.2, 7.25, 1.0])

        scale = compute_color_scale(values, 'green', 'white', 'red')

        assert scale.limits == (-3.5, 7.25)
        assert scale.midpoint == (-3.5 + 7.25) / 2
        assert scale.colors == ('green', 'white', 'red')
        assert scale.is_diverging

    def test_diverging_norm(self):
        scale = compute_color_scale(np.array([0.0, 10.0]), 'green', 'white', 'red')

        norm = scale.norm()

        assert isinstance(norm, TwoSlopeNorm)
        assert norm.vcenter == 5.0
        assert np.isclose(norm(5.0), 0.5)

    def test_constant_values_still_give_a_norm(self):
        scale = compute_color_scale(np.full(4, 2.0), 'green', 'white', 'red')

        assert scale.midpoint == 2.0
        norm = scale.norm()
        assert norm.vmin < 2.0 < norm.vmax
        levels = scale.levels(10)
        assert np.all(np.diff(levels) > 0)

    def test_sequential_scale(self):
        scale = compute_sequential_scale(np.array([0.5, 0.1, 2.0]), 'white', 'red')

        assert scale.limits == (0.1, 2.0)
        assert scale.midpoint is None
        assert not scale.is_diverging
        assert type(scale.norm()) is Normalize

    def test_no_finite_values_rejected(self):
        with pytest.raises(ValueError):
            compute_color_scale(np.array([np.nan, np.nan]), 'green', 'white', 'red')

    def test_cmap_uses_anchors(self):
        scale = compute_color_scale(np.array([0.0, 1.0]), 'green', 'white', 'red')

        cmap = scale.cmap()

        assert np.allclose(cmap(0.5)[:3], (1.0, 1.0, 1.0), atol=0.01)


class TestPrepareGrid:
    """Test evaluation grid normalization."""

    def test_vector_becomes_column(self):
        grid, names = prepare_grid([0.0, 1.0, 2.0])

        assert grid.shape == (3, 1)
        assert names is None

    def test_matrix_kept(self):
        grid, names = prepare_grid(np.ones((4, 2)))

        assert grid.shape == (4, 2)
        assert names is None

    def test_dataframe_keeps_names(self):
        df = pd.DataFrame({'temperature': [300.0, 350.0], 'pressure': [1.0, 2.0]})

        grid, names = prepare_grid(df)

        assert grid is df
        assert names == ['temperature', 'pressure']

    def test_three_dimensional_input_rejected(self):
        with pytest.raises(ValueError):
            prepare_grid(np.ones((2, 2, 2)))


class TestCanTriangulate:
    """Test detection of point sets that cover an area."""

    def test_mesh(self):
        X, Y = np.meshgrid(np.arange(3.0), np.arange(3.0))
        assert can_triangulate(X.ravel(), Y.ravel())

    def test_too_few_points(self):
        assert not can_triangulate(np.array([0.0, 1.0]), np.array([0.0, 1.0]))

    def test_collinear(self):
        t = np.linspace(0, 1, 10)
        assert not can_triangulate(t, 2 * t + 1)

    def test_duplicates_do_not_count(self):
        x = np.array([0.0, 0.0, 0.0, 1.0])
        y = np.array([0.0, 0.0, 0.0, 1.0])
        assert not can_triangulate(x, y)

    def test_single_off_line_point(self):
        x = np.array([0.0, 1.0, 2.0, 0.0])
        y = np.array([0.0, 0.0, 0.0, 1.0])
        assert can_triangulate(x, y)


class TestHelpers:
    """Test miscellaneous helpers."""

    def test_sort_legend_items(self):
        labels = ['Observations (n=3)', '±2σ (95.4%)', 'Prediction', 'Heteroscedastic ±1σ (68.3%)']

        order = sort_legend_items(labels)

        assert [labels[i] for i in order] == [
            'Prediction',
            'Heteroscedastic ±1σ (68.3%)',
            '±2σ (95.4%)',
            'Observations (n=3)',
        ]
