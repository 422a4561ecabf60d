"""
Helper functions for visualization module.

Utilities for data preparation, validation, and computation.
"""

import re
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from gpviz.exceptions import NegativeVarianceError, SummaryShapeError

DEFAULT_BAND_MULTIPLIER = 2.0


def prepare_grid(points: Any) -> Tuple[Any, Optional[List[str]]]:
    """
    Normalize evaluation points into a 2D grid.

    DataFrames are kept as they are so models can use column names; their
    names are returned for axis labels and name-based covariate selection.
    Anything else is converted to a float array, and 1D input becomes a
    single column.

    Returns:
        Tuple of (grid, column_names) where column_names is None for arrays
    """
    if isinstance(points, pd.DataFrame):
        return points, [str(c) for c in points.columns]

    grid = np.asarray(points, dtype=float)
    if grid.ndim == 1:
        grid = grid.reshape(-1, 1)
    if grid.ndim != 2:
        raise ValueError(f"Evaluation points must be a 2D array, got shape {grid.shape}")
    return grid, None


def grid_values(grid: Any) -> np.ndarray:
    """Numeric view of a grid as a float array."""
    return np.asarray(grid, dtype=float)


def can_triangulate(x: np.ndarray, y: np.ndarray) -> bool:
    """
    Whether (x, y) points span an area, so a Delaunay triangulation exists.

    Needs at least three distinct points that are not all on one line.
    """
    points = np.unique(np.column_stack([x, y]), axis=0)
    if len(points) < 3:
        return False
    centered = points - points.mean(axis=0)
    return np.linalg.matrix_rank(centered) == 2


class ConfidenceBand(NamedTuple):
    lower: np.ndarray
    upper: np.ndarray


def compute_confidence_band(
    mean: np.ndarray,
    variance: np.ndarray,
    k: float = DEFAULT_BAND_MULTIPLIER
) -> ConfidenceBand:
    """
    Compute a symmetric confidence band around the mean.

    lower = mean - k * sqrt(variance)
    upper = mean + k * sqrt(variance)

    Args:
        mean: Predictive mean
        variance: Predictive variance (same length as mean)
        k: Number of standard deviations (2.0 ≈ 95% under a Gaussian)

    Returns:
        ConfidenceBand of (lower, upper) arrays

    Raises:
        SummaryShapeError: If mean and variance lengths differ
        NegativeVarianceError: If any variance entry is negative

    Example:
        >>> band = compute_confidence_band(np.arange(5.0), np.ones(5))
        >>> band.lower
        array([-2., -1.,  0.,  1.,  2.])
    """
    mean = np.asarray(mean, dtype=float)
    variance = np.asarray(variance, dtype=float)

    if mean.shape != variance.shape:
        raise SummaryShapeError(
            f"Mean has shape {mean.shape} but variance has shape {variance.shape}"
        )

    negative = variance < 0
    if np.any(negative):
        raise NegativeVarianceError(
            f"{int(negative.sum())} variance entries are negative "
            f"(minimum {variance.min():.4g})"
        )

    half_width = k * np.sqrt(variance)
    return ConfidenceBand(lower=mean - half_width, upper=mean + half_width)


def band_coverage(k: float) -> float:
    """Probability mass inside ±k standard deviations of a Gaussian."""
    from scipy import stats

    return float(stats.norm.cdf(k) - stats.norm.cdf(-k))


def band_label(k: float, prefix: str = "") -> str:
    """Legend label for a ±kσ band, e.g. '±2σ (95.4%)'."""
    label = f"±{k:g}σ ({band_coverage(k):.1%})"
    return f"{prefix} {label}" if prefix else label


@dataclass(frozen=True)
class ColorScale:
    """
    Color scale for a heatmap.

    With a midpoint the scale is diverging: ``colors`` are (low, mid, high)
    and the middle color sits on the midpoint. Without one it is sequential
    from ``colors[0]`` to ``colors[-1]``.
    """
    vmin: float
    vmax: float
    colors: Tuple[str, ...]
    midpoint: Optional[float] = None

    @property
    def limits(self) -> Tuple[float, float]:
        return self.vmin, self.vmax

    @property
    def is_diverging(self) -> bool:
        return self.midpoint is not None

    def cmap(self):
        from matplotlib.colors import LinearSegmentedColormap

        name = 'gpviz_diverging' if self.is_diverging else 'gpviz_sequential'
        return LinearSegmentedColormap.from_list(name, list(self.colors))

    def norm(self):
        from matplotlib.colors import Normalize, TwoSlopeNorm

        vmin, vmax = self.vmin, self.vmax
        # Constant field: open up a unit window so the colormap is still defined
        if vmin == vmax:
            vmin, vmax = vmin - 0.5, vmax + 0.5

        if self.is_diverging and vmin < self.midpoint < vmax:
            return TwoSlopeNorm(vcenter=self.midpoint, vmin=vmin, vmax=vmax)
        return Normalize(vmin=vmin, vmax=vmax)

    def levels(self, n: int = 50) -> np.ndarray:
        norm = self.norm()
        return np.linspace(norm.vmin, norm.vmax, n)


def _finite_limits(values: np.ndarray) -> Tuple[float, float]:
    values = np.asarray(values, dtype=float)
    if values.size == 0 or not np.any(np.isfinite(values)):
        raise ValueError("Cannot build a color scale without finite values")
    return float(np.nanmin(values)), float(np.nanmax(values))


def compute_color_scale(
    values: np.ndarray,
    low: str,
    mid: str,
    high: str
) -> ColorScale:
    """
    Diverging color scale centered on the middle of the values' range.

    limits = (min(values), max(values))
    midpoint = (limits[0] + limits[1]) / 2

    The midpoint always follows the data so the neutral color marks the
    center of what is shown.
    """
    vmin, vmax = _finite_limits(values)
    return ColorScale(
        vmin=vmin,
        vmax=vmax,
        colors=(low, mid, high),
        midpoint=(vmin + vmax) / 2.0,
    )


def compute_sequential_scale(values: np.ndarray, low: str, high: str) -> ColorScale:
    """Sequential color scale from ``low`` at the minimum to ``high`` at the maximum."""
    vmin, vmax = _finite_limits(values)
    return ColorScale(vmin=vmin, vmax=vmax, colors=(low, high))


def sort_legend_items(labels: Sequence[str]) -> List[int]:
    """
    Sort legend labels for consistent ordering.

    Preferred order: Prediction, uncertainty bands (small to large), Observations

    Args:
        labels: List of legend label strings

    Returns:
        List of indices for sorted order
    """
    def sort_key(lbl):
        if 'Prediction' in lbl:
            return (0, 0)
        elif 'σ' in lbl:
            match = re.search(r'±([\d.]+)σ', lbl)
            if match:
                return (1, float(match.group(1)))
            return (1, 999)
        elif 'Observation' in lbl:
            return (2, 0)
        else:
            return (3, 0)

    indices = list(range(len(labels)))
    indices.sort(key=lambda i: sort_key(labels[i]))
    return indices
