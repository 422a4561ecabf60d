"""
gpviz - Plots for Gaussian process models

This package draws the predictive summary (mean and variance) of a fitted
Gaussian process over a set of evaluation points.

Main Components:
    - render: 1D line/band plot or 2D expectation/variance heatmaps,
      chosen from the number of covariates
    - render_heteroscedastic: inner GP plot with the heteroscedastic band on top
    - SklearnGP, HeteroscedasticGP: scikit-learn backed models ready to plot

Example:
    >>> import numpy as np
    >>> from gpviz import SklearnGP, render
    >>>
    >>> gp = SklearnGP().fit(X_train, y_train)
    >>> panel = render(gp, np.linspace(0, 10, 200).reshape(-1, 1), title="Posterior")
    >>> fig, ax = panel.draw()
"""

__version__ = "0.1.0"

from gpviz.exceptions import (
    GPVizError,
    InvalidDimensionError,
    InvalidCovariateError,
    SummaryShapeError,
    NegativeVarianceError,
    UnsupportedOverlayDimensionError,
)
from gpviz.models import (
    SummaryResult,
    Summarizable,
    ObservedData,
    SklearnGP,
    HeteroscedasticGP,
    summarize,
)
from gpviz.visualization import (
    Panel,
    PanelPair,
    RenderSpec,
    render,
    render_heteroscedastic,
)

__all__ = [
    "render",
    "render_heteroscedastic",
    "summarize",
    "Panel",
    "PanelPair",
    "RenderSpec",
    "SummaryResult",
    "Summarizable",
    "ObservedData",
    "SklearnGP",
    "HeteroscedasticGP",
    "GPVizError",
    "InvalidDimensionError",
    "InvalidCovariateError",
    "SummaryShapeError",
    "NegativeVarianceError",
    "UnsupportedOverlayDimensionError",
]
