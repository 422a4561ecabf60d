"""
Entry points for plotting a fitted Gaussian process.

``render`` decides between the 1D and 2D plots from the covariate selection;
``render_heteroscedastic`` draws the inner GP and overlays the outer model's
noise-inclusive band.
"""

from dataclasses import dataclass, replace
from typing import Any, List, Optional, Sequence, Union

import numpy as np

from gpviz.config import get_logger
from gpviz.exceptions import (
    InvalidCovariateError,
    InvalidDimensionError,
    UnsupportedOverlayDimensionError,
)
from gpviz.models import summarize
from gpviz.visualization.helpers import (
    band_label,
    compute_confidence_band,
    grid_values,
    prepare_grid,
)
from gpviz.visualization.options import DEFAULT_OVERLAY_ALPHA, OVERLAY_COLOR, RenderSpec
from gpviz.visualization.plots import (
    Panel,
    PanelPair,
    create_gp_line_plot,
    create_gp_surface_plots,
    overlay_band,
)

logger = get_logger(__name__)

Covariate = Union[int, str]


@dataclass(frozen=True)
class OneD:
    covariate: int


@dataclass(frozen=True)
class TwoD:
    covariate_x: int
    covariate_y: int


def _column_index(covariate: Covariate, n_columns: int,
                  column_names: Optional[List[str]]) -> int:
    if isinstance(covariate, str):
        if column_names is None or covariate not in column_names:
            raise InvalidCovariateError(f"Unknown covariate '{covariate}'")
        return column_names.index(covariate)

    if isinstance(covariate, (int, np.integer)) and not isinstance(covariate, bool):
        if not 0 <= covariate < n_columns:
            raise InvalidCovariateError(
                f"Covariate {covariate} out of range for a grid with {n_columns} columns"
            )
        return int(covariate)

    raise InvalidCovariateError(f"Covariate must be a column index or name, got {covariate!r}")


def resolve_covariates(
    grid: Any,
    covariates: Optional[Union[Covariate, Sequence[Covariate]]] = None,
    column_names: Optional[List[str]] = None
) -> Union[OneD, TwoD]:
    """
    Resolve a covariate selection into the plot dimension.

    Args:
        grid: Evaluation grid (rows = points)
        covariates: Column indices or names; all columns if None
        column_names: Grid column names, if the grid has them

    Returns:
        OneD or TwoD with positional column indices

    Raises:
        InvalidDimensionError: If the selection has neither 1 nor 2 entries
        InvalidCovariateError: If an entry does not pick a grid column
    """
    n_columns = grid_values(grid).shape[1]

    if covariates is None:
        selected = list(range(n_columns))
    elif isinstance(covariates, (str, int, np.integer)):
        selected = [covariates]
    else:
        selected = list(covariates)

    if len(selected) not in (1, 2):
        raise InvalidDimensionError(len(selected))

    indices = [_column_index(c, n_columns, column_names) for c in selected]
    if len(indices) == 1:
        return OneD(indices[0])
    return TwoD(indices[0], indices[1])


def _default_labels(spec: RenderSpec, dims: Union[OneD, TwoD],
                    column_names: Optional[List[str]]) -> RenderSpec:
    """Label axes with the grid's column names unless labels were given."""
    if column_names is None:
        return spec
    if isinstance(dims, OneD):
        if spec.xlabel is None:
            spec = replace(spec, xlabel=column_names[dims.covariate])
        return spec
    if spec.xlabel is None:
        spec = replace(spec, xlabel=column_names[dims.covariate_x])
    if spec.ylabel is None:
        spec = replace(spec, ylabel=column_names[dims.covariate_y])
    return spec


def render(
    model: Any,
    points: Any,
    covariates: Optional[Union[Covariate, Sequence[Covariate]]] = None,
    draw: bool = True,
    **render_options
) -> Union[Panel, PanelPair]:
    """
    Plot a Gaussian process over a set of evaluation points.

    One covariate gives a line plot of the mean with a confidence band; two
    give heatmaps of the expectation and variance.

    Args:
        model: Object implementing ``summarize(points)``, optionally ``xp``/``yp``
        points: Evaluation points, 2D array or DataFrame (rows = points)
        covariates: One or two column indices/names; all columns if None
        draw: For 2D plots, draw the composed panels right away
        **render_options: Fields of ``RenderSpec`` (title, xlabel, ylabel,
            alpha, mean_color, plot_mean, plot_variance, plot_scatter,
            low, mid, high, k, figsize, dpi)

    Returns:
        Panel for 1D plots, PanelPair for 2D plots

    Raises:
        InvalidDimensionError: If the selection has neither 1 nor 2 covariates.
            Raised before the model is evaluated.

    Example:
        >>> panel = render(gp, np.linspace(0, 10, 200), title="Posterior")
        >>> fig, ax = panel.draw()
    """
    grid, column_names = prepare_grid(points)
    dims = resolve_covariates(grid, covariates, column_names)
    spec = _default_labels(RenderSpec.from_options(**render_options), dims, column_names)

    if isinstance(dims, OneD):
        panel = create_gp_line_plot(model, grid, dims.covariate, spec)
        logger.info(f"Generated 1D GP plot with {len(panel.layers)} layers")
        return panel

    panels = create_gp_surface_plots(model, grid, (dims.covariate_x, dims.covariate_y),
                                     spec, draw=draw)
    logger.info(
        f"Generated 2D GP plot ({'with' if panels.variance is not None else 'without'} variance panel)"
    )
    return panels


def render_heteroscedastic(
    model: Any,
    points: Any,
    alpha: float = DEFAULT_OVERLAY_ALPHA,
    covariates: Optional[Union[Covariate, Sequence[Covariate]]] = None,
    **options
) -> Panel:
    """
    Plot a heteroscedastic GP.

    The inner model ``model.gp`` is plotted as usual; on top goes a band
    built from the outer model's own variance, which includes the
    input-dependent noise.

    Args:
        model: Heteroscedastic model with ``summarize(points)`` and a ``gp`` attribute
        points: Evaluation points (rows = points)
        alpha: Transparency of the heteroscedastic band
        covariates: Column index or name; the only column if None
        **options: Render options passed to the inner plot (see ``render``),
            including ``draw``

    Returns:
        New Panel; the inner plot's panel is not modified

    Raises:
        TypeError: If the model has no inner ``gp``
        UnsupportedOverlayDimensionError: If the selection is two-dimensional
    """
    inner = getattr(model, 'gp', None)
    if inner is None:
        raise TypeError(f"{type(model).__name__} has no inner 'gp' model to plot")

    grid, column_names = prepare_grid(points)
    dims = resolve_covariates(grid, covariates, column_names)
    if isinstance(dims, TwoD):
        raise UnsupportedOverlayDimensionError(
            "Heteroscedastic overlay is only defined for one covariate"
        )

    draw = options.pop('draw', True)
    spec = RenderSpec.from_options(**options)
    result = summarize(model, grid)

    base = render(inner, grid, covariates=dims.covariate, draw=draw, **options)

    if not result.has_variance:
        logger.debug("Heteroscedastic model reports no variance; returning inner plot")
        return base

    x = grid_values(grid)[:, dims.covariate]
    order = np.argsort(x, kind='stable')
    band = compute_confidence_band(result.mean[order], result.variance[order], k=spec.k)

    logger.info("Generated heteroscedastic GP plot")
    return overlay_band(base, x[order], band, color=OVERLAY_COLOR, alpha=alpha,
                        label=band_label(spec.k, prefix='Heteroscedastic'))
