"""
Pure plotting functions for Gaussian process summaries.

Plots are built as immutable ``Panel`` values (a title, axis labels and an
ordered tuple of layers) and only touch matplotlib when drawn. Overlays and
layouts always produce new objects; a panel can be drawn or reused any
number of times.
"""

import math
from dataclasses import dataclass, replace
from typing import Any, NamedTuple, Optional, Sequence, Tuple, Type, Union

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure

from gpviz.config import get_logger
from gpviz.models import get_observed_data, summarize
from gpviz.visualization.helpers import (
    ColorScale,
    ConfidenceBand,
    band_label,
    can_triangulate,
    compute_color_scale,
    compute_confidence_band,
    compute_sequential_scale,
    grid_values,
    sort_legend_items,
)
from gpviz.visualization.options import (
    BAND_EDGE,
    BAND_FACE,
    DEFAULT_OVERLAY_ALPHA,
    OVERLAY_COLOR,
    RenderSpec,
)

logger = get_logger(__name__)

EXPECTATION_TITLE = "Expected value"
VARIANCE_TITLE = "Variance"


# ==============================================================================
# Layers
# ==============================================================================

@dataclass(frozen=True, eq=False)
class LineLayer:
    x: np.ndarray
    y: np.ndarray
    color: str = "red"
    linewidth: float = 2.0
    label: Optional[str] = None

    def draw(self, ax: Axes, zorder: int) -> Any:
        return ax.plot(self.x, self.y, color=self.color, linewidth=self.linewidth,
                       label=self.label, zorder=zorder)


@dataclass(frozen=True, eq=False)
class BandLayer:
    x: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    facecolor: str = BAND_FACE
    edgecolor: Optional[str] = BAND_EDGE
    alpha: float = 0.5
    label: Optional[str] = None

    @property
    def width(self) -> np.ndarray:
        return self.upper - self.lower

    def draw(self, ax: Axes, zorder: int) -> Any:
        # Alpha goes on the face only so the outline stays visible
        return ax.fill_between(
            self.x,
            self.lower,
            self.upper,
            facecolor=to_rgba(self.facecolor, self.alpha),
            edgecolor=self.edgecolor if self.edgecolor is not None else 'none',
            linewidth=0.9,
            label=self.label,
            zorder=zorder
        )


@dataclass(frozen=True, eq=False)
class ScatterLayer:
    """Observed points; colored by ``values`` through ``scale`` when given."""
    x: np.ndarray
    y: np.ndarray
    values: Optional[np.ndarray] = None
    scale: Optional[ColorScale] = None
    color: str = "black"
    label: Optional[str] = None

    def draw(self, ax: Axes, zorder: int) -> Any:
        if self.values is not None and self.scale is not None:
            return ax.scatter(self.x, self.y, c=self.values, cmap=self.scale.cmap(),
                              norm=self.scale.norm(), s=60, edgecolors='black',
                              linewidths=0.9, label=self.label, zorder=zorder)
        return ax.scatter(self.x, self.y, s=30, color=self.color,
                          label=self.label, zorder=zorder)


@dataclass(frozen=True, eq=False)
class HeatmapLayer:
    """
    Filled heatmap over scattered (x, y) points with a colorbar.

    Points that cannot be triangulated (fewer than three, or all on one
    line) are drawn as colored markers instead of filled regions.
    """
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    scale: ColorScale
    colorbar_label: Optional[str] = None
    n_levels: int = 50

    def draw(self, ax: Axes, zorder: int) -> Any:
        if can_triangulate(self.x, self.y):
            mappable = ax.tricontourf(self.x, self.y, self.z,
                                      levels=self.scale.levels(self.n_levels),
                                      cmap=self.scale.cmap(), norm=self.scale.norm(),
                                      zorder=zorder)
        else:
            logger.debug("Evaluation points span no area; drawing heatmap as markers")
            mappable = ax.scatter(self.x, self.y, c=self.z, cmap=self.scale.cmap(),
                                  norm=self.scale.norm(), s=80, marker='s', zorder=zorder)
        cbar = ax.figure.colorbar(mappable, ax=ax)
        if self.colorbar_label:
            cbar.set_label(self.colorbar_label)
        return mappable


@dataclass(frozen=True, eq=False)
class ContourLayer:
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    n_levels: int = 10
    color: str = "black"

    def draw(self, ax: Axes, zorder: int) -> Any:
        # Flat fields and degenerate point sets have no contour lines
        if np.ptp(self.z) == 0 or not can_triangulate(self.x, self.y):
            return None
        return ax.tricontour(self.x, self.y, self.z, levels=self.n_levels,
                             colors=self.color, linewidths=0.6, alpha=0.6, zorder=zorder)


# ==============================================================================
# Panels
# ==============================================================================

@dataclass(frozen=True, eq=False)
class Panel:
    """
    One renderable chart: labels plus layers drawn bottom to top.

    Panels are values. ``with_layers`` returns a new panel and leaves the
    original untouched, so a base panel can be shared by several overlays.
    """
    title: str = ""
    xlabel: Optional[str] = None
    ylabel: Optional[str] = None
    layers: Tuple[Any, ...] = ()

    def with_layers(self, *layers) -> 'Panel':
        return replace(self, layers=self.layers + tuple(layers))

    def find_layers(self, kind: Type) -> Tuple[Any, ...]:
        return tuple(layer for layer in self.layers if isinstance(layer, kind))

    def draw(
        self,
        ax: Optional[Axes] = None,
        figsize: Tuple[float, float] = (8, 6),
        dpi: int = 100
    ) -> Tuple[Figure, Axes]:
        """
        Draw the panel with matplotlib.

        Args:
            ax: Existing axes to draw on (creates new if None)
            figsize: Figure size (width, height) in inches
            dpi: Resolution in dots per inch

        Returns:
            Tuple of (Figure, Axes)
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=figsize, dpi=dpi)
            should_tight_layout = True
        else:
            fig = ax.figure
            should_tight_layout = False

        for zorder, layer in enumerate(self.layers, start=1):
            layer.draw(ax, zorder)

        if self.xlabel is not None:
            ax.set_xlabel(self.xlabel)
        if self.ylabel is not None:
            ax.set_ylabel(self.ylabel)
        if self.title:
            ax.set_title(self.title)

        handles, labels = ax.get_legend_handles_labels()
        if handles:
            sorted_indices = sort_legend_items(labels)
            ax.legend([handles[i] for i in sorted_indices],
                      [labels[i] for i in sorted_indices])

        if should_tight_layout:
            fig.tight_layout()

        return fig, ax


class PanelPair(NamedTuple):
    """
    Panels of a 2D plot.

    ``variance`` is None when it was not drawn. ``figure`` holds the composed
    side-by-side layout when one was drawn; close it with ``plt.close`` once
    it is no longer needed.
    """
    expectation: Panel
    variance: Optional[Panel] = None
    figure: Optional[Figure] = None

    @property
    def panels(self) -> Tuple[Panel, ...]:
        return tuple(p for p in (self.expectation, self.variance) if p is not None)


# ==============================================================================
# Renderers
# ==============================================================================

def create_gp_line_plot(
    model: Any,
    grid: Any,
    covariate: int,
    spec: Optional[RenderSpec] = None
) -> Panel:
    """
    Create a 1D plot of a GP's mean with a confidence band.

    Layers, bottom to top: observed data, confidence band, mean line. Points
    are drawn in order of the plotted covariate.

    Args:
        model: Object implementing ``summarize(points)``, optionally ``xp``/``yp``
        grid: Evaluation points (rows = points)
        covariate: Column of ``grid`` on the x axis
        spec: Render options (defaults if None)

    Returns:
        Panel with the requested layers

    Note:
        If the model reports no variance the band is left out; if it has no
        single-output training data the scatter is left out. Neither is an error.
    """
    spec = spec or RenderSpec()
    result = summarize(model, grid)

    x = grid_values(grid)[:, covariate]
    order = np.argsort(x, kind='stable')
    x_sorted = x[order]
    mean_sorted = result.mean[order]

    layers = []

    if spec.plot_scatter:
        observed = get_observed_data(model)
        if observed is None:
            logger.debug("Model has no single-output observed data; skipping scatter")
        elif observed[0].shape[1] <= covariate:
            logger.debug(f"Observed inputs have no column {covariate}; skipping scatter")
        else:
            xp, yp = observed
            layers.append(ScatterLayer(
                x=xp[:, covariate],
                y=yp,
                label=f'Observations (n={len(yp)})'
            ))

    if spec.plot_variance:
        if result.has_variance:
            band = compute_confidence_band(mean_sorted, result.variance[order], k=spec.k)
            layers.append(BandLayer(
                x=x_sorted,
                lower=band.lower,
                upper=band.upper,
                alpha=spec.alpha,
                label=band_label(spec.k)
            ))
        else:
            logger.debug("Model reports no variance; skipping confidence band")

    if spec.plot_mean:
        layers.append(LineLayer(x=x_sorted, y=mean_sorted, color=spec.mean_color,
                                label='Prediction'))

    return Panel(title=spec.title, xlabel=spec.xlabel, ylabel=spec.ylabel,
                 layers=tuple(layers))


def create_gp_surface_plots(
    model: Any,
    grid: Any,
    covariates: Tuple[int, int],
    spec: Optional[RenderSpec] = None,
    draw: bool = True
) -> PanelPair:
    """
    Create 2D heatmaps of a GP's expectation and variance.

    The expectation uses a diverging scale (``low``/``mid``/``high``) whose
    midpoint is the center of the mean's range. The variance uses a
    sequential scale from ``mid`` to ``high``. Both get contour lines.

    Args:
        model: Object implementing ``summarize(points)``, optionally ``xp``/``yp``
        grid: Evaluation points (rows = points)
        covariates: Columns of ``grid`` for the x and y axes
        spec: Render options (defaults if None)
        draw: Compose and draw the panels side by side

    Returns:
        PanelPair(expectation, variance, figure); variance is None unless
        requested and reported by the model, figure is None unless ``draw``

    Example:
        >>> X, Y = np.meshgrid(np.linspace(0, 1, 30), np.linspace(0, 1, 30))
        >>> grid = np.column_stack([X.ravel(), Y.ravel()])
        >>> panels = create_gp_surface_plots(gp, grid, (0, 1))
    """
    spec = spec or RenderSpec()
    result = summarize(model, grid)

    i, j = covariates
    values = grid_values(grid)
    x, y = values[:, i], values[:, j]

    scale = compute_color_scale(result.mean, spec.low, spec.mid, spec.high)
    logger.debug(f"Expectation color scale: limits={scale.limits}, midpoint={scale.midpoint}")

    layers = [
        HeatmapLayer(x=x, y=y, z=result.mean, scale=scale, colorbar_label='Mean'),
        ContourLayer(x=x, y=y, z=result.mean),
    ]

    if spec.plot_scatter:
        observed = get_observed_data(model)
        if observed is None:
            logger.debug("Model has no single-output observed data; skipping scatter")
        elif observed[0].shape[1] <= max(i, j):
            logger.debug(f"Observed inputs have no columns {i}, {j}; skipping scatter")
        else:
            xp, yp = observed
            layers.append(ScatterLayer(x=xp[:, i], y=xp[:, j], values=yp, scale=scale,
                                       label=f'Observations (n={len(yp)})'))

    expectation = Panel(title=EXPECTATION_TITLE, xlabel=spec.xlabel, ylabel=spec.ylabel,
                        layers=tuple(layers))

    variance = None
    if spec.plot_variance:
        if result.has_variance:
            var_scale = compute_sequential_scale(result.variance, spec.mid, spec.high)
            variance = Panel(
                title=VARIANCE_TITLE,
                xlabel=spec.xlabel,
                ylabel=spec.ylabel,
                layers=(
                    HeatmapLayer(x=x, y=y, z=result.variance, scale=var_scale,
                                 colorbar_label='Variance'),
                    ContourLayer(x=x, y=y, z=result.variance),
                )
            )
        else:
            logger.debug("Model reports no variance; skipping variance panel")

    panels = PanelPair(expectation=expectation, variance=variance)

    if draw:
        fig = compose_panels(panels, title=spec.title or None, figsize=spec.figsize, dpi=spec.dpi)
        panels = panels._replace(figure=fig)

    return panels


# ==============================================================================
# Composition
# ==============================================================================

def compose_panels(
    panels: Union[PanelPair, Sequence[Optional[Panel]]],
    ncol: Optional[int] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (8, 6),
    dpi: int = 100
) -> Figure:
    """
    Draw one or more panels into a single figure.

    Missing panels (None) are skipped; a PanelPair contributes its panels.
    By default all panels go in one row, so an expectation/variance pair sits
    side by side and a lone panel fills the figure.

    Args:
        panels: Panels to draw, in order
        ncol: Number of columns (defaults to the number of panels)
        title: Figure title
        figsize: Size of each panel (width, height) in inches
        dpi: Resolution

    Returns:
        matplotlib Figure
    """
    if isinstance(panels, PanelPair):
        panels = panels.panels
    panels = [p for p in panels if p is not None]
    if not panels:
        raise ValueError("compose_panels needs at least one panel")

    ncol = ncol or len(panels)
    nrow = math.ceil(len(panels) / ncol)

    fig, axes = plt.subplots(nrow, ncol, figsize=(figsize[0] * ncol, figsize[1] * nrow),
                             dpi=dpi, squeeze=False)
    for ax, panel in zip(axes.flat, panels):
        panel.draw(ax=ax)
    for ax in axes.flat[len(panels):]:
        ax.set_visible(False)

    if title:
        fig.suptitle(title)

    fig.tight_layout()
    return fig


def overlay_band(
    panel: Panel,
    x: np.ndarray,
    band: ConfidenceBand,
    color: str = OVERLAY_COLOR,
    alpha: float = DEFAULT_OVERLAY_ALPHA,
    label: Optional[str] = None
) -> Panel:
    """
    Return a copy of ``panel`` with an extra confidence band on top.

    The band is filled in ``color`` without an outline, so it reads apart
    from the panel's own gray-edged band.
    """
    return panel.with_layers(BandLayer(
        x=np.asarray(x, dtype=float),
        lower=band.lower,
        upper=band.upper,
        facecolor=color,
        edgecolor=None,
        alpha=alpha,
        label=label
    ))
