"""
Visualization module for gpviz.

Pure plotting functions with no global style state.
Plots are immutable Panel values that draw to matplotlib Figure/Axes objects.
"""

from gpviz.visualization.plots import (
    Panel,
    PanelPair,
    LineLayer,
    BandLayer,
    ScatterLayer,
    HeatmapLayer,
    ContourLayer,
    create_gp_line_plot,
    create_gp_surface_plots,
    compose_panels,
    overlay_band,
)

from gpviz.visualization.render import (
    OneD,
    TwoD,
    resolve_covariates,
    render,
    render_heteroscedastic,
)

from gpviz.visualization.options import RenderSpec

from gpviz.visualization.helpers import (
    compute_confidence_band,
    compute_color_scale,
    compute_sequential_scale,
    ColorScale,
    ConfidenceBand,
)

__all__ = [
    'Panel',
    'PanelPair',
    'LineLayer',
    'BandLayer',
    'ScatterLayer',
    'HeatmapLayer',
    'ContourLayer',
    'create_gp_line_plot',
    'create_gp_surface_plots',
    'compose_panels',
    'overlay_band',
    'OneD',
    'TwoD',
    'resolve_covariates',
    'render',
    'render_heteroscedastic',
    'RenderSpec',
    'compute_confidence_band',
    'compute_color_scale',
    'compute_sequential_scale',
    'ColorScale',
    'ConfidenceBand',
]
