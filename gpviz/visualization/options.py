"""
Render options shared by all GP plots.

A ``RenderSpec`` is passed explicitly into every plotting call; there is no
global style state.
"""

from dataclasses import dataclass, fields
from typing import Optional, Tuple

from gpviz.visualization.helpers import DEFAULT_BAND_MULTIPLIER

# Diverging anchors for expectation heatmaps (muted green -> white -> muted red)
DEFAULT_LOW = "#2E6B30"
DEFAULT_MID = "white"
DEFAULT_HIGH = "#832424"

# Structural band styling
BAND_FACE = "black"
BAND_EDGE = "gray"

# Heteroscedastic band styling
OVERLAY_COLOR = "red"
DEFAULT_OVERLAY_ALPHA = 0.3


@dataclass(frozen=True)
class RenderSpec:
    """
    Labels, layer switches and colors for a GP plot.

    Attributes:
        title: Plot title (figure title for 2D layouts)
        xlabel: X-axis label (defaults to the covariate name for DataFrames)
        ylabel: Y-axis label
        alpha: Transparency of the confidence band
        mean_color: Color of the mean line
        plot_mean: Draw the mean line (1D)
        plot_variance: Draw the confidence band (1D) or the variance panel (2D)
        plot_scatter: Draw observed training data if the model has it
        low, mid, high: Color anchors for 2D heatmaps
        k: Band half-width in standard deviations
        figsize: Figure size per panel (width, height) in inches
        dpi: Resolution in dots per inch
    """
    title: str = ""
    xlabel: Optional[str] = None
    ylabel: Optional[str] = None
    alpha: float = 0.5
    mean_color: str = "red"
    plot_mean: bool = True
    plot_variance: bool = True
    plot_scatter: bool = True
    low: str = DEFAULT_LOW
    mid: str = DEFAULT_MID
    high: str = DEFAULT_HIGH
    k: float = DEFAULT_BAND_MULTIPLIER
    figsize: Tuple[float, float] = (8, 6)
    dpi: int = 100

    def __post_init__(self):
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha must be between 0 and 1, got {self.alpha}")
        if self.k <= 0:
            raise ValueError(f"Band multiplier k must be positive, got {self.k}")

    @classmethod
    def from_options(cls, **options) -> 'RenderSpec':
        """
        Build a RenderSpec from keyword render options.

        Raises:
            TypeError: On option names the renderer does not know
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise TypeError(
                f"Unknown render option(s): {', '.join(unknown)}. "
                f"Valid options: {', '.join(sorted(known))}"
            )
        return cls(**options)
