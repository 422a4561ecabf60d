"""
Exceptions raised by gpviz.

Every error is raised at the point where the broken precondition first
becomes visible. None of them are retried.
"""


class GPVizError(Exception):
    """Base class for all gpviz errors."""


class InvalidDimensionError(GPVizError, ValueError):
    """Covariate selection does not have one or two entries."""

    def __init__(self, n_covariates: int):
        self.n_covariates = n_covariates
        super().__init__(
            f"Gaussian process has invalid dimension: {n_covariates} covariates "
            f"selected, only 1 or 2 can be plotted."
        )


class InvalidCovariateError(GPVizError, ValueError):
    """A covariate does not name or index a column of the evaluation grid."""


class SummaryShapeError(GPVizError, ValueError):
    """Model summary does not line up with the evaluation grid."""


class NegativeVarianceError(GPVizError, ValueError):
    """A variance entry is negative, so no confidence band exists."""


class UnsupportedOverlayDimensionError(GPVizError, ValueError):
    """Heteroscedastic overlay requested on a two-covariate plot."""
