"""
Model capabilities consumed by the plotting functions.

A plottable model only needs a ``summarize(points)`` method returning the
pointwise mean and (optionally) variance. Models may also expose the data
they were trained on as ``xp``/``yp``. Two scikit-learn backed models are
provided for convenience: ``SklearnGP`` and ``HeteroscedasticGP``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable

import numpy as np
from sklearn.gaussian_process import GaussianProcessRegressor
from sklearn.gaussian_process.kernels import (
    RBF,
    ConstantKernel as C,
    Matern,
    RationalQuadratic,
    WhiteKernel,
)

from gpviz.config import get_logger
from gpviz.exceptions import SummaryShapeError

logger = get_logger(__name__)


@dataclass(frozen=True)
class SummaryResult:
    """
    Pointwise predictive summary of a model over an evaluation grid.

    Attributes:
        mean: Predictive mean, one entry per evaluation point
        variance: Predictive variance with the same length as ``mean``,
                  or None if the model does not report one
    """
    mean: np.ndarray
    variance: Optional[np.ndarray] = None

    @property
    def has_variance(self) -> bool:
        return self.variance is not None


@runtime_checkable
class Summarizable(Protocol):
    """Anything that can report a predictive mean/variance at given points."""

    def summarize(self, points: Any) -> Union[SummaryResult, Mapping[str, Any]]:
        ...


@runtime_checkable
class ObservedData(Protocol):
    """Models that expose their training inputs ``xp`` and outputs ``yp``."""

    xp: Any
    yp: Any


def _as_vector(values: Any, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.ravel()
    if arr.ndim != 1:
        raise SummaryShapeError(
            f"Model summary '{name}' must be one-dimensional, got shape {arr.shape}"
        )
    return arr


def summarize(model: Any, grid: Any) -> SummaryResult:
    """
    Evaluate a model's summary on a grid and validate its shape.

    Args:
        model: Object implementing ``summarize(points)``
        grid: Evaluation points (rows = points)

    Returns:
        SummaryResult with flat float arrays

    Raises:
        TypeError: If the model has no ``summarize`` method
        SummaryShapeError: If mean or variance do not have one entry per row
    """
    if not isinstance(model, Summarizable):
        raise TypeError(
            f"{type(model).__name__} does not implement summarize(points)"
        )

    raw = model.summarize(grid)
    if isinstance(raw, SummaryResult):
        mean, variance = raw.mean, raw.variance
    else:
        mean, variance = raw["mean"], raw.get("variance")

    n_points = len(grid)
    mean = _as_vector(mean, "mean")
    if len(mean) != n_points:
        raise SummaryShapeError(
            f"Model summary has {len(mean)} mean values for {n_points} evaluation points"
        )

    if variance is not None:
        variance = _as_vector(variance, "variance")
        if len(variance) != len(mean):
            raise SummaryShapeError(
                f"Model summary has {len(variance)} variance values for "
                f"{len(mean)} mean values"
            )

    return SummaryResult(mean=mean, variance=variance)


def get_observed_data(model: Any) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """
    Return the model's training data as ``(xp, y)`` if it can be scattered.

    Observed data is only usable when the model has ``xp`` set and ``yp``
    holds exactly one output column. ``y`` is returned as a flat vector.
    """
    if not isinstance(model, ObservedData) or model.xp is None or model.yp is None:
        return None

    xp = np.asarray(model.xp, dtype=float)
    yp = np.asarray(model.yp, dtype=float)
    if xp.ndim == 1:
        xp = xp.reshape(-1, 1)
    if yp.ndim == 1:
        yp = yp.reshape(-1, 1)

    if yp.ndim != 2 or yp.shape[1] != 1:
        logger.debug(f"Observed outputs have shape {yp.shape}; not a single column")
        return None

    return xp, yp[:, 0]


def _build_kernel(X: np.ndarray, kernel_options: Dict[str, Any]):
    """Build a scaled kernel with a white-noise term, length scales from the data range."""
    kernel_type = kernel_options.get("kernel_type", "RBF")
    ls_init = np.ptp(X, axis=0)
    ls_init = np.where(ls_init > 0, ls_init, 1.0)
    ls_bounds = (1e-5, 1e5)
    constant = C()
    if kernel_type == "RBF":
        kernel = constant * RBF(length_scale=ls_init, length_scale_bounds=ls_bounds)
    elif kernel_type == "Matern":
        matern_nu = kernel_options.get("matern_nu", 1.5)
        kernel = constant * Matern(length_scale=ls_init, length_scale_bounds=ls_bounds, nu=matern_nu)
    elif kernel_type == "RationalQuadratic":
        kernel = constant * RationalQuadratic()
    else:
        raise ValueError(f"Unknown kernel type: {kernel_type}")
    return kernel + WhiteKernel()


def _as_training_data(X: Any, y: Any) -> Tuple[np.ndarray, np.ndarray]:
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    y = np.asarray(y, dtype=float).ravel()
    if len(y) != len(X):
        raise ValueError(f"Got {len(X)} input rows but {len(y)} outputs")
    return X, y


class SklearnGP:
    """
    Gaussian process regression backed by scikit-learn.

    Example:
        >>> gp = SklearnGP(kernel_options={"kernel_type": "Matern", "matern_nu": 2.5})
        >>> gp.fit(X_train, y_train)
        >>> result = gp.summarize(X_grid)
    """

    def __init__(self, kernel_options: Optional[dict] = None, n_restarts_optimizer: int = 5,
                 random_state: int = 42, normalize_y: bool = True):
        self.kernel_options = kernel_options or {}
        self.n_restarts_optimizer = n_restarts_optimizer
        self.random_state = random_state
        self.normalize_y = normalize_y
        self.model = None
        self.xp = None
        self.yp = None

    @property
    def is_trained(self) -> bool:
        return self.model is not None

    def fit(self, X, y) -> 'SklearnGP':
        """Fit the GP and keep the training data as ``xp``/``yp``."""
        X, y = _as_training_data(X, y)

        self.model = GaussianProcessRegressor(
            kernel=_build_kernel(X, self.kernel_options),
            n_restarts_optimizer=self.n_restarts_optimizer,
            random_state=self.random_state,
            normalize_y=self.normalize_y,
        )
        self.model.fit(X, y)
        self.xp = X
        self.yp = y.reshape(-1, 1)

        logger.info(f"Fitted GP on {len(X)} observations, kernel: {self.model.kernel_}")
        return self

    def summarize(self, points) -> SummaryResult:
        if not self.is_trained:
            raise ValueError("Model is not trained yet.")

        mean, std = self.model.predict(np.asarray(points, dtype=float), return_std=True)
        return SummaryResult(mean=np.asarray(mean), variance=np.asarray(std) ** 2)


class HeteroscedasticGP:
    """
    Gaussian process with input-dependent noise.

    A base GP (``self.gp``) models the mean. A second GP is fitted to the
    log of the squared residuals of the base GP; its exponentiated prediction
    is the local noise variance. ``summarize`` reports the base mean with the
    base variance plus the local noise variance.

    Args:
        kernel_options: Kernel settings for the base GP (see ``SklearnGP``)
        noise_kernel_options: Kernel settings for the noise GP
        min_noise: Floor added to squared residuals before taking logs
    """

    def __init__(self, kernel_options: Optional[dict] = None,
                 noise_kernel_options: Optional[dict] = None,
                 min_noise: float = 1e-8, n_restarts_optimizer: int = 5,
                 random_state: int = 42):
        self.gp = SklearnGP(kernel_options=kernel_options,
                            n_restarts_optimizer=n_restarts_optimizer,
                            random_state=random_state)
        self.noise_gp = SklearnGP(kernel_options=noise_kernel_options,
                                  n_restarts_optimizer=n_restarts_optimizer,
                                  random_state=random_state)
        self.min_noise = min_noise

    @property
    def xp(self):
        return self.gp.xp

    @property
    def yp(self):
        return self.gp.yp

    @property
    def is_trained(self) -> bool:
        return self.gp.is_trained and self.noise_gp.is_trained

    def fit(self, X, y) -> 'HeteroscedasticGP':
        X, y = _as_training_data(X, y)
        self.gp.fit(X, y)

        base_mean = self.gp.summarize(X).mean
        log_residuals = np.log((y - base_mean) ** 2 + self.min_noise)
        self.noise_gp.fit(X, log_residuals)
        return self

    def noise_variance(self, points) -> np.ndarray:
        """Predicted noise variance at the given points."""
        return np.exp(self.noise_gp.summarize(points).mean)

    def summarize(self, points) -> SummaryResult:
        if not self.is_trained:
            raise ValueError("Model is not trained yet.")

        base = self.gp.summarize(points)
        return SummaryResult(
            mean=base.mean,
            variance=base.variance + self.noise_variance(points),
        )
