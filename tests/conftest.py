"""
Pytest configuration and shared fake models.
"""

import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for testing

import numpy as np
import pytest

# Add project root to path so the package imports without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


class FakeGP:
    """
    Model stub returning fixed functions of the evaluation points.

    Counts summarize calls so tests can check that nothing was evaluated.
    """

    def __init__(self, mean_fn, variance_fn=None, xp=None, yp=None):
        self.mean_fn = mean_fn
        self.variance_fn = variance_fn
        self.xp = xp
        self.yp = yp
        self.calls = 0

    def summarize(self, points):
        self.calls += 1
        X = np.asarray(points, dtype=float)
        return {
            'mean': self.mean_fn(X),
            'variance': self.variance_fn(X) if self.variance_fn is not None else None,
        }


class FakeHeteroscedasticGP:
    """Outer model with its own variance wrapping an inner FakeGP."""

    def __init__(self, gp, variance_fn):
        self.gp = gp
        self.variance_fn = variance_fn

    def summarize(self, points):
        X = np.asarray(points, dtype=float)
        inner = self.gp.summarize(points)
        return {'mean': inner['mean'], 'variance': self.variance_fn(X)}


@pytest.fixture
def line_grid():
    """Five points on one covariate."""
    return np.arange(5.0).reshape(-1, 1)


@pytest.fixture
def line_model():
    """mean = x, unit variance, three observations."""
    return FakeGP(
        mean_fn=lambda X: X[:, 0].copy(),
        variance_fn=lambda X: np.ones(len(X)),
        xp=np.array([[0.5], [1.5], [3.5]]),
        yp=np.array([[0.4], [1.6], [3.3]]),
    )


@pytest.fixture
def surface_grid():
    """10 x 10 mesh flattened into rows of (x, y)."""
    X, Y = np.meshgrid(np.linspace(0, 1, 10), np.linspace(0, 2, 10))
    return np.column_stack([X.ravel(), Y.ravel()])


@pytest.fixture
def surface_model():
    """Smooth mean over two covariates with variance growing in x."""
    return FakeGP(
        mean_fn=lambda X: np.sin(3 * X[:, 0]) + X[:, 1],
        variance_fn=lambda X: 0.1 + X[:, 0] ** 2,
        xp=np.array([[0.2, 0.5], [0.8, 1.5], [0.5, 1.0]]),
        yp=np.array([[1.0], [2.3], [2.0]]),
    )


@pytest.fixture
def make_gp():
    """Factory for FakeGP models."""
    return FakeGP


@pytest.fixture
def make_heteroscedastic():
    """Factory for FakeHeteroscedasticGP models."""
    return FakeHeteroscedasticGP
