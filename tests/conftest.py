import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from fridge import config


def orthogonal_design(n, norms, seed=config.RANDOM_SEED):
    """Design matrix with orthogonal columns of the given norms."""
    rng = np.random.default_rng(seed)
    q, _ = np.linalg.qr(rng.standard_normal((n, len(norms))))
    return q * np.asarray(norms, dtype=float)


@pytest.fixture
def orthogonal_data():
    rng = np.random.default_rng(config.RANDOM_SEED)
    X = orthogonal_design(50, [5.0, 4.0, 3.0, 2.0, 1.0])
    true_coef = np.ones(5)
    y = X @ true_coef + 0.01 * rng.standard_normal(50)
    x0 = np.array([1.0, 0.0, 0.0, 0.0, 0.0])
    return X, y, x0


@pytest.fixture
def random_data():
    rng = np.random.default_rng(7)
    n_samples, n_features = 30, 4
    X = rng.standard_normal((n_samples, n_features))
    true_coef = np.array([1.5, -2.0, 0.5, -1.0])
    y = X @ true_coef + 0.5 * rng.standard_normal(n_samples)
    x0 = np.array([0.3, -1.2, 0.8, 2.0])
    return X, y, x0


@pytest.fixture
def high_dim_data():
    rng = np.random.default_rng(3)
    n_samples, n_features = 20, 40
    X = rng.standard_normal((n_samples, n_features))
    true_coef = np.zeros(n_features)
    true_coef[:5] = [2.0, -1.0, 1.0, 0.5, -0.5]
    y = X @ true_coef + 0.3 * rng.standard_normal(n_samples)
    x0 = rng.standard_normal(n_features)
    return X, y, x0


@pytest.fixture
def rank_deficient_data():
    rng = np.random.default_rng(config.RANDOM_SEED)
    X = rng.standard_normal((20, 3))
    X[:, 2] = 0.0
    y = X[:, :2] @ np.array([1.0, -0.5]) + 0.3 * rng.standard_normal(20)
    x0 = np.array([1.0, 1.0, 0.0])
    return X, y, x0
