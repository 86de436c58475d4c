import numpy as np
import pytest

from chifit.profiles import gaussian, gaussian_model


@pytest.fixture
def line_data():
    x = np.array([1.0, 2.0, 3.0, 4.0])
    y = np.array([2.1, 3.9, 6.2, 7.8])
    sigma = np.full(4, 0.1)
    return x, y, sigma


@pytest.fixture
def gaussian_truth():
    return np.array([2.0, 0.5, 1.2])


@pytest.fixture
def gaussian_data(gaussian_truth):
    x = np.linspace(-3.0, 4.0, 50)
    # Evaluated point by point, exactly as the fitters evaluate the model
    y = np.array([gaussian_model(xi, gaussian_truth)[0] for xi in x])
    sigma = np.full_like(x, 0.05)
    return x, y, sigma


@pytest.fixture
def noisy_gaussian_data(gaussian_truth):
    rng = np.random.default_rng(1)
    x = np.linspace(-3.0, 4.0, 80)
    sigma = np.full_like(x, 0.05)
    y = gaussian(x, *gaussian_truth) + rng.normal(0.0, 0.05, x.size)
    return x, y, sigma
