import numpy as np
import pytest

from chifit.fitting import evaluate_curvature
from chifit.profiles import gaussian_model


def _jacobian(x, coef):
    rows = [gaussian_model(xi, coef) for xi in x]
    return np.array([r[0] for r in rows]), np.array([r[1] for r in rows])


def test_matches_weighted_jacobian_products(noisy_gaussian_data):
    x, y, sigma = noisy_gaussian_data
    coef = np.array([1.8, 0.4, 1.3])
    free = np.ones(3, dtype=bool)

    alpha, beta, chi2 = evaluate_curvature(x, y, sigma, coef, free, gaussian_model)

    ymod, jac = _jacobian(x, coef)
    w = 1.0 / sigma**2
    expected_alpha = jac.T @ (jac * w[:, np.newaxis])
    expected_beta = jac.T @ ((y - ymod) * w)
    # Off-diagonal sums cancel; compare on the scale of the summed terms
    alpha_scale = np.abs(jac).T @ (np.abs(jac) * w[:, np.newaxis])
    beta_scale = np.abs(jac).T @ np.abs((y - ymod) * w)
    np.testing.assert_allclose(alpha, expected_alpha, rtol=0, atol=1e-12 * alpha_scale.max())
    np.testing.assert_allclose(beta, expected_beta, rtol=0, atol=1e-12 * beta_scale.max())
    assert chi2 == pytest.approx(np.sum(((y - ymod) / sigma)**2), rel=1e-12)
    assert np.array_equal(alpha, alpha.T)


def test_restricted_to_free_coefficients(noisy_gaussian_data):
    x, y, sigma = noisy_gaussian_data
    coef = np.array([1.8, 0.4, 1.3])
    free = np.array([True, False, True])

    alpha, beta, chi2 = evaluate_curvature(x, y, sigma, coef, free, gaussian_model)
    alpha_all, beta_all, chi2_all = evaluate_curvature(x, y, sigma, coef, np.ones(3, dtype=bool), gaussian_model)

    assert alpha.shape == (2, 2)
    np.testing.assert_allclose(alpha, alpha_all[np.ix_(free, free)], rtol=1e-14)
    np.testing.assert_allclose(beta, beta_all[free], rtol=1e-14)
    assert chi2 == chi2_all


def test_no_free_coefficients(gaussian_data, gaussian_truth):
    x, y, sigma = gaussian_data

    alpha, beta, chi2 = evaluate_curvature(x, y, sigma, gaussian_truth, np.zeros(3, dtype=bool), gaussian_model)

    assert alpha.shape == (0, 0)
    assert beta.shape == (0,)
    assert chi2 == 0.0
