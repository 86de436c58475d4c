import numpy as np
import pytest

from chifit.errors import FitError, NoFreeParametersWarning
from chifit.fitting import LevenbergMarquardt, nonlin_fit
from chifit.fitting.nonlinear import INITIAL_LAMBDA
from chifit.profiles import gaussian_model


def test_init_state(gaussian_data):
    x, y, sigma = gaussian_data
    coef = np.array([1.5, 0.2, 1.6])
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model)

    state = lm.init(coef)

    assert state.lam == INITIAL_LAMBDA
    assert state.nfit == 3
    assert np.array_equal(state.trial, coef)
    assert state.trial is not coef
    assert state.chi2 > 0
    assert state.alpha.shape == (3, 3)


def test_gaussian_converges_from_perturbed_guess(gaussian_data, gaussian_truth):
    x, y, sigma = gaussian_data
    coef = np.array([1.5, 0.2, 1.6])
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model)
    state = lm.init(coef)

    accepted = 0
    chi2 = state.chi2
    for _ in range(200):
        previous = chi2
        chi2 = lm.step(state, coef)
        if chi2 < previous:
            accepted += 1
        if chi2 < 1e-12:
            break

    assert chi2 < 1e-12
    assert accepted < 50
    assert coef == pytest.approx(gaussian_truth, rel=1e-6)


def test_accepted_chi2_never_increases_and_lambda_follows(gaussian_data):
    x, y, sigma = gaussian_data
    coef = np.array([1.0, 1.5, 0.8])
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model)
    state = lm.init(coef)

    accepted = [state.chi2]
    for _ in range(40):
        lam_before = state.lam
        best_before = state.chi2
        coef_before = coef.copy()

        chi2 = lm.step(state, coef)

        if chi2 < best_before:
            assert state.lam == pytest.approx(lam_before / 10)
            assert chi2 <= accepted[-1]
            accepted.append(chi2)
        else:
            assert state.lam == pytest.approx(lam_before * 10)
            assert chi2 == best_before
            assert np.array_equal(coef, coef_before)

    assert len(accepted) > 1
    assert all(a >= b for a, b in zip(accepted, accepted[1:]))


def test_step_at_exact_solution_is_rejected(gaussian_data, gaussian_truth):
    x, y, sigma = gaussian_data
    coef = gaussian_truth.copy()
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model)
    state = lm.init(coef)
    assert state.chi2 == 0.0

    chi2 = lm.step(state, coef)

    assert chi2 == 0.0
    assert state.lam == pytest.approx(INITIAL_LAMBDA * 10)
    assert np.array_equal(coef, gaussian_truth)


def test_finalize_returns_inverse_curvature(noisy_gaussian_data):
    x, y, sigma = noisy_gaussian_data
    coef = np.array([1.8, 0.4, 1.3])
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model)
    state = lm.init(coef)
    for _ in range(30):
        lm.step(state, coef)
    alpha = state.alpha.copy()

    covar, curvature = lm.finalize(state)

    np.testing.assert_allclose(curvature, alpha)
    np.testing.assert_allclose(covar, np.linalg.inv(alpha), rtol=1e-10)
    assert state.lam == 0.0
    with pytest.raises(FitError):
        lm.step(state, coef)
    with pytest.raises(FitError):
        lm.finalize(state)


def test_fixed_coefficient(gaussian_data, gaussian_truth):
    x, y, sigma = gaussian_data
    coef = np.array([1.5, 0.2, gaussian_truth[2]])
    free = [True, True, False]
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model, free)

    result = lm.fit(coef)

    assert coef[2] == gaussian_truth[2]
    assert coef[:2] == pytest.approx(gaussian_truth[:2], rel=1e-5)
    for matrix in (result.covar, result.curvature):
        assert np.all(matrix[2, :] == 0.0)
        assert np.all(matrix[:, 2] == 0.0)
        assert np.all(np.diag(matrix)[:2] > 0)


def test_fit_driver(gaussian_data, gaussian_truth):
    x, y, sigma = gaussian_data
    coef = np.array([1.5, 0.2, 1.6])

    result = LevenbergMarquardt(x, y, sigma, gaussian_model).fit(coef)

    assert result.converged
    assert result.accepted < 50
    assert result.chi_squared < 1e-6
    assert coef == pytest.approx(gaussian_truth, abs=1e-4)
    assert np.array_equal(result.coef, coef)
    assert len(result.lambdas) == result.iterations + 1
    assert result.covar.shape == (3, 3)


def test_fit_without_free_parameters_warns(gaussian_data):
    x, y, sigma = gaussian_data
    coef = np.array([1.5, 0.2, 1.6])

    with pytest.warns(NoFreeParametersWarning):
        result = LevenbergMarquardt(x, y, sigma, gaussian_model, [False] * 3).fit(coef)

    assert np.array_equal(coef, [1.5, 0.2, 1.6])
    assert result.iterations == 0
    assert np.all(result.covar == 0.0)


def test_lambda_control_protocol(gaussian_data, gaussian_truth):
    x, y, sigma = gaussian_data
    coef = np.array([1.5, 0.2, 1.6])
    free = [1, 1, 1]

    chi2, lam, state, covar, curvature = nonlin_fit(x, y, sigma, coef, free, gaussian_model, -1.0)
    assert lam == pytest.approx(INITIAL_LAMBDA / 10) or lam == pytest.approx(INITIAL_LAMBDA * 10)
    assert covar is None and curvature is None

    for _ in range(100):
        chi2, lam, state, covar, curvature = nonlin_fit(x, y, sigma, coef, free, gaussian_model, lam, state)
        if chi2 < 1e-12:
            break

    chi2, lam, state, covar, curvature = nonlin_fit(x, y, sigma, coef, free, gaussian_model, 0.0, state)

    assert lam == 0.0
    assert chi2 < 1e-12
    assert coef == pytest.approx(gaussian_truth, rel=1e-6)
    assert covar.shape == curvature.shape == (3, 3)
    np.testing.assert_allclose(covar @ curvature, np.eye(3), atol=1e-8)


def test_lambda_protocol_needs_state(gaussian_data):
    x, y, sigma = gaussian_data
    with pytest.raises(FitError):
        nonlin_fit(x, y, sigma, np.ones(3), None, gaussian_model, 0.001)


def test_coefficient_shape_must_match_state(gaussian_data):
    x, y, sigma = gaussian_data
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model)
    state = lm.init(np.array([1.5, 0.2, 1.6]))

    with pytest.raises(FitError):
        lm.step(state, np.ones(6))


def test_independent_sessions_do_not_interfere(gaussian_data, gaussian_truth):
    x, y, sigma = gaussian_data
    lm = LevenbergMarquardt(x, y, sigma, gaussian_model)
    coef_a = np.array([1.5, 0.2, 1.6])
    coef_b = np.array([2.5, 0.9, 1.0])
    state_a = lm.init(coef_a)
    state_b = lm.init(coef_b)

    for _ in range(60):
        lm.step(state_a, coef_a)
        lm.step(state_b, coef_b)

    assert coef_a == pytest.approx(gaussian_truth, rel=1e-6)
    assert coef_b == pytest.approx(gaussian_truth, rel=1e-6)
