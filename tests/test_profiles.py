import numpy as np
import pytest

from chifit.profiles import (PROFILE_REGISTRY, gaussian, gaussian_model, get_profile, get_profile_kind,
                             list_profiles, lorentzian, lorentzian_model, polynomial_basis, register_profile)


def _numerical_derivatives(model, x, coef, step=1e-6):
    derivs = np.empty_like(coef)
    for i in range(coef.size):
        up = coef.copy()
        down = coef.copy()
        up[i] += step
        down[i] -= step
        derivs[i] = (model(x, up)[0] - model(x, down)[0]) / (2 * step)
    return derivs


@pytest.mark.parametrize('model', [gaussian_model, lorentzian_model])
@pytest.mark.parametrize('x', [-1.3, 0.2, 2.7])
def test_analytic_derivatives(model, x):
    coef = np.array([2.0, 0.5, 1.2, 0.7, 1.8, 0.6])

    _, dyda = model(x, coef)

    assert dyda == pytest.approx(_numerical_derivatives(model, x, coef), rel=1e-6, abs=1e-8)


def test_model_values_are_sums_of_peaks():
    coef = np.array([2.0, 0.5, 1.2, 0.7, 1.8, 0.6])
    x = 1.1

    assert gaussian_model(x, coef)[0] == pytest.approx(gaussian(x, 2.0, 0.5, 1.2) + gaussian(x, 0.7, 1.8, 0.6))
    assert lorentzian_model(x, coef)[0] == pytest.approx(lorentzian(x, 2.0, 0.5, 1.2) + lorentzian(x, 0.7, 1.8, 0.6))


def test_gaussian_shape():
    # exp(-((x - E) / G)^2): value at x = E + G is B / e
    assert gaussian(2.5, 3.0, 1.0, 1.5) == pytest.approx(3.0 / np.e)


@pytest.mark.parametrize('model', [gaussian_model, lorentzian_model])
def test_models_need_coefficient_triplets(model):
    with pytest.raises(ValueError):
        model(0.0, [1.0, 2.0])


def test_polynomial_basis():
    assert np.array_equal(polynomial_basis(2.0, 4), [1.0, 2.0, 4.0, 8.0])
    assert np.array_equal(polynomial_basis(0.0, 3), [1.0, 0.0, 0.0])
    assert polynomial_basis(5.0, 0).size == 0


def test_registry():
    assert get_profile('gaussian') is gaussian_model
    assert get_profile_kind('polynomial') == 'basis'
    assert list_profiles('basis') == ['polynomial']
    assert set(list_profiles('model')) == {'gaussian', 'lorentzian'}
    with pytest.raises(KeyError, match="Available"):
        get_profile('voigt')


def test_register_custom_profile():
    def exponential(x, coef):
        value = coef[0] * np.exp(-x / coef[1])
        return value, np.array([value / coef[0], value * x / coef[1]**2])

    register_profile('exponential', exponential)
    try:
        assert get_profile('exponential') is exponential
        assert 'exponential' in list_profiles('model')
    finally:
        PROFILE_REGISTRY.pop('exponential')

    with pytest.raises(ValueError):
        register_profile('bad', exponential, kind='other')
