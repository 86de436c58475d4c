import numpy as np
import pytest

from chifit.fitting import components_to_coefficients, init_evenly_spaced, init_with_gmm
from chifit.profiles import gaussian


def test_evenly_spaced():
    x = np.linspace(0.0, 10.0, 101)
    y = np.full_like(x, 2.0)

    comps = init_evenly_spaced(x, 4, y)

    assert [c['center'] for c in comps] == pytest.approx([2.0, 4.0, 6.0, 8.0])
    assert all(c['width'] == pytest.approx(10.0 / 16) for c in comps)
    assert all(c['amplitude'] == pytest.approx(1.0) for c in comps)


def test_gmm_finds_two_peaks():
    x = np.linspace(0.0, 10.0, 400)
    y = gaussian(x, 1.0, 3.0, 0.5 * np.sqrt(2)) + gaussian(x, 0.8, 7.0, 0.5 * np.sqrt(2))

    comps = init_with_gmm(x, y, 2)

    assert [c['center'] for c in comps] == pytest.approx([3.0, 7.0], abs=0.2)
    assert [c['width'] for c in comps] == pytest.approx([0.5, 0.5], abs=0.2)


def test_gmm_without_signal():
    x = np.linspace(0.0, 1.0, 10)
    assert init_with_gmm(x, np.zeros_like(x), 1) is None


def test_components_to_coefficients():
    comps = [{'amplitude': 2.0, 'center': 1.0, 'width': 0.5}]

    gauss = components_to_coefficients(comps, 'gaussian')
    lorentz = components_to_coefficients(comps, 'lorentzian')

    assert gauss == pytest.approx([2.0, 1.0, 0.5 * np.sqrt(2)])
    assert lorentz == pytest.approx([2.0, 1.0, 0.5 * np.sqrt(2 * np.log(2))])
    with pytest.raises(ValueError):
        components_to_coefficients(comps, 'polynomial')
