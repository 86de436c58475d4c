import numpy as np
import pytest

from chifit.linalg import expand_covariance


def test_packed_block_moves_to_free_positions():
    covar = np.zeros((4, 4))
    covar[:2, :2] = [[1.0, 2.0], [2.0, 3.0]]

    expand_covariance(covar, [False, True, False, True])

    expected = np.zeros((4, 4))
    expected[1, 1] = 1.0
    expected[1, 3] = expected[3, 1] = 2.0
    expected[3, 3] = 3.0
    assert np.array_equal(covar, expected)


def test_all_free_is_unchanged():
    rng = np.random.default_rng(0)
    m = rng.normal(size=(3, 3))
    m = m + m.T
    covar = m.copy()

    expand_covariance(covar, [True, True, True])

    assert np.array_equal(covar, m)


@pytest.mark.parametrize('seed', range(5))
def test_random_masks(seed):
    rng = np.random.default_rng(seed)
    n = 6
    free = rng.random(n) < 0.5
    free[rng.integers(n)] = True
    full = rng.normal(size=(n, n))
    full = full + full.T

    nfit = int(free.sum())
    covar = np.full((n, n), np.nan)
    covar[:nfit, :nfit] = full[np.ix_(free, free)]
    covar[nfit:, :] = 99.0
    covar[:, nfit:] = 99.0

    expand_covariance(covar, free)

    expected = np.where(np.outer(free, free), full, 0.0)
    assert np.array_equal(covar, expected)
    assert np.array_equal(covar, covar.T)


def test_matrix_larger_than_coefficient_count():
    covar = np.zeros((5, 5))
    covar[0, 0] = 4.0

    expand_covariance(covar, [False, False, True])

    expected = np.zeros((5, 5))
    expected[2, 2] = 4.0
    assert np.array_equal(covar, expected)


def test_matrix_too_small():
    with pytest.raises(ValueError):
        expand_covariance(np.zeros((2, 2)), [True, True, True])
