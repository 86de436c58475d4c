"""
Linear least-squares fit of a linear combination of basis functions.
"""

import numpy as np

from ..errors import NoFreeParametersWarning, warn
from ..linalg import expand_covariance, gauss_jordan
from .dataset import check_coefficients, check_dataset, check_mask, check_sigma
from utils.logger import log_debug


def linear_chi_squared(x, y, sigma, coef, basis):
    """
    Chi squared of the model Σ coef_i * basis_i(x) against the data.

    Parameters
    ----------
    x, y, sigma : ndarray
        Data points and their standard deviations
    coef : ndarray
        Model coefficients
    basis : callable
        ``basis(x, ncoef)`` returning the basis-function values at x

    Returns
    -------
    float
    """
    ncoef = coef.size
    chi2 = 0.0
    for xi, yi, si in zip(x, y, sigma):
        ymod = np.dot(coef, np.asarray(basis(xi, ncoef), dtype=float))
        chi2 += ((yi - ymod) / si)**2
    return float(chi2)


def linear_fit(x, y, sigma, coef, free, basis, ncov=None):
    """
    Fit the coefficients of a linear model by minimising chi squared.

    The model is y = Σ_i coef_i * basis_i(x), e.g. a polynomial with
    basis_i(x) = x**i. Coefficients whose entry in ``free`` is False keep
    their current value; the others are fitted.

    Parameters
    ----------
    x : array_like
        X values of the data
    y : array_like
        Y values of the data
    sigma : array_like
        Standard deviations of the y values; none may be zero
    coef : ndarray
        Coefficients of the model (float array, updated in place)
    free : array_like of bool
        Fit coefficient i if free[i] is true, keep it fixed otherwise.
        None fits all coefficients.
    basis : callable
        ``basis(x, ncoef)`` returning the ncoef basis-function values at x
    ncov : int, optional
        Size of the returned covariance matrix (>= len(coef)), default len(coef)

    Returns
    -------
    covar : ndarray
        Variance-covariance matrix (ncov x ncov); rows and columns of fixed
        coefficients are zero
    chi2 : float
        Chi squared of the fitted model

    Raises
    ------
    FatalInputError
        If any uncertainty is zero (coef is left unchanged)

    See Numerical Recipes, Sect. 15.4 (lfit).
    """
    x, y, sigma = check_dataset(x, y, sigma)
    coef = check_coefficients(coef)
    ncoef = coef.size
    free = check_mask(free, ncoef)
    check_sigma(sigma, 'linear_fit()')

    if ncov is None:
        ncov = ncoef
    if ncov < ncoef:
        raise ValueError(f"ncov = {ncov} is smaller than the number of coefficients ({ncoef})")

    nfit = int(np.count_nonzero(free))
    covar = np.zeros((ncov, ncov))
    if nfit == 0:
        warn("linear_fit(): no parameters to be fit for", NoFreeParametersWarning)
        return covar, linear_chi_squared(x, y, sigma, coef, basis)

    fixed = ~free
    alpha = covar[:nfit, :nfit]
    beta = np.zeros(nfit)
    lower = np.tril_indices(nfit)

    # Accumulate the normal equations over the free coefficients
    for xi, yi, si in zip(x, y, sigma):
        afunc = np.asarray(basis(xi, ncoef), dtype=float)
        ym = yi
        if nfit < ncoef:
            ym -= np.dot(coef[fixed], afunc[fixed])
        sig2i = 1.0 / si**2

        afree = afunc[free]
        wt = afree * sig2i
        alpha[lower] += np.outer(wt, afree)[lower]
        beta += ym * wt

    upper = np.triu_indices(nfit, 1)
    alpha[upper] = alpha.T[upper]

    gauss_jordan(covar, beta, n=nfit)
    coef[free] = beta

    chi2 = linear_chi_squared(x, y, sigma, coef, basis)
    expand_covariance(covar, free, nfit)

    log_debug(f"linear_fit(): {nfit}/{ncoef} coefficients fitted to {x.size} points, chi2 = {chi2:.6g}")

    return covar, chi2
