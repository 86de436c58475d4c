"""
Curvature matrix, chi-squared gradient and chi squared of a nonlinear model.
"""

import numpy as np


def evaluate_curvature(x, y, sigma, coef, free, model):
    """
    Evaluate the linearised fitting matrices for the free coefficients.

    Parameters
    ----------
    x, y, sigma : ndarray
        Data points and the standard deviations of y
    coef : ndarray
        Model coefficients (length N)
    free : ndarray of bool
        Free-parameter mask (length N)
    model : callable
        ``model(x, coef)`` returning ``(y, dyda)`` with dyda of length N

    Returns
    -------
    alpha : ndarray
        Curvature matrix (nfit x nfit): Σ dy/da_i dy/da_j / σ²
    beta : ndarray
        Vector (nfit): Σ (y - y_model) dy/da_i / σ², i.e. -½ dχ²/da_i
    chi2 : float
        Chi squared at ``coef``

    Notes
    -----
    Second derivatives of the model are neglected (Gauss-Newton approximation
    of the Hessian). See Numerical Recipes, Sect. 15.5 (mrqcof).
    """
    nfit = int(np.count_nonzero(free))
    alpha = np.zeros((nfit, nfit))
    beta = np.zeros(nfit)
    lower = np.tril_indices(nfit)

    chi2 = 0.0
    for xi, yi, si in zip(x, y, sigma):
        ymod, dyda = model(xi, coef)
        dyda = np.asarray(dyda, dtype=float)

        sig2i = 1.0 / si**2
        dy = yi - ymod

        dfree = dyda[free]
        wt = dfree * sig2i
        alpha[lower] += np.outer(wt, dfree)[lower]
        beta += dy * wt

        chi2 += dy**2 * sig2i

    # Fill in the symmetric side
    upper = np.triu_indices(nfit, 1)
    alpha[upper] = alpha.T[upper]

    return alpha, beta, float(chi2)
