"""
Polynomial basis functions for linear fitting.
"""

import numpy as np


def polynomial_basis(x, ncoef):
    """
    Polynomial basis: basis_i(x) = x**i for i = 0 .. ncoef-1.

    Parameters
    ----------
    x : float
        X value of a single data point
    ncoef : int
        Number of coefficients (polynomial degree + 1)

    Returns
    -------
    ndarray
        Basis-function values 1, x, x², ...
    """
    basis = np.empty(ncoef)
    if ncoef > 0:
        basis[0] = 1.0
    for i in range(1, ncoef):
        basis[i] = basis[i - 1] * x
    return basis


def polynomial(x, coef):
    """Evaluate Σ coef_i x**i (ascending coefficient order)."""
    return np.polynomial.polynomial.polyval(x, coef)
