"""
Restore packed covariance/curvature matrices to full coefficient order.
"""

import numpy as np


def expand_covariance(covar, free, nfit=None):
    """
    Spread a matrix computed over the free coefficients to their true positions.

    The fitters build their matrices over the free coefficients only, packed
    into the leading ``nfit x nfit`` block. This rewrites the matrix in place
    so that element (i, j) belongs to coefficients i and j, with zero rows and
    columns for the fixed coefficients.

    Parameters
    ----------
    covar : ndarray
        Square float array of size >= len(free), modified in place
    free : array_like of bool
        Free-parameter mask, True for fitted coefficients
    nfit : int, optional
        Number of free coefficients; counted from ``free`` if omitted

    Returns
    -------
    covar : ndarray
        The same array, now in full coefficient order

    See Numerical Recipes, Sect. 15.4 (covsrt).
    """
    free = np.asarray(free, dtype=bool)
    ncoef = free.size
    if nfit is None:
        nfit = int(np.count_nonzero(free))
    if covar.ndim != 2 or covar.shape[0] < ncoef or covar.shape[1] < ncoef:
        raise ValueError(f"Matrix of shape {covar.shape} cannot hold {ncoef} coefficients")
    if nfit > ncoef:
        raise ValueError(f"nfit = {nfit} exceeds the number of coefficients ({ncoef})")

    covar[nfit:ncoef, :ncoef] = 0.0
    covar[:ncoef, nfit:ncoef] = 0.0

    k = nfit - 1
    for j in range(ncoef - 1, -1, -1):
        if free[j]:
            covar[:ncoef, [j, k]] = covar[:ncoef, [k, j]]
            covar[[j, k], :ncoef] = covar[[k, j], :ncoef]
            k -= 1

    return covar
