"""
Gauss-Jordan elimination with full pivoting.
"""

import numpy as np

from ..errors import SingularMatrixWarning, warn


_EPS = np.finfo(float).eps
_TINY = np.finfo(float).tiny


def pivot_threshold(scale, n):
    """
    Smallest pivot magnitude accepted without a singular-matrix warning.

    The threshold is relative to the magnitude of the pivot's own row and
    column in the original matrix, so a well-conditioned but badly scaled
    matrix (e.g. diag(1e10, 1e-10)) is not reported as singular.

    Parameters
    ----------
    scale : float
        Largest absolute value in the original row and column of the pivot
    n : int
        Dimension of the equation set

    Returns
    -------
    float
        ``max(n * eps * scale, 10 * tiny)``
    """
    if not np.isfinite(scale):
        scale = 0.0
    return max(n * _EPS * scale, 10 * _TINY)


def _scales(work, axis):
    scale = np.abs(work).max(axis=axis, initial=0.0)
    return np.where(np.isfinite(scale), scale, 0.0)


def gauss_jordan(a, b=None, n=None):
    """
    Solve a set of linear equations and invert the matrix in place.

    Parameters
    ----------
    a : ndarray
        Float array of at least n x n. On return its leading n x n block holds
        the inverse of the original block.
    b : ndarray, optional
        Right-hand side(s): a vector of length >= n or an array of shape
        (>= n, K). On return it holds the solution vector(s).
    n : int, optional
        Dimension of the equation set, default ``a.shape[0]``

    Returns
    -------
    a : ndarray
        The inverted matrix (same object as the input)
    b : ndarray or None
        The solution(s) (same object as the input)

    Notes
    -----
    In every elimination step the largest remaining element of the unreduced
    submatrix is used as pivot. A zero pivot, one that is tiny compared with
    its original row and column (see :func:`pivot_threshold`), or a column
    selected twice, means the matrix is (numerically) singular: a
    :class:`~chifit.errors.SingularMatrixWarning` is issued and the
    elimination carries on, so the result must then be treated as unreliable.

    See Numerical Recipes, Sect. 2.1.
    """
    if n is None:
        n = a.shape[0]
    if a.ndim != 2 or a.shape[0] < n or a.shape[1] < n:
        raise ValueError(f"Matrix of shape {a.shape} is too small for n = {n}")

    work = a[:n, :n]
    if b is None:
        rhs = np.zeros((n, 0))
    else:
        if b.shape[0] < n:
            raise ValueError(f"Right-hand side of shape {b.shape} is too small for n = {n}")
        rhs = b[:n, np.newaxis] if b.ndim == 1 else b[:n]

    row_scale = _scales(work, 1)
    col_scale = _scales(work, 0)
    indxr = np.zeros(n, dtype=int)
    indxc = np.zeros(n, dtype=int)
    ipiv = np.zeros(n, dtype=int)
    rows = np.arange(n)
    singular = False
    irow = icol = 0

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        for i in range(n):
            # Find the pivot: largest element in the unpivoted rows/columns
            big = 0.0
            for j in range(n):
                if ipiv[j] != 1:
                    for k in range(n):
                        if ipiv[k] == 0:
                            if abs(work[j, k]) >= big:
                                big = abs(work[j, k])
                                irow = j
                                icol = k
                        elif ipiv[k] > 1:
                            singular = True

            ipiv[icol] += 1
            if ipiv[icol] > 1:
                singular = True

            # Move the pivot to the diagonal
            if irow != icol:
                work[[irow, icol], :] = work[[icol, irow], :]
                rhs[[irow, icol], :] = rhs[[icol, irow], :]
                row_scale[[irow, icol]] = row_scale[[icol, irow]]
            indxr[i] = irow
            indxc[i] = icol

            threshold = pivot_threshold(max(row_scale[icol], col_scale[icol]), n)
            if not abs(work[icol, icol]) >= threshold:
                singular = True

            pivinv = 1.0 / work[icol, icol]
            work[icol, icol] = 1.0
            work[icol, :] *= pivinv
            rhs[icol, :] *= pivinv

            # Reduce all other rows
            others = rows != icol
            factors = work[others, icol].copy()
            work[others, icol] = 0.0
            work[others, :] -= np.outer(factors, work[icol, :])
            rhs[others, :] -= np.outer(factors, rhs[icol, :])

        # Unscramble the columns in reverse order of the swaps
        for i in range(n - 1, -1, -1):
            if indxr[i] != indxc[i]:
                work[:, [indxr[i], indxc[i]]] = work[:, [indxc[i], indxr[i]]]

    if singular:
        warn(f"gauss_jordan(): singular matrix (n = {n})", SingularMatrixWarning)

    return a, b
