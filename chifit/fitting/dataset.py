"""
Argument checks shared by the fitters.
"""

import numpy as np

from ..data_import import SIGMA_FLOOR
from ..errors import FatalInputError, FitError
from utils.logger import log_error


def check_dataset(x, y, sigma):
    """
    Convert (x, y, sigma) to float arrays and check their lengths.

    Returns
    -------
    x, y, sigma : ndarray
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    sigma = np.asarray(sigma, dtype=float)
    if x.ndim != 1 or not (x.shape == y.shape == sigma.shape):
        raise FitError(
            f"x, y and sigma must be 1-D arrays of equal length: "
            f"{x.shape}, {y.shape}, {sigma.shape}"
        )
    return x, y, sigma


def check_sigma(sigma, caller):
    """Raise FatalInputError if any uncertainty is zero."""
    if sigma.size and np.min(np.abs(sigma)) < SIGMA_FLOOR:
        message = f"{caller}: errors cannot be zero"
        log_error(message)
        raise FatalInputError(message)


def check_coefficients(coef):
    """The coefficient vector is updated in place, so it must be a float ndarray."""
    if not isinstance(coef, np.ndarray) or coef.ndim != 1 or coef.dtype.kind != 'f':
        raise TypeError("coef must be a 1-D float numpy array (it is updated in place)")
    return coef


def check_mask(free, ncoef):
    """Return the free-parameter mask as a bool array of length ncoef."""
    if free is None:
        return np.ones(ncoef, dtype=bool)
    free = np.asarray(free).astype(bool)
    if free.shape != (ncoef,):
        raise FitError(f"Free-parameter mask has shape {free.shape}, expected ({ncoef},)")
    return free
