"""
Gaussian profile model.
"""

import numpy as np


def gaussian(x, height, center, width):
    """
    Gaussian peak profile.

    Parameters
    ----------
    x : array_like
        Independent variable (x-axis data)
    height : float
        Peak height (B)
    center : float
        Peak center position (E)
    width : float
        Peak width (G), equal to sqrt(2) times the standard deviation

    Returns
    -------
    array_like
        Gaussian peak values at x positions

    Notes
    -----
    Mathematical form: f(x) = B * exp(-((x - E) / G)²)

    FWHM (Full Width at Half Maximum) = 2 * sqrt(ln 2) * G ≈ 1.665 * G
    """
    return height * np.exp(-((x - center) / width)**2)


def gaussian_model(x, coef):
    """
    Sum of Gaussians with partial derivatives, for nonlinear fitting.

    Parameters
    ----------
    x : float
        X value of a single data point
    coef : array_like
        Coefficients in groups of three per Gaussian: height B_k, center E_k
        and width G_k

    Returns
    -------
    y : float
        Model value  y = Σ_k B_k exp(-((x - E_k) / G_k)²)
    dyda : ndarray
        Partial derivatives dy/dB_k, dy/dE_k, dy/dG_k, in coefficient order

    Examples
    --------
    >>> y, dyda = gaussian_model(0.5, [2.0, 0.0, 1.0])
    """
    coef = np.asarray(coef, dtype=float)
    if coef.size == 0 or coef.size % 3 != 0:
        raise ValueError(f"Expected 3 coefficients per Gaussian, got {coef.size}")

    height = coef[0::3]
    width = coef[2::3]
    arg = (x - coef[1::3]) / width
    ex = np.exp(-arg**2)
    fac = height * ex * 2 * arg

    dyda = np.empty_like(coef)
    dyda[0::3] = ex
    dyda[1::3] = fac / width
    dyda[2::3] = fac * arg / width

    return float(np.sum(height * ex)), dyda
