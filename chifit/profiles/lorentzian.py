"""
Lorentzian profile model.
"""

import numpy as np


def lorentzian(x, height, center, gamma):
    """
    Lorentzian (Cauchy) peak profile.

    Parameters
    ----------
    x : array_like
        Independent variable (x-axis data)
    height : float
        Peak height (B)
    center : float
        Peak center position (x₀)
    gamma : float
        Half-width at half-maximum (HWHM)

    Returns
    -------
    array_like
        Lorentzian peak values at x positions

    Notes
    -----
    Mathematical form: f(x) = B * (γ² / ((x - x₀)² + γ²))

    FWHM (Full Width at Half Maximum) = 2 * gamma
    """
    return height * (gamma**2 / ((x - center)**2 + gamma**2))


def lorentzian_model(x, coef):
    """
    Sum of Lorentzians with partial derivatives, for nonlinear fitting.

    Parameters
    ----------
    x : float
        X value of a single data point
    coef : array_like
        Coefficients in groups of three per Lorentzian: height, center, HWHM

    Returns
    -------
    y : float
        Model value
    dyda : ndarray
        Partial derivatives with respect to each coefficient
    """
    coef = np.asarray(coef, dtype=float)
    if coef.size == 0 or coef.size % 3 != 0:
        raise ValueError(f"Expected 3 coefficients per Lorentzian, got {coef.size}")

    height = coef[0::3]
    gamma = coef[2::3]
    dx = x - coef[1::3]
    denom = dx**2 + gamma**2
    shape = gamma**2 / denom

    dyda = np.empty_like(coef)
    dyda[0::3] = shape
    dyda[1::3] = 2 * height * shape * dx / denom
    dyda[2::3] = 2 * height * gamma * dx**2 / denom**2

    return float(np.sum(height * shape)), dyda
