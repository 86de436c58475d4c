"""
Goodness-of-fit statistics calculator.
"""

import numpy as np
from scipy.stats import chi2 as chi2_distribution


def calculate_statistics(chi_squared, n_data, n_params, covar=None, names=None):
    """
    Calculate goodness-of-fit statistics.

    Parameters
    ----------
    chi_squared : float
        Chi squared of the fit
    n_data : int
        Number of data points
    n_params : int
        Number of fitted (free) parameters
    covar : ndarray, optional
        Variance-covariance matrix in full coefficient order
    names : list of str, optional
        Coefficient names, used to label the parameter errors

    Returns
    -------
    stats : dict
        Dictionary containing various fit statistics:
        - 'chi_squared': Chi-squared
        - 'reduced_chi_squared': Chi-squared per degree of freedom
        - 'q_value': Probability of a chi-squared this large or larger if
          the model is correct (goodness of fit)
        - 'n_data', 'n_params', 'dof'
        - 'errors': standard deviations of the coefficients (with covar)
        - 'correlation': correlation matrix (with covar)
    """
    dof = n_data - n_params
    if dof > 0:
        reduced_chi_squared = chi_squared / dof
        q_value = float(chi2_distribution.sf(chi_squared, dof))
    else:
        reduced_chi_squared = np.inf
        q_value = np.nan

    stats = {
        'chi_squared': chi_squared,
        'reduced_chi_squared': reduced_chi_squared,
        'q_value': q_value,
        'n_data': n_data,
        'n_params': n_params,
        'dof': dof,
    }

    if covar is not None:
        covar = np.asarray(covar, dtype=float)
        variances = np.diag(covar)
        # A negative variance only comes out of a singular curvature matrix
        errors = np.sqrt(np.where(variances >= 0, variances, np.nan))
        scale = np.outer(errors, errors)
        correlation = np.zeros_like(covar)
        np.divide(covar, scale, out=correlation, where=scale > 0)
        stats['errors'] = errors
        stats['correlation'] = correlation
        if names is not None:
            stats['parameter_errors'] = dict(zip(names, errors))

    return stats


def format_statistics(stats):
    """
    Format statistics for display.

    Parameters
    ----------
    stats : dict
        Statistics dictionary

    Returns
    -------
    str
        Formatted statistics string
    """
    lines = []
    lines.append("=== Fit Statistics ===")
    lines.append(f"χ² = {stats.get('chi_squared', 0):.6e}")
    lines.append(f"Reduced χ² = {stats.get('reduced_chi_squared', 0):.6f}")
    lines.append(f"Q (goodness of fit) = {stats.get('q_value', np.nan):.6g}")
    lines.append(f"N data = {stats.get('n_data', 0)}")
    lines.append(f"N parameters = {stats.get('n_params', 0)}")
    lines.append(f"Degrees of freedom = {stats.get('dof', 0)}")

    return '\n'.join(lines)


def format_coefficients(coef, errors, free, names=None):
    """
    Format a coefficient table with uncertainties.

    Fixed coefficients are marked as such instead of showing a zero error.
    """
    if names is None:
        names = [f"c{i}" for i in range(len(coef))]
    width = max(len(name) for name in names) if names else 0

    lines = ["[[ COEFFICIENTS ]]"]
    for name, value, error, is_free in zip(names, coef, errors, free):
        if is_free:
            lines.append(f"  {name:<{width}} = {value: .8g} +/- {error:.3g}")
        else:
            lines.append(f"  {name:<{width}} = {value: .8g} (fixed)")
    return '\n'.join(lines)
