"""
Main curve fitter class.
"""

from dataclasses import dataclass

import numpy as np

from ..data_import import validate_data
from ..profiles import get_profile, get_profile_kind
from .dataset import check_mask
from .linear import linear_fit
from .nonlinear import LevenbergMarquardt
from .statistics import calculate_statistics, format_coefficients, format_statistics
from utils.logger import log_info


@dataclass
class FitResult:
    """
    Result of a CurveFitter fit.

    Attributes
    ----------
    kind : str
        'linear' or 'nonlinear'
    profile : callable
        Basis (linear) or model (nonlinear) callback
    profile_name : str
        Registry name of the profile, or the callback's __name__
    coef : ndarray
        Fitted coefficients
    free : ndarray of bool
        Free-parameter mask
    names : list of str
        Coefficient names
    covar : ndarray
        Variance-covariance matrix
    chi_squared : float
        Chi squared at the fitted coefficients
    best_fit : ndarray
        Model evaluated at the data x values
    residual : ndarray
        y - best_fit
    iterations : int
        Number of Levenberg-Marquardt steps (0 for linear fits)
    converged : bool
        Whether the iteration converged (always True for linear fits)
    curvature : ndarray or None
        Curvature matrix (nonlinear fits only)
    """
    kind: str
    profile: object
    profile_name: str
    coef: np.ndarray
    free: np.ndarray
    names: list
    covar: np.ndarray
    chi_squared: float
    best_fit: np.ndarray
    residual: np.ndarray
    iterations: int = 0
    converged: bool = True
    curvature: np.ndarray = None


def default_coefficient_names(profile_name, ncoef):
    """
    Coefficient names for a profile.

    Peak models get height/center/width names per component (h1, c1, w1, ...),
    everything else c0, c1, ...
    """
    if profile_name in ('gaussian', 'lorentzian') and ncoef % 3 == 0:
        names = []
        for k in range(1, ncoef // 3 + 1):
            names.extend([f"h{k}", f"c{k}", f"w{k}"])
        return names
    return [f"c{i}" for i in range(ncoef)]


class CurveFitter:
    """
    Chi-squared fitting of a data set with error bars.

    Attributes
    ----------
    x : ndarray
        X-axis data
    y : ndarray
        Y-axis data
    sigma : ndarray
        Standard deviations of the y values
    result : FitResult or None
        Result of the last fit
    """

    def __init__(self, x_data, y_data, sigma=None):
        """
        Initialize CurveFitter.

        Parameters
        ----------
        x_data : array_like
            X-axis data
        y_data : array_like
            Y-axis data
        sigma : array_like, optional
            Standard deviations of y. If None, all points get unit weight.
        """
        validate_data(x_data, y_data, sigma)
        self.x = np.asarray(x_data, dtype=float)
        self.y = np.asarray(y_data, dtype=float)
        if sigma is None:
            log_info("No uncertainties given; using sigma = 1 for all points")
            self.sigma = np.ones_like(self.y)
        else:
            self.sigma = np.asarray(sigma, dtype=float)

        self.result = None

    @staticmethod
    def _resolve_profile(profile, kind):
        """Return (callback, name) for a registry name or a callable."""
        if isinstance(profile, str):
            profile_kind = get_profile_kind(profile)
            if profile_kind != kind:
                raise ValueError(f"Profile '{profile}' is a {profile_kind} profile, expected {kind}")
            return get_profile(profile), profile
        if not callable(profile):
            raise TypeError(f"Profile must be a name or a callable, got {type(profile).__name__}")
        return profile, getattr(profile, '__name__', 'custom')

    def fit_linear(self, basis, coef, free=None, names=None):
        """
        Fit a linear combination of basis functions.

        Parameters
        ----------
        basis : str or callable
            Basis profile name (e.g. 'polynomial') or ``basis(x, ncoef)``
        coef : array_like
            Coefficients; the values of fixed coefficients are kept
        free : array_like of bool, optional
            Free-parameter mask, default all free
        names : list of str, optional
            Coefficient names for the report

        Returns
        -------
        FitResult

        Examples
        --------
        >>> fitter = CurveFitter(x, y, sigma)
        >>> result = fitter.fit_linear('polynomial', np.zeros(3))
        """
        func, name = self._resolve_profile(basis, 'basis')
        coef = np.array(coef, dtype=float)
        free = check_mask(free, coef.size)

        covar, chi2 = linear_fit(self.x, self.y, self.sigma, coef, free, func)

        self.result = self._make_result('linear', func, name, coef, free, names, covar, chi2)
        return self.result

    def fit_nonlinear(self, model, coef, free=None, names=None, max_iter=200, tol=1e-3, n_converged=4):
        """
        Fit a nonlinear model with the Levenberg-Marquardt method.

        Parameters
        ----------
        model : str or callable
            Model profile name (e.g. 'gaussian') or ``model(x, coef)``
            returning ``(y, dyda)``
        coef : array_like
            Initial coefficients
        free : array_like of bool, optional
            Free-parameter mask, default all free
        names : list of str, optional
            Coefficient names for the report
        max_iter, tol, n_converged
            Convergence settings, see LevenbergMarquardt.fit()

        Returns
        -------
        FitResult
        """
        func, name = self._resolve_profile(model, 'model')
        coef = np.array(coef, dtype=float)
        free = check_mask(free, coef.size)

        lm = LevenbergMarquardt(self.x, self.y, self.sigma, func, free)
        lm_result = lm.fit(coef, max_iter=max_iter, tol=tol, n_converged=n_converged)

        self.result = self._make_result('nonlinear', func, name, coef, free, names,
                                        lm_result.covar, lm_result.chi_squared)
        self.result.iterations = lm_result.iterations
        self.result.converged = lm_result.converged
        self.result.curvature = lm_result.curvature
        return self.result

    def _make_result(self, kind, func, name, coef, free, names, covar, chi2):
        if names is None:
            names = default_coefficient_names(name, coef.size)
        elif len(names) != coef.size:
            raise ValueError(f"Got {len(names)} names for {coef.size} coefficients")
        best_fit = self._evaluate(kind, func, coef, self.x)
        return FitResult(kind=kind, profile=func, profile_name=name, coef=coef, free=free,
                         names=list(names), covar=covar, chi_squared=chi2,
                         best_fit=best_fit, residual=self.y - best_fit)

    @staticmethod
    def _evaluate(kind, func, coef, x):
        if kind == 'linear':
            return np.array([np.dot(coef, func(xi, coef.size)) for xi in x])
        return np.array([func(xi, coef)[0] for xi in x])

    def evaluate(self, x=None):
        """
        Evaluate the fitted model.

        Parameters
        ----------
        x : array_like, optional
            X values to evaluate at. If None, use self.x

        Returns
        -------
        ndarray
            Model values
        """
        if self.result is None:
            raise ValueError("No fit result available. Run a fit first.")
        if x is None:
            x = self.x
        x = np.atleast_1d(np.asarray(x, dtype=float))
        return self._evaluate(self.result.kind, self.result.profile, self.result.coef, x)

    def get_statistics(self):
        """
        Calculate fit statistics.

        Returns
        -------
        stats : dict
            Dictionary containing fit quality metrics
        """
        if self.result is None:
            raise ValueError("No fit result available. Run a fit first.")

        result = self.result
        stats = calculate_statistics(result.chi_squared, len(self.x), int(np.count_nonzero(result.free)),
                                     covar=result.covar, names=result.names)
        stats['profile'] = result.profile_name
        stats['kind'] = result.kind
        if result.kind == 'nonlinear':
            stats['iterations'] = result.iterations
            stats['converged'] = result.converged
        return stats

    def get_fit_report(self):
        """
        Get detailed fit report.

        Returns
        -------
        str
            Fit report string
        """
        if self.result is None:
            raise ValueError("No fit result available. Run a fit first.")

        result = self.result
        stats = self.get_statistics()

        report = f"[[ FIT ]]\nProfile: {result.profile_name} ({result.kind})\n"
        if result.kind == 'nonlinear':
            state = "converged" if result.converged else "NOT converged"
            report += f"Iterations: {result.iterations} ({state})\n"
        report += "\n"
        report += format_coefficients(result.coef, stats['errors'], result.free, result.names)
        report += "\n\n"
        report += format_statistics(stats)
        report += "\n"
        return report
