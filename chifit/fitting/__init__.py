"""Fitting engine: linear and Levenberg-Marquardt chi-squared fits."""

from .linear import linear_fit, linear_chi_squared
from .curvature import evaluate_curvature
from .nonlinear import FitState, LMResult, LevenbergMarquardt, nonlin_fit
from .fitter import CurveFitter, FitResult, default_coefficient_names
from .statistics import calculate_statistics, format_statistics, format_coefficients
from .initializers import init_evenly_spaced, init_with_gmm, components_to_coefficients

__all__ = [
    'linear_fit',
    'linear_chi_squared',
    'evaluate_curvature',
    'FitState',
    'LMResult',
    'LevenbergMarquardt',
    'nonlin_fit',
    'CurveFitter',
    'FitResult',
    'default_coefficient_names',
    'calculate_statistics',
    'format_statistics',
    'format_coefficients',
    'init_evenly_spaced',
    'init_with_gmm',
    'components_to_coefficients',
]
