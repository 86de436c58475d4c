"""Linear algebra used by the fitters."""

from .gauss_jordan import gauss_jordan, pivot_threshold
from .covariance import expand_covariance

__all__ = [
    'gauss_jordan',
    'pivot_threshold',
    'expand_covariance',
]
