"""
Model callbacks for curve fitting.

Two kinds of callbacks are registered:

- ``'basis'`` callbacks for linear fits, ``basis(x, ncoef) -> values``
  returning the ncoef basis-function values at x;
- ``'model'`` callbacks for nonlinear fits, ``model(x, coef) -> (y, dyda)``
  returning the model value and its partial derivatives at x.
"""

from .polynomial import polynomial_basis, polynomial
from .gaussian import gaussian, gaussian_model
from .lorentzian import lorentzian, lorentzian_model


PROFILE_KINDS = ('basis', 'model')

# Profile registry - maps profile names to (function, kind)
PROFILE_REGISTRY = {
    'polynomial': (polynomial_basis, 'basis'),
    'gaussian': (gaussian_model, 'model'),
    'lorentzian': (lorentzian_model, 'model'),
}


def get_profile(name):
    """
    Get profile callback by name.

    Parameters
    ----------
    name : str
        Profile name (e.g., 'polynomial', 'gaussian', 'lorentzian')

    Returns
    -------
    callable
        Basis or model callback

    Raises
    ------
    KeyError
        If profile name not found in registry
    """
    if name not in PROFILE_REGISTRY:
        raise KeyError(f"Profile '{name}' not found. Available: {list_profiles()}")
    return PROFILE_REGISTRY[name][0]


def get_profile_kind(name):
    """Return 'basis' or 'model' for a registered profile."""
    if name not in PROFILE_REGISTRY:
        raise KeyError(f"Profile '{name}' not found. Available: {list_profiles()}")
    return PROFILE_REGISTRY[name][1]


def list_profiles(kind=None):
    """
    List available profile names.

    Parameters
    ----------
    kind : str, optional
        Restrict to 'basis' or 'model' profiles

    Returns
    -------
    list
        List of available profile names
    """
    return [name for name, (_, k) in PROFILE_REGISTRY.items() if kind is None or k == kind]


def register_profile(name, func, kind='model'):
    """
    Register a custom profile callback.

    Parameters
    ----------
    name : str
        Profile name
    func : callable
        ``func(x, ncoef)`` for kind 'basis', ``func(x, coef)`` returning
        ``(y, dyda)`` for kind 'model'
    kind : str, optional
        'basis' or 'model', default 'model'
    """
    if kind not in PROFILE_KINDS:
        raise ValueError(f"Unknown profile kind '{kind}'. Available: {list(PROFILE_KINDS)}")
    PROFILE_REGISTRY[name] = (func, kind)


__all__ = [
    'polynomial_basis',
    'polynomial',
    'gaussian',
    'gaussian_model',
    'lorentzian',
    'lorentzian_model',
    'get_profile',
    'get_profile_kind',
    'list_profiles',
    'register_profile',
    'PROFILE_REGISTRY',
    'PROFILE_KINDS',
]
