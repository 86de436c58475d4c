"""
Initial guesses for peak models.

Provides different strategies for estimating component parameters
(center, width, amplitude) before a nonlinear fit, and the conversion of
those components into the coefficient vector of a peak model.
"""

import numpy as np

from utils.logger import log_warning


# Half width at half maximum of a Gaussian in units of its standard deviation
_HWHM_PER_SIGMA = np.sqrt(2 * np.log(2))


def init_with_gmm(x, y, n_components, baseline=None, max_samples=20000, random_state=42):
    """
    Initialize component parameters using a Gaussian Mixture Model.

    Uses the EM algorithm to find likely peak locations based on the
    intensity-weighted distribution of x-values. Particularly effective
    for overlapping peaks.

    Parameters
    ----------
    x : array_like
        X data
    y : array_like
        Y data
    n_components : int
        Number of components to initialize
    baseline : array_like, optional
        Baseline to subtract. If None, uses 5th percentile
    max_samples : int, optional
        Max samples for GMM fitting (for performance)
    random_state : int, optional
        Random seed for reproducibility

    Returns
    -------
    list of dict or None
        List of parameter dicts: [{'center': c, 'width': w, 'amplitude': a}, ...]
        with the width given as a standard deviation. Returns None if the
        data carry no signal or the mixture fit fails (caller should fall
        back to init_evenly_spaced).
    """
    from sklearn.mixture import GaussianMixture

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    if baseline is None:
        y_corrected = y - np.percentile(y, 5)
    else:
        y_corrected = y - baseline

    y_corrected = np.clip(y_corrected, 0, None)

    if y_corrected.sum() < 1e-12:
        return None

    # Sample x-coordinates weighted by intensity
    prob = y_corrected / y_corrected.sum()
    n_samples = min(max_samples, len(x) * 50)
    rng = np.random.default_rng(random_state)
    indices = rng.choice(len(x), size=n_samples, p=prob)
    X_samples = x[indices].reshape(-1, 1)

    gmm = GaussianMixture(
        n_components=n_components,
        covariance_type='full',
        random_state=random_state,
        init_params='k-means++',
        max_iter=200
    )
    try:
        gmm.fit(X_samples)
    except ValueError as e:
        log_warning(f"Gaussian mixture initialization failed: {e}")
        return None

    centers = gmm.means_.ravel()
    widths = np.sqrt(gmm.covariances_.ravel())

    # Estimate amplitudes from data at discovered centers
    amplitudes = np.interp(centers, x, y_corrected)

    order = np.argsort(centers)
    return [
        {
            'center': float(centers[i]),
            'width': float(widths[i]),
            'amplitude': float(amplitudes[i])
        }
        for i in order
    ]


def init_evenly_spaced(x, n_components, y=None):
    """
    Initialize components evenly spaced across x-range.

    Parameters
    ----------
    x : array_like
        X data
    n_components : int
        Number of components to initialize
    y : array_like, optional
        Y data for amplitude estimation. If None, uses default amplitude.

    Returns
    -------
    list of dict
        List of parameter dicts: [{'center': c, 'width': w, 'amplitude': a}, ...]
    """
    x = np.asarray(x, dtype=float)
    x_min, x_max = np.min(x), np.max(x)
    x_range = x_max - x_min

    if x_range == 0:
        x_range = 1.0

    if y is not None:
        y = np.asarray(y, dtype=float)
        y_max = np.max(y)
        y_min = np.min(y)
        base_amplitude = max((y_max - y_min) / n_components, y_max * 0.5)
    else:
        base_amplitude = 1.0

    params = []
    for i in range(n_components):
        center = x_min + (i + 1) / (n_components + 1) * x_range
        width = x_range / (4 * n_components)
        params.append({
            'center': float(center),
            'width': float(width),
            'amplitude': float(base_amplitude)
        })

    return params


def components_to_coefficients(components, profile='gaussian'):
    """
    Flatten component guesses into a peak-model coefficient vector.

    Parameters
    ----------
    components : list of dict
        Dicts with 'amplitude', 'center' and 'width' (standard deviation)
    profile : str, optional
        'gaussian' (width coefficient G = sqrt(2) * sigma) or 'lorentzian'
        (width coefficient = HWHM of a Gaussian with that sigma)

    Returns
    -------
    ndarray
        Coefficients (height, center, width) per component
    """
    if profile == 'gaussian':
        factor = np.sqrt(2.0)
    elif profile == 'lorentzian':
        factor = _HWHM_PER_SIGMA
    else:
        raise ValueError(f"No peak coefficients for profile '{profile}'")

    coef = []
    for comp in components:
        coef.extend([comp['amplitude'], comp['center'], comp['width'] * factor])
    return np.array(coef, dtype=float)
