"""
Plot a fit and its residuals with Matplotlib.
"""

import numpy as np
from matplotlib.figure import Figure
from matplotlib.backends.backend_agg import FigureCanvasAgg


def plot_fit(x, y, sigma, best_fit, path, title=None, dpi=100):
    """
    Save a two-panel plot: data with error bars and fit, and normalized residuals.

    Parameters
    ----------
    x, y, sigma : array_like
        Data points and standard deviations
    best_fit : array_like
        Model evaluated at x
    path : str
        Output image file (format from the extension, e.g. .png)
    title : str, optional
        Figure title
    dpi : int, optional
        Resolution, default 100

    Returns
    -------
    str
        The output path
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    sigma = np.asarray(sigma, dtype=float)
    best_fit = np.asarray(best_fit, dtype=float)
    order = np.argsort(x)

    fig = Figure(figsize=(8, 6), dpi=dpi)
    FigureCanvasAgg(fig)
    ax1 = fig.add_subplot(2, 1, 1)
    ax2 = fig.add_subplot(2, 1, 2, sharex=ax1)

    ax1.errorbar(x, y, yerr=sigma, fmt='o', ms=3, color='k', ecolor='0.5', label='Data')
    ax1.plot(x[order], best_fit[order], '-', color='tab:red', lw=1.5, label='Fit')
    ax1.set_ylabel('Y')
    ax1.legend(loc='best')
    if title:
        ax1.set_title(title)

    ax2.axhline(0.0, color='0.5', lw=0.8)
    ax2.plot(x, (y - best_fit) / sigma, 'o', ms=3, color='tab:blue')
    ax2.set_xlabel('X')
    ax2.set_ylabel('Residual / σ')

    fig.tight_layout()
    fig.savefig(path)
    return path
