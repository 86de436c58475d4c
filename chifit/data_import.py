"""
Data import utilities for reading measurement files.
"""

import numpy as np

from .errors import FatalInputError


# Uncertainties below this magnitude are treated as zero
SIGMA_FLOOR = 10 * np.finfo(float).tiny


def load_txt_file(filepath, delimiter=None, comments='#', skip_header=0):
    """
    Load data from TXT file with automatic header detection.

    Parameters
    ----------
    filepath : str
        Path to TXT file
    delimiter : str or None, optional
        Delimiter between columns. If None, split on whitespace
    comments : str, optional
        Character indicating comment lines, default '#'
    skip_header : int, optional
        Number of header lines to skip, default 0 (auto-detect)

    Returns
    -------
    x : ndarray
        X-axis data (first column)
    y : ndarray
        Y-axis data (second column)
    sigma : ndarray or None
        Standard deviations of y (third column), None for two-column files

    Raises
    ------
    ValueError
        If file cannot be parsed or doesn't have at least 2 columns
    """
    # Auto-detect header lines
    auto_skip = 0
    with open(filepath, 'r') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith(comments):
                auto_skip += 1
                continue

            try:
                parts = line.split(delimiter) if delimiter else line.split()
                float(parts[0])
                float(parts[1])
                break
            except (ValueError, IndexError):
                # Not numeric - treat as header
                auto_skip += 1
                continue

    if skip_header == 0:
        skip_header = auto_skip

    try:
        data = np.loadtxt(filepath, delimiter=delimiter, comments=comments,
                          skiprows=skip_header, ndmin=2)
    except ValueError as e:
        raise ValueError(f"Error loading file '{filepath}': {e}") from e

    if data.shape[1] < 2:
        raise ValueError(f"File must have at least 2 columns, found {data.shape[1]}")

    x = data[:, 0]
    y = data[:, 1]
    sigma = data[:, 2] if data.shape[1] >= 3 else None

    if not np.all(np.isfinite(x)):
        raise ValueError("X data contains NaN or Inf values")
    if not np.all(np.isfinite(y)):
        raise ValueError("Y data contains NaN or Inf values")
    if sigma is not None and not np.all(np.isfinite(sigma)):
        raise ValueError("Sigma data contains NaN or Inf values")

    return x, y, sigma


def auto_detect_delimiter(filepath, max_lines=10):
    """
    Automatically detect delimiter in text file.

    Parameters
    ----------
    filepath : str
        Path to file
    max_lines : int, optional
        Number of lines to check, default 10

    Returns
    -------
    str or None
        Detected delimiter (comma or tab), None for whitespace
    """
    with open(filepath, 'r') as f:
        lines = []
        for i, line in enumerate(f):
            if i >= max_lines:
                break
            line = line.strip()
            if line and not line.startswith('#'):
                lines.append(line)

    if not lines:
        return None

    for delim in (',', '\t'):
        counts = [line.count(delim) for line in lines]
        # Consistent and more than one column
        if len(set(counts)) == 1 and counts[0] > 0:
            return delim

    return None


def load_data_file(filepath):
    """
    Load data file with automatic format detection.

    Parameters
    ----------
    filepath : str
        Path to data file

    Returns
    -------
    x, y : ndarray
        Data columns
    sigma : ndarray or None
        Uncertainty column, if present
    """
    delimiter = auto_detect_delimiter(filepath)

    try:
        return load_txt_file(filepath, delimiter=delimiter)
    except ValueError as e:
        if delimiter is None:
            raise
        # Retry whitespace-separated
        try:
            return load_txt_file(filepath, delimiter=None)
        except ValueError:
            raise ValueError(f"Could not load data file: {e}") from e


def validate_data(x, y, sigma=None):
    """
    Validate measurement data.

    Parameters
    ----------
    x : array_like
        X-axis data
    y : array_like
        Y-axis data
    sigma : array_like, optional
        Standard deviations of y

    Returns
    -------
    bool
        True if data is valid

    Raises
    ------
    ValueError
        If data validation fails
    FatalInputError
        If an uncertainty is zero (a ValueError subclass)
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    if x.ndim != 1 or y.ndim != 1:
        raise ValueError("X and Y must be one-dimensional")

    if len(x) != len(y):
        raise ValueError(f"X and Y must have same length: {len(x)} vs {len(y)}")

    if len(x) < 1:
        raise ValueError("Need at least 1 data point")

    if not np.all(np.isfinite(x)):
        raise ValueError("X data contains NaN or Inf")

    if not np.all(np.isfinite(y)):
        raise ValueError("Y data contains NaN or Inf")

    if sigma is not None:
        sigma = np.asarray(sigma, dtype=float)
        if sigma.shape != y.shape:
            raise ValueError(f"Sigma must have the same length as Y: {sigma.shape} vs {y.shape}")
        if not np.all(np.isfinite(sigma)):
            raise ValueError("Sigma data contains NaN or Inf")
        if np.any(np.abs(sigma) < SIGMA_FLOOR):
            raise FatalInputError("Sigma data contains zero uncertainties")

    return True
