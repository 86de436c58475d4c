"""
Exceptions and warnings raised by the fitting engine.

Fatal conditions (arithmetic impossibilities such as a zero uncertainty) are
raised as exceptions. Recoverable numerical conditions are reported through
:func:`warn`, which logs them and issues a Python warning, and computation
continues with a best-effort result.
"""

import warnings

from utils.logger import log_warning


class FitError(Exception):
    """Base class for fitting errors."""


class FatalInputError(FitError, ValueError):
    """Input data that cannot be fitted, e.g. zero uncertainties."""


class FitWarning(UserWarning):
    """Base class for non-fatal fitting conditions."""


class SingularMatrixWarning(FitWarning):
    """The linear solver met a zero, tiny or reused pivot."""


class NoFreeParametersWarning(FitWarning):
    """A fit was requested with every coefficient held fixed."""


def warn(message, category=FitWarning):
    """
    Report a non-fatal condition.

    The message goes to the package log at WARNING level and is issued as a
    Python warning of the given category, so it can be filtered or turned
    into an error with the standard :mod:`warnings` machinery.
    """
    log_warning(message)
    warnings.warn(message, category, stacklevel=3)
