"""Chi-squared curve fitting package."""

from . import errors
from . import linalg
from . import profiles
from . import data_import
from . import fitting

__version__ = '0.1.0'

__all__ = ['errors', 'linalg', 'profiles', 'data_import', 'fitting']
