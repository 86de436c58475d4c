"""
Logging utility for the fitting engine.
"""

import logging
import os
from datetime import datetime


LOGGER_NAME = 'chifit'


def setup_logger(log_dir=None, log_level=logging.INFO):
    """
    Set up the package logger that writes to console and, optionally, a file.

    The configured logger becomes the global instance returned by get_logger().

    Parameters
    ----------
    log_dir : str or None
        Directory to store log files. If None or empty, no log file is written.
    log_level : int
        Logging level (logging.DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns
    -------
    logger : logging.Logger
        Configured logger instance
    """
    global _logger
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_file = None
    if log_dir:
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = os.path.join(log_dir, f'chifit_{timestamp}.log')

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Console handler (only warnings and errors)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_formatter = logging.Formatter('%(levelname)s: %(message)s')
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    logger.debug("=" * 60)
    logger.debug("chifit logger started")
    if log_file:
        logger.debug(f"Log file: {log_file}")
    logger.debug("=" * 60)

    _logger = logger
    return logger


# Global logger instance
_logger = None


def get_logger():
    """
    Get or create the global logger instance.

    If setup_logger() has not been called, the first call configures the
    logger from the environment: ``CHIFIT_LOG_DIR`` (directory for a log
    file; unset or empty means no file) and ``CHIFIT_LOG_LEVEL`` (default
    ``INFO``).
    """
    if _logger is None:
        log_dir = os.environ.get('CHIFIT_LOG_DIR')
        level_name = os.environ.get('CHIFIT_LOG_LEVEL', 'INFO').upper()
        log_level = logging.getLevelName(level_name)
        if not isinstance(log_level, int):
            log_level = logging.INFO
        setup_logger(log_dir=log_dir, log_level=log_level)
    return _logger


def log_error(message, exception=None):
    """
    Log an error message with optional exception details.

    Parameters
    ----------
    message : str
        Error message
    exception : Exception, optional
        Exception object to log
    """
    logger = get_logger()
    if exception:
        logger.error(f"{message}: {str(exception)}", exc_info=True)
    else:
        logger.error(message)


def log_warning(message):
    """Log a warning message."""
    get_logger().warning(message)


def log_info(message):
    """Log an info message."""
    get_logger().info(message)


def log_debug(message):
    """Log a debug message."""
    get_logger().debug(message)
