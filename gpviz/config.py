"""
Logging setup for gpviz.

Every module logs through ``get_logger`` under the ``gpviz`` namespace.
Importing gpviz adds only a ``NullHandler``, so applications keep control of
the root logger; ``configure_logging`` opts in to gpviz's own output.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = 'gpviz'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Marks handlers installed by configure_logging so they can be swapped out
_HANDLER_FLAG = '_gpviz_handler'


def _package_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _owned_handlers(logger: logging.Logger):
    return [h for h in logger.handlers if getattr(h, _HANDLER_FLAG, False)]


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Send gpviz log records to stdout and, optionally, a file.

    Handlers go on the ``gpviz`` logger only; the root logger and other
    libraries' loggers are left alone. Calling this again replaces the
    handlers from the previous call. While configured, gpviz records do not
    propagate to the root logger, so they are not printed twice.

    Args:
        level: Logging level (logging.DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs to
        format_string: Optional custom format string for log messages

    Example:
        >>> from gpviz.config import configure_logging
        >>> import logging
        >>>
        >>> # Only report problems
        >>> configure_logging(level=logging.WARNING)
        >>>
        >>> # Trace skipped layers while debugging a plot
        >>> configure_logging(level=logging.DEBUG, log_file="gpviz.log")
    """
    logger = _package_logger()
    _remove_owned_handlers(logger)

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        setattr(handler, _HANDLER_FLAG, True)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False


def reset_logging() -> None:
    """Undo ``configure_logging``: drop its handlers and propagate to the root logger again."""
    logger = _package_logger()
    _remove_owned_handlers(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _remove_owned_handlers(logger: logging.Logger) -> None:
    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Name of the module (usually __name__)

    Returns:
        Logger instance under the ``gpviz`` namespace

    Example:
        >>> from gpviz.config import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Rendering expectation panel...")
    """
    if not name.startswith(LOGGER_NAME):
        name = f'{LOGGER_NAME}.{name}'

    return logging.getLogger(name)


def set_verbosity(verbose: bool = True) -> None:
    """
    Quick helper to set the gpviz log level.

    Args:
        verbose: If True, set to INFO level. If False, set to WARNING level.

    Example:
        >>> from gpviz.config import set_verbosity
        >>> set_verbosity(False)  # Quiet mode
    """
    _package_logger().setLevel(logging.INFO if verbose else logging.WARNING)


# Library default: stay silent unless the application configures logging
if not any(isinstance(h, logging.NullHandler) for h in _package_logger().handlers):
    _package_logger().addHandler(logging.NullHandler())
