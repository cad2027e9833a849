"""
Package loggers for sabr_smile.

Every module logs under the ``sabr_smile`` hierarchy and stays silent until
the application configures it:

- ``sabr_smile.vol.sabr`` logs DEBUG when a calibration starts (quote count,
  expiry, forward, fixed mask, weighting) and when the all-fixed skip path is
  taken, INFO with the outcome (termination status, RMS and max error,
  parameters), and WARNING when the optimizer stopped on its iteration cap.
- ``sabr_smile.numerics.optimization`` logs DEBUG with the optimizer's own
  iteration and evaluation counts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

ROOT_LOGGER_NAME = "sabr_smile"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_NULL_HANDLER = logging.NullHandler()


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Logger ``name`` with a shared null handler, so the library is silent
    unless the application attaches a handler of its own."""
    logger = logging.getLogger(name)
    if _NULL_HANDLER not in logger.handlers:
        logger.addHandler(_NULL_HANDLER)
    return logger


def configure_logging(
    level: int = logging.INFO,
    *,
    handlers: Iterable[logging.Handler] | None = None,
    format_string: str | None = DEFAULT_FORMAT,
) -> logging.Logger:
    """Route calibration logs to ``handlers`` at ``level``.

    Parameters
    ----------
    level : int, default logging.INFO
        INFO shows one line per calibration; WARNING keeps only iteration-cap
        reports; DEBUG adds start-of-calibration and optimizer details.
    handlers : iterable of logging.Handler, optional
        Defaults to a single ``StreamHandler`` on stderr. A handler already
        attached to the package logger is not attached twice.
    format_string : str or None
        Formatter applied to each handler; ``None`` leaves formatters as they
        are.

    Returns
    -------
    logging.Logger
        The package logger.
    """
    logger = get_logger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    targets = [logging.StreamHandler()] if handlers is None else list(handlers)
    for handler in targets:
        if format_string is not None:
            handler.setFormatter(logging.Formatter(format_string))
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger


__all__ = ["DEFAULT_FORMAT", "ROOT_LOGGER_NAME", "configure_logging", "get_logger"]
