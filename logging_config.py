"""
logging_config.py

Handlers for the 'slits' logger namespace. Library modules only create
child loggers ('slits.simulation', 'slits.near_field', ...); scripts call
setup_logging once.
"""

from __future__ import annotations

import logging
import sys

from config import SimulationConfig


LOGGER_NAME = "slits"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%H:%M:%S"


def level_for_config(cfg: SimulationConfig | None) -> int:
    """
    DEBUG for a verbose config, INFO otherwise.
    """
    if cfg is not None and cfg.verbose:
        return logging.DEBUG
    return logging.INFO


def setup_logging(
    cfg: SimulationConfig | None = None,
    *,
    level: int | None = None,
    log_file: str | None = None,
) -> logging.Logger:
    """
    Configure the 'slits' logger.

    Parameters
    ----------
    cfg : SimulationConfig or None
        Run configuration; cfg.verbose selects DEBUG.
    level : int or None
        Explicit level, overrides cfg.
    log_file : str or None
        Also write records to this file (truncated).

    Returns
    -------
    logging.Logger
        The 'slits' logger. Calling again replaces its handlers.
    """
    if level is None:
        level = level_for_config(cfg)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        logger.addHandler(h)

    logger.debug("logging at %s", logging.getLevelName(level))
    return logger
