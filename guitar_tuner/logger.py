"""Logger lookup for the guitar tuner's modules."""

import logging
from typing import Dict, Optional

PACKAGE_LOGGER = "guitar_tuner"

_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the logger for a module of the package.

    Names outside the package, such as '__main__' when a module is run as a
    script, are placed under 'guitar_tuner' so the levels and handler
    installed by setup_logging() apply to them as well.

    Args:
        name: Module name, usually __name__; None for the package logger
    """
    if not name:
        name = PACKAGE_LOGGER
    elif name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"

    logger = _loggers.get(name)
    if logger is None:
        logger = _loggers[name] = logging.getLogger(name)
    return logger
