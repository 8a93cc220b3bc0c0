import logging
from typing import Set

_debug: bool = False
_logger_names: Set[str] = set()


def _level() -> int:
    return logging.DEBUG if _debug else logging.WARNING


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger. All loggers created here follow the package-wide debug switch.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level())
    _logger_names.add(name)
    return logger


def set_debug(debug: bool) -> None:
    global _debug
    _debug = debug
    for name in _logger_names:
        logging.getLogger(name).setLevel(_level())
