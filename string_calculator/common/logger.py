"""Package-wide logger writing to stderr."""
import logging
import os
import sys


LOG_LEVEL_ENV: str = "STRING_CALCULATOR_LOG_LEVEL"
LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(processName)s %(name)s: %(message)s"
DEFAULT_LEVEL: int = logging.WARNING

logger: logging.Logger = logging.getLogger("string_calculator")

if not logger.handlers:
    # stdout is reserved for results
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.propagate = False


def level_from_env() -> int:
    """
    Read the log level from the environment.

    Unknown names fall back to WARNING with a warning instead of failing the import.

    :return: Numeric logging level
    :rtype: int
    """
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        logger.warning(f"⚠️ Unknown log level {name!r} in {LOG_LEVEL_ENV}, using WARNING")
        return DEFAULT_LEVEL
    return level


logger.setLevel(level_from_env())


def set_level(level: str) -> None:
    """
    Change the package log level at runtime.

    :param str level: Level name such as ``"DEBUG"`` or ``"info"``

    :raises ValueError: If the level name is unknown
    """
    logger.setLevel(level.upper())
