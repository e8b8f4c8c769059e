"""
Logging Configuration
Sets up the package logger for applications embedding the engine.

The evaluator logs one DEBUG line per complex sample value, which is a few
hundred lines per strand and update. DEFAULT_MODULE_LEVELS holds that
module back at INFO unless the caller asks for it explicitly.
"""
import logging
import sys
from typing import Mapping, Optional, Union

PACKAGE_LOGGER = "knotcanvas"

FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

DEFAULT_MODULE_LEVELS = {
    "knotcanvas.expression": logging.INFO,
}

Level = Union[int, str]


def resolve_level(level: Level) -> int:
    """logging.DEBUG, 10, 'debug' or 'DEBUG' -> 10."""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level '{level}'")
    return value


def setup_logging(level: Level = logging.INFO, log_file: Optional[str] = None,
                  module_levels: Optional[Mapping[str, Level]] = None) -> logging.Logger:
    """
    Configures the logger for the 'knotcanvas' namespace.

    Args:
        level: Logging level, as a number or a name ('debug', 'INFO').
        log_file: Optional path to save logs to a file.
        module_levels: Per-module levels, e.g. {'knotcanvas.expression': 'DEBUG'}.
                       Merged over DEFAULT_MODULE_LEVELS.

    Returns:
        The configured package logger.
    """
    level = resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Re-running replaces the handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    levels = dict(DEFAULT_MODULE_LEVELS)
    levels.update(module_levels or {})
    for name, module_level in levels.items():
        if not name.startswith(PACKAGE_LOGGER + "."):
            raise ValueError(f"'{name}' is not a {PACKAGE_LOGGER} module logger")
        logging.getLogger(name).setLevel(max(level, resolve_level(module_level)))

    logger.info(f"Logging initialized at {logging.getLevelName(level)}.")
    return logger
