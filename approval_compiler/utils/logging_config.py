"""
Logging configuration for the approval letter compiler.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "approval_compiler"

_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"
_FILE_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging(log_file: Optional[str] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure console (and optionally file) logging for the package.

    Args:
        log_file: Optional path of a file that receives DEBUG-level output
        verbose: Show DEBUG messages on the console

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_module_logger(name: str) -> logging.Logger:
    """Return a child of the package logger for a module ``__name__``."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def get_assembler_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.assembler")


def get_merge_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.merge")


def get_fallback_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.fallback")


def get_letter_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.letter")
