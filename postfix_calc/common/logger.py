"""Shared logger for the postfix calculator."""
import logging
import sys

LOGGER_NAME = "postfix_calc"

logger: logging.Logger = logging.getLogger(LOGGER_NAME)

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(_handler)
    logger.setLevel(logging.WARNING)
    # Records are printed by the handler above, not again by the root logger
    logger.propagate = False


def configure_logging(level: str) -> None:
    """
    Set the level of the package logger.

    :param str level: Logging level name (e.g. "DEBUG", "INFO")

    :raises ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logger.setLevel(numeric_level)
