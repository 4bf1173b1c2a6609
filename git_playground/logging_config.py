"""
Logging setup.

The package logs through loguru and stays silent until an application
opts in with `configure_logging`.
"""

import sys

from loguru import logger

from git_playground.config import EngineConfig

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> - "
    "<cyan>{name}</cyan> - "
    "<level>{level}</level> - "
    "<level>{message}</level>"
)


def configure_logging(
    config: EngineConfig | None = None,
    level: str | None = None,
    colorize: bool = True,
) -> int:
    """
    Enable the package's log messages on stderr.

    The level comes from `level` when given, else from `config.log_level`
    (`EngineConfig.from_env()` when no config is passed). Removes loguru's
    default handler and installs one with the project's format. Returns
    the handler id so callers can `logger.remove()` it.
    """
    config = config or EngineConfig.from_env()
    level = (level or config.log_level).upper()

    logger.enable("git_playground")
    logger.remove()
    return logger.add(sys.stderr, format=LOG_FORMAT, level=level, colorize=colorize)
