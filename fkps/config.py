"""
FKPS configuration
Environment driven defaults for parameter loading and logging.
"""

import logging
import os

# Defaults
DEFAULT_PARAMS_FILE = os.getenv('FKPS_PARAMS_FILE', '')
DEFAULT_TIME_PARAM = int(os.getenv('FKPS_TIME_PARAM', 40))
DEFAULT_CHALLENGE_BITS = int(os.getenv('FKPS_CHALLENGE_BITS', 277))
DEFAULT_LOG_LEVEL = os.getenv('FKPS_LOG_LEVEL', 'WARNING')

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


class Config:
    """Process-wide settings, read once from the environment."""

    def __init__(self):
        self.params_file = DEFAULT_PARAMS_FILE
        self.time_param = DEFAULT_TIME_PARAM
        self.challenge_bits = DEFAULT_CHALLENGE_BITS
        self.log_level = DEFAULT_LOG_LEVEL

    @property
    def has_params_file(self):
        return bool(self.params_file)


def configure_logging(level=None):
    """
    Configure the root logger for scripts and demos.

    Parameters
    ----------
    level : int or str, optional
        Logging level; falls back to ``config.log_level``.
    """
    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level_value = getattr(logging, level.upper(), logging.WARNING)
    else:
        level_value = level

    logging.basicConfig(
        level=level_value,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


# Global config instance
config = Config()
