r"""
Logging configuration for applications embedding rate_limits.

The library only attaches a NullHandler; call LoggerConfigurator().configure()
from an application to get coloured console output through colorlog.
"""

import logging
import sys

import colorlog

from .constants import DEBUG_ENV, _get_env_bool

LOG_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s"
)
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}


def build_formatter() -> colorlog.ColoredFormatter:
    """Create the coloured formatter shared by all handlers."""
    return colorlog.ColoredFormatter(
        LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors=LOG_COLORS,
        secondary_log_colors={
            "message": {
                "ERROR": "red",
                "CRITICAL": "magenta",
            }
        },
        reset=True,
    )


class LoggerConfigurator:
    """Handles logging configuration cleanly using colorlog.

    Supports environment variable configuration for log levels.
    """

    def __init__(self, logger_name: str = "rate_limits", stream=None):
        """Initialize the configurator.

        Args:
            logger_name: Logger that receives the coloured handler.
            stream: Output stream, stderr by default.
        """
        self.logger_name = logger_name
        self.stream = stream

    @staticmethod
    def log_level() -> int:
        """DEBUG when the DEBUG env var is 'true', '1' or 'yes', otherwise INFO."""
        return logging.DEBUG if _get_env_bool(DEBUG_ENV) else logging.INFO

    def configure(self) -> logging.Logger:
        """Attach a coloured stream handler and set the level from the environment.

        Calling it again replaces the handler instead of stacking a second one.
        """
        target = logging.getLogger(self.logger_name)
        for h in list(target.handlers):
            if getattr(h, "_rate_limits_handler", False):
                target.removeHandler(h)

        handler = logging.StreamHandler(self.stream or sys.stderr)
        handler.setFormatter(build_formatter())
        handler._rate_limits_handler = True  # type: ignore[attr-defined]
        target.addHandler(handler)
        target.setLevel(self.log_level())
        return target
