"""
Project logger with domain-friendly levels: warning, info, request, error,
slow, great. Keyword context is appended to the message as ``key=value``
pairs so it survives plain-text log shipping.
"""
import logging
from typing import Any, Dict

from teamtasks.logging.formatters import LevelAwareFormatter
from teamtasks.logging.log_levels import LogLevel
from teamtasks.core.config import settings


LOG_LEVEL_MAP = {
    LogLevel.WARNING: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.REQUEST: logging.INFO,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SLOW: logging.WARNING,
    LogLevel.GREAT: logging.INFO,
}


class CustomLogger:
    """
    Logger wrapper used by endpoints and services.

    Usage:
        logger = CustomLogger("teams")
        logger.info("Team created", team_id=12, user_id=3)
        logger.error("Team deletion failed", exc_info=True, team_id=12)
        logger.slow("Slow request", duration=2.4, path="/api/tasks/")
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

        # Own handler, no propagation: avoids duplicated lines on the root handler
        self.logger.handlers.clear()
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(LevelAwareFormatter())
        self.logger.addHandler(console_handler)
        self.logger.propagate = False

    def _log(
        self,
        level: LogLevel,
        message: str,
        exc_info: bool = False,
        **context: Any
    ) -> None:
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} | {pairs}"

        self.logger.log(
            LOG_LEVEL_MAP[level],
            message,
            extra={"log_level": level, "custom_data": context},
            exc_info=exc_info
        )

    def warning(self, message: str, **context: Any) -> None:
        """
        Something deserves attention but is not an error.

        Example:
            logger.warning("Login failed", email="a@b.c")
        """
        self._log(LogLevel.WARNING, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def request(
        self,
        message: str,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        **context: Any
    ) -> None:
        """
        HTTP request line.

        Example:
            logger.request("API request", method="POST", path="/api/tasks/",
                           status_code=201, duration=0.052)
        """
        self._log(
            LogLevel.REQUEST,
            message,
            method=method,
            path=path,
            status_code=status_code,
            duration=duration,
            **context
        )

    def error(
        self,
        message: str,
        exc_info: bool = True,
        **context: Any
    ) -> None:
        self._log(LogLevel.ERROR, message, exc_info=exc_info, **context)

    def slow(
        self,
        message: str,
        duration: float,
        threshold: float = 1.0,
        **context: Any
    ) -> None:
        """
        Operation slower than the configured threshold.

        Example:
            logger.slow("Slow request", duration=2.4, threshold=1.0, path="/api/tasks/stats")
        """
        self._log(
            LogLevel.SLOW,
            message,
            duration=duration,
            threshold=threshold,
            **context
        )

    def great(self, message: str, **context: Any) -> None:
        self._log(LogLevel.GREAT, message, **context)


_loggers: Dict[str, CustomLogger] = {}


def get_logger(name: str) -> CustomLogger:
    """
    Get (or create) the project logger for a name.

    Usage:
        from teamtasks.logging import get_logger
        logger = get_logger(__name__)
    """
    if name not in _loggers:
        _loggers[name] = CustomLogger(name)
    return _loggers[name]
