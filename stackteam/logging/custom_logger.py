"""
Custom logger with semantic levels: warning, info, request, error, slow, great
"""
import logging
from typing import Dict, Any

from stackteam.core.config import isDebugMode
from stackteam.logging.formatters import SemanticFormatter
from stackteam.logging.log_levels import LogLevel

# Keys that must never reach a log line
_REDACTED_KEYS = {"password", "token", "access_token", "authorization", "secret"}


class CustomLogger:
    """
    Logger with semantic levels and key=value context

    Usage:
        logger = CustomLogger("my_module")
        logger.info("Member removed", team_id=3, user_id=9)
        logger.error("Notification write failed", exc_info=True)
        logger.slow("Slow request", duration=5.2, path="/api/questions/")
    """

    _level_map = {
        LogLevel.WARNING: logging.WARNING,
        LogLevel.INFO: logging.INFO,
        LogLevel.REQUEST: logging.INFO,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.SLOW: logging.WARNING,
        LogLevel.GREAT: logging.INFO,
    }

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if isDebugMode() else logging.INFO)
        self.logger.propagate = False

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(SemanticFormatter())
        self.logger.addHandler(console_handler)

    @staticmethod
    def _render(message: str, context: Dict[str, Any]) -> str:
        if not context:
            return message
        parts = []
        for key, value in context.items():
            if key.lower() in _REDACTED_KEYS:
                value = "[FILTERED]"
            parts.append(f"{key}={value}")
        return f"{message} | {' '.join(parts)}"

    def _log(
        self,
        level: LogLevel,
        message: str,
        exc_info: bool = False,
        **context: Any
    ) -> None:
        self.logger.log(
            self._level_map[level],
            self._render(message, context),
            extra={"semantic_level": level, "custom_data": context},
            exc_info=exc_info
        )

    def warning(self, message: str, **context: Any) -> None:
        """Situations worth attention that are not errors"""
        self._log(LogLevel.WARNING, message, **context)

    def info(self, message: str, **context: Any) -> None:
        """Important system events"""
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
        HTTP request log

        Example:
            logger.request(
                "API request",
                method="POST",
                path="/api/auth/login",
                status_code=200,
                duration=0.152
            )
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
        """Failures that need attention"""
        self._log(LogLevel.ERROR, message, exc_info=exc_info, **context)

    def slow(
        self,
        message: str,
        duration: float,
        threshold: float = 1.0,
        **context: Any
    ) -> None:
        """Operation above its latency threshold"""
        self._log(
            LogLevel.SLOW,
            message,
            duration=duration,
            threshold=threshold,
            **context
        )

    def great(self, message: str, **context: Any) -> None:
        """Notable successful events"""
        self._log(LogLevel.GREAT, message, **context)


_loggers: Dict[str, CustomLogger] = {}


def get_logger(name: str) -> CustomLogger:
    """
    Get a cached CustomLogger instance

    Usage:
        from stackteam.logging import get_logger
        logger = get_logger(__name__)
    """
    if name not in _loggers:
        _loggers[name] = CustomLogger(name)
    return _loggers[name]
