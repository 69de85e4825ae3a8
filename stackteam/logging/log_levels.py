"""
Custom log level definitions
"""
from enum import Enum


class LogLevel(str, Enum):
    """Semantic log levels"""
    WARNING = "warning"
    INFO = "info"
    REQUEST = "request"
    ERROR = "error"
    SLOW = "slow"
    GREAT = "great"
