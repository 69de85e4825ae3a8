"""
Custom logging module with semantic levels
"""
from stackteam.logging.custom_logger import CustomLogger, get_logger
from stackteam.logging.log_levels import LogLevel

__all__ = [
    'CustomLogger',
    'LogLevel',
    'get_logger',
]
