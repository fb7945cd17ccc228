"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, logger, set_log_level, set_log_stream, get_logger
from .error_handler import (
    ErrorHandler, ErrorContext, ErrorType, ErrorSeverity,
    ArpDiscoveryError, ConfigError, InvalidRangeError, InterfaceWriteError,
    InterfaceReadError, SessionStateError
)
from . import network_utils

__all__ = [
    'Logger',
    'LogLevel',
    'logger',
    'set_log_level',
    'set_log_stream',
    'get_logger',
    'ErrorHandler',
    'ErrorContext',
    'ErrorType',
    'ErrorSeverity',
    'ArpDiscoveryError',
    'ConfigError',
    'InvalidRangeError',
    'InterfaceWriteError',
    'InterfaceReadError',
    'SessionStateError',
    'network_utils'
]
