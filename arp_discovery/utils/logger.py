"""
Logging system with colored output for ARP discovery operations.

This module provides a Logger class that supports colored console output
using colorama, different log levels with distinct colors, and table helpers
used to render scan results in plain mode.
"""

import sys
from datetime import datetime
from enum import Enum
from typing import Optional, List, TextIO
from colorama import Fore, Style, init

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class LogLevel(Enum):
    """Enumeration for different log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
}


class Logger:
    """
    Logger class with colored console output.

    Provides structured logging with different levels, colors, and formatting
    utilities for scan sessions.
    """

    # Color mapping for different log levels
    LEVEL_COLORS = {
        LogLevel.DEBUG: Fore.CYAN,
        LogLevel.INFO: Fore.GREEN,
        LogLevel.WARNING: Fore.YELLOW,
        LogLevel.ERROR: Fore.RED,
    }

    # Symbol mapping for different log levels
    LEVEL_SYMBOLS = {
        LogLevel.DEBUG: "🔍",
        LogLevel.INFO: "ℹ️",
        LogLevel.WARNING: "⚠️",
        LogLevel.ERROR: "❌",
    }

    def __init__(
        self,
        name: str = "ArpDiscovery",
        min_level: LogLevel = LogLevel.INFO,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize the Logger.

        Args:
            name: Name of the logger (default: "ArpDiscovery")
            min_level: Minimum log level to display (default: INFO)
            stream: Stream for non-error output (default: stdout)
        """
        self.name = name
        self.min_level = min_level
        self.stream = stream

    def _should_log(self, level: LogLevel) -> bool:
        """
        Check if a message should be logged based on minimum level.

        Args:
            level: Log level to check

        Returns:
            True if message should be logged, False otherwise
        """
        return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.min_level]

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def _format_timestamp(self) -> str:
        """Format current timestamp for log messages."""
        return datetime.now().strftime("%H:%M:%S")

    def _log(self, level: LogLevel, message: str, **kwargs) -> None:
        """
        Internal logging method that handles formatting and output.

        Args:
            level: Log level
            message: Message to log
            **kwargs: Additional context rendered as key=value pairs
        """
        if not self._should_log(level):
            return

        timestamp = self._format_timestamp()
        color = self.LEVEL_COLORS[level]
        symbol = self.LEVEL_SYMBOLS[level]

        formatted_message = (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{color}{symbol} {level.value:<7}{Style.RESET_ALL} "
            f"{message}"
        )

        if kwargs:
            details = " | ".join([f"{k}={v}" for k, v in kwargs.items()])
            formatted_message += f" {Style.DIM}({details}){Style.RESET_ALL}"

        print(
            formatted_message,
            file=self._out() if level != LogLevel.ERROR else sys.stderr,
        )

    def debug(self, message: str, **kwargs) -> None:
        """Log a debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(
        self, message: str, exception: Optional[Exception] = None, **kwargs
    ) -> None:
        """
        Log an error message.

        Args:
            message: Error message
            exception: Optional exception object for additional context
            **kwargs: Additional context information
        """
        if exception:
            kwargs["exception"] = f"{type(exception).__name__}: {str(exception)}"
        self._log(LogLevel.ERROR, message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """
        Log a success message (formatted as INFO with special styling).

        Args:
            message: Success message
            **kwargs: Additional context information
        """
        if not self._should_log(LogLevel.INFO):
            return

        timestamp = self._format_timestamp()
        formatted_message = (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{Fore.GREEN}✅ SUCCESS {Style.RESET_ALL} "
            f"{Style.BRIGHT}{message}{Style.RESET_ALL}"
        )

        if kwargs:
            details = " | ".join([f"{k}={v}" for k, v in kwargs.items()])
            formatted_message += f" {Style.DIM}({details}){Style.RESET_ALL}"

        print(formatted_message, file=self._out())

    def section(self, title: str) -> None:
        """
        Log a section header for organizing output.

        Args:
            title: Section title
        """
        if not self._should_log(LogLevel.INFO):
            return

        out = self._out()
        separator = "=" * 60
        print(f"\n{Fore.BLUE}{Style.BRIGHT}{separator}", file=out)
        print(f"  {title.upper()}", file=out)
        print(f"{separator}{Style.RESET_ALL}\n", file=out)

    def table_header(self, headers: List[str], widths: List[int]) -> None:
        """
        Print a formatted table header.

        Args:
            headers: List of header names
            widths: List of column widths
        """
        out = self._out()
        header_row = " | ".join(
            [f"{header:<{width}}" for header, width in zip(headers, widths)]
        )
        print(f"{Style.BRIGHT}{header_row}{Style.RESET_ALL}", file=out)

        separator = "-+-".join(["-" * width for width in widths])
        print(f"{Style.DIM}{separator}{Style.RESET_ALL}", file=out)

    def table_row(
        self, values: List[str], widths: List[int], highlight: bool = False
    ) -> None:
        """
        Print a formatted table row.

        Args:
            values: List of values to display
            widths: List of column widths
            highlight: Whether to highlight this row
        """
        row = " | ".join(
            [f"{str(value):<{width}}" for value, width in zip(values, widths)]
        )

        if highlight:
            print(f"{Style.BRIGHT}{row}{Style.RESET_ALL}", file=self._out())
        else:
            print(row, file=self._out())

    def scan_settings(
        self,
        interface: str,
        networks: List[str],
        source_ip: Optional[str] = None,
        destination_mac: Optional[str] = None,
    ) -> None:
        """
        Display the scan settings before probes are sent.

        Args:
            interface: Interface used for the scan
            networks: Network ranges being scanned
            source_ip: Forced ARP source IPv4, if any
            destination_mac: Forced Ethernet destination MAC, if any
        """
        if not self._should_log(LogLevel.INFO):
            return

        out = self._out()
        network_list = ", ".join(networks[:5])
        if len(networks) > 5:
            network_list += f" ({len(networks) - 5} more)"

        print(f"\n{Fore.CYAN}{Style.BRIGHT}🌐 SCAN SETTINGS{Style.RESET_ALL}", file=out)
        print(f"  Interface:     {Style.BRIGHT}{interface}{Style.RESET_ALL}", file=out)
        print(f"  Network Range: {Style.BRIGHT}{network_list}{Style.RESET_ALL}", file=out)
        if source_ip:
            print(f"  Source IPv4:   {Style.BRIGHT}{source_ip}{Style.RESET_ALL} (forced)", file=out)
        if destination_mac:
            print(f"  Dest. MAC:     {Style.BRIGHT}{destination_mac}{Style.RESET_ALL} (forced)", file=out)
        print(file=out)


_default_level = LogLevel.INFO
_default_stream: Optional[TextIO] = None

# Global logger instance
logger = Logger()


def set_log_level(level: LogLevel) -> None:
    """
    Set the log level for the global logger and every logger created later.

    Args:
        level: Minimum log level to display
    """
    global _default_level
    _default_level = level
    logger.min_level = level


def set_log_stream(stream: Optional[TextIO]) -> None:
    """
    Redirect non-error output of the global logger and later loggers.

    Args:
        stream: Target stream, or None for stdout
    """
    global _default_stream
    _default_stream = stream
    logger.stream = stream


def get_logger(name: str = "ArpDiscovery") -> Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance using the current default level and stream
    """
    return Logger(name, min_level=_default_level, stream=_default_stream)
