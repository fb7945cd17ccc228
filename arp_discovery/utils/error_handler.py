"""
Error taxonomy and centralized error handling for the ARP discovery engine.

Configuration problems are fatal and surface before any frame is sent.
Interface write failures abort the session. Interface read failures are
transient: they are logged and the listener keeps reading. A target that
never answers is not an error at all.
"""

from typing import Optional, Dict, Any
from enum import Enum
from dataclasses import dataclass

from .logger import Logger, get_logger


class ErrorType(Enum):
    """Enumeration for different types of errors."""
    CONFIGURATION_ERROR = "configuration_error"
    INTERFACE_WRITE_ERROR = "interface_write_error"
    INTERFACE_READ_ERROR = "interface_read_error"
    PERMISSION_ERROR = "permission_error"
    FILE_ERROR = "file_error"


class ErrorSeverity(Enum):
    """Enumeration for error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Context information for error handling.

    Attributes:
        error_type: Type of error that occurred
        severity: Severity level of the error
        operation: Operation that was being performed when error occurred
        component: Component/module where error occurred
        additional_info: Additional context information
    """
    error_type: ErrorType
    severity: ErrorSeverity
    operation: str
    component: str
    additional_info: Dict[str, Any] = None

    def __post_init__(self):
        if self.additional_info is None:
            self.additional_info = {}


class ArpDiscoveryError(Exception):
    """Base exception class for the ARP discovery engine."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class ConfigError(ArpDiscoveryError):
    """Invalid session configuration; raised before any traffic is sent."""
    pass


class InvalidRangeError(ConfigError):
    """Network range that cannot be parsed or holds no usable host."""
    pass


class InterfaceWriteError(ArpDiscoveryError):
    """The interface rejected a frame or cannot be opened for writing."""
    pass


class InterfaceReadError(ArpDiscoveryError):
    """A read on the interface failed."""
    pass


class SessionStateError(ArpDiscoveryError):
    """An operation was invoked in a session state that does not allow it."""
    pass


class ErrorHandler:
    """
    Centralized error handling.

    Logs errors at a level derived from their severity, keeps per-type
    statistics and tells the caller whether the failed operation may be
    retried. Fatal errors come with troubleshooting suggestions.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the ErrorHandler.

        Args:
            logger: Logger instance for error reporting
        """
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {
            error_type: 0 for error_type in ErrorType
        }

    def handle_error(self, error: Exception, context: ErrorContext) -> bool:
        """
        Handle an error based on its type and context.

        Args:
            error: The exception that occurred
            context: Error context information

        Returns:
            bool: True if the operation should be retried, False otherwise
        """
        self.error_statistics[context.error_type] += 1
        self._log_error(error, context)

        if context.error_type == ErrorType.INTERFACE_READ_ERROR:
            return True
        elif context.error_type == ErrorType.INTERFACE_WRITE_ERROR:
            self._suggest_interface_solutions(context)
            return False
        elif context.error_type == ErrorType.PERMISSION_ERROR:
            self._suggest_permission_solutions(context)
            return False
        elif context.error_type == ErrorType.CONFIGURATION_ERROR:
            self._suggest_configuration_fixes(context)
            return False
        elif context.error_type == ErrorType.FILE_ERROR:
            file_path = context.additional_info.get('file_path', 'unknown')
            self.logger.info(f"Check that {file_path} exists and is readable")
            return False
        else:
            self.logger.error(f"Unknown error type: {context.error_type}")
            return False

    def _log_error(self, error: Exception, context: ErrorContext) -> None:
        """Log error information with a level matching its severity."""
        error_msg = f"Error in {context.component}.{context.operation}: {str(error)}"

        if context.severity == ErrorSeverity.CRITICAL:
            self.logger.error(error_msg, exception=error)
        elif context.severity == ErrorSeverity.HIGH:
            self.logger.error(error_msg)
        elif context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(error_msg)
        else:
            self.logger.debug(error_msg)

    def _suggest_interface_solutions(self, context: ErrorContext) -> None:
        """Provide interface error solutions."""
        interface = context.additional_info.get('interface', 'the interface')
        self.logger.info("Interface error solutions:")
        self.logger.info(f"  • Check that {interface} is up: ip link show")
        self.logger.info("  • Run with sudo, or grant CAP_NET_RAW to the interpreter")
        self.logger.info("  • List usable interfaces with: python -m arp_discovery --list")

    def _suggest_permission_solutions(self, context: ErrorContext) -> None:
        """Provide permission error solutions."""
        self.logger.info("Permission error solutions:")
        self.logger.info("  • Run with sudo: sudo python -m arp_discovery")
        self.logger.info("  • Or grant raw socket access: sudo setcap cap_net_raw+eip $(readlink -f $(which python3))")

    def _suggest_configuration_fixes(self, context: ErrorContext) -> None:
        """Provide configuration error solutions."""
        self.logger.info("Configuration error solutions:")
        self.logger.info("  • Use CIDR notation for ranges, e.g. 192.168.1.0/24")
        self.logger.info("  • Use colon-separated MAC addresses, e.g. aa:bb:cc:dd:ee:ff")
        self.logger.info("  • Check YAML syntax and values in arp_config.yml")
