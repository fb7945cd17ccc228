"""
Reply listener for ARP scans.

Captures frames on the interface for the whole session, keeps the ARP
replies addressed to the scanning host and records them in the result set.
"""

import time
from typing import Callable, Optional

from .arp_frames import extract_reply, parse_arp
from .base_worker import BaseWorker
from ..core.data_models import ReplyRecord
from ..core.interface import Frame, InterfaceHandle
from ..core.result_set import ResultSet
from ..utils.error_handler import (
    ErrorContext, ErrorHandler, ErrorSeverity, ErrorType, InterfaceReadError
)
from ..utils.logger import Logger


class ReplyListener(BaseWorker):
    """
    Capture loop of a scan session.

    Reads are bounded by ``poll_interval`` so a stop request is honoured
    within one quantum. Frames that are not ARP replies to the scanning host,
    or that come from an address outside the target set, are dropped.
    """

    worker_name = "listener"

    def __init__(
        self,
        interface: InterfaceHandle,
        results: ResultSet,
        local_ip: str,
        is_target: Optional[Callable[[str], bool]] = None,
        poll_interval: float = 0.05,
        logger: Optional[Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
        on_reply: Optional[Callable[[ReplyRecord], None]] = None,
    ):
        """
        Initialize the listener.

        Args:
            interface: Open interface to read frames from
            results: Result set receiving new replies
            local_ip: IPv4 of the scanning host; replies must target it
            is_target: Membership test for sender addresses
            poll_interval: Upper bound of a single read wait, in seconds
            logger: Logger instance
            error_handler: ErrorHandler used for read failures
            on_reply: Called from the listener thread for every new address
        """
        super().__init__(logger)
        self._interface = interface
        self._results = results
        self.local_ip = local_ip
        self._is_target = is_target
        self.poll_interval = poll_interval
        self.error_handler = error_handler or ErrorHandler(logger)
        self.on_reply = on_reply

        self.packet_count = 0
        self.arp_count = 0
        self.read_errors = 0

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                frame = self._interface.receive(self.poll_interval)
            except InterfaceReadError as e:
                self.read_errors += 1
                context = ErrorContext(
                    error_type=ErrorType.INTERFACE_READ_ERROR,
                    severity=ErrorSeverity.MEDIUM,
                    operation="receive",
                    component="ReplyListener",
                    additional_info={"interface": getattr(self._interface, "name", None)},
                )
                if not self.error_handler.handle_error(e, context):
                    raise
                self._stop_event.wait(self.poll_interval)
                continue

            if frame is not None:
                self.handle_frame(frame)

    def handle_frame(self, frame: Frame) -> bool:
        """
        Process one captured frame.

        Returns:
            True if the frame added a new host to the result set
        """
        self.packet_count += 1

        arp = parse_arp(frame)
        if arp is None:
            return False
        self.arp_count += 1

        reply = extract_reply(arp, self.local_ip)
        if reply is None:
            return False

        ip_address, mac_address = reply
        if self._is_target is not None and not self._is_target(ip_address):
            self._log_debug(f"Ignoring ARP reply from non-target {ip_address}")
            return False

        record = ReplyRecord(ip_address=ip_address, mac_address=mac_address, received_at=time.time())
        if not self._results.record(record):
            return False

        self._log_debug(f"ARP response: {ip_address} -> {mac_address}")
        if self.on_reply:
            self.on_reply(record)
        return True
