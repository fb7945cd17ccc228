"""
Session Coordinator for the ARP discovery engine.

This module provides the SessionCoordinator class that runs one scan session:
it opens the interface, starts the reply listener and the probe transmitter,
watches both until a completion condition is met and hands back a frozen
ScanReport.
"""

import threading
import time
from datetime import datetime
from typing import Callable, Optional

from .cancellation import CancellationToken
from .data_models import CompletionReason, ScanReport, SessionState
from .interface import InterfaceHandle, open_interface
from .result_set import ResultSet
from .target_enumerator import TargetEnumerator
from ..config.config_loader import SessionConfig
from ..scanners.probe_transmitter import ProbeTransmitter
from ..scanners.reply_listener import ReplyListener
from ..utils.error_handler import ConfigError, ErrorHandler, SessionStateError
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import BROADCAST_MAC


class SessionCoordinator:
    """
    Drives a scan session through IDLE → RUNNING → DRAINING → COMPLETE.

    The session ends when every target has answered, when the grace period
    passes without a new reply after the last probe, at the global deadline,
    on cancellation, or on a fatal worker error. In every case both workers
    are stopped and joined, the interface is closed and the result set is
    frozen before ``run()`` returns or raises.

    A coordinator runs exactly one session.
    """

    def __init__(
        self,
        config: SessionConfig,
        interface_opener: Callable[[str], InterfaceHandle] = open_interface,
        cancel_token: Optional[CancellationToken] = None,
        logger: Optional[Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            config: Settings of the session
            interface_opener: Opens an interface by name
            cancel_token: Token that interrupts the session when cancelled
            logger: Logger instance
            error_handler: ErrorHandler passed to the listener
        """
        self.config = config
        self.interface_opener = interface_opener
        self.cancel_token = cancel_token or CancellationToken()
        self.logger = logger or get_logger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)

        self._state = SessionState.IDLE
        self._state_lock = threading.Lock()
        self._started = False
        self._results = ResultSet()
        self._wake = threading.Event()
        self.completion_reason: Optional[CompletionReason] = None

        self._transmitter: Optional[ProbeTransmitter] = None
        self._listener: Optional[ReplyListener] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def results(self) -> ResultSet:
        return self._results

    def run(self) -> ScanReport:
        """
        Execute the session.

        Returns:
            ScanReport with the replies in order of first arrival

        Raises:
            ConfigError: Invalid settings, unknown interface or no usable
                source address; raised before any probe is sent
            InterfaceWriteError: The interface rejected a probe
            SessionStateError: The coordinator has already run
        """
        with self._state_lock:
            if self._started:
                raise SessionStateError(f"Session already {self._state.value}")
            self._started = True

        started_at = datetime.now()
        start = time.monotonic()

        try:
            self.config.validate()
            targets = TargetEnumerator(
                self.config.network,
                exclude=self.config.exclude,
                randomize=self.config.randomize_targets,
                seed=self.config.random_seed,
            )
            handle = self.interface_opener(self.config.interface or "")
        except BaseException:
            self._finish(CompletionReason.FAILED)
            raise

        try:
            source_ip, source_mac = self._resolve_source(handle)
        except BaseException:
            handle.close()
            self._finish(CompletionReason.FAILED)
            raise

        self.logger.scan_settings(
            interface=handle.name,
            networks=[str(network) for network in targets.networks],
            source_ip=self.config.source_ipv4,
            destination_mac=self.config.destination_mac
            if self.config.destination_mac != BROADCAST_MAC else None,
        )
        self.logger.info(f"Probing {len(targets)} targets from {source_ip} ({source_mac})")

        self._listener = ReplyListener(
            handle,
            self._results,
            local_ip=source_ip,
            is_target=targets.__contains__,
            poll_interval=self.config.poll_interval,
            logger=self.logger,
            error_handler=self.error_handler,
            on_reply=lambda _reply: self._wake.set(),
        )
        self._transmitter = ProbeTransmitter(
            handle,
            self._results,
            source_ip=source_ip,
            source_mac=source_mac,
            destination_mac=self.config.destination_mac,
            per_target_timeout=self.config.per_target_timeout,
            max_retries=self.config.retry_count,
            pacing_interval=self.config.pacing_interval,
            logger=self.logger,
            on_finished=self._wake.set,
        )

        self._state = SessionState.RUNNING
        self.cancel_token.add_callback(self._on_cancel)
        error: Optional[BaseException] = None
        reason = CompletionReason.FAILED
        try:
            self._listener.start()
            self._transmitter.start(targets)
            reason, error = self._supervise(start, len(targets))
        finally:
            self._shutdown(handle)
            self._finish(reason)

        elapsed = time.monotonic() - start
        if error is not None:
            self.logger.error(f"Scan aborted after {elapsed:.2f}s: {error}")
            raise error

        replies = self._results.snapshot()
        if reason == CompletionReason.CANCELLED:
            self.logger.warning(f"Scan interrupted, {len(replies)} hosts found before cancellation")
        self.logger.success(
            f"Scan complete: {len(replies)} of {len(targets)} targets responded "
            f"in {elapsed:.2f}s ({reason.value})"
        )

        return ScanReport(
            replies=replies,
            elapsed=elapsed,
            completion_reason=reason,
            target_count=len(targets),
            probes_sent=self._transmitter.probes_sent,
            packet_count=self._listener.packet_count,
            arp_count=self._listener.arp_count,
            duplicate_replies=self._results.duplicate_count,
            started_at=started_at,
        )

    def _resolve_source(self, handle: InterfaceHandle):
        source_ip = self.config.source_ipv4 or handle.ipv4_address
        if not source_ip:
            raise ConfigError(
                f"Interface {handle.name} has no IPv4 address; set a source address explicitly"
            )
        source_mac = self.config.source_mac or handle.mac_address
        if not source_mac:
            raise ConfigError(
                f"Interface {handle.name} has no hardware address; set a source MAC explicitly"
            )
        return source_ip, source_mac.lower()

    def _supervise(self, start: float, target_count: int):
        """Wait for a completion condition; return the reason and any fatal error."""
        deadline = start + self.config.global_timeout
        drain_started: Optional[float] = None

        while True:
            if self.cancel_token.cancelled:
                return CompletionReason.CANCELLED, None

            error = self._transmitter.error or self._listener.error
            if error is not None:
                return CompletionReason.FAILED, error

            if len(self._results) >= target_count:
                return CompletionReason.ALL_ANSWERED, None

            now = time.monotonic()
            if now >= deadline:
                self.logger.warning(f"Global timeout of {self.config.global_timeout}s reached")
                return CompletionReason.TIMEOUT, None

            wait = min(self.config.poll_interval, deadline - now)

            if self._transmitter.done:
                if drain_started is None:
                    drain_started = now
                    self._state = SessionState.DRAINING
                    self.logger.debug(
                        f"All probes sent, waiting {self.config.grace_period}s for late replies"
                    )
                quiet_since = max(drain_started, self._results.last_recorded_at or drain_started)
                grace_left = quiet_since + self.config.grace_period - now
                if grace_left <= 0:
                    return CompletionReason.GRACE_ELAPSED, None
                wait = min(wait, grace_left)

            self._wake.wait(wait)
            self._wake.clear()

    def _on_cancel(self) -> None:
        if self._transmitter is not None:
            self._transmitter.stop()
        self._wake.set()

    def _shutdown(self, handle: InterfaceHandle) -> None:
        self.cancel_token.remove_callback(self._on_cancel)
        join_timeout = max(1.0, self.config.poll_interval * 10)

        for worker in (self._transmitter, self._listener):
            if worker is not None:
                worker.stop()
        for worker in (self._transmitter, self._listener):
            if worker is not None and not worker.join(join_timeout):
                self.logger.warning(f"{worker.worker_name} did not stop within {join_timeout:.1f}s")

        handle.close()

    def _finish(self, reason: CompletionReason) -> None:
        self._results.freeze()
        self.completion_reason = reason
        self._state = SessionState.COMPLETE
