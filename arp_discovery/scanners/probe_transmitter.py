"""
Probe transmitter for ARP scans.

Sends one ARP who-has request per target at a fixed pacing interval and
re-sends unanswered requests until the retry budget of each target is spent.
"""

import threading
import time
from collections import OrderedDict
from typing import Callable, Iterable, Optional

from .arp_frames import build_request
from .base_worker import BaseWorker
from ..core.data_models import ProbeRecord, TargetAddress
from ..core.interface import InterfaceHandle
from ..core.result_set import ResultSet
from ..utils.logger import Logger
from ..utils.network_utils import BROADCAST_MAC


class ProbeTransmitter(BaseWorker):
    """
    Send loop of a scan session.

    A target that never answers is probed exactly ``max_retries + 1`` times,
    ``per_target_timeout`` apart, and then dropped. Interface write errors
    end the thread; they are not retried.
    """

    worker_name = "transmitter"

    def __init__(
        self,
        interface: InterfaceHandle,
        results: ResultSet,
        source_ip: str,
        source_mac: str,
        destination_mac: str = BROADCAST_MAC,
        per_target_timeout: float = 0.5,
        max_retries: int = 1,
        pacing_interval: float = 0.01,
        logger: Optional[Logger] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the transmitter.

        Args:
            interface: Open interface to write frames to
            results: Result set consulted before each retry
            source_ip: Sender IPv4 written into every request
            source_mac: Sender MAC written into every request
            destination_mac: Ethernet destination of every request
            per_target_timeout: Seconds to wait for a reply before re-sending
            max_retries: Re-sends allowed per target after the first probe
            pacing_interval: Seconds to wait after every transmission
            logger: Logger instance
            on_finished: Called when the send loop ends
        """
        super().__init__(logger, on_finished)
        self._interface = interface
        self._results = results
        self.source_ip = source_ip
        self.source_mac = source_mac
        self.destination_mac = destination_mac
        self.per_target_timeout = per_target_timeout
        self.max_retries = max_retries
        self.pacing_interval = pacing_interval

        self._send_lock = threading.Lock()
        self._outstanding: "OrderedDict[str, ProbeRecord]" = OrderedDict()
        self.probes_sent = 0
        self.targets_sent = 0
        self.abandoned = 0

    def send_probe(self, target: TargetAddress) -> bool:
        """
        Write one ARP request for ``target``.

        Returns:
            False if the transmitter was stopped and nothing was sent

        Raises:
            InterfaceWriteError: If the interface rejects the frame
        """
        frame = build_request(str(target), self.source_ip, self.source_mac, self.destination_mac)
        with self._send_lock:
            if self._stop_event.is_set():
                return False
            self._interface.send(frame)
            self.probes_sent += 1
        return True

    def stop(self) -> None:
        """Stop sending; no frame is written once this returns."""
        with self._send_lock:
            self._stop_event.set()

    @property
    def outstanding(self) -> int:
        return len(self._outstanding)

    def _run(self, targets: Iterable[TargetAddress]) -> None:
        pending = iter(targets)
        exhausted = False

        while not self._stop_event.is_set():
            self._process_due_retries()

            if not exhausted:
                target = next(pending, None)
                if target is None:
                    exhausted = True
                    self._log_debug(
                        f"All {self.targets_sent} targets probed, {len(self._outstanding)} awaiting replies"
                    )
                    continue
                if not self._transmit(ProbeRecord(target=target)):
                    break
                self.targets_sent += 1
                continue

            if not self._outstanding:
                break

            oldest = next(iter(self._outstanding.values()))
            remaining = oldest.sent_at + self.per_target_timeout - time.monotonic()
            if remaining > 0:
                self._stop_event.wait(remaining)

        self._log_debug(
            f"Transmitter finished: {self.probes_sent} probes sent, {self.abandoned} targets without reply"
        )

    def _transmit(self, record: ProbeRecord) -> bool:
        if not self.send_probe(record.target):
            return False
        record.sent_at = time.monotonic()
        self._outstanding[str(record.target)] = record
        if self.pacing_interval > 0:
            self._stop_event.wait(self.pacing_interval)
        return True

    def _process_due_retries(self) -> None:
        """Drop answered probes and re-send the ones whose timer expired."""
        while self._outstanding and not self._stop_event.is_set():
            key, record = next(iter(self._outstanding.items()))

            if self._results.contains(key):
                del self._outstanding[key]
                continue

            if time.monotonic() - record.sent_at < self.per_target_timeout:
                return

            del self._outstanding[key]
            if record.retry_count >= self.max_retries:
                self.abandoned += 1
                continue

            record.retry_count += 1
            self._log_debug(f"No reply from {key}, retry {record.retry_count}/{self.max_retries}")
            if not self._transmit(record):
                return
