"""Shared fixtures: an in-memory Ethernet segment standing in for a real interface."""

import heapq
import itertools
import threading
import time
from collections import Counter
from typing import Dict, Optional

import pytest
from scapy.layers.l2 import ARP, Ether
from scapy.packet import Packet

from arp_discovery.core.interface import InterfaceHandle
from arp_discovery.utils.error_handler import InterfaceReadError, InterfaceWriteError
from arp_discovery.utils.logger import Logger, LogLevel

LOCAL_IP = "10.0.0.1"
LOCAL_MAC = "02:00:00:00:00:01"


def build_reply(sender_ip: str, sender_mac: str,
                target_ip: str = LOCAL_IP, target_mac: str = LOCAL_MAC) -> bytes:
    """Raw bytes of an ARP is-at reply."""
    return bytes(
        Ether(dst=target_mac, src=sender_mac)
        / ARP(op=2, hwsrc=sender_mac, psrc=sender_ip, hwdst=target_mac, pdst=target_ip)
    )


def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class FakeInterface(InterfaceHandle):
    """
    Simulated segment.

    ``hosts`` maps live addresses to their MAC. A host answers a probe once
    the number of probes it received reaches ``answer_on_attempt`` (1 by
    default), after its entry in ``reply_delay``.
    """

    def __init__(
        self,
        hosts: Optional[Dict[str, str]] = None,
        reply_delay: Optional[Dict[str, float]] = None,
        answer_on_attempt: Optional[Dict[str, int]] = None,
        fail_send: bool = False,
        read_errors: int = 0,
        name: str = "fake0",
        ipv4_address: Optional[str] = LOCAL_IP,
        mac_address: Optional[str] = LOCAL_MAC,
    ):
        self.name = name
        self.ipv4_address = ipv4_address
        self.mac_address = mac_address
        self.hosts = hosts or {}
        self.reply_delay = reply_delay or {}
        self.answer_on_attempt = answer_on_attempt or {}
        self.fail_send = fail_send
        self.read_errors = read_errors

        self.sent = []
        self.send_counts = Counter()
        self.closed = False

        self._cond = threading.Condition()
        self._queue = []
        self._seq = itertools.count()

    @property
    def total_sent(self) -> int:
        with self._cond:
            return len(self.sent)

    def send(self, frame) -> None:
        if self.closed:
            raise InterfaceWriteError(f"{self.name} is closed")
        if self.fail_send:
            raise InterfaceWriteError(f"Cannot write frame on {self.name}: network is down")

        packet = frame if isinstance(frame, Packet) else Ether(frame)
        arp = packet[ARP]
        target = str(arp.pdst)
        with self._cond:
            self.sent.append(target)
            self.send_counts[target] += 1
            attempts = self.send_counts[target]

        mac = self.hosts.get(target)
        if mac is not None and attempts >= self.answer_on_attempt.get(target, 1):
            self.inject(build_reply(target, mac, arp.psrc, arp.hwsrc),
                        delay=self.reply_delay.get(target, 0.0))

    def inject(self, frame: bytes, delay: float = 0.0) -> None:
        """Queue a frame for the listener."""
        with self._cond:
            heapq.heappush(self._queue, (time.monotonic() + delay, next(self._seq), frame))
            self._cond.notify_all()

    def receive(self, timeout: float) -> Optional[bytes]:
        if self.read_errors > 0:
            self.read_errors -= 1
            raise InterfaceReadError(f"Cannot read from {self.name}: resource temporarily unavailable")

        deadline = time.monotonic() + timeout
        with self._cond:
            while True:
                now = time.monotonic()
                if self._queue and self._queue[0][0] <= now:
                    return heapq.heappop(self._queue)[2]
                if now >= deadline:
                    return None
                wait = deadline - now
                if self._queue:
                    wait = min(wait, self._queue[0][0] - now)
                self._cond.wait(wait)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def quiet_logger():
    """Logger that only prints errors."""
    return Logger("test", min_level=LogLevel.ERROR)


@pytest.fixture
def segment():
    """Factory for FakeInterface instances."""
    def _make(**kwargs) -> FakeInterface:
        return FakeInterface(**kwargs)
    return _make
