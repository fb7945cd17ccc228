"""
Core data models and enums for the ARP discovery engine.

This module defines the records exchanged between the transmitter, the
listener and the coordinator, and the report handed to output consumers.
"""

import ipaddress
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

TargetAddress = ipaddress.IPv4Address


class SessionState(Enum):
    """Lifecycle of one scan session."""
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETE = "complete"


class CompletionReason(Enum):
    """Why a session reached the COMPLETE state."""
    ALL_ANSWERED = "all_answered"
    GRACE_ELAPSED = "grace_elapsed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class ProbeRecord:
    """
    Book-keeping for one probed target.

    Attributes:
        target: Address being probed
        sent_at: Monotonic time of the last transmission
        retry_count: Number of re-sends after the first probe
    """
    target: TargetAddress
    sent_at: float = 0.0
    retry_count: int = 0


@dataclass(frozen=True)
class ReplyRecord:
    """
    One captured ARP reply.

    Attributes:
        ip_address: Sender protocol address of the reply
        mac_address: Sender hardware address, lower-case colon form
        received_at: Wall-clock capture time (epoch seconds)
    """
    ip_address: str
    mac_address: str
    received_at: float


@dataclass(frozen=True)
class HostDetails:
    """A live host with the optional attributes added after the scan."""
    ip_address: str
    mac_address: str
    hostname: Optional[str] = None
    vendor: Optional[str] = None


@dataclass(frozen=True)
class ScanReport:
    """
    Final outcome of a completed session.

    Attributes:
        replies: Recorded replies in order of first arrival
        elapsed: Session wall-clock duration in seconds
        completion_reason: Why the session stopped
        target_count: Number of enumerated targets
        probes_sent: Total ARP requests written to the interface
        packet_count: Frames read by the listener
        arp_count: ARP frames among them
        duplicate_replies: Replies ignored because the address was known
        started_at: Session start time
    """
    replies: Tuple[ReplyRecord, ...]
    elapsed: float
    completion_reason: CompletionReason
    target_count: int
    probes_sent: int = 0
    packet_count: int = 0
    arp_count: int = 0
    duplicate_replies: int = 0
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def interrupted(self) -> bool:
        return self.completion_reason == CompletionReason.CANCELLED

    @property
    def duration_ms(self) -> int:
        return int(self.elapsed * 1000)
