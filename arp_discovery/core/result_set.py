"""
Thread-safe accumulator of ARP replies.
"""

import threading
import time
from typing import Dict, Optional, Tuple

from .data_models import ReplyRecord
from ..utils.error_handler import SessionStateError


class ResultSet:
    """
    Mapping of responding addresses to their first reply.

    The listener is the only writer. The transmitter reads it to skip
    retries for answered targets, and the output stage takes a snapshot once
    the session is complete. The first reply for an address wins: later
    replies are counted and dropped.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, ReplyRecord] = {}
        self._frozen = False
        self._last_recorded_at: Optional[float] = None
        self.duplicate_count = 0

    def record(self, reply: ReplyRecord) -> bool:
        """
        Add a reply.

        Returns:
            True if the address was not known yet, False otherwise
        """
        with self._lock:
            if self._frozen:
                return False
            if reply.ip_address in self._records:
                self.duplicate_count += 1
                return False
            self._records[reply.ip_address] = reply
            self._last_recorded_at = time.monotonic()
            return True

    def contains(self, ip_address) -> bool:
        with self._lock:
            return str(ip_address) in self._records

    __contains__ = contains

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def last_recorded_at(self) -> Optional[float]:
        """Monotonic time of the latest new address, None before any."""
        with self._lock:
            return self._last_recorded_at

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject further writes; snapshots become available."""
        with self._lock:
            self._frozen = True

    def snapshot(self) -> Tuple[ReplyRecord, ...]:
        """
        Return the replies in order of first arrival.

        Raises:
            SessionStateError: If the result set has not been frozen yet
        """
        with self._lock:
            if not self._frozen:
                raise SessionStateError("Result snapshot requested before the session completed")
            return tuple(self._records.values())
