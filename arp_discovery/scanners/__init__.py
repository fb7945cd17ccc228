"""
Worker threads of a scan session.

This package contains the worker base class, the ARP frame helpers, the
probe transmitter and the reply listener.
"""

from .base_worker import BaseWorker
from .probe_transmitter import ProbeTransmitter
from .reply_listener import ReplyListener

__all__ = [
    'BaseWorker',
    'ProbeTransmitter',
    'ReplyListener'
]
