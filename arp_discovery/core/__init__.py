"""
Core components of the ARP scanning engine.
"""

from .data_models import (
    TargetAddress,
    SessionState,
    CompletionReason,
    ProbeRecord,
    ReplyRecord,
    HostDetails,
    ScanReport
)
from .cancellation import CancellationToken
from .result_set import ResultSet
from .target_enumerator import TargetEnumerator

__all__ = [
    'TargetAddress',
    'SessionState',
    'CompletionReason',
    'ProbeRecord',
    'ReplyRecord',
    'HostDetails',
    'ScanReport',
    'CancellationToken',
    'ResultSet',
    'TargetEnumerator'
]
