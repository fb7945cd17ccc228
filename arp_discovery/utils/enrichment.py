"""
Host enrichment for discovered devices.

Adds a reverse-DNS hostname and the hardware vendor (from an IEEE OUI CSV
export) to the replies of a completed scan.
"""

import csv
import socket
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .logger import Logger, get_logger
from ..core.data_models import HostDetails, ReplyRecord


class HostnameResolver:
    """Reverse DNS lookups, run in parallel."""

    def __init__(self, max_workers: int = 16, logger: Optional[Logger] = None):
        self.max_workers = max_workers
        self.logger = logger or get_logger(__name__)

    def resolve(self, ip_address: str) -> Optional[str]:
        """
        Resolve one address to its hostname.

        Returns:
            Hostname, or None if the address has no PTR record
        """
        try:
            hostname, _, _ = socket.gethostbyaddr(ip_address)
        except (socket.herror, socket.gaierror, OSError) as e:
            self.logger.debug(f"No hostname for {ip_address}: {e}")
            return None
        return hostname

    def resolve_all(self, ip_addresses: Iterable[str]) -> Dict[str, Optional[str]]:
        """Resolve several addresses concurrently."""
        addresses = list(ip_addresses)
        if not addresses:
            return {}

        workers = min(self.max_workers, len(addresses))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="arp-dns") as executor:
            hostnames = list(executor.map(self.resolve, addresses))
        return dict(zip(addresses, hostnames))


class VendorLookup:
    """
    Maps MAC addresses to vendor names.

    The table is loaded from an IEEE MA-L CSV export whose columns are
    ``Registry,Assignment,Organization Name,Organization Address``; the
    assignment is the six hex digits of the OUI.
    """

    def __init__(self, oui_file: Optional[str] = None, logger: Optional[Logger] = None):
        """
        Initialize the lookup and load the OUI file if one is given.

        Args:
            oui_file: Path of the IEEE OUI CSV file
            logger: Logger instance
        """
        self.logger = logger or get_logger(__name__)
        self.oui_file = Path(oui_file) if oui_file else None
        self._vendors: Dict[str, str] = {}
        if self.oui_file is not None:
            self.load(self.oui_file)

    @property
    def enabled(self) -> bool:
        return bool(self._vendors)

    def __len__(self) -> int:
        return len(self._vendors)

    def load(self, oui_file: Path) -> int:
        """
        Load vendor names from a CSV file.

        Returns:
            Number of OUI entries loaded; 0 when the file is missing
        """
        oui_file = Path(oui_file)
        if not oui_file.exists():
            self.logger.warning(f"OUI file not found at {oui_file}, vendor lookup disabled")
            return 0

        loaded = 0
        try:
            with open(oui_file, 'r', encoding='utf-8', newline='') as f:
                reader = csv.reader(f)
                for row in reader:
                    if len(row) < 3:
                        continue
                    assignment = row[1].strip().upper()
                    if len(assignment) != 6:
                        continue
                    try:
                        int(assignment, 16)
                    except ValueError:
                        # header row
                        continue
                    self._vendors[assignment] = row[2].strip()
                    loaded += 1
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            self.logger.error(f"Cannot read OUI file {oui_file}: {e}")
            return loaded

        self.logger.debug(f"Loaded {loaded} OUI entries from {oui_file}")
        return loaded

    def lookup(self, mac_address: str) -> Optional[str]:
        """Return the vendor name of a MAC address, if known."""
        oui = mac_address.replace(':', '').replace('-', '').upper()[:6]
        return self._vendors.get(oui)


def enrich(
    replies: Iterable[ReplyRecord],
    resolver: Optional[HostnameResolver] = None,
    vendors: Optional[VendorLookup] = None,
) -> List[HostDetails]:
    """
    Build HostDetails for the replies of a scan.

    Args:
        replies: Recorded replies
        resolver: Hostname resolver; hostnames are omitted when None
        vendors: Vendor lookup; vendors are omitted when None

    Returns:
        Host details in the order of the replies
    """
    replies = list(replies)
    hostnames = resolver.resolve_all(r.ip_address for r in replies) if resolver is not None else {}

    return [
        HostDetails(
            ip_address=reply.ip_address,
            mac_address=reply.mac_address,
            hostname=hostnames.get(reply.ip_address),
            vendor=vendors.lookup(reply.mac_address) if vendors is not None else None,
        )
        for reply in replies
    ]
