"""
Network interface detection for ARP scans.

This module lists the host's network interfaces, picks a sensible default
interface when the operator did not name one, and derives the IPv4 network
to scan from the interface's own address and netmask.
"""

import ipaddress
import socket
from dataclasses import dataclass
from typing import List, Optional

import psutil

from ..utils.logger import Logger, get_logger

_LINK_FAMILIES = tuple(
    family for family in (getattr(socket, "AF_PACKET", None), getattr(psutil, "AF_LINK", None))
    if family is not None
)


@dataclass
class InterfaceInfo:
    """
    Information about one network interface.

    Attributes:
        name: Interface name
        is_up: Whether the interface is administratively up
        mac_address: Hardware address, if any
        ipv4_address: First IPv4 address, if any
        netmask: Netmask of that address
    """
    name: str
    is_up: bool = False
    mac_address: Optional[str] = None
    ipv4_address: Optional[str] = None
    netmask: Optional[str] = None

    @property
    def is_loopback(self) -> bool:
        if self.ipv4_address:
            return ipaddress.IPv4Address(self.ipv4_address).is_loopback
        return self.name == "lo"

    @property
    def network(self) -> Optional[ipaddress.IPv4Network]:
        if not self.ipv4_address or not self.netmask:
            return None
        return ipaddress.IPv4Network(f"{self.ipv4_address}/{self.netmask}", strict=False)

    @property
    def ready_for_scan(self) -> bool:
        return self.is_up and not self.is_loopback and bool(self.mac_address) and bool(self.ipv4_address)


class NetworkDetector:
    """Detects host interfaces and their IPv4 networks using psutil."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)

    def list_interfaces(self) -> List[InterfaceInfo]:
        """
        Return every interface known to the operating system.

        Returns:
            List of InterfaceInfo, in the order reported by psutil
        """
        stats = psutil.net_if_stats()
        interfaces = []

        for name, addresses in psutil.net_if_addrs().items():
            info = InterfaceInfo(name=name, is_up=bool(stats.get(name) and stats[name].isup))

            for address in addresses:
                if address.family == socket.AF_INET and info.ipv4_address is None:
                    info.ipv4_address = address.address
                    info.netmask = address.netmask
                elif address.family in _LINK_FAMILIES and address.address:
                    mac = address.address.replace('-', ':').lower()
                    if mac != "00:00:00:00:00:00":
                        info.mac_address = mac

            interfaces.append(info)

        self.logger.debug(f"Detected {len(interfaces)} network interfaces")
        return interfaces

    def select_default_interface(self) -> Optional[InterfaceInfo]:
        """
        Pick the first interface that can carry an ARP scan.

        The interface must be up, not loopback, and have both a MAC address
        and an IPv4 address.
        """
        for info in self.list_interfaces():
            if info.ready_for_scan:
                self.logger.debug(f"Default interface: {info.name}")
                return info
        return None

    def get_interface(self, name: str) -> Optional[InterfaceInfo]:
        """Return the interface called ``name``, or None."""
        for info in self.list_interfaces():
            if info.name == name:
                return info
        return None

    def get_interface_network(self, name: str) -> Optional[str]:
        """
        Return the IPv4 network of an interface in CIDR notation.

        Returns:
            e.g. "192.168.1.0/24", or None if the interface has no IPv4
        """
        info = self.get_interface(name)
        if info is None or info.network is None:
            return None
        return str(info.network)
