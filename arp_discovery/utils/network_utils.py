"""
Network utility functions for address validation and normalization.
"""

import ipaddress
import re
from typing import Tuple

BROADCAST_MAC = "ff:ff:ff:ff:ff:ff"
ZERO_MAC = "00:00:00:00:00:00"

_MAC_PATTERN = re.compile(r'^([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})$')


def is_valid_ip(ip_address: str) -> bool:
    """
    Check if a string represents a valid IPv4 address.

    Args:
        ip_address: String to validate as IPv4 address

    Returns:
        bool: True if valid IPv4 address, False otherwise
    """
    try:
        ipaddress.IPv4Address(ip_address)
        return True
    except (ipaddress.AddressValueError, TypeError):
        return False


def is_valid_mac(mac: str) -> bool:
    """Check if string is a valid MAC address (colon or dash separated)."""
    if not mac or not isinstance(mac, str):
        return False
    return bool(_MAC_PATTERN.match(mac))


def normalize_mac(mac: str) -> str:
    """
    Convert a MAC address to lower-case, colon-separated form.

    Raises:
        ValueError: If the MAC address is malformed
    """
    if not is_valid_mac(mac):
        raise ValueError(f"Invalid MAC address: {mac}")
    return mac.replace('-', ':').lower()


def ip_sort_key(ip_address: str) -> Tuple[int, ...]:
    """Sort key ordering dotted IPv4 strings numerically."""
    try:
        return tuple(int(part) for part in ip_address.split('.'))
    except ValueError:
        return (999, 999, 999, 999)
