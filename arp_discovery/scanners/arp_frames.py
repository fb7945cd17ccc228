"""
ARP frame construction and decoding with scapy.
"""

from typing import Optional, Tuple, Union

from scapy.layers.l2 import ARP, Ether
from scapy.packet import Packet

from ..utils.network_utils import BROADCAST_MAC, ZERO_MAC

ARP_REQUEST = 1
ARP_REPLY = 2


def build_request(
    target_ip: str,
    source_ip: str,
    source_mac: str,
    destination_mac: str = BROADCAST_MAC,
) -> Packet:
    """
    Build an Ethernet/ARP who-has frame for ``target_ip``.

    Args:
        target_ip: Address being resolved
        source_ip: Sender protocol address (the scanning host)
        source_mac: Sender hardware address (the scanning host)
        destination_mac: Ethernet destination, broadcast unless forced
    """
    return Ether(dst=destination_mac, src=source_mac) / ARP(
        op=ARP_REQUEST,
        hwsrc=source_mac,
        psrc=source_ip,
        hwdst=ZERO_MAC,
        pdst=str(target_ip),
    )


def parse_arp(frame: Union[bytes, Packet, None]) -> Optional[ARP]:
    """
    Decode a raw frame and return its ARP layer.

    Returns:
        The ARP layer, or None for non-ARP or undecodable frames
    """
    if not frame:
        return None
    try:
        packet = frame if isinstance(frame, Packet) else Ether(frame)
        if ARP not in packet:
            return None
        return packet[ARP]
    except Exception:
        return None


def extract_reply(arp: ARP, local_ip: str) -> Optional[Tuple[str, str]]:
    """
    Return ``(sender IP, sender MAC)`` if the ARP packet answers us.

    Only is-at replies whose target protocol address is the scanning host
    are accepted.
    """
    if arp.op != ARP_REPLY:
        return None
    if arp.pdst != local_ip:
        return None
    if not arp.psrc or not arp.hwsrc:
        return None
    return str(arp.psrc), str(arp.hwsrc).lower()
