"""
Link-layer interface access for the scanning engine.

The engine only needs three operations on an interface: write a frame, read a
frame with a bounded wait, and close. ``InterfaceHandle`` is that contract;
``ScapyInterface`` implements it on top of scapy's layer-2 sockets.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from scapy.all import conf, get_if_addr, get_if_hwaddr, get_if_list
from scapy.packet import Packet

from ..utils.error_handler import ConfigError, InterfaceReadError, InterfaceWriteError

Frame = Union[bytes, Packet]


class InterfaceHandle(ABC):
    """
    Open network interface shared by the transmitter and the listener.

    Sending and receiving are independent operations and need no mutual
    exclusion between them.

    Attributes:
        name: Interface name
        ipv4_address: IPv4 address configured on the interface, if any
        mac_address: Hardware address of the interface, if any
    """

    name: str
    ipv4_address: Optional[str] = None
    mac_address: Optional[str] = None

    @abstractmethod
    def send(self, frame: Frame) -> None:
        """
        Write one frame.

        Raises:
            InterfaceWriteError: If the interface rejects the frame
        """

    @abstractmethod
    def receive(self, timeout: float) -> Optional[bytes]:
        """
        Read one frame, waiting at most ``timeout`` seconds.

        Returns:
            Raw frame bytes, or None if nothing arrived in time

        Raises:
            InterfaceReadError: If the read fails
        """

    @abstractmethod
    def close(self) -> None:
        """Release the interface."""


class ScapyInterface(InterfaceHandle):
    """InterfaceHandle backed by a scapy ``conf.L2socket``."""

    def __init__(self, name: str):
        """
        Open a raw layer-2 socket on the interface.

        Args:
            name: Interface name

        Raises:
            InterfaceWriteError: If the socket cannot be opened (privileges,
                interface down)
        """
        self.name = name
        try:
            self._socket = conf.L2socket(iface=name)
        except PermissionError as e:
            raise InterfaceWriteError(
                f"Permission denied opening {name}; raw sockets need root or CAP_NET_RAW"
            ) from e
        except OSError as e:
            raise InterfaceWriteError(f"Cannot open interface {name}: {e}") from e

        self.mac_address = _query_mac(name)
        self.ipv4_address = _query_ipv4(name)

    def send(self, frame: Frame) -> None:
        try:
            self._socket.send(frame)
        except OSError as e:
            raise InterfaceWriteError(f"Cannot write frame on {self.name}: {e}") from e

    def receive(self, timeout: float) -> Optional[bytes]:
        try:
            ready = self._socket.select([self._socket], timeout)
            if not ready:
                return None
            _, data, _ = self._socket.recv_raw()
        except OSError as e:
            raise InterfaceReadError(f"Cannot read from {self.name}: {e}") from e
        return data

    def close(self) -> None:
        self._socket.close()


def _query_mac(name: str) -> Optional[str]:
    try:
        mac = get_if_hwaddr(name)
    except (OSError, ValueError):
        return None
    if not mac or mac == "00:00:00:00:00:00":
        return None
    return mac.lower()


def _query_ipv4(name: str) -> Optional[str]:
    try:
        address = get_if_addr(name)
    except (OSError, ValueError):
        return None
    if not address or address == "0.0.0.0":
        return None
    return address


def open_interface(name: str) -> InterfaceHandle:
    """
    Open an interface by name.

    Raises:
        ConfigError: If no interface with that name exists
        InterfaceWriteError: If the interface exists but cannot be opened
    """
    if not name:
        raise ConfigError("No network interface selected")
    if name not in get_if_list():
        raise ConfigError(f"Network interface '{name}' not found")
    return ScapyInterface(name)
