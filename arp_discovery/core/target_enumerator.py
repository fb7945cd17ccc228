"""
Target enumeration for ARP scans.

Expands one or more IPv4 ranges into the ordered, deduplicated sequence of
host addresses that the transmitter probes.
"""

import ipaddress
import random
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .data_models import TargetAddress
from ..utils.error_handler import InvalidRangeError


def _parse_network(spec: str) -> ipaddress.IPv4Network:
    """Parse one CIDR range or bare address, ignoring host bits."""
    spec = spec.strip()
    if not spec:
        raise InvalidRangeError("Empty network range")

    try:
        network = ipaddress.ip_network(spec, strict=False)
    except ValueError as e:
        raise InvalidRangeError(f"Invalid network range '{spec}': {e}") from e

    if network.version != 4:
        raise InvalidRangeError(f"IPv6 networks are not supported by the ARP protocol: {spec}")
    return network


def _usable_hosts(network: ipaddress.IPv4Network) -> Iterator[TargetAddress]:
    """
    Yield the usable host addresses of a network.

    /31 networks are point-to-point links with two usable addresses, /32 is a
    single host. Wider prefixes drop the network and broadcast addresses.
    """
    first, last = _host_range(network)
    for value in range(first, last + 1):
        yield ipaddress.IPv4Address(value)


def _host_range(network: ipaddress.IPv4Network) -> Tuple[int, int]:
    """Inclusive integer bounds of the usable hosts of a network."""
    first = int(network.network_address)
    last = int(network.broadcast_address)
    if network.prefixlen >= 31:
        return first, last
    return first + 1, last - 1


def _merge_ranges(ranges: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Merge overlapping or adjacent inclusive ranges."""
    merged: List[Tuple[int, int]] = []
    for first, last in sorted(ranges):
        if merged and first <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], last))
        else:
            merged.append((first, last))
    return merged


class TargetEnumerator:
    """
    Lazy, restartable sequence of scan targets.

    Every call to ``iter()`` starts over and yields the same order. Addresses
    are unique even when ranges overlap, and excluded addresses or ranges
    never appear.
    """

    def __init__(
        self,
        network: Union[str, Iterable[str]],
        exclude: Iterable[str] = (),
        randomize: bool = False,
        seed: Optional[int] = None,
    ):
        """
        Initialize the enumerator.

        Args:
            network: Comma-separated CIDR ranges or addresses, or a list of them
            exclude: Addresses or CIDR ranges left out of the scan
            randomize: Shuffle the target order
            seed: Seed for the shuffle; a random one is drawn when omitted

        Raises:
            InvalidRangeError: If a range is malformed, IPv6, or no target remains
        """
        if isinstance(network, str):
            specs = [part for part in network.split(',') if part.strip()]
        else:
            specs = list(network)
        if not specs:
            raise InvalidRangeError("No network range given")

        self.networks: List[ipaddress.IPv4Network] = [_parse_network(spec) for spec in specs]
        self.excluded: List[ipaddress.IPv4Network] = [_parse_network(spec) for spec in exclude]
        self.randomize = randomize
        self.seed = seed if seed is not None else random.randrange(2 ** 32)
        self._length: Optional[int] = None

        if len(self) == 0:
            raise InvalidRangeError(
                f"No usable host address in {', '.join(str(n) for n in self.networks)}"
            )

    def _is_excluded(self, address: TargetAddress) -> bool:
        return any(address in excluded for excluded in self.excluded)

    def _ordered(self) -> Iterator[TargetAddress]:
        seen = set() if len(self.networks) > 1 else None
        for network in self.networks:
            for address in _usable_hosts(network):
                if self._is_excluded(address):
                    continue
                if seen is not None:
                    if address in seen:
                        continue
                    seen.add(address)
                yield address

    def __iter__(self) -> Iterator[TargetAddress]:
        if not self.randomize:
            return self._ordered()
        targets = list(self._ordered())
        random.Random(self.seed).shuffle(targets)
        return iter(targets)

    def __len__(self) -> int:
        """Number of targets, counted on address ranges without expanding them."""
        if self._length is None:
            included = _merge_ranges(_host_range(network) for network in self.networks)
            excluded = _merge_ranges(
                (int(network.network_address), int(network.broadcast_address))
                for network in self.excluded
            )
            count = sum(last - first + 1 for first, last in included)
            for first, last in included:
                for ex_first, ex_last in excluded:
                    overlap = min(last, ex_last) - max(first, ex_first) + 1
                    if overlap > 0:
                        count -= overlap
            self._length = count
        return self._length

    def __contains__(self, address) -> bool:
        try:
            address = ipaddress.IPv4Address(address)
        except (ipaddress.AddressValueError, ValueError):
            return False

        if self._is_excluded(address):
            return False

        for network in self.networks:
            if address not in network:
                continue
            if network.prefixlen >= 31:
                return True
            if address not in (network.network_address, network.broadcast_address):
                return True
        return False

    def __repr__(self) -> str:
        ranges = ", ".join(str(n) for n in self.networks)
        return f"TargetEnumerator({ranges}, targets={len(self)})"
