"""
Target expansion: single address or CIDR block into individual addresses.
"""

import ipaddress
from typing import List, Tuple, Union

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


class InvalidTarget(ValueError):
    pass


def _parse(spec: str) -> Network:
    spec = spec.strip()
    if "/" not in spec:
        try:
            return ipaddress.ip_network(ipaddress.ip_address(spec))
        except ValueError as exc:
            raise InvalidTarget(f"invalid target {spec!r}: not an address or CIDR block") from exc
    try:
        return ipaddress.ip_network(spec, strict=False)
    except ValueError as exc:
        raise InvalidTarget(f"invalid target {spec!r}: {exc}") from exc


def _bounds(net: Network) -> Tuple[int, int]:
    # network and broadcast are dropped only when there is something left
    if net.num_addresses > 2:
        return int(net.network_address) + 1, int(net.broadcast_address) - 1
    return int(net.network_address), int(net.broadcast_address)


def count_targets(spec: str) -> int:
    """Number of addresses expand_targets(spec) would return, without building them."""
    first, last = _bounds(_parse(spec))
    return last - first + 1


def expand_targets(spec: str) -> List[str]:
    """
    Returns the addresses named by `spec` in ascending order.

    A single address yields itself. A CIDR block yields every address in
    the mask; when that is more than two addresses the network and
    broadcast addresses are dropped, so /31 and /32 (/127, /128) come back
    whole.
    """
    net = _parse(spec)
    first, last = _bounds(net)
    cls = type(net.network_address)
    return [str(cls(i)) for i in range(first, last + 1)]
