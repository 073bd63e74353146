"""
TCP connect probe using plain connect() without crafting raw packets.
One attempt, no retries; a failed connect is a closed port, not an error.
"""

import socket

from core.models import ScanResult, ScanStatus, utcnow

BANNER_TIMEOUT_S = 2.0
BANNER_SIZE = 256


def _read_banner(sock: socket.socket, timeout: float, size: int) -> str:
    sock.settimeout(timeout)
    try:
        data = sock.recv(size)
    except OSError:
        return ""
    return data.decode(errors="replace")


def tcp_probe(
    address: str,
    port: int,
    timeout: float,
    banner_timeout: float = BANNER_TIMEOUT_S,
    banner_size: int = BANNER_SIZE,
) -> ScanResult:
    try:
        sock = socket.create_connection((address, port), timeout=timeout)
    except (OSError, OverflowError, ValueError):
        # any connect failure, including a port outside 0-65535
        return ScanResult(address=address, port=port, status=ScanStatus.CLOSED)

    connected_at = utcnow()
    with sock:
        banner = _read_banner(sock, banner_timeout, banner_size)
    return ScanResult(address=address, port=port, status=ScanStatus.OPEN, banner=banner, timestamp=connected_at)
