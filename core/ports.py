"""
Port specification parsing.

Parsing is best effort: unparseable comma tokens are dropped and
unparseable range bounds count as 0. Only a range with the wrong number of
bounds is rejected.
"""

from typing import List


class InvalidPortSpec(ValueError):
    pass


def _to_int(token: str, default: int = 0) -> int:
    try:
        return int(token.strip())
    except ValueError:
        return default


def parse_ports(spec: str) -> List[int]:
    """
    "80,443" -> [80, 443]
    "1-5"    -> [1, 2, 3, 4, 5]
    """
    spec = spec.strip()
    if "-" in spec:
        parts = spec.split("-")
        if len(parts) != 2:
            raise InvalidPortSpec(f"invalid range format: {spec!r}")
        start, end = _to_int(parts[0]), _to_int(parts[1])
        return list(range(start, end + 1))

    ports: List[int] = []
    for token in spec.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            ports.append(int(token))
        except ValueError:
            continue
    return ports
