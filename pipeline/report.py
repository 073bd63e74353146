"""
Plain-text presentation of scan results: console lines and the optional
report file (header, one line per open port, summary trailer).
"""

from __future__ import annotations

import datetime as dt
from typing import IO, Optional

from core.models import ScanResult, ScanSummary

SEPARATOR = "-" * 50


def format_open(r: ScanResult) -> str:
    return f"[+] {r.address:<15} | Port: {r.port:<5} | Banner: {r.banner!r}"


def format_closed(r: ScanResult) -> str:
    return f"[-] {r.address:<15} | Port: {r.port:<5} | Status: {r.status.value}"


def format_progress(r: ScanResult) -> str:
    return f"[*] Scanning... IP: {r.address} | Port: {r.port}"


def format_duration(seconds: Optional[float]) -> str:
    seconds = seconds or 0.0
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.3f}s"


def format_summary(s: ScanSummary) -> str:
    msg = f"[✓] Scan complete in {format_duration(s.duration_s)}. {s.open_ports} open ports found."
    if s.interrupted:
        msg += f" Interrupted after {s.scanned}/{s.total} probes."
    return msg


class ReportWriter:
    """
    Report file writer. The file is created in the constructor so an
    unwritable path fails before any probing starts.
    """

    def __init__(self, path: str, verbose: bool = False):
        self.path = path
        self.verbose = verbose
        self._fh: IO[str] = open(path, "w", encoding="utf-8")

    def write_header(self, target: str, ports_spec: str, when: Optional[dt.datetime] = None) -> None:
        when = when or dt.datetime.now(dt.timezone.utc)
        self._fh.write(f"TCPSWEEP SCAN REPORT - {when.strftime('%a, %d %b %Y %H:%M:%S %Z')}\n")
        self._fh.write(f"Target: {target} | Ports: {ports_spec}\n")
        self._fh.write(SEPARATOR + "\n")

    def record(self, result: ScanResult) -> None:
        if result.is_open:
            self._fh.write(format_open(result) + "\n")
        elif self.verbose:
            self._fh.write(format_closed(result) + "\n")

    def write_summary(self, summary: ScanSummary) -> None:
        self._fh.write(SEPARATOR + "\n")
        self._fh.write(format_summary(summary) + "\n")

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> "ReportWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
