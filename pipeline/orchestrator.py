"""
Single-node orchestrator: resolves the scan plan from user input and
settings, runs the engine and keeps a running summary of the stream.
"""

import functools
import logging
import threading
import time
from contextlib import closing
from typing import Iterator, List, Optional, Tuple

from core.config import Settings, settings as default_settings
from core.models import ScanResult, ScanSummary
from core.ports import parse_ports
from core.targets import count_targets, expand_targets
from pipeline.engine import ScanEngine
from probers.l4_tcp import tcp_probe

log = logging.getLogger(__name__)


class ScanTooLarge(ValueError):
    pass


class Orchestrator:
    def __init__(self, settings: Optional[Settings] = None, probe=None) -> None:
        self.settings = settings or default_settings
        self.probe = probe or functools.partial(tcp_probe, banner_size=self.settings.banner_size)
        self.summary: Optional[ScanSummary] = None

    def plan(
        self, target: str, ports_spec: Optional[str] = None, max_probes: Optional[int] = None
    ) -> Tuple[List[str], List[int]]:
        """
        Raises InvalidTarget / InvalidPortSpec before anything is probed, and
        ScanTooLarge when hosts x ports exceeds `max_probes`. The limit is
        checked before the address list is built.
        """
        hosts = count_targets(target)
        ports = parse_ports(ports_spec if ports_spec is not None else self.settings.ports)
        if max_probes is not None and hosts * len(ports) > max_probes:
            raise ScanTooLarge(f"scan of {hosts} hosts x {len(ports)} ports exceeds limit of {max_probes} probes")
        return expand_targets(target), ports

    def scan(
        self,
        target: str,
        ports_spec: Optional[str] = None,
        concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
        stop_event: Optional[threading.Event] = None,
        max_probes: Optional[int] = None,
    ) -> Iterator[ScanResult]:
        ports_spec = ports_spec if ports_spec is not None else self.settings.ports
        addresses, ports = self.plan(target, ports_spec, max_probes=max_probes)

        engine = ScanEngine(
            addresses,
            concurrency=self.settings.concurrency if concurrency is None else concurrency,
            timeout=self.settings.connect_timeout_s if timeout is None else timeout,
            probe=self.probe,
            queue_size=self.settings.work_queue_size,
            banner_timeout=self.settings.banner_timeout_s,
        )
        self.summary = ScanSummary(
            target=target,
            ports_spec=ports_spec,
            hosts=len(addresses),
            ports=len(ports),
            total=len(addresses) * len(ports),
        )
        return self._stream(engine, ports, self.summary, stop_event)

    def _stream(
        self,
        engine: ScanEngine,
        ports: List[int],
        summary: ScanSummary,
        stop_event: Optional[threading.Event],
    ) -> Iterator[ScanResult]:
        log.info(
            "scan started | target=%s hosts=%d ports=%d concurrency=%d timeout=%.3fs",
            summary.target, summary.hosts, summary.ports, engine.concurrency, engine.timeout,
        )
        start = time.monotonic()
        try:
            with closing(engine.run(ports, stop_event=stop_event)) as results:
                for result in results:
                    summary.record(result)
                    yield result
        finally:
            summary.duration_s = round(time.monotonic() - start, 3)
            summary.interrupted = summary.scanned < summary.total
            log.info(
                "scan finished | target=%s scanned=%d/%d open=%d duration=%.3fs%s",
                summary.target, summary.scanned, summary.total, summary.open_ports,
                summary.duration_s, " (interrupted)" if summary.interrupted else "",
            )
