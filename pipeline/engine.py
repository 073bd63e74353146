"""
Scan engine: a fixed pool of worker threads fed by a bounded port queue.

Every worker holds the full address list, takes one port at a time and
probes that port on every address, handing each result to the consumer
through a single-slot queue. A slow consumer therefore throttles the
workers instead of letting results pile up in memory.

Completion is signalled by a supervisor thread that joins the workers and
then posts an end-of-stream marker; the result iterator stops exactly
there, after |ports| x |addresses| results.
"""

import logging
import queue
import threading
from typing import Callable, Iterable, Iterator, Optional, Sequence

from core.models import ScanResult, ScanStatus
from probers.l4_tcp import BANNER_TIMEOUT_S, tcp_probe

log = logging.getLogger(__name__)

Probe = Callable[..., ScanResult]

WORK_QUEUE_SIZE = 100
_POLL_S = 0.1

# queue markers
_CLOSED = object()
_DONE = object()


class _StopSignal:
    """Engine-owned stop flag that also reads as set once the caller's event is."""

    def __init__(self, external: Optional[threading.Event] = None):
        self._own = threading.Event()
        self._external = external

    def set(self) -> None:
        self._own.set()

    def is_set(self) -> bool:
        return self._own.is_set() or (self._external is not None and self._external.is_set())


def _put(q: queue.Queue, item, stop: _StopSignal) -> bool:
    """Blocking put that gives up once `stop` is set."""
    while not stop.is_set():
        try:
            q.put(item, timeout=_POLL_S)
            return True
        except queue.Full:
            continue
    return False


class ScanEngine:
    def __init__(
        self,
        addresses: Sequence[str],
        concurrency: int,
        timeout: float,
        probe: Probe = tcp_probe,
        queue_size: int = WORK_QUEUE_SIZE,
        banner_timeout: float = BANNER_TIMEOUT_S,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.addresses = tuple(addresses)
        self.concurrency = concurrency
        self.timeout = timeout
        self.probe = probe
        self.queue_size = queue_size
        self.banner_timeout = banner_timeout

    def _probe_one(self, address: str, port: int) -> ScanResult:
        try:
            return self.probe(address, port, self.timeout, banner_timeout=self.banner_timeout)
        except Exception:  # noqa: BLE001
            log.exception("probe failed unexpectedly | %s:%s", address, port)
            return ScanResult(address=address, port=port, status=ScanStatus.CLOSED)

    def _worker(self, work: queue.Queue, results: queue.Queue, stop: _StopSignal) -> None:
        name = threading.current_thread().name
        log.debug("%s started", name)
        while not stop.is_set():
            try:
                port = work.get(timeout=_POLL_S)
            except queue.Empty:
                continue
            if port is _CLOSED:
                break
            for address in self.addresses:
                if stop.is_set():
                    break
                if not _put(results, self._probe_one(address, port), stop):
                    break
        log.debug("%s finished", name)

    def _produce(self, ports: Iterable[int], work: queue.Queue, stop: _StopSignal) -> None:
        for port in ports:
            if not _put(work, port, stop):
                return
        for _ in range(self.concurrency):
            if not _put(work, _CLOSED, stop):
                return

    @staticmethod
    def _supervise(workers: Sequence[threading.Thread], results: queue.Queue) -> None:
        for w in workers:
            w.join()
        results.put(_DONE)

    def run(self, ports: Iterable[int], stop_event: Optional[threading.Event] = None) -> Iterator[ScanResult]:
        """
        Lazily yields one ScanResult per (address, port) pair, in completion
        order. Threads start on the first next(). Setting `stop_event`, or
        closing the iterator early, winds the pool down without leaving any
        thread blocked. The engine only reads `stop_event`; it never sets it.
        """
        stop = _StopSignal(stop_event)
        work: queue.Queue = queue.Queue(maxsize=self.queue_size)
        results: queue.Queue = queue.Queue(maxsize=1)

        workers = [
            threading.Thread(target=self._worker, args=(work, results, stop), name=f"scan-worker-{i}", daemon=True)
            for i in range(self.concurrency)
        ]
        for w in workers:
            w.start()
        threading.Thread(target=self._produce, args=(ports, work, stop), name="scan-producer", daemon=True).start()
        threading.Thread(target=self._supervise, args=(workers, results), name="scan-supervisor", daemon=True).start()

        finished = False
        try:
            while True:
                item = results.get()
                if item is _DONE:
                    finished = True
                    return
                yield item
        finally:
            if not finished:
                stop.set()
                while results.get() is not _DONE:
                    pass
