import argparse
import logging
import re
import sys
import threading
from contextlib import ExitStack, closing

from core.config import VERSION, settings
from core.ports import InvalidPortSpec
from core.targets import InvalidTarget
from pipeline import report
from pipeline.orchestrator import Orchestrator

RESET = "\033[0m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
CYAN = "\033[36m"

_DURATION = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$")
_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, None: 1.0}


def parse_duration(value: str) -> float:
    """'500ms' -> 0.5, '2s' -> 2.0, '1m' -> 60.0, '0.25' -> 0.25 (seconds)"""
    m = _DURATION.match(value)
    if not m:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    seconds = float(m.group(1)) * _UNITS[m.group(2)]
    if seconds <= 0:
        raise argparse.ArgumentTypeError("duration must be positive")
    return seconds


class Console:
    def __init__(self, stream=None, color=None):
        self.stream = stream or sys.stdout
        self.color = self.stream.isatty() if color is None else color

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{RESET}" if self.color else text

    def line(self, text: str, color: str = "") -> None:
        clear = "\r\033[K" if self.color else ""
        self.stream.write(clear + (self._paint(text, color) if color else text) + "\n")
        self.stream.flush()

    def status(self, text: str) -> None:
        # transient line, overwritten by the next one
        if not self.color:
            return
        self.stream.write("\r" + self._paint(text, YELLOW))
        self.stream.flush()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tcpsweep", description="Concurrent TCP connect port scanner")
    p.add_argument("-t", "--target", help="target IP or CIDR range")
    p.add_argument("-p", "--ports", default=settings.ports, help="port range, e.g. '80,443' or '1-1024' (default %(default)s)")
    p.add_argument("-c", "--concurrency", type=int, default=settings.concurrency, help="concurrent workers (default %(default)s)")
    p.add_argument(
        "--to", "--timeout", dest="timeout", type=parse_duration, default=settings.connect_timeout_s,
        help="timeout per connection, e.g. 500ms or 2s (default %(default)ss)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="show every connection attempt, open and closed")
    p.add_argument("-o", "--output", help="save results to a report file")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return p


def run(args, console: Console) -> int:
    if args.concurrency < 1:
        console.line("[!] concurrency must be >= 1", RED)
        return 1

    orch = Orchestrator()
    stop = threading.Event()
    try:
        stream = orch.scan(args.target, args.ports, concurrency=args.concurrency, timeout=args.timeout, stop_event=stop)
    except InvalidTarget as exc:
        console.line(f"[!] Error parsing target: {exc}", RED)
        return 1
    except InvalidPortSpec as exc:
        console.line(f"[!] Error parsing ports: {exc}", RED)
        return 1

    with ExitStack() as stack:
        writer = None
        if args.output:
            try:
                writer = stack.enter_context(report.ReportWriter(args.output, verbose=args.verbose))
            except OSError as exc:
                console.line(f"[!] Could not create file: {exc}", RED)
                return 1
            writer.write_header(args.target, args.ports)

        summary = orch.summary
        console.line(
            f"[*] Target: {args.target} | [*] Hosts: {summary.hosts} | [*] Concurrency: {args.concurrency}", CYAN
        )
        if writer:
            console.line(f"[*] Saving results to: {args.output}", CYAN)
        console.line("-" * 65)

        interrupted = False
        try:
            with closing(stream):
                for res in stream:
                    if writer:
                        writer.record(res)
                    if res.is_open:
                        console.line(report.format_open(res), GREEN)
                    elif args.verbose:
                        console.line(report.format_closed(res), RED)
                    else:
                        console.status(report.format_progress(res))
        except KeyboardInterrupt:
            interrupted = True
            stop.set()

        console.line("")
        console.line(report.format_summary(summary), GREEN)
        if writer:
            writer.write_summary(summary)

    return 130 if interrupted else 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if not args.target:
        parser.print_usage(sys.stderr)
        return 1
    return run(args, Console())


if __name__ == "__main__":
    sys.exit(main())
