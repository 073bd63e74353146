import socket
import threading
import time

import pytest


class Listener:
    """Loopback TCP server that optionally greets every client with a banner."""

    def __init__(self, banner: bytes = b""):
        self.banner = banner
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(64)
        self.port = self.sock.getsockname()[1]
        self._stop = threading.Event()
        self._clients = []
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        self.sock.settimeout(0.1)
        while not self._stop.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            if self.banner:
                conn.sendall(self.banner)
            self._clients.append(conn)

    def wait_for_client(self, timeout: float = 2.0):
        """First accepted server-side connection, once the accept loop has it."""
        deadline = time.monotonic() + timeout
        while not self._clients and time.monotonic() < deadline:
            time.sleep(0.01)
        return self._clients[0]

    def close(self):
        self._stop.set()
        self._thread.join(timeout=2)
        for c in self._clients:
            c.close()
        self.sock.close()


@pytest.fixture
def listener():
    servers = []

    def _make(banner: bytes = b"") -> Listener:
        srv = Listener(banner)
        servers.append(srv)
        return srv

    yield _make
    for srv in servers:
        srv.close()


@pytest.fixture
def closed_port() -> int:
    """A loopback port that was just released and has nothing listening on it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
