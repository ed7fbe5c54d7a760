"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttp import Server, ServerConfig, MemoryContentStore
from tinyhttp.core import Stream


HELLO = b"<html>Hi</html>"


class FakeSocket:
    """Socket double whose recv/sendall can be made to fail."""

    def __init__(self, recv_data: bytes = b"", recv_error: Optional[Exception] = None,
                 send_error: Optional[Exception] = None):
        self.recv_data = recv_data
        self.recv_error = recv_error
        self.send_error = send_error
        self.sent = b""
        self.close_calls = 0
        self.shutdown_calls = 0

    def settimeout(self, timeout):
        pass

    def recv(self, size: int) -> bytes:
        if self.recv_error is not None:
            raise self.recv_error
        data, self.recv_data = self.recv_data[:size], self.recv_data[size:]
        return data

    def sendall(self, data: bytes):
        if self.send_error is not None:
            raise self.send_error
        self.sent += data

    def shutdown(self, how):
        self.shutdown_calls += 1

    def close(self):
        self.close_calls += 1


def fetch(port: int, request: bytes = b"GET / \r\n\r\n", timeout: float = 5.0) -> bytes:
    """Connect, send ``request``, read until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as client:
        if request:
            client.sendall(request)
        return recv_all(client)


def recv_all(client: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = client.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Directory holding hello.html."""
    (tmp_path / "hello.html").write_bytes(HELLO)
    return tmp_path


@pytest.fixture
def memory_store() -> MemoryContentStore:
    return MemoryContentStore({"hello.html": HELLO})


@pytest.fixture
def stream_pair() -> Generator[tuple, None, None]:
    """A Stream on one end of a socketpair, the raw peer socket on the other."""
    server_side, client_side = socket.socketpair()
    stream = Stream(
        socket=server_side,
        address=("127.0.0.1", 50000),
        drain_timeout=0.05,
    )
    yield stream, client_side
    stream.close()
    client_side.close()


class ServerThread:
    """Runs Server.serve_forever() in a background thread."""

    def __init__(self, server: Server):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def _run(self):
        try:
            self.server.serve_forever()
        except BaseException as e:
            self.error = e

    def start(self) -> "ServerThread":
        # Bind here so connections queue even before the thread is scheduled
        self.server.bind()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        return self

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self.server.close()


def make_server(store, **overrides) -> Server:
    options = dict(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        accept_poll_interval=0.05,
        log_level="WARNING",
    )
    options.update(overrides)
    return Server(ServerConfig(**options), store=store)


@pytest.fixture
def running_server(memory_store: MemoryContentStore) -> Generator[ServerThread, None, None]:
    """A server on a free port serving memory_store's hello.html."""
    srv = ServerThread(make_server(memory_store)).start()
    yield srv
    srv.stop()
