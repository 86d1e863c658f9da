"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, List, Optional
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pageserver import PageServer, ServerConfig
from pageserver.core import Connection


SUCCESS_BODY = b"<html><body><h1>Hello!</h1></body></html>\n"
NOT_FOUND_BODY = b"<html><body><h1>Oops!</h1></body></html>\n"


class FakeSocket:
    """
    In-memory stand-in for a client socket.

    Serves ``incoming`` to recv() the way a TCP socket would: at most n bytes
    per call, then b"" once everything has been read. Everything passed to
    sendall() is collected in ``sent``.
    """

    def __init__(self, incoming: bytes = b"", recv_error: Optional[Exception] = None,
                 send_error: Optional[Exception] = None):
        self._incoming = incoming
        self.recv_error = recv_error
        self.send_error = send_error
        self.sent = b""
        self.recv_calls: List[int] = []
        self.timeouts: List[Optional[float]] = []
        self.shutdown_calls: List[int] = []
        self.closed = False

    def recv(self, n: int) -> bytes:
        self.recv_calls.append(n)
        if self.recv_error is not None:
            error, self.recv_error = self.recv_error, None
            raise error
        data, self._incoming = self._incoming[:n], self._incoming[n:]
        return data

    def sendall(self, data: bytes):
        if self.send_error is not None:
            raise self.send_error
        self.sent += data

    def settimeout(self, timeout):
        self.timeouts.append(timeout)

    def shutdown(self, how: int):
        self.shutdown_calls.append(how)

    def close(self):
        self.closed = True

    @property
    def unread(self) -> bytes:
        return self._incoming


@pytest.fixture
def fake_socket():
    """Factory for FakeSocket instances."""
    return FakeSocket


@pytest.fixture
def make_connection():
    """Factory wrapping a FakeSocket in a Connection."""
    def factory(incoming: bytes = b"", **kwargs) -> Connection:
        sock_kwargs = {
            key: kwargs.pop(key) for key in ("recv_error", "send_error") if key in kwargs
        }
        sock = FakeSocket(incoming, **sock_kwargs)
        return Connection(socket=sock, address=("127.0.0.1", 54321), **kwargs)
    return factory


@pytest.fixture
def pages(tmp_path: Path):
    """Success and not-found pages in a temporary directory."""
    success = tmp_path / "hello.html"
    not_found = tmp_path / "404.html"
    success.write_bytes(SUCCESS_BODY)
    not_found.write_bytes(NOT_FOUND_BODY)
    return success, not_found


@pytest.fixture
def config(pages) -> ServerConfig:
    """Test server configuration bound to an OS-chosen port."""
    success, not_found = pages
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        drain_timeout=0.2,
        success_page=success,
        not_found_page=not_found,
        log_level="WARNING",
    )


class TestServer:
    """Test server helper that runs the accept loop in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: PageServer):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self):
        return self.server.address

    def start(self, host: Optional[str] = None, port: Optional[int] = None):
        """Bind in the calling thread, then serve in the background."""
        self.server.start(host, port)
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            self.server.accept_loop()
        except BaseException as e:
            self.error = e

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def join(self, timeout: float = 5.0):
        if self._thread:
            self._thread.join(timeout=timeout)


def request(address, payload: bytes, timeout: float = 5.0) -> bytes:
    """
    Send ``payload``, half-close, and read the response until the server
    closes. An empty payload is a client that connects and sends nothing.
    """
    with socket.create_connection(address, timeout=timeout) as client:
        if payload:
            client.sendall(payload)
        client.shutdown(socket.SHUT_WR)
        return read_all(client)


def read_all(client: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = client.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A page server accepting connections in a background thread."""
    test_srv = TestServer(PageServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def send_request():
    """The ``request`` helper, as a fixture."""
    return request


@pytest.fixture
def recv_all():
    """The ``read_all`` helper, as a fixture."""
    return read_all


@pytest.fixture
def serve():
    """Factory that starts a background server for a given config."""
    started: List[TestServer] = []

    def factory(config: ServerConfig, host: Optional[str] = None,
                port: Optional[int] = None) -> TestServer:
        test_srv = TestServer(PageServer(config))
        test_srv.start(host, port)
        started.append(test_srv)
        return test_srv

    yield factory

    for test_srv in started:
        test_srv.stop()


@pytest.fixture
def free_port() -> int:
    """A port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
