"""
Signal handling tests against the CLI running in a child process.

Signal handlers only exist in the main thread, so these cannot use the
background-thread TestServer.
"""

import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

import pytest


pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")

SRC_DIR = Path(__file__).parent.parent.parent / "src"


@pytest.fixture
def cli_server(pages, free_port):
    """Start ``python -m pageserver`` and wait until it answers a request."""
    success, not_found = pages
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env.pop("PAGESERVER_TIMEOUT", None)

    proc = subprocess.Popen(
        [
            sys.executable, "-m", "pageserver",
            "--port", str(free_port),
            "--success-page", str(success),
            "--not-found-page", str(not_found),
            "--log-level", "WARNING",
        ],
        env=env,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )

    address = ("127.0.0.1", free_port)
    deadline = time.monotonic() + 10.0
    while True:
        try:
            with socket.create_connection(address, timeout=5.0) as client:
                client.sendall(b"GET / HTTP/1.1\r\n\r\n")
                client.shutdown(socket.SHUT_WR)
                if client.recv(4096).startswith(b"HTTP/1.1 200 OK"):
                    break
        except OSError:
            pass
        if proc.poll() is not None or time.monotonic() > deadline:
            proc.kill()
            proc.wait()
            pytest.fail("server did not come up")
        time.sleep(0.1)

    try:
        yield proc, address
    finally:
        if proc.poll() is None:
            proc.kill()
        proc.wait()


class TestSignals:
    """SIGINT/SIGTERM end the process even when a client stalls."""

    def test_sigterm_stops_idle_server(self, cli_server):
        proc, _ = cli_server

        proc.send_signal(signal.SIGTERM)

        assert proc.wait(timeout=5.0) == 0

    def test_sigint_stops_idle_server(self, cli_server):
        proc, _ = cli_server

        proc.send_signal(signal.SIGINT)

        assert proc.wait(timeout=5.0) == 0

    def test_sigint_with_stalled_client(self, cli_server):
        proc, address = cli_server

        with socket.create_connection(address, timeout=5.0):
            # The server accepts this client and blocks in recv() with no timeout
            time.sleep(0.5)

            proc.send_signal(signal.SIGINT)

            assert proc.wait(timeout=5.0) == 0

    def test_sigterm_with_stalled_client(self, cli_server):
        proc, address = cli_server

        with socket.create_connection(address, timeout=5.0):
            time.sleep(0.5)

            proc.send_signal(signal.SIGTERM)

            assert proc.wait(timeout=5.0) == 0
