"""
=============================================================================
RESPONSE BUILDING
=============================================================================

A response here is as small as HTTP allows:

    HTTP/1.1 200 OK\\r\\n          ← status line
    \\r\\n                          ← blank line, so no headers at all
    <html>...</html>              ← body, the raw bytes of a page file

There is no Content-Length and no Connection header. The client learns
where the body ends because the server closes the socket right after it.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum


class StatusLine(Enum):
    """
    The fixed status lines the server can send.

    Each value already includes the empty line that ends the (empty)
    header section, so a response is just ``status line + body``.
    """
    OK = "HTTP/1.1 200 OK\r\n\r\n"
    NOT_FOUND = "HTTP/1.1 404 NOT FOUND\r\n\r\n"
    INTERNAL_ERROR = "HTTP/1.1 500 INTERNAL SERVER ERROR\r\n\r\n"

    @property
    def code(self) -> int:
        """Numeric status code, e.g. 404."""
        return int(self.value.split(" ", 2)[1])

    def to_bytes(self) -> bytes:
        return self.value.encode("ascii")


INTERNAL_ERROR_BODY = b"500 Internal Server Error\n"
"""Body sent when a page file could not be loaded."""


@dataclass
class Response:
    """
    A status line and a body.

    Attributes:
        status_line: One of the StatusLine literals.
        body: Raw body bytes, sent exactly as given.
    """
    status_line: StatusLine
    body: bytes = b""

    @property
    def status_code(self) -> int:
        return self.status_line.code

    def to_bytes(self) -> bytes:
        """
        Serialize for the wire.

        Nothing is added: the result is the status line immediately
        followed by the body.
        """
        return self.status_line.to_bytes() + self.body

    def __len__(self) -> int:
        return len(self.status_line.value) + len(self.body)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: bytes) -> Response:
    """Create a 200 response."""
    return Response(StatusLine.OK, body)


def not_found(body: bytes) -> Response:
    """Create a 404 response."""
    return Response(StatusLine.NOT_FOUND, body)


def internal_error() -> Response:
    """Create a 500 response with the fixed error body."""
    return Response(StatusLine.INTERNAL_ERROR, INTERNAL_ERROR_BODY)
