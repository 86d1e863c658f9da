"""
=============================================================================
REQUEST CLASSIFICATION
=============================================================================

This server does not parse HTTP. It looks at the first bytes a client sent
and asks exactly one question:

    Do they start with  b"GET / HTTP/1.1\\r\\n" ?

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     What counts as a root request                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n     → ROOT                        │
    │   GET / HTTP/1.1\\r\\n                     → ROOT                        │
    │   GET /foo HTTP/1.1\\r\\n\\r\\n             → OTHER                       │
    │   GET / HTTP/1.0\\r\\n\\r\\n                → OTHER                       │
    │   get / http/1.1\\r\\n                     → OTHER (case matters)        │
    │   (nothing)                              → OTHER                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only one recv() of at most REQUEST_BUFFER_SIZE bytes is ever classified.
If a client's request line arrives split over two TCP segments, the first
segment alone decides. That is the whole protocol.

=============================================================================
"""

from enum import Enum


ROOT_REQUEST = b"GET / HTTP/1.1\r\n"
"""The only request prefix the server recognizes."""

REQUEST_BUFFER_SIZE = 512
"""Bytes read from a client per connection."""


class RequestKind(Enum):
    """Result of classifying a request buffer."""
    ROOT = "root"
    OTHER = "other"


def is_root_request(data: bytes) -> bool:
    """Check whether ``data`` begins with the root request line."""
    return data.startswith(ROOT_REQUEST)


def classify(data: bytes) -> RequestKind:
    """
    Classify a request buffer.

    Args:
        data: Raw bytes from one read of the client socket.

    Returns:
        RequestKind.ROOT for a root request, RequestKind.OTHER otherwise.
    """
    if is_root_request(data):
        return RequestKind.ROOT
    return RequestKind.OTHER


def describe(data: bytes) -> str:
    """
    Render request bytes for logging.

    Invalid UTF-8 is replaced with U+FFFD instead of failing, since clients
    can send anything.
    """
    return data.decode("utf-8", errors="replace")
