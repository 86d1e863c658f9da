"""
=============================================================================
PAGE HANDLER
=============================================================================

Turns a request buffer into a response by picking one of two files:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   request bytes                                                     │
    │        │                                                            │
    │        ▼                                                            │
    │   starts with "GET / HTTP/1.1\\r\\n" ?                                │
    │        │                                                            │
    │        ├── yes ──► 200 OK        + success_page bytes               │
    │        │                                                            │
    │        └── no  ──► 404 NOT FOUND + not_found_page bytes             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Pages are read from disk on EVERY request. Edit hello.html while the server
runs and the next request sees the new content. Files are served as raw
bytes; nothing is decoded, so any encoding passes through untouched.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Callable, Tuple, Union

from ..errors import FileReadError
from ..http.request import RequestKind, classify
from ..http.response import Response, ok, not_found


logger = logging.getLogger(__name__)


class PageHandler:
    """
    Serve the success page for root requests and the 404 page otherwise.

    Usage:
        handler = PageHandler("hello.html", "404.html")
        response = handler.handle(b"GET / HTTP/1.1\\r\\n\\r\\n")
        response.status_code  # 200
    """

    def __init__(self, success_page: Union[str, Path], not_found_page: Union[str, Path]):
        """
        Args:
            success_page: File served for ``GET / HTTP/1.1``.
            not_found_page: File served for anything else.
        """
        self.success_page = Path(success_page)
        self.not_found_page = Path(not_found_page)

    def select(self, data: bytes) -> Tuple[Callable[[bytes], Response], Path]:
        """
        Pick the response builder and file for a request.

        Returns:
            (ok, success_page) or (not_found, not_found_page)
        """
        if classify(data) is RequestKind.ROOT:
            return ok, self.success_page
        return not_found, self.not_found_page

    def load(self, path: Path) -> bytes:
        """
        Read a whole file into memory.

        Raises:
            FileReadError: If the file is missing, is a directory, or cannot
                be read.
        """
        try:
            return path.read_bytes()
        except OSError as e:
            raise FileReadError(path, e) from e

    def handle(self, data: bytes) -> Response:
        """
        Build the response for one request buffer.

        Raises:
            FileReadError: If the chosen page cannot be loaded.
        """
        build, path = self.select(data)
        response = build(self.load(path))
        logger.debug(f"Serving {path} ({len(response.body)} bytes) with {response.status_code}")
        return response
