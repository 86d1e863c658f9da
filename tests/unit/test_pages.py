"""
Unit tests for the page handler.
"""

import pytest

from pageserver.errors import FileReadError
from pageserver.handlers import PageHandler
from pageserver.http.response import StatusLine, not_found as not_found_response, ok


@pytest.fixture
def handler(pages) -> PageHandler:
    success, not_found = pages
    return PageHandler(success, not_found)


class TestPageHandler:
    """Tests for PageHandler."""

    def test_root_request_serves_success_page(self, handler: PageHandler, pages):
        success, _ = pages
        response = handler.handle(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        assert response.status_line is StatusLine.OK
        assert response.body == success.read_bytes()

    def test_other_request_serves_not_found_page(self, handler: PageHandler, pages):
        _, not_found = pages
        response = handler.handle(b"GET /foo HTTP/1.1\r\n\r\n")

        assert response.status_line is StatusLine.NOT_FOUND
        assert response.body == not_found.read_bytes()

    def test_select(self, handler: PageHandler, pages):
        success, not_found = pages
        assert handler.select(b"GET / HTTP/1.1\r\n") == (ok, success)
        assert handler.select(b"") == (not_found_response, not_found)

    def test_page_is_reread_every_request(self, handler: PageHandler, pages):
        success, _ = pages
        handler.handle(b"GET / HTTP/1.1\r\n")

        success.write_bytes(b"changed")

        assert handler.handle(b"GET / HTTP/1.1\r\n").body == b"changed"

    def test_bytes_served_verbatim(self, handler: PageHandler, pages):
        success, _ = pages
        content = "héllo ✓".encode("utf-8") + b"\x00\xff"
        success.write_bytes(content)

        assert handler.handle(b"GET / HTTP/1.1\r\n").body == content

    def test_missing_page_raises_file_read_error(self, tmp_path, pages):
        success, _ = pages
        missing = tmp_path / "nope.html"
        handler = PageHandler(success, missing)

        with pytest.raises(FileReadError) as exc_info:
            handler.handle(b"GET /foo HTTP/1.1\r\n")

        assert exc_info.value.path == missing
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_directory_raises_file_read_error(self, tmp_path, pages):
        _, not_found = pages
        handler = PageHandler(tmp_path, not_found)

        with pytest.raises(FileReadError):
            handler.handle(b"GET / HTTP/1.1\r\n")

    def test_accepts_string_paths(self, pages):
        success, not_found = pages
        handler = PageHandler(str(success), str(not_found))
        assert handler.handle(b"GET / HTTP/1.1\r\n").body == success.read_bytes()
