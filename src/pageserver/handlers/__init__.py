"""
Request handlers.

    from pageserver.handlers import PageHandler

    pages = PageHandler("hello.html", "404.html")
    response = pages.handle(raw_request)
"""

from .pages import PageHandler

__all__ = [
    "PageHandler",
]
