"""
HTTP pieces of the page server: prefix classification and fixed responses.
"""

from .request import (
    ROOT_REQUEST,
    REQUEST_BUFFER_SIZE,
    RequestKind,
    is_root_request,
    classify,
    describe,
)
from .response import (
    StatusLine,
    Response,
    INTERNAL_ERROR_BODY,
    ok,
    not_found,
    internal_error,
)

__all__ = [
    "ROOT_REQUEST",
    "REQUEST_BUFFER_SIZE",
    "RequestKind",
    "is_root_request",
    "classify",
    "describe",
    "StatusLine",
    "Response",
    "INTERNAL_ERROR_BODY",
    "ok",
    "not_found",
    "internal_error",
]
