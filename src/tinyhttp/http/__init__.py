"""
=============================================================================
HTTP PROTOCOL PIECES
=============================================================================

Only the response side exists: incoming bytes are read but never parsed.

=============================================================================
"""

from .response import Response, content_response, error_response
from .status_codes import HTTPStatus

__all__ = [
    # Response building
    "Response",
    "content_response",
    "error_response",

    # Status codes
    "HTTPStatus",
]
