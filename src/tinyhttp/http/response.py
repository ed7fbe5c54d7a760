"""
=============================================================================
HTTP RESPONSE
=============================================================================

Builds the bytes we send back. There is exactly one header on the wire:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n              ← status line                   │
    │    Content-Length: 15\r\n           ← byte length of the body       │
    │    \r\n                             ← blank line ends the headers   │
    │    <html>Hi</html>                  ← body, verbatim, no terminator │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No Date, no Server, no Content-Type, no Connection header. The client
knows where the body ends from Content-Length (and from the close that
follows it).

=============================================================================
CONTENT-LENGTH COUNTS BYTES
=============================================================================

    "héllo"            5 characters
    "héllo".encode()   6 bytes   ← Content-Length must say 6

The body is always bytes here, so len(body) is the right number.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .status_codes import HTTPStatus


@dataclass
class Response:
    """
    One HTTP response: status, ordered headers, body.

    Headers are a list of (name, value) pairs rather than a dict so that the
    order we build them in is the order they go on the wire.

    Built fresh per connection, serialized once with to_bytes(), then
    thrown away.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def header(self, name: str) -> Optional[str]:
        """Value of the first header called ``name`` (case-insensitive)."""
        wanted = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == wanted:
                return value
        return None

    def to_bytes(self) -> bytes:
        """
        Serialize the response for Stream.write().

            status line CRLF
            name: value CRLF      (for each header, in order)
            CRLF
            body

        Nothing is added: the headers written are exactly self.headers.
        """
        lines = [self.status_line]
        for name, value in self.headers:
            lines.append(f"{name}: {value}")
        lines.append("")

        head = ("\r\n".join(lines) + "\r\n").encode("latin-1")
        return head + self.body


def content_response(body: bytes) -> Response:
    """
    200 OK carrying ``body`` with a matching Content-Length.

    Example:
        content_response(b"<html>Hi</html>").to_bytes()
        == b"HTTP/1.1 200 OK\\r\\nContent-Length: 15\\r\\n\\r\\n<html>Hi</html>"
    """
    return Response(
        status=HTTPStatus.OK,
        headers=[("Content-Length", str(len(body)))],
        body=body,
    )


def error_response(status: HTTPStatus) -> Response:
    """
    A failure status with an empty body and ``Content-Length: 0``.

    We don't echo the error message to the peer: the store's exception
    text may contain filesystem paths.
    """
    return Response(
        status=HTTPStatus(status),
        headers=[("Content-Length", "0")],
        body=b"",
    )
