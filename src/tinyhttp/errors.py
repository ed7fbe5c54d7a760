"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the server knows about, grouped by how far it is allowed to
travel:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   TinyHTTPError                                                      │
    │   ├── TransportError                                                 │
    │   │   ├── BindError        startup, fatal: process exits non-zero   │
    │   │   ├── AcceptError      fatal unless keep-accepting is enabled   │
    │   │   ├── ReadError        connection-scoped: abandon connection    │
    │   │   └── WriteError       connection-scoped: abandon connection    │
    │   └── ContentStoreError                                              │
    │       ├── NotFound         connection-scoped: 404 response          │
    │       └── ContentIOError   connection-scoped: 500 response          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only BindError and (by default) AcceptError ever leave the server loop.
=============================================================================
"""


class TinyHTTPError(Exception):
    """Base class for all tinyhttp errors."""


class TransportError(TinyHTTPError):
    """A socket-level operation failed."""


class BindError(TransportError):
    """The listening socket could not be created, bound or put into listen mode."""


class AcceptError(TransportError):
    """The listening socket failed while waiting for a connection."""


class ReadError(TransportError):
    """Reading request bytes from a connection failed."""


class WriteError(TransportError):
    """Sending the response did not complete."""


class ContentStoreError(TinyHTTPError):
    """
    Raised when the content store cannot produce the requested bytes.

    Carries the HTTP status the connection handler answers with, so the
    store decides what kind of failure it was and the handler only has to
    turn it into a response.
    """

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class NotFound(ContentStoreError):
    """No content exists at the requested path."""

    def __init__(self, path: str):
        super().__init__(f"No content at {path!r}", status_code=404)
        self.path = path


class ContentIOError(ContentStoreError):
    """The backing storage failed while reading existing content."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)
