"""
=============================================================================
TINYHTTP - A Sequential Single-Page HTTP Listener
=============================================================================

Accepts TCP connections one at a time, reads whatever the client sends,
and answers every connection with the same piece of content:

    HTTP/1.1 200 OK\r\n
    Content-Length: 15\r\n
    \r\n
    <html>Hi</html>

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tinyhttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tinyhttp)
    ├── config.py            # ServerConfig / ListenerConfig dataclasses
    ├── errors.py            # Exception hierarchy
    ├── logging_setup.py     # logging.basicConfig wrapper
    ├── server.py            # Server: the accept loop
    ├── handler.py           # ConnectionHandler: one connection, one response
    ├── store.py             # Content stores (files, memory)
    ├── core/
    │   ├── listener.py      # Bound TCP socket
    │   └── stream.py        # One accepted connection
    └── http/
        ├── response.py      # Response + serialization
        └── status_codes.py  # HTTPStatus enum

=============================================================================
QUICK START
=============================================================================

    from tinyhttp import Server, ServerConfig

    Server(ServerConfig(port=7878, content_root="./public")).run()

Or from a shell:

    python -m tinyhttp --root ./public --path hello.html

=============================================================================
"""

__version__ = "1.0.0"

from .config import ListenerConfig, ServerConfig
from .errors import (
    TinyHTTPError, TransportError, BindError, AcceptError, ReadError, WriteError,
    ContentStoreError, NotFound, ContentIOError,
)
from .handler import ConnectionHandler
from .server import Server
from .store import ContentStore, FileContentStore, MemoryContentStore

__all__ = [
    "Server",
    "ServerConfig",
    "ListenerConfig",
    "ConnectionHandler",
    "ContentStore",
    "FileContentStore",
    "MemoryContentStore",
    "TinyHTTPError",
    "TransportError",
    "BindError",
    "AcceptError",
    "ReadError",
    "WriteError",
    "ContentStoreError",
    "NotFound",
    "ContentIOError",
    "__version__",
]
