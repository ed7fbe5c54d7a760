"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the listener, the content source and the
logging setup.

=============================================================================
TWO CONFIG OBJECTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ServerConfig      Everything the process needs. Mutable while     │
    │                     the CLI and environment are being merged.       │
    │         │                                                            │
    │         │ listener_config()                                          │
    │         ▼                                                            │
    │   ListenerConfig    Just host + port. Frozen: once the server       │
    │                     binds, the address never changes.                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONFIGURATION SOURCES
=============================================================================

Priority (highest to lowest):

    1. Command-line arguments       python -m tinyhttp --port 3000
    2. Environment variables        TINYHTTP_PORT=3000 python -m tinyhttp
    3. Defaults in this file

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ListenerConfig:
    """
    The address the Listener binds to.

    Port 0 asks the OS for any free port (handy in tests); the Listener
    reports the real port through its ``address`` property.
    """

    host: str
    port: int

    def validate(self) -> None:
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass
class ServerConfig:
    """
    Configuration for the server process.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, read_timeout, accept_poll_interval

    CONTENT
    - content_root, content_path

    POLICY
    - fatal_accept_errors

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (containers)
    """

    port: int = 7878
    """The port number to listen on. 0 = let the OS pick one."""

    backlog: int = 5
    """
    Connections the kernel queues while we are busy with the current one.
    Connections are served one at a time, so this is the waiting room.
    """

    buffer_size: int = 8192
    """How many request bytes a single read may return."""

    read_timeout: Optional[float] = None
    """
    Seconds to wait for the peer's request bytes.
    None = block until the peer sends or closes. A peer that does neither
    then holds up every later connection.
    """

    accept_poll_interval: float = 1.0
    """
    How often the accept loop wakes up to notice a shutdown request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    content_root: str = "."
    """Directory the file-backed content store reads from."""

    content_path: str = "hello.html"
    """The logical path fetched for every connection."""

    # ─────────────────────────────────────────────────────────────────────
    # POLICY
    # ─────────────────────────────────────────────────────────────────────

    fatal_accept_errors: bool = True
    """
    True: an accept failure stops the server (non-zero exit).
    False: log it and keep accepting.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    def listener_config(self) -> ListenerConfig:
        """Freeze the network address into a ListenerConfig."""
        return ListenerConfig(host=self.host, port=self.port)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        TINYHTTP_HOST          Server host (default: 127.0.0.1)
        TINYHTTP_PORT          Server port (default: 7878)
        TINYHTTP_ROOT          Content directory (default: .)
        TINYHTTP_PATH          Logical path served (default: hello.html)
        TINYHTTP_LOG_LEVEL     Logging level (default: INFO)
        TINYHTTP_READ_TIMEOUT  Request read timeout in seconds (default: none)

        =====================================================================
        """
        read_timeout = os.getenv("TINYHTTP_READ_TIMEOUT")
        return cls(
            host=os.getenv("TINYHTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("TINYHTTP_PORT", "7878")),
            content_root=os.getenv("TINYHTTP_ROOT", "."),
            content_path=os.getenv("TINYHTTP_PATH", "hello.html"),
            log_level=os.getenv("TINYHTTP_LOG_LEVEL", "INFO"),
            read_timeout=float(read_timeout) if read_timeout else None,
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Runs at startup so a typo fails before the socket is ever created.
        """
        self.listener_config().validate()

        if self.backlog < 0:
            raise ValueError("backlog must be >= 0")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")

        if self.accept_poll_interval <= 0:
            raise ValueError("accept_poll_interval must be > 0")

        if not self.content_path:
            raise ValueError("content_path must not be empty")
