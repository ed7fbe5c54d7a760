"""
=============================================================================
STREAM: ONE ACCEPTED CONNECTION
=============================================================================

A Stream wraps the socket returned by accept() with the three operations
the connection handler needs: read once, write everything, close.

=============================================================================
ONE READ, NOT A FULL REQUEST
=============================================================================

TCP does not preserve message boundaries, so a single recv() may return
part of what the client sent, all of it, or nothing at all (peer closed).

We never parse the request, so we do not care where it ends:

    Client sends:   GET / HTTP/1.1\r\nHost: x\r\n\r\n
    read() returns: whatever the first recv() delivered
                    (b"" if the client hung up without sending)

Anything left in the kernel buffer is drained in close().

=============================================================================
STREAM STATE MACHINE
=============================================================================

    OPEN ──────► READING ──────► WRITING ──────► CLOSED
     │              │                │              ▲
     └──────────────┴────────────────┴──────────────┘
                 (error on any step: close anyway)

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ReadError, WriteError


logger = logging.getLogger(__name__)


class StreamState(Enum):
    """Where a stream is in its (short) life."""
    OPEN = "open"          # Just accepted
    READING = "reading"    # Waiting for request bytes
    WRITING = "writing"    # Sending the response
    CLOSED = "closed"      # Socket released


@dataclass
class Stream:
    """
    A bidirectional byte channel for one accepted connection.

    The connection handler owns the stream exclusively and must release it
    on every exit path. The easiest way is the context manager:

        with stream:
            request = stream.read()
            stream.write(response_bytes)

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used to correlate log lines.
        state: Current stream state.
        buffer_size: Maximum bytes returned by one read().
        read_timeout: Seconds to wait in read(); None blocks.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: StreamState = StreamState.OPEN
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    read_timeout: Optional[float] = None
    drain_timeout: float = 0.5

    def __post_init__(self):
        # Accepted sockets inherit the listener's timeout on some platforms
        self.socket.settimeout(self.read_timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def closed(self) -> bool:
        return self.state == StreamState.CLOSED

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read(self) -> bytes:
        """
        Read one chunk of request bytes.

        Blocks until the peer sends something or closes its side. A single
        recv() is all we do: the request is never interpreted, so there is
        no delimiter to wait for.

        Returns:
            The bytes received, or b"" if the peer closed immediately.

        Raises:
            ReadError: On reset, timeout, or any other socket failure.
        """
        self.state = StreamState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout as e:
            raise ReadError("Timed out waiting for request bytes") from e
        except OSError as e:
            raise ReadError(f"Read failed: {e}") from e

        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def write(self, data: bytes) -> None:
        """
        Send all of ``data`` to the peer.

        Uses sendall(): it either hands every byte to the kernel or raises.
        A partial write is never reported as success.

        Raises:
            WriteError: If the peer reset the connection or the send failed.
        """
        self.state = StreamState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            raise WriteError(f"Send failed: {e}") from e

        logger.debug(f"[{self.id}] Wrote {len(data)} bytes")

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. Drain: read whatever request bytes we never consumed. Closing
           with unread data makes the kernel send RST, which can destroy
           the response before the client reads it. Bounded by
           drain_timeout in total.
        3. close(): release the file descriptor
        """
        if self.state == StreamState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        # One deadline for the whole drain: a peer trickling bytes must not
        # keep us here past drain_timeout
        deadline = time.monotonic() + self.drain_timeout
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = StreamState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
