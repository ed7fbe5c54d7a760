"""
=============================================================================
LISTENER: THE BOUND TCP SOCKET
=============================================================================

The Listener owns the listening socket. It is created once at startup and
produces one Stream per accepted connection.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with IP:PORT
    3. listen()    OS starts queueing incoming connections (backlog)
    4. accept()    BLOCKS until a client connects, returns a NEW socket
    5. close()     Release the socket

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Listener.bind()
                    └───────────┬───────────┘
                                │ accept()
                                ▼
                          ┌───────────┐
                          │  Stream   │  one at a time
                          └───────────┘

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR:  restart immediately instead of waiting out TIME_WAIT.
TCP_NODELAY:   the response goes out in one sendall(); no reason to let
               Nagle's algorithm sit on the tail end of it.

We deliberately do NOT set SO_REUSEPORT: with it, a second server could
bind the same port and "Address already in use" would go undetected.

=============================================================================
"""

import socket
import logging
from typing import Optional, Tuple

from ..config import ListenerConfig
from ..errors import AcceptError, BindError
from .stream import Stream


logger = logging.getLogger(__name__)


class Listener:
    """
    A bound, listening TCP socket.

    Usage:
        listener = Listener.bind(ListenerConfig("127.0.0.1", 7878))
        with listener:
            stream = listener.accept()
            ...

    Exactly one Listener exists per running server. It must outlive every
    Stream it produced, which holds naturally because streams are handled
    and closed before the next accept().
    """

    def __init__(
        self,
        sock: socket.socket,
        config: ListenerConfig,
        buffer_size: int = 8192,
        read_timeout: Optional[float] = None,
    ):
        """
        Wrap an already bound and listening socket.

        Use Listener.bind() instead of calling this directly.
        """
        self.config = config
        self.buffer_size = buffer_size
        self.read_timeout = read_timeout
        self._socket: Optional[socket.socket] = sock

    @classmethod
    def bind(
        cls,
        config: ListenerConfig,
        backlog: int = 5,
        buffer_size: int = 8192,
        read_timeout: Optional[float] = None,
    ) -> "Listener":
        """
        Create, bind and listen.

        Common failures, all reported as BindError:
        - Address already in use: another process has this port
        - Permission denied: ports < 1024 require root
        - Name or service not known: the host is not a valid address

        Raises:
            BindError: If the socket could not be bound.
        """
        try:
            config.validate()
        except ValueError as e:
            raise BindError(str(e)) from e

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            sock.bind((config.host, config.port))
            sock.listen(backlog)
        except OSError as e:
            # socket.gaierror (bad host) is an OSError too
            sock.close()
            logger.error(f"Failed to bind to {config}: {e}")
            raise BindError(f"Failed to bind to {config}: {e}") from e

        listener = cls(sock, config, buffer_size=buffer_size, read_timeout=read_timeout)
        logger.debug(f"Bound listener to {listener.address[0]}:{listener.address[1]}")
        return listener

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        Differs from the config when port 0 was requested.
        """
        if self._socket is None:
            return (self.config.host, self.config.port)
        host, port = self._socket.getsockname()[:2]
        return (host, port)

    @property
    def closed(self) -> bool:
        return self._socket is None

    def accept(self, timeout: Optional[float] = None) -> Optional[Stream]:
        """
        Wait for the next connection.

        Args:
            timeout: None blocks until a peer connects. A number bounds the
                     wait; None is returned if nobody connected in time.
                     The server loop uses this to check for shutdown.

        Returns:
            A Stream for the new connection, or None on timeout.

        Raises:
            AcceptError: If the listening socket itself failed (or was
                         closed underneath us).
        """
        if self._socket is None:
            raise AcceptError("Listener is closed")

        self._socket.settimeout(timeout)

        try:
            client_socket, client_address = self._socket.accept()
        except socket.timeout:
            return None
        except OSError as e:
            raise AcceptError(f"Accept failed: {e}") from e

        stream = Stream(
            socket=client_socket,
            address=client_address,
            buffer_size=self.buffer_size,
            read_timeout=self.read_timeout,
        )

        logger.debug(
            f"[{stream.id}] Accepted connection from "
            f"{stream.client_ip}:{stream.client_port}"
        )
        return stream

    def close(self):
        """Close the listening socket. Safe to call more than once."""
        if self._socket is None:
            return
        try:
            self._socket.close()
        except OSError:
            pass  # Already closed
        self._socket = None
        logger.debug("Listener closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
