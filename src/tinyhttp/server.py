"""
=============================================================================
SERVER LOOP
=============================================================================

Owns the Listener and serves connections one at a time, forever.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          Server.run()                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   bind()                  BindError → propagate (process exits 1)   │
    │      │                                                               │
    │   "Listening on host:port"                                           │
    │      │                                                               │
    │   while running:                                                     │
    │      stream = listener.accept()      ← blocks                        │
    │      handler(stream)                 ← blocks until fully served     │
    │                                                                      │
    │   listener.close()                                                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STRICTLY SEQUENTIAL
=============================================================================

There is no thread pool. While one connection is being served, the next
client waits in the kernel's accept queue (up to ``backlog`` of them).
Connections are therefore answered in exactly the order they were
accepted, and nothing is shared between them, so nothing needs a lock.

The price: a client that connects and never sends anything holds up
everyone behind it, unless ``read_timeout`` is set.

=============================================================================
STOPPING
=============================================================================

The loop has no exit condition of its own. It stops when:

- the process gets SIGINT / SIGTERM (handlers installed by run())
- another thread calls shutdown()
- accept() fails and accept failures are fatal

accept() is called with a poll interval so a shutdown request is noticed
within ``accept_poll_interval`` seconds even if nobody connects.

=============================================================================
"""

import logging
import signal
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import Listener
from .errors import AcceptError
from .handler import ConnectionHandler
from .store import ContentStore, FileContentStore


logger = logging.getLogger(__name__)


class Server:
    """
    Sequential accept-and-serve loop.

    Usage:
        server = Server(ServerConfig(port=7878, content_root="./public"))
        server.run()   # Blocks until SIGINT/SIGTERM

    Embedding with an in-memory page:
        store = MemoryContentStore({"hello.html": b"<html>Hi</html>"})
        Server(ServerConfig(), store=store).run()
    """

    def __init__(self, config: Optional[ServerConfig] = None, store: Optional[ContentStore] = None):
        """
        Args:
            config: Server configuration. Defaults are used if not provided.
            store: Content source. Defaults to files under config.content_root.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        if store is None:
            store = FileContentStore(self.config.content_root)
        self.store = store
        self.handler = ConnectionHandler(self.store, self.config.content_path)

        self._listener: Optional[Listener] = None
        self._running = False
        self._stop_requested = threading.Event()
        self._stopped = threading.Event()
        self._original_handlers: dict = {}
        self.connections_served = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """The bound address, or the configured one before bind()."""
        if self._listener is not None:
            return self._listener.address
        return (self.config.host, self.config.port)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def bind(self) -> Listener:
        """
        Bind the listening socket.

        Raises:
            BindError: Propagated unchanged. The server does not retry.
        """
        if self._listener is None:
            self._listener = Listener.bind(
                self.config.listener_config(),
                backlog=self.config.backlog,
                buffer_size=self.config.buffer_size,
                read_timeout=self.config.read_timeout,
            )
        return self._listener

    def run(self):
        """
        Bind, announce, serve until stopped, then close the listener.

        The startup notice is only printed once bind() has succeeded.

        Raises:
            BindError: If the address can't be bound.
            AcceptError: If accept fails and accept failures are fatal.
        """
        self.bind()

        host, port = self.address
        logger.info(f"Serving {self.config.content_path!r} from {self.store!r}")
        print(f"Listening on {host}:{port}", flush=True)

        self._setup_signals()
        try:
            self.serve_forever()
        finally:
            self._restore_signals()
            self.close()

    def serve_forever(self):
        """
        Accept and handle connections until shutdown() is called.

        Binds first if run() didn't already. A shutdown() that arrived
        before this call makes it return without accepting anything.
        """
        listener = self.bind()
        self._running = True
        self._stopped.clear()

        try:
            while not self._stop_requested.is_set():
                try:
                    stream = listener.accept(timeout=self.config.accept_poll_interval)
                except AcceptError as e:
                    if self._stop_requested.is_set():
                        break  # Listener closed by shutdown
                    if self.config.fatal_accept_errors:
                        logger.error(f"Accept error, stopping: {e}")
                        raise
                    logger.error(f"Accept error, continuing: {e}")
                    continue

                if stream is None:
                    continue  # Poll timeout: re-check for shutdown

                self.handler(stream)
                self.connections_served += 1
        finally:
            self._running = False
            self._stopped.set()

    def shutdown(self):
        """
        Ask the loop to stop after the current connection.

        Safe to call from another thread or a signal handler, and more
        than once.
        """
        if not self._stop_requested.is_set():
            logger.info("Shutting down server...")
        self._stop_requested.set()

    def close(self):
        """Release the listening socket."""
        if self._listener is not None:
            self._listener.close()
            self._listener = None
            logger.info("Server stopped")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for serve_forever() to return.

        Returns:
            True if the loop has stopped, False on timeout.
        """
        return self._stopped.wait(timeout)

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _setup_signals(self):
        """
        Turn SIGINT (Ctrl+C) and SIGTERM (docker stop, kill) into shutdown().

        signal.signal() only works on the main thread, so a server started
        from a worker thread (tests, embedding) skips this and is stopped
        with shutdown() instead.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGINT, signal.SIGTERM):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()
