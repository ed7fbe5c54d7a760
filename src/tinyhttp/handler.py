"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Turns one accepted Stream into exactly one response (or a clean abandon).

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ConnectionHandler(stream)                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. stream.read()            bytes are read, never parsed          │
    │          │  ReadError ──────────────────────────────► abandon ──┐   │
    │          ▼                                                       │   │
    │   2. store.read(path)                                            │   │
    │          │  NotFound / ContentIOError ──► 404 / 500 response     │   │
    │          ▼                                                       │   │
    │   3. 200 + Content-Length + body                                 │   │
    │          │                                                       │   │
    │          ▼                                                       │   │
    │   4. stream.write(bytes)      one call                           │   │
    │          │  WriteError ─────────────────────────────► abandon ──┤   │
    │          ▼                                                       │   │
    │   5. stream.close()  ◄───────────────────────────────────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing raised while handling a connection escapes __call__. The server
loop only ever sees a finished connection.

=============================================================================
"""

import logging
from typing import Optional

from .core.stream import Stream
from .errors import ContentStoreError, ReadError, WriteError
from .http.response import Response, content_response, error_response
from .http.status_codes import HTTPStatus
from .store import ContentStore


logger = logging.getLogger(__name__)


def failure_status(status_code: int) -> HTTPStatus:
    """
    The status to answer a store failure with.

    Codes we have no reason phrase for, and codes that aren't errors at
    all, become 500.
    """
    try:
        status = HTTPStatus(status_code)
    except ValueError:
        return HTTPStatus.INTERNAL_SERVER_ERROR
    if not status.is_error:
        return HTTPStatus.INTERNAL_SERVER_ERROR
    return status


class ConnectionHandler:
    """
    Serves the content at one fixed logical path to every connection.

    Args:
        store: Where the body comes from.
        content_path: The logical path requested from the store.
    """

    def __init__(self, store: ContentStore, content_path: str = "hello.html"):
        self.store = store
        self.content_path = content_path

    def __call__(self, stream: Stream) -> Optional[Response]:
        """
        Handle one connection and release it.

        Returns:
            The response written, or None if the connection was abandoned.
        """
        with stream:
            try:
                return self._serve(stream)
            except (ReadError, WriteError) as e:
                logger.warning(f"[{stream.id}] Abandoning connection: {e}")
            except Exception as e:
                logger.exception(f"[{stream.id}] Unexpected error: {e}")
        return None

    def _serve(self, stream: Stream) -> Response:
        request = stream.read()
        if not request:
            logger.debug(f"[{stream.id}] Peer sent no request bytes")

        response = self.build_response(stream.id)

        stream.write(response.to_bytes())

        level = logging.INFO if response.status.is_success else logging.WARNING
        logger.log(
            level,
            f"[{stream.id}] {stream.client_ip}:{stream.client_port} "
            f"{self.content_path} {int(response.status)} {len(response.body)}"
        )
        return response

    def build_response(self, stream_id: str = "-") -> Response:
        """
        Fetch the content and wrap it in a response.

        Store failures become a failure status instead of an exception.
        """
        try:
            body = self.store.read(self.content_path)
        except ContentStoreError as e:
            logger.warning(f"[{stream_id}] Content store failed: {e}")
            return error_response(failure_status(e.status_code))

        return content_response(body)
