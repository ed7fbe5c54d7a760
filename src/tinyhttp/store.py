"""
=============================================================================
CONTENT STORES
=============================================================================

Where response bodies come from. A content store maps a logical path to
bytes, or raises:

    NotFound        nothing at that path           → 404
    ContentIOError  something there, but unreadable → 500

Nothing is cached: every connection reads the content again, so editing
the file on disk shows up on the next request.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .errors import ContentIOError, NotFound


logger = logging.getLogger(__name__)


class ContentStore(ABC):
    """Resolves a logical path to byte content."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """
        Return the full content at ``path``.

        Raises:
            NotFound: If no content exists at the path.
            ContentIOError: If the underlying storage failed.
        """


class FileContentStore(ContentStore):
    """
    Serves files from a directory on disk.

        store = FileContentStore("./public")
        store.read("hello.html")   # bytes of ./public/hello.html

    Paths that resolve outside the root (``../etc/passwd``, or a symlink
    pointing elsewhere) are reported as NotFound.
    """

    def __init__(self, root_dir: str):
        # Resolve now so the containment check compares absolute paths
        self.root_dir = Path(root_dir).resolve()

    def _resolve(self, path: str) -> Optional[Path]:
        full_path = (self.root_dir / path.lstrip("/")).resolve()
        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path escapes content root: {path}")
            return None
        return full_path

    def read(self, path: str) -> bytes:
        full_path = self._resolve(path)
        if full_path is None:
            raise NotFound(path)

        try:
            return full_path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFound(path) from e
        except OSError as e:
            raise ContentIOError(f"Failed to read {path!r}: {e}") from e

    def __repr__(self) -> str:
        return f"FileContentStore({str(self.root_dir)!r})"


class MemoryContentStore(ContentStore):
    """
    Serves content held in a dict.

    Useful for embedding the server in a program that generates its page,
    and in tests.
    """

    def __init__(self, entries: Optional[Dict[str, bytes]] = None):
        self.entries: Dict[str, bytes] = dict(entries or {})

    def put(self, path: str, content: bytes) -> None:
        self.entries[path] = content

    def read(self, path: str) -> bytes:
        try:
            return self.entries[path]
        except KeyError:
            raise NotFound(path) from None
