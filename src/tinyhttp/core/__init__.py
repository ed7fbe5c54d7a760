"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

Socket-level building blocks:

    Listener   bound TCP socket, produces one Stream per connection
    Stream     one accepted connection: read once, write all, close

=============================================================================
"""

from .listener import Listener
from .stream import Stream, StreamState

__all__ = [
    "Listener",      # Bound socket - accepts connections
    "Stream",        # Wrapper for client socket - handles I/O
    "StreamState",   # Enum for stream lifecycle states
]
