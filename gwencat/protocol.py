"""
gwencat wire format and shared constants.

There is no framing: the sender writes the raw file bytes to the TCP
stream and closes the connection.  The receiver treats the peer's close
as end-of-file.  Nothing else (name, size, checksum) crosses the wire.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CHUNK_SIZE: int = 32 * 1024         # copier read size (32 KiB)
PROGRESS_INTERVAL: float = 0.1      # min seconds between progress renders
DEFAULT_TIMEOUT: float = 30.0       # connect / accept timeout, seconds
MAX_TIMEOUT: float = 86400.0        # one day; keeps the deadline within socket limits
DEADLINE_FACTOR: int = 10           # whole-transfer deadline = timeout × this
LISTEN_HOST: str = "0.0.0.0"
LISTEN_BACKLOG: int = 1
