"""
Streaming copy with throughput accounting.

copy_stream(dst, src, progress) → int
    Copies *src* to *dst* in CHUNK_SIZE reads until *src* returns no data,
    rendering progress at most every PROGRESS_INTERVAL seconds.

SocketStream(sock, deadline)
    read()/write() adapter over a connected socket.  Each blocking call is
    given whatever time is left on the Deadline, so the deadline bounds the
    whole transfer rather than a single recv/send.
"""

from __future__ import annotations

import socket
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .progress import NullProgress
from .protocol import CHUNK_SIZE, PROGRESS_INTERVAL
from .units import calculate_speed


class ShortWriteError(OSError):
    """Destination accepted fewer bytes than it was given."""


class _Reporter(Protocol):
    def start(self) -> None: ...
    def show(self, written: int) -> None: ...
    def stop(self) -> None: ...


@dataclass
class TransferResult:
    role: str                    # "send" or "receive"
    path: Path
    transferred: int = 0         # bytes
    duration: float = 0.0        # seconds
    checksum: str | None = None
    peer: str | None = None      # remote IP
    rejected: bool = False       # receiver peer filter did not match

    @property
    def speed(self) -> int:
        return calculate_speed(self.transferred, self.duration)


class Deadline:
    """Absolute point in (monotonic) time after which socket I/O fails."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self._expires = time.monotonic() + seconds

    def remaining(self) -> float:
        """Seconds left; raises TimeoutError once the deadline has passed."""
        left = self._expires - time.monotonic()
        if left <= 0:
            raise TimeoutError(f"Deadline of {self.seconds:g}s exceeded")
        return left


class SocketStream:
    def __init__(self, sock: socket.socket, deadline: Deadline | None = None) -> None:
        self._sock = sock
        self._deadline = deadline

    def _arm(self) -> None:
        if self._deadline is not None:
            self._sock.settimeout(self._deadline.remaining())

    def read(self, n: int) -> bytes:
        self._arm()
        return self._sock.recv(n)

    def write(self, data: bytes) -> int:
        self._arm()
        self._sock.sendall(data)
        return len(data)


def copy_stream(
    dst,
    src,
    progress: _Reporter | None = None,
    chunk_size: int = CHUNK_SIZE,
    interval: float = PROGRESS_INTERVAL,
) -> int:
    """
    Copy everything from *src* to *dst* and return the number of bytes written.

    *progress* decides between percentage and byte count.  Errors from
    either side propagate after the progress line is closed.
    """
    progress = progress or NullProgress()

    written = 0
    shown = None
    last_update = time.monotonic()
    progress.start()
    try:
        while True:
            block = src.read(chunk_size)
            if not block:
                break
            n = dst.write(block)
            written += n or 0
            if n != len(block):
                raise ShortWriteError(
                    f"Short write: {n or 0} of {len(block)} bytes accepted"
                )
            now = time.monotonic()
            if now - last_update >= interval:
                progress.show(written)
                shown = written
                last_update = now
        if shown != written:
            progress.show(written)
    finally:
        progress.stop()
    return written
