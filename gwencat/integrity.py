"""
Integrity helpers — whole-file digests.

checksum_file(path, algorithm) → str   (lowercase hex, 64 chars)

Both supported algorithms produce a 256-bit digest.  SHA-256 is the
default so the printed value can be compared with ``sha256sum`` output;
BLAKE3 is faster on large files when both ends use gwencat.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import blake3 as _b3

from .protocol import CHUNK_SIZE

ALGORITHMS: tuple[str, ...] = ("sha256", "blake3")
DEFAULT_ALGORITHM: str = "sha256"


def new_hasher(algorithm: str = DEFAULT_ALGORITHM):
    """Return a fresh hash object for *algorithm*."""
    if algorithm == "sha256":
        return hashlib.sha256()
    if algorithm == "blake3":
        return _b3.blake3()
    raise ValueError(f"Unsupported checksum algorithm: {algorithm!r}")


def checksum_file(
    path: str | Path,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = CHUNK_SIZE,
) -> str:
    """Stream *path* through *algorithm* in a single pass; return the hex digest."""
    hasher = new_hasher(algorithm)
    with open(path, "rb") as fh:
        while True:
            block = fh.read(chunk_size)
            if not block:
                break
            hasher.update(block)
    return hasher.hexdigest()
