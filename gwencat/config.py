"""
Session configuration and role dispatch.

TransferConfig replaces command-line globals: it is built once from the
parsed arguments and handed to SendSession / ReceiveSession.
"""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .integrity import ALGORITHMS, DEFAULT_ALGORITHM
from .protocol import DEADLINE_FACTOR, DEFAULT_TIMEOUT, MAX_TIMEOUT


class UsageError(Exception):
    """Missing or invalid command-line options."""


class Role(str, Enum):
    SEND = "send"
    RECEIVE = "receive"


def resolve_role(path: str | Path, mode: str | None = None) -> Role:
    """
    Return the explicit *mode* as a Role, or pick one from the filesystem:
    an existing *path* is sent, a missing one is received into.
    """
    if not mode:
        return Role.SEND if Path(path).exists() else Role.RECEIVE
    try:
        return Role(mode.lower())
    except ValueError:
        raise UsageError(f"Invalid mode {mode!r}. Use 'send' or 'receive'") from None


@dataclass
class TransferConfig:
    path: Path
    role: Role
    port: int = 0
    remote: str = ""             # target for send, source filter for receive
    timeout: float = DEFAULT_TIMEOUT
    verify: bool = False
    progress: bool = False
    listen_all: bool = False
    algorithm: str = DEFAULT_ALGORITHM

    @property
    def deadline(self) -> float:
        """Seconds allowed for the whole transfer once connected."""
        return self.timeout * DEADLINE_FACTOR

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> TransferConfig:
        config = cls(
            path=Path(args.path),
            role=resolve_role(args.path, args.mode),
            port=args.port or 0,
            remote=args.remote or "",
            timeout=args.timeout,
            verify=args.verify,
            progress=args.progress,
            listen_all=args.listen_all,
            algorithm=args.algorithm,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise UsageError if the options cannot run in the chosen role."""
        if self.role is Role.SEND and (not self.remote or not self.port):
            raise UsageError("Send mode requires -r <remote_ip> -p <port>")
        if self.role is Role.RECEIVE and not self.port:
            raise UsageError("Receive mode requires -p <port>")
        if not 0 < self.port < 65536:
            raise UsageError(f"Port out of range: {self.port}")
        if not math.isfinite(self.timeout) or not 0 < self.timeout <= MAX_TIMEOUT:
            raise UsageError(
                f"Timeout must be between 0 and {MAX_TIMEOUT:g} seconds, got {self.timeout:g}"
            )
        if self.algorithm not in ALGORITHMS:
            raise UsageError(f"Unknown checksum algorithm: {self.algorithm}")
