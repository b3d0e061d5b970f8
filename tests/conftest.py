"""Shared fixtures: loopback receivers and unused ports."""

from __future__ import annotations

import socket
import threading
from pathlib import Path

import pytest

from gwencat.config import Role, TransferConfig
from gwencat.session import ReceiveSession


class ReceiverThread(threading.Thread):
    """Runs a ReceiveSession in the background and keeps its outcome."""

    def __init__(self, session: ReceiveSession) -> None:
        super().__init__(daemon=True, name="gwencat-test-recv")
        self.session = session
        self.result = None
        self.error: BaseException | None = None

    def run(self) -> None:
        try:
            self.result = self.session.run()
        except Exception as exc:
            self.error = exc


def receive_config(dest: Path, **kwargs) -> TransferConfig:
    kwargs.setdefault("timeout", 5)
    return TransferConfig(path=dest, role=Role.RECEIVE, **kwargs)


def send_config(src: Path, port: int, **kwargs) -> TransferConfig:
    kwargs.setdefault("timeout", 5)
    return TransferConfig(path=src, role=Role.SEND, remote="127.0.0.1", port=port, **kwargs)


@pytest.fixture
def start_receiver():
    """Bind a receiver on an ephemeral port and run it in a thread."""
    threads: list[ReceiverThread] = []

    def _start(dest: Path, **kwargs) -> ReceiverThread:
        session = ReceiveSession(receive_config(dest, **kwargs))
        session.listen()
        t = ReceiverThread(session)
        t.start()
        threads.append(t)
        return t

    yield _start
    for t in threads:
        t.join(timeout=10)


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
