"""
gwencat transfer sessions: sender and receiver sides.

SendSession
-----------
    Connects to host:port within the configured timeout, then streams the
    file over the socket under a deadline of DEADLINE_FACTOR × timeout.
    With --verify the local checksum is computed first and logged.

ReceiveSession
--------------
    Binds all interfaces, accepts exactly one connection within the
    timeout and streams it into the destination file until the peer
    closes.  If a peer filter is set and the first connection comes from
    another address, that connection is dropped and the session ends
    without touching the destination.

Both raise TransferError on any I/O or network failure; the caller
decides the exit status.
"""

from __future__ import annotations

import logging
import os
import socket
import time

from .config import Role, TransferConfig
from .integrity import checksum_file
from .progress import NullProgress, ProgressTracker
from .protocol import LISTEN_BACKLOG, LISTEN_HOST
from .transfer import Deadline, SocketStream, TransferResult, copy_stream
from .units import format_bytes, format_duration

log = logging.getLogger("gwencat.session")


class TransferError(RuntimeError):
    """Fatal failure while opening, connecting, listening or copying."""


def join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _report(verb: str, result: TransferResult) -> None:
    log.info(
        "✓ File %s successfully: %s (%s in %s, %s/s)",
        verb,
        result.path.name,
        format_bytes(result.transferred),
        format_duration(result.duration),
        format_bytes(result.speed),
    )


# ---------------------------------------------------------------------------
# Sender
# ---------------------------------------------------------------------------

class SendSession:
    """Send one file to a listening receiver."""

    def __init__(
        self,
        config: TransferConfig,
        progress: ProgressTracker | NullProgress | None = None,
    ) -> None:
        self._config = config
        self._progress = progress

    def run(self) -> TransferResult:
        """Execute the transfer. Raises TransferError on fatal error."""
        cfg = self._config
        if not cfg.path.is_file():
            raise TransferError(f"File does not exist: {cfg.path}")

        address = join_host_port(cfg.remote, cfg.port)
        log.info("Connecting to %s (timeout: %gs)...", address, cfg.timeout)
        try:
            sock = socket.create_connection((cfg.remote, cfg.port), timeout=cfg.timeout)
        except OSError as exc:
            raise TransferError(f"Failed to connect to {address}: {exc}") from exc

        with sock:
            deadline = Deadline(cfg.deadline)
            return self._send(sock, deadline)

    def _send(self, sock: socket.socket, deadline: Deadline) -> TransferResult:
        cfg = self._config
        try:
            fh = open(cfg.path, "rb")
        except OSError as exc:
            raise TransferError(f"Failed to open file {cfg.path}: {exc}") from exc

        with fh:
            size = os.fstat(fh.fileno()).st_size
            log.info("Sending file: %s (%s)", cfg.path.name, format_bytes(size))

            checksum = None
            if cfg.verify:
                log.info("Calculating %s checksum...", cfg.algorithm)
                try:
                    checksum = checksum_file(cfg.path, cfg.algorithm)
                except OSError as exc:
                    raise TransferError(f"Failed to calculate checksum: {exc}") from exc
                log.info("File checksum: %s", checksum)

            progress = self._progress
            if progress is None:
                progress = ProgressTracker("Sending", total=size) if cfg.progress else NullProgress()

            start = time.monotonic()
            try:
                sent = copy_stream(SocketStream(sock, deadline), fh, progress)
            except OSError as exc:
                raise TransferError(f"Failed to send file: {exc}") from exc
            duration = time.monotonic() - start

        result = TransferResult(
            role=Role.SEND.value,
            path=cfg.path,
            transferred=sent,
            duration=duration,
            checksum=checksum,
            peer=cfg.remote,
        )
        _report("sent", result)
        if checksum:
            log.info("✓ Checksum: %s", checksum)
        return result


# ---------------------------------------------------------------------------
# Receiver
# ---------------------------------------------------------------------------

class ReceiveSession:
    """
    Receive one file from the first inbound connection.

    listen() may be called ahead of run() to bind early (e.g. on port 0)
    and read the chosen port from .port.
    """

    def __init__(
        self,
        config: TransferConfig,
        progress: ProgressTracker | NullProgress | None = None,
    ) -> None:
        self._config = config
        self._progress = progress
        self._server_sock: socket.socket | None = None

    @property
    def port(self) -> int:
        if self._server_sock is None:
            return self._config.port
        return self._server_sock.getsockname()[1]

    def listen(self) -> None:
        if self._server_sock is not None:
            return
        cfg = self._config
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((LISTEN_HOST, cfg.port))
            sock.listen(LISTEN_BACKLOG)
        except OSError as exc:
            sock.close()
            raise TransferError(f"Failed to listen on port {cfg.port}: {exc}") from exc
        self._server_sock = sock

        if cfg.listen_all:
            log.info("Listening on all interfaces at port %d", self.port)
        elif cfg.remote:
            log.info("Listening on port %d, will accept connections only from %s",
                     self.port, cfg.remote)
        else:
            log.info("Listening on port %d, will accept connections from any IP", self.port)

    def close(self) -> None:
        if self._server_sock is not None:
            self._server_sock.close()
            self._server_sock = None

    def run(self) -> TransferResult:
        """Accept one connection and receive into the destination path."""
        cfg = self._config
        self.listen()
        try:
            conn, addr = self._accept()
        finally:
            self.close()

        with conn:
            peer_ip = addr[0]
            if cfg.remote and peer_ip != cfg.remote:
                log.warning("✗ Rejected connection from %s (expected %s)", peer_ip, cfg.remote)
                return TransferResult(
                    role=Role.RECEIVE.value, path=cfg.path, peer=peer_ip, rejected=True
                )
            log.info("✓ Connection established from %s", peer_ip)
            deadline = Deadline(cfg.deadline)
            return self._receive(conn, peer_ip, deadline)

    def _accept(self) -> tuple[socket.socket, tuple]:
        assert self._server_sock is not None
        timeout = self._config.timeout
        log.info("Waiting for connection (timeout: %gs)...", timeout)
        self._server_sock.settimeout(timeout)
        try:
            return self._server_sock.accept()
        except OSError as exc:
            raise TransferError(f"Failed to accept connection: {exc}") from exc

    def _receive(self, conn: socket.socket, peer_ip: str, deadline: Deadline) -> TransferResult:
        cfg = self._config
        dest = cfg.path
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TransferError(f"Failed to create directory {dest.parent}: {exc}") from exc
        try:
            fh = open(dest, "wb")
        except OSError as exc:
            raise TransferError(f"Failed to create file {dest}: {exc}") from exc

        progress = self._progress
        if progress is None:
            progress = ProgressTracker("Receiving") if cfg.progress else NullProgress()

        with fh:
            log.info("Receiving file...")
            start = time.monotonic()
            try:
                received = copy_stream(fh, SocketStream(conn, deadline), progress)
            except OSError as exc:
                raise TransferError(f"Failed to receive file: {exc}") from exc
            duration = time.monotonic() - start

        result = TransferResult(
            role=Role.RECEIVE.value,
            path=dest,
            transferred=received,
            duration=duration,
            peer=peer_ip,
        )
        _report("received", result)

        if cfg.verify:
            log.info("Calculating %s checksum for verification...", cfg.algorithm)
            try:
                result.checksum = checksum_file(dest, cfg.algorithm)
            except OSError as exc:
                log.warning("⚠ Could not calculate checksum: %s", exc)
            else:
                log.info("✓ File checksum: %s", result.checksum)
                log.info("Compare with the sender's checksum to verify integrity")
        return result


def run_session(config: TransferConfig) -> TransferResult:
    """Dispatch *config* to the session matching its role."""
    if config.role is Role.SEND:
        return SendSession(config).run()
    return ReceiveSession(config).run()
