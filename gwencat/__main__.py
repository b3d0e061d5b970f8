"""
gwencat — single-file transfer over raw TCP.  CLI entry point.

Usage:
    python -m gwencat -r <remote_ip> -p <port> [options] <file_path>
    python -m gwencat --mode send -r <remote_ip> -p <port> [options] <file_to_send>
    python -m gwencat --mode receive -p <port> [options] <file_to_save>

Without --mode, an existing <file_path> is sent and a missing one is
received into.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import Role, TransferConfig, UsageError
from .integrity import ALGORITHMS, DEFAULT_ALGORITHM
from .protocol import DEFAULT_TIMEOUT
from .session import TransferError, run_session

log = logging.getLogger("gwencat")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

_EPILOG = """\
examples:
  # Send file to 192.168.1.100 on port 4444
  gwencat -r 192.168.1.100 -p 4444 myfile.txt

  # Receive file on port 4444, save as newfile.txt
  gwencat -p 4444 newfile.txt

  # Receive with IP filtering and verification
  gwencat --mode receive -r 192.168.1.50 -p 4444 -v received.txt
"""


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        level=level,
    )


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="gwencat",
        description="Send or receive one file over a raw TCP connection.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", help="File to send, or where to save the received file")
    parser.add_argument("-m", "-mode", "--mode", choices=[r.value for r in Role],
                        help="Explicitly set mode (auto-detected when omitted)")
    parser.add_argument("-r", "--remote", default="",
                        help="Remote IP (required for send, optional filter for receive)")
    parser.add_argument("-p", "--port", type=int, default=0,
                        help="Port number (required)")
    parser.add_argument("-t", "--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help=f"Connection timeout in seconds (default {DEFAULT_TIMEOUT:g})")
    parser.add_argument("-v", "--verify", action="store_true",
                        help="Print the file checksum for integrity comparison")
    parser.add_argument("-progress", "--progress", action="store_true",
                        help="Show transfer progress")
    parser.add_argument("-a", "--all", dest="listen_all", action="store_true",
                        help="Listen on all interfaces (receive mode only)")
    parser.add_argument("--algorithm", choices=ALGORITHMS, default=DEFAULT_ALGORITHM,
                        help=f"Checksum algorithm (default {DEFAULT_ALGORITHM})")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run one session and return the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.debug)

    try:
        config = TransferConfig.from_args(args)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_FAILURE

    log.debug("Resolved %s", config)
    try:
        run_session(config)
    except TransferError as exc:
        log.error("%s", exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        log.error("Transfer cancelled")
        return EXIT_INTERRUPTED
    return EXIT_OK


def main(argv: list[str] | None = None) -> None:
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
