"""Size, duration and throughput formatting for log lines and progress."""

from __future__ import annotations

_UNITS = "KMGTPE"


def format_bytes(n: int) -> str:
    """Human-readable size using binary units: ``512 B``, ``1.5 MB``."""
    if n < 1024:
        return f"{n} B"
    div, exp = 1024, 0
    q = n // 1024
    while q >= 1024:
        div *= 1024
        exp += 1
        q //= 1024
    return f"{n / div:.1f} {_UNITS[exp]}B"


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.3f}s"


def calculate_speed(n: int, seconds: float) -> int:
    """Bytes per second; 0 for a zero-length interval."""
    if seconds <= 0:
        return 0
    return int(n / seconds)
